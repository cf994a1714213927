"""Scan Go sources for annotated handlers and Wire providers, and generate
Fiber route registration and provider set files."""

from taskw.config import Config, load_config
from taskw.errors import (
    ConfigError,
    FormatError,
    GeneratorError,
    ScanDirectoryError,
    TaskwError,
)
from taskw.generator import DependencyGenerator, RouteGenerator
from taskw.scanner import Scanner, validate_scan_result

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigError",
    "DependencyGenerator",
    "FormatError",
    "GeneratorError",
    "RouteGenerator",
    "ScanDirectoryError",
    "Scanner",
    "TaskwError",
    "load_config",
    "validate_scan_result",
]
