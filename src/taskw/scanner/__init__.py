"""Go source scanning: file filtering, extraction, aggregation, validation."""

from taskw.scanner.ast_scanner import (
    ASTScanner,
    ExtractorRules,
    is_handler_implementation,
    is_handler_type_name,
)
from taskw.scanner.file_filter import (
    DEFAULT_IGNORE_PATTERNS,
    FileFilter,
    create_default_ignore_file,
    match_pattern,
)
from taskw.scanner.scanner import Scanner, get_statistics
from taskw.scanner.types import (
    HandlerFunction,
    HandlerImplementation,
    HandlerInterface,
    ProviderFunction,
    RouteMapping,
    ScanError,
    ScanResult,
    ScanStatistics,
    ValidationIssue,
    ValidationResult,
    normalize_path,
)
from taskw.scanner.validation import Validator, validate_scan_result

__all__ = [
    "ASTScanner",
    "DEFAULT_IGNORE_PATTERNS",
    "ExtractorRules",
    "FileFilter",
    "HandlerFunction",
    "HandlerImplementation",
    "HandlerInterface",
    "ProviderFunction",
    "RouteMapping",
    "ScanError",
    "ScanResult",
    "ScanStatistics",
    "Scanner",
    "ValidationIssue",
    "ValidationResult",
    "Validator",
    "create_default_ignore_file",
    "get_statistics",
    "is_handler_implementation",
    "is_handler_type_name",
    "match_pattern",
    "normalize_path",
    "validate_scan_result",
]
