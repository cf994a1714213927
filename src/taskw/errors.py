"""Exceptions raised by taskw.

Per-file scan failures and validation findings are returned as data
(``ScanError``, ``ValidationIssue``); only conditions that stop an
operation are raised.
"""

from __future__ import annotations

from pathlib import Path


class TaskwError(Exception):
    """Base class for all taskw errors."""


class ConfigError(TaskwError):
    """taskw.yaml or go.mod could not be read or is invalid."""


class ScanDirectoryError(TaskwError):
    """A configured scan root is missing or cannot be walked."""

    def __init__(self, directory: Path, reason: str):
        self.directory = directory
        super().__init__(f"error scanning directory {directory}: {reason}")


class GeneratorError(TaskwError):
    """A generated file could not be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"failed to write {path}: {reason}")


class FormatError(TaskwError):
    """gofmt rejected the generated source."""
