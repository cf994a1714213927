"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

from taskw import console
from taskw.config import Config, load_config
from taskw.scanner import ScanResult, ValidationResult


def load_project_config(config: Path | None) -> Config:
    return load_config(config.resolve() if config else None)


def report_scan_errors(result: ScanResult) -> None:
    for err in result.errors:
        location = str(err.source_file)
        if err.line:
            location = f"{location}:{err.line}"
        console.warning(f"{location}: {err.message}")


def report_validation(validation: ValidationResult) -> None:
    for issue in validation.errors:
        console.error(f"[{issue.kind}] {issue.message}")
    for issue in validation.warnings:
        console.warning(f"[{issue.kind}] {issue.message}")
