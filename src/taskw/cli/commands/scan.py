"""Scan command - report handlers, routes and providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from taskw import console
from taskw.cli._common import (
    load_project_config,
    report_scan_errors,
    report_validation,
)
from taskw.scanner import (
    Scanner,
    ScanResult,
    get_statistics,
    normalize_path,
    validate_scan_result,
)


@dataclass
class Scan:
    """Scan Go sources and show what would be generated."""

    config: Path | None = field(
        default=None,
        metadata={"help": "Path to taskw.yaml (default: ./taskw.yaml)"},
    )
    details: bool = field(
        default=True,
        metadata={"help": "List every handler, route and provider"},
    )

    def run(self) -> int:
        """Execute the scan command."""
        cfg = load_project_config(self.config)
        scanner = Scanner(cfg)

        with console.status("scanning Go sources..."):
            result = scanner.scan_all()
        validation = validate_scan_result(result)
        stats = get_statistics(result)

        console.header("Scan Results")
        console.key_value("handlers", stats.handlers_found)
        console.key_value("routes", stats.routes_found)
        console.key_value("providers", stats.providers_found)
        console.key_value("packages", stats.packages_scanned)
        console.key_value("errors", stats.errors_found)

        if self.details:
            _print_details(result)

        report_scan_errors(result)
        report_validation(validation)
        if validation.has_errors:
            return 1
        console.success("scan complete")
        return 0


def _print_details(result: ScanResult) -> None:
    if result.handlers:
        console.subheader("Handlers")
        for h in sorted(result.handlers, key=lambda h: (h.key, h.handler_name)):
            console.line(f"  {h.package}.{h.handler_name}.{h.function_name}")

    if result.routes:
        console.subheader("Routes")
        for r in sorted(result.routes, key=lambda r: (r.path, r.http_method)):
            path = normalize_path(r.path)
            console.line(f"  {r.http_method:<7} {path} -> {r.handler_ref}")

    if result.providers:
        console.subheader("Providers")
        for p in sorted(
            result.providers, key=lambda p: (p.package, p.function_name)
        ):
            console.line(f"  {p.package}.{p.function_name} -> {p.return_type}")
