"""Generate commands - routes_gen.go, dependencies_gen.go and swagger docs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from taskw import console
from taskw.cli._common import (
    load_project_config,
    report_scan_errors,
    report_validation,
)
from taskw.config import Config
from taskw.errors import GeneratorError
from taskw.generator import (
    DependencyGenerator,
    RouteGenerator,
    SwaggerGenerator,
)
from taskw.generator.swagger import SWAG_INSTALL_HINT
from taskw.scanner import ScanResult, Scanner, validate_scan_result


def _scan(cfg: Config) -> ScanResult:
    with console.status("scanning Go sources..."):
        result = Scanner(cfg).scan_all()
    report_scan_errors(result)
    return result


def _report_written(what: str, path: Path | None) -> None:
    if path is None:
        console.dim(f"{what} generation disabled in config")
    else:
        console.success(f"generated {path}")


def _report_swagger(docs: Path | None) -> None:
    if docs is None:
        console.warning(
            "swag not found on PATH, skipping swagger docs "
            f"(install with: {SWAG_INSTALL_HINT})"
        )
    else:
        console.success(f"generated swagger docs in {docs}")


@dataclass
class Generate:
    """Scan, validate and generate routes, dependencies and swagger docs."""

    config: Path | None = field(
        default=None,
        metadata={"help": "Path to taskw.yaml (default: ./taskw.yaml)"},
    )
    force: bool = field(
        default=False,
        metadata={"help": "Generate even if validation reports errors"},
    )

    def run(self) -> int:
        """Execute the generate command."""
        cfg = load_project_config(self.config)
        result = _scan(cfg)

        validation = validate_scan_result(result)
        report_validation(validation)
        if validation.has_errors and not self.force:
            console.error(
                f"{len(validation.errors)} validation error(s); "
                "fix them or rerun with --force"
            )
            return 1

        routes_path = RouteGenerator(cfg).generate_routes(
            result.handlers, result.routes
        )
        _report_written("route", routes_path)
        deps_path = DependencyGenerator(cfg).generate_dependencies(
            result.providers
        )
        _report_written("dependency", deps_path)

        # swagger failures never fail the run
        try:
            with console.status("generating swagger docs..."):
                docs = SwaggerGenerator(cfg).generate_swagger()
        except GeneratorError as e:
            console.warning(f"swagger docs not generated: {e}")
        else:
            _report_swagger(docs)
        return 0


@dataclass
class GenerateRoutes:
    """Generate routes_gen.go only."""

    config: Path | None = field(
        default=None,
        metadata={"help": "Path to taskw.yaml (default: ./taskw.yaml)"},
    )

    def run(self) -> int:
        cfg = load_project_config(self.config)
        result = _scan(cfg)
        path = RouteGenerator(cfg).generate_routes(result.handlers, result.routes)
        _report_written("route", path)
        return 0


@dataclass
class GenerateDeps:
    """Generate dependencies_gen.go only."""

    config: Path | None = field(
        default=None,
        metadata={"help": "Path to taskw.yaml (default: ./taskw.yaml)"},
    )

    def run(self) -> int:
        cfg = load_project_config(self.config)
        result = _scan(cfg)
        path = DependencyGenerator(cfg).generate_dependencies(result.providers)
        _report_written("dependency", path)
        return 0


@dataclass
class GenerateSwagger:
    """Generate swagger docs with swag (skipped when swag is missing)."""

    config: Path | None = field(
        default=None,
        metadata={"help": "Path to taskw.yaml (default: ./taskw.yaml)"},
    )

    def run(self) -> int:
        cfg = load_project_config(self.config)
        try:
            with console.status("generating swagger docs..."):
                docs = SwaggerGenerator(cfg).generate_swagger()
        except GeneratorError as e:
            console.error(str(e))
            return 1
        _report_swagger(docs)
        return 0
