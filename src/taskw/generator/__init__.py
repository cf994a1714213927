"""Go code generation from scan results."""

from taskw.generator.dependencies import DependencyGenerator
from taskw.generator.routes import (
    RouteGenerator,
    calculate_specificity_score,
    normalize_path,
    sort_routes,
)
from taskw.generator.swagger import SwaggerGenerator, find_main_file
from taskw.generator.writer import (
    GENERATED_MARKER,
    derive_import_path,
    format_go_source,
    is_generated_file,
    write_generated_file,
)

__all__ = [
    "DependencyGenerator",
    "GENERATED_MARKER",
    "RouteGenerator",
    "SwaggerGenerator",
    "calculate_specificity_score",
    "derive_import_path",
    "find_main_file",
    "format_go_source",
    "is_generated_file",
    "normalize_path",
    "sort_routes",
    "write_generated_file",
]
