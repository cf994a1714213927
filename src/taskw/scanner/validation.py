"""Cross-checks over a completed scan.

Validation never raises and never mutates its input; callers decide what to
do with the returned errors and warnings.
"""

from __future__ import annotations

from collections import defaultdict

from taskw.scanner.ast_scanner import HTTP_METHODS
from taskw.scanner.types import (
    DUPLICATE_ROUTE,
    HANDLER_WITHOUT_ROUTE,
    INVALID_ROUTE_PATTERN,
    NAMING_CONVENTION,
    ROUTE_WITHOUT_HANDLER,
    TEST_FUNCTION,
    HandlerFunction,
    RouteMapping,
    ScanResult,
    ValidationIssue,
    ValidationResult,
    normalize_path,
)

_WHITESPACE = frozenset(" \t\n\r")


def route_pattern_error(route: RouteMapping) -> str | None:
    """Describe what is wrong with a route's path or method, if anything."""
    path = route.path
    if not path.startswith("/"):
        return f"route path must start with '/': {path}"

    for segment in path.split("/"):
        if not segment or segment[0] in ":*":
            continue
        if any(ch in _WHITESPACE for ch in segment):
            return f"route path contains whitespace: {path}"

    if route.http_method not in HTTP_METHODS:
        return f"invalid HTTP method: {route.http_method}"
    return None


class Validator:
    def __init__(self, handler_suffix: str = "Handler"):
        self.handler_suffix = handler_suffix

    def validate_scan_result(self, result: ScanResult) -> ValidationResult:
        validation = ValidationResult()
        self._validate_routes(result.routes, validation)
        self._validate_handlers(result.handlers, validation)
        self._validate_handler_route_matching(
            result.handlers, result.routes, validation
        )
        return validation

    def _validate_routes(
        self, routes: tuple[RouteMapping, ...], validation: ValidationResult
    ) -> None:
        # {id} and :id register the same route
        groups: dict[tuple[str, str], list[RouteMapping]] = defaultdict(list)
        for route in routes:
            key = (route.http_method, normalize_path(route.path))
            groups[key].append(route)

        for (method, path), members in sorted(groups.items()):
            if len(members) < 2:
                continue
            for route in members:
                validation.errors.append(
                    ValidationIssue(
                        kind=DUPLICATE_ROUTE,
                        message=(
                            f"Duplicate route found: {method} {path} "
                            f"({route.package}.{route.method_name})"
                        ),
                        source_file=route.source_file,
                        route=route,
                    )
                )

        for route in routes:
            problem = route_pattern_error(route)
            if problem is not None:
                validation.errors.append(
                    ValidationIssue(
                        kind=INVALID_ROUTE_PATTERN,
                        message=problem,
                        source_file=route.source_file,
                        route=route,
                    )
                )

    def _validate_handlers(
        self, handlers: tuple[HandlerFunction, ...], validation: ValidationResult
    ) -> None:
        test_like: set[str] = set()
        for handler in handlers:
            if not handler.handler_name.endswith(self.handler_suffix):
                validation.warnings.append(
                    ValidationIssue(
                        kind=NAMING_CONVENTION,
                        message=(
                            f"Handler struct {handler.handler_name} should end "
                            f"with '{self.handler_suffix}'"
                        ),
                        source_file=handler.source_file,
                        handler=handler,
                    )
                )
            if handler.key in test_like:
                continue
            if "test" in handler.function_name.lower():
                test_like.add(handler.key)
                validation.warnings.append(
                    ValidationIssue(
                        kind=TEST_FUNCTION,
                        message=(
                            f"Function {handler.function_name} appears to be a "
                            "test function but was detected as a handler"
                        ),
                        source_file=handler.source_file,
                        handler=handler,
                    )
                )

    def _validate_handler_route_matching(
        self,
        handlers: tuple[HandlerFunction, ...],
        routes: tuple[RouteMapping, ...],
        validation: ValidationResult,
    ) -> None:
        # first record wins; interface-based copies share the concrete key
        handler_map: dict[str, HandlerFunction] = {}
        for handler in handlers:
            handler_map.setdefault(handler.key, handler)
        route_map: dict[str, RouteMapping] = {}
        for route in routes:
            route_map.setdefault(route.key, route)

        for key in sorted(handler_map.keys() - route_map.keys()):
            handler = handler_map[key]
            validation.warnings.append(
                ValidationIssue(
                    kind=HANDLER_WITHOUT_ROUTE,
                    message=(
                        f"Handler function {key} found but no @Router "
                        "annotation"
                    ),
                    source_file=handler.source_file,
                    handler=handler,
                )
            )

        for key in sorted(route_map.keys() - handler_map.keys()):
            route = route_map[key]
            validation.errors.append(
                ValidationIssue(
                    kind=ROUTE_WITHOUT_HANDLER,
                    message=(
                        f"@Router annotation found for {key} but no "
                        "corresponding handler function"
                    ),
                    source_file=route.source_file,
                    route=route,
                )
            )


def validate_scan_result(result: ScanResult) -> ValidationResult:
    return Validator().validate_scan_result(result)
