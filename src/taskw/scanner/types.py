"""Records produced by the scanner and consumed by the generators."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

PARSE_ERROR = "parse_error"

_BRACE_PARAM = re.compile(r"\{([^{}/]+)\}")


def normalize_path(path: str) -> str:
    """Convert OpenAPI-style ``{id}`` parameters to Fiber's ``:id``."""
    return _BRACE_PARAM.sub(r":\1", path)


@dataclass(frozen=True, slots=True)
class HandlerFunction:
    """A method with the handler signature shape.

    For interface-based handlers, ``handler_name`` is the interface name and
    ``implementer_name`` the concrete struct the method was declared on.
    """

    function_name: str  # GetUser
    package: str  # user
    handler_name: str  # Handler / UserHandler / HandlerImpl
    source_file: Path
    implementer_name: str | None = None
    returns_error: bool = True
    is_interface_based: bool = False

    @property
    def key(self) -> str:
        return f"{self.package}.{self.function_name}"


@dataclass(frozen=True, slots=True)
class RouteMapping:
    """One ``@Router`` annotation attached to a handler."""

    method_name: str  # GetUser
    path: str  # /api/v1/users/{id}
    http_method: str  # GET
    handler_ref: str  # userHandler.GetUser
    package: str
    source_file: Path | None = None
    line: int | None = None

    @property
    def key(self) -> str:
        return f"{self.package}.{self.method_name}"


@dataclass(frozen=True, slots=True)
class ProviderFunction:
    """A ``Provide*`` function feeding the Wire graph."""

    function_name: str  # ProvideUserService
    package: str
    return_type: str  # *UserService
    source_file: Path
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HandlerInterface:
    interface_name: str
    package: str
    source_file: Path
    methods: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HandlerImplementation:
    struct_name: str
    package: str
    source_file: Path


@dataclass(frozen=True, slots=True)
class ScanError:
    """A per-file failure. Recorded as data, never raised."""

    source_file: Path
    message: str
    kind: str = PARSE_ERROR
    line: int | None = None


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Everything extracted from one scan.

    Collections are tuples: once the aggregator hands a result out, nothing
    downstream can append to it.
    """

    handlers: tuple[HandlerFunction, ...] = ()
    routes: tuple[RouteMapping, ...] = ()
    providers: tuple[ProviderFunction, ...] = ()
    interfaces: tuple[HandlerInterface, ...] = ()
    implementations: tuple[HandlerImplementation, ...] = ()
    errors: tuple[ScanError, ...] = ()

    @classmethod
    def merge(cls, *results: ScanResult) -> ScanResult:
        """Concatenate several results in argument order."""
        return cls(
            handlers=tuple(h for r in results for h in r.handlers),
            routes=tuple(rt for r in results for rt in r.routes),
            providers=tuple(p for r in results for p in r.providers),
            interfaces=tuple(i for r in results for i in r.interfaces),
            implementations=tuple(
                im for r in results for im in r.implementations
            ),
            errors=tuple(e for r in results for e in r.errors),
        )

    @classmethod
    def failed(
        cls, source_file: Path, message: str, line: int | None = None
    ) -> ScanResult:
        return cls(errors=(ScanError(source_file, message, PARSE_ERROR, line),))

    @property
    def packages(self) -> set[str]:
        return {h.package for h in self.handlers} | {
            p.package for p in self.providers
        }


@dataclass(frozen=True, slots=True)
class ScanStatistics:
    handlers_found: int
    routes_found: int
    providers_found: int
    errors_found: int
    packages_scanned: int


# validation kinds
DUPLICATE_ROUTE = "duplicate_route"
INVALID_ROUTE_PATTERN = "invalid_route_pattern"
ROUTE_WITHOUT_HANDLER = "route_without_handler"
HANDLER_WITHOUT_ROUTE = "handler_without_route"
NAMING_CONVENTION = "naming_convention"
TEST_FUNCTION = "test_function"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    kind: str
    message: str
    source_file: Path | None = None
    handler: HandlerFunction | None = None
    route: RouteMapping | None = None


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def errors_of(self, kind: str) -> list[ValidationIssue]:
        return [e for e in self.errors if e.kind == kind]

    def warnings_of(self, kind: str) -> list[ValidationIssue]:
        return [w for w in self.warnings if w.kind == kind]
