"""Fiber route registration generator."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from taskw.config import Config
from taskw.generator.writer import (
    Formatter,
    derive_import_path,
    format_go_source,
    render_template,
    write_generated_file,
)
from taskw.scanner.ast_scanner import handler_field_name
from taskw.scanner.types import HandlerFunction, RouteMapping, normalize_path
from taskw.settings import ROUTER_IMPORT

logger = structlog.get_logger(__name__)

ROUTER_METHODS = {
    "GET": "Get",
    "POST": "Post",
    "PUT": "Put",
    "DELETE": "Delete",
    "PATCH": "Patch",
    "HEAD": "Head",
    "OPTIONS": "Options",
    "TRACE": "Trace",
    "CONNECT": "Connect",
}


def _is_parameter(segment: str) -> bool:
    return segment.startswith((":", "*"))


def calculate_specificity_score(path: str) -> int:
    """Higher scores register first.

    Every segment adds 1000; static segments add another 100 and parameter
    segments subtract 100, so ``/users/search`` outranks ``/users/:id``.
    """
    segments = path.strip("/").split("/")
    score = len(segments) * 1000
    for segment in segments:
        score += -100 if _is_parameter(segment) else 100
    return score


def router_method(http_method: str) -> str:
    return ROUTER_METHODS.get(http_method.upper(), "All")


@dataclass(frozen=True, slots=True)
class HandlerMeta:
    field_name: str  # userHandler
    type_name: str  # *user.UserHandler / user.Handler
    import_path: str
    package: str


@dataclass(frozen=True, slots=True)
class RegisteredRoute:
    router_method: str
    path: str
    handler_ref: str
    http_method: str
    score: int


def sort_routes(routes: Iterable[RouteMapping]) -> list[RegisteredRoute]:
    """Normalize paths and order routes for registration.

    Ties on score fall back to HTTP method, then path, then handler ref so
    duplicate routes still come out in a stable order.
    """
    entries = []
    for route in routes:
        path = normalize_path(route.path)
        entries.append(
            RegisteredRoute(
                router_method=router_method(route.http_method),
                path=path,
                handler_ref=route.handler_ref,
                http_method=route.http_method,
                score=calculate_specificity_score(path),
            )
        )
    entries.sort(key=lambda r: (-r.score, r.http_method, r.path, r.handler_ref))
    return entries


class RouteGenerator:
    def __init__(self, config: Config, formatter: Formatter = format_go_source):
        self.config = config
        self.formatter = formatter

    @property
    def output_path(self) -> Path:
        return self.config.routes_output_path

    def handler_metadata(
        self, handlers: Sequence[HandlerFunction], routes: Sequence[RouteMapping]
    ) -> list[HandlerMeta]:
        """One entry per handler field that the routes reference."""
        output_package = self.config.output_package
        by_package: dict[str, list[HandlerFunction]] = {}
        for handler in handlers:
            by_package.setdefault(handler.package, []).append(handler)

        metas: dict[str, HandlerMeta] = {}
        for package in sorted({r.package for r in routes}):
            candidates = sorted(
                by_package.get(package, ()),
                key=lambda h: (h.handler_name, str(h.source_file)),
            )
            if not candidates:
                logger.debug("no handler for routed package", package=package)
                continue
            interface_based = [h for h in candidates if h.is_interface_based]
            # interface-based handlers carry the interface as handler_name
            chosen = (interface_based or candidates)[0]
            qualified = (
                chosen.handler_name
                if package == output_package
                else f"{package}.{chosen.handler_name}"
            )
            if not interface_based:
                qualified = f"*{qualified}"

            field_name = handler_field_name(package)
            metas[field_name] = HandlerMeta(
                field_name=field_name,
                type_name=qualified,
                import_path=derive_import_path(
                    self.config.project.module,
                    chosen.source_file,
                    self.config.root,
                ),
                package=package,
            )
        return [metas[name] for name in sorted(metas)]

    def imports(self, metas: Sequence[HandlerMeta]) -> list[str]:
        output_package = self.config.output_package
        paths = {
            m.import_path
            for m in metas
            if m.import_path and m.package != output_package
        }
        paths.discard(ROUTER_IMPORT)
        return [ROUTER_IMPORT, *sorted(paths)]

    def render(
        self, handlers: Sequence[HandlerFunction], routes: Sequence[RouteMapping]
    ) -> str:
        metas = self.handler_metadata(handlers, routes)
        return render_template(
            "routes.go.j2",
            package=self.config.output_package,
            imports=self.imports(metas),
            handlers=metas,
            routes=sort_routes(routes),
        )

    def generate_routes(
        self, handlers: Sequence[HandlerFunction], routes: Sequence[RouteMapping]
    ) -> Path | None:
        """Write the routes file; ``None`` when route generation is disabled."""
        if not self.config.generation.routes.enabled:
            logger.debug("route generation disabled")
            return None
        content = self.render(handlers, routes)
        path = write_generated_file(self.output_path, content, self.formatter)
        logger.info("generated routes", path=str(path), routes=len(routes))
        return path
