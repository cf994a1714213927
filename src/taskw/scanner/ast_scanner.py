"""Syntax-tree extraction of handlers, routes and providers from Go files.

Go sources are parsed with tree-sitter. Detection is purely syntactic: a
handler is recognised by the shape of its signature and the name of its
receiver type, never by resolving types.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

import structlog
import tree_sitter_go
from tree_sitter import Language, Node, Parser

from taskw.scanner.types import (
    HandlerFunction,
    HandlerImplementation,
    HandlerInterface,
    ProviderFunction,
    RouteMapping,
    ScanResult,
)

logger = structlog.get_logger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

HTTP_METHODS: frozenset[str] = frozenset(
    {
        "GET",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "HEAD",
        "OPTIONS",
        "TRACE",
        "CONNECT",
    }
)

# order matters: the first form that matches a line wins
ROUTE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # @Router /path [method]
    re.compile(r"@Router\s+([^\s\[\]]+)\s+\[([^\]]+)\]", re.IGNORECASE),
    # @Router "/path" [method]
    re.compile(r'@Router\s+"([^"]+)"\s+\[([^\]]+)\]', re.IGNORECASE),
    # @Router /path method
    re.compile(r"@Router\s+(\S+)\s+([A-Za-z]+)(?:\s|$)", re.IGNORECASE),
)


def is_handler_implementation(name: str) -> bool:
    """Name heuristic for concrete structs behind a handler interface."""
    return (
        name == "HandlerImpl"
        or name.endswith("Implementation")
        or name.endswith("Impl")
        or (name.endswith("Handler") and "Impl" in name)
    )


def is_handler_type_name(name: str) -> bool:
    """Default handler-role predicate for receiver type names."""
    return name.endswith("Handler") or is_handler_implementation(name)


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def handler_field_name(package: str) -> str:
    """Server field holding a package's handler, e.g. user -> userHandler."""
    return lower_first(package + "Handler")


@dataclass(frozen=True)
class ExtractorRules:
    """Immutable pattern tables used during extraction.

    ``is_handler_type`` classifies a receiver type name as filling the
    handler role; swap it for a stricter predicate without touching the
    rest of the pipeline.
    """

    context_types: frozenset[str] = frozenset({"fiber.Ctx", "gin.Context"})
    error_type: str = "error"
    handler_suffix: str = "Handler"
    handler_interface_name: str = "Handler"
    provider_prefix: str = "Provide"
    http_methods: frozenset[str] = HTTP_METHODS
    route_patterns: tuple[re.Pattern[str], ...] = ROUTE_PATTERNS
    is_handler_type: Callable[[str], bool] = is_handler_type_name
    is_implementation: Callable[[str], bool] = is_handler_implementation


DEFAULT_RULES = ExtractorRules()


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _comment_lines(text: str, first_line: int) -> Iterator[tuple[int, str]]:
    """Yield (line number, text) for every line of a Go comment."""
    if text.startswith("//"):
        yield first_line, text[2:].strip()
        return
    body = text[2:-2] if text.endswith("*/") else text[2:]
    for offset, line in enumerate(body.splitlines()):
        yield first_line + offset, line.strip().lstrip("*").strip()


class _GoSource:
    """One parsed file: raw bytes plus the helpers that read nodes."""

    def __init__(self, path: Path, source: bytes, root: Node):
        self.path = path
        self.source = source
        self.root = root

    def text(self, node: Node | None) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode(
            "utf-8", errors="replace"
        )

    def package_name(self) -> str | None:
        for child in self.root.named_children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type in ("package_identifier", "identifier"):
                        return self.text(sub)
        return None

    def type_string(self, node: Node | None) -> str:
        """Render a type expression the way it is spelled in source."""
        if node is None:
            return ""
        kind = node.type
        if kind in ("type_identifier", "identifier", "package_identifier"):
            return self.text(node)
        if kind == "pointer_type":
            return "*" + self.type_string(node.named_children[-1])
        if kind == "qualified_type":
            pkg = self.text(node.child_by_field_name("package"))
            name = self.text(node.child_by_field_name("name"))
            return f"{pkg}.{name}"
        if kind == "slice_type":
            return "[]" + self.type_string(node.child_by_field_name("element"))
        if kind == "array_type":
            length = self.text(node.child_by_field_name("length"))
            elem = self.type_string(node.child_by_field_name("element"))
            return f"[{length}]{elem}"
        if kind == "map_type":
            key = self.type_string(node.child_by_field_name("key"))
            value = self.type_string(node.child_by_field_name("value"))
            return f"map[{key}]{value}"
        if kind == "generic_type":
            base = self.type_string(node.child_by_field_name("type"))
            args = node.child_by_field_name("type_arguments")
            rendered = (
                [self.type_string(a) for a in args.named_children]
                if args is not None
                else []
            )
            return f"{base}[{', '.join(rendered)}]"
        if kind == "type_elem":
            return " | ".join(self.type_string(c) for c in node.named_children)
        if kind == "parenthesized_type" and node.named_children:
            return self.type_string(node.named_children[0])
        return " ".join(self.text(node).split())

    def field_types(self, params: Node | None) -> list[str]:
        """Types of a parameter list, one entry per declared value."""
        if params is None:
            return []
        types: list[str] = []
        for decl in params.named_children:
            if decl.type not in (
                "parameter_declaration",
                "variadic_parameter_declaration",
            ):
                continue
            rendered = self.type_string(decl.child_by_field_name("type"))
            if decl.type == "variadic_parameter_declaration":
                rendered = "..." + rendered
            names = decl.children_by_field_name("name")
            types.extend([rendered] * max(1, len(names)))
        return types

    def result_types(self, node: Node) -> list[str]:
        result = node.child_by_field_name("result")
        if result is None:
            return []
        if result.type == "parameter_list":
            return self.field_types(result)
        return [self.type_string(result)]

    def doc_comments(self, node: Node) -> list[Node]:
        """Comment nodes directly above a declaration, top to bottom."""
        comments: list[Node] = []
        next_row = node.start_point[0]
        prev = node.prev_named_sibling
        while prev is not None and prev.type == "comment":
            if prev.end_point[0] < next_row - 1:
                break
            comments.append(prev)
            next_row = prev.start_point[0]
            prev = prev.prev_named_sibling
        comments.reverse()
        return comments


class ASTScanner:
    """Extracts handler, route, provider and interface records from Go files.

    Extraction runs in two phases. ``extract_file`` collects raw
    declarations from one file; ``resolve_interfaces`` pairs handler
    implementations with same-package interfaces across whatever set of
    files it is given. ``scan_file`` runs both for a single file.
    """

    def __init__(self, rules: ExtractorRules = DEFAULT_RULES):
        self.rules = rules

    def scan_file(self, path: Path) -> ScanResult:
        return self.resolve_interfaces(self.extract_file(path))

    def extract_file(self, path: Path) -> ScanResult:
        """Phase 1: parse one file. Never raises for bad input."""
        try:
            source = path.read_bytes()
        except OSError as e:
            return ScanResult.failed(path, f"failed to read file {path}: {e}")

        # parsers hold per-parse state, so each file gets its own
        tree = Parser(GO_LANGUAGE).parse(source)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            line = bad.start_point[0] + 1 if bad is not None else None
            where = f" at line {line}" if line else ""
            return ScanResult.failed(
                path, f"failed to parse file {path}: syntax error{where}", line
            )

        go = _GoSource(path, source, root)
        package = go.package_name()
        if not package:
            return ScanResult.failed(
                path, f"failed to parse file {path}: missing package clause", 1
            )

        handlers: list[HandlerFunction] = []
        routes: list[RouteMapping] = []
        providers: list[ProviderFunction] = []
        interfaces: list[HandlerInterface] = []
        implementations: list[HandlerImplementation] = []

        for node in root.named_children:
            if node.type == "method_declaration":
                handler = self._extract_handler(go, node, package)
                if handler is not None:
                    handlers.append(handler)
                    routes.extend(self._extract_routes(go, node, handler))
            elif node.type == "function_declaration":
                provider = self._extract_provider(go, node, package)
                if provider is not None:
                    providers.append(provider)
            elif node.type == "type_declaration":
                for spec in node.named_children:
                    if spec.type != "type_spec":
                        continue
                    self._process_type_spec(
                        go, spec, package, interfaces, implementations
                    )

        logger.debug(
            "extracted file",
            path=str(path),
            package=package,
            handlers=len(handlers),
            routes=len(routes),
            providers=len(providers),
        )
        return ScanResult(
            handlers=tuple(handlers),
            routes=tuple(routes),
            providers=tuple(providers),
            interfaces=tuple(interfaces),
            implementations=tuple(implementations),
        )

    def resolve_interfaces(self, result: ScanResult) -> ScanResult:
        """Phase 2: add interface-addressed copies of implementation handlers.

        Returns a new result; running it twice adds nothing the second time.
        """
        iface_name = self.rules.handler_interface_name
        iface_packages = {
            i.package for i in result.interfaces if i.interface_name == iface_name
        }
        paired = {
            (impl.package, impl.struct_name)
            for impl in result.implementations
            if impl.package in iface_packages
        }
        if not paired:
            return result

        existing = set(result.handlers)
        derived: list[HandlerFunction] = []
        for handler in result.handlers:
            if handler.is_interface_based:
                continue
            if (handler.package, handler.handler_name) not in paired:
                continue
            candidate = dataclasses.replace(
                handler,
                handler_name=iface_name,
                implementer_name=handler.handler_name,
                is_interface_based=True,
            )
            if candidate not in existing:
                existing.add(candidate)
                derived.append(candidate)

        if not derived:
            return result
        return dataclasses.replace(
            result, handlers=result.handlers + tuple(derived)
        )

    # -- handlers ---------------------------------------------------------

    def _receiver_type_name(self, go: _GoSource, node: Node) -> str | None:
        receiver = node.child_by_field_name("receiver")
        if receiver is None:
            return None
        decls = [
            d for d in receiver.named_children if d.type == "parameter_declaration"
        ]
        if len(decls) != 1:
            return None
        recv_type = decls[0].child_by_field_name("type")
        if recv_type is not None and recv_type.type == "pointer_type":
            recv_type = recv_type.named_children[-1]
        if recv_type is not None and recv_type.type == "generic_type":
            recv_type = recv_type.child_by_field_name("type")
        if recv_type is None or recv_type.type != "type_identifier":
            return None
        return go.text(recv_type)

    def _has_handler_shape(self, go: _GoSource, node: Node) -> bool:
        """Single request-context parameter and an error as last result."""
        params = go.field_types(node.child_by_field_name("parameters"))
        if len(params) != 1:
            return False
        param = params[0]
        if not param.startswith("*") or param[1:] not in self.rules.context_types:
            return False
        results = go.result_types(node)
        return bool(results) and results[-1] == self.rules.error_type

    def _extract_handler(
        self, go: _GoSource, node: Node, package: str
    ) -> HandlerFunction | None:
        receiver = self._receiver_type_name(go, node)
        if not receiver or not self.rules.is_handler_type(receiver):
            return None
        if not self._has_handler_shape(go, node):
            return None
        return HandlerFunction(
            function_name=go.text(node.child_by_field_name("name")),
            package=package,
            handler_name=receiver,
            source_file=go.path,
        )

    def _extract_routes(
        self, go: _GoSource, node: Node, handler: HandlerFunction
    ) -> list[RouteMapping]:
        routes: list[RouteMapping] = []
        for comment in go.doc_comments(node):
            for line_no, line in _comment_lines(
                go.text(comment), comment.start_point[0] + 1
            ):
                route = self._match_route(line, line_no, handler)
                if route is not None:
                    routes.append(route)
        return routes

    def _match_route(
        self, line: str, line_no: int, handler: HandlerFunction
    ) -> RouteMapping | None:
        for pattern in self.rules.route_patterns:
            match = pattern.search(line)
            if match is None:
                continue
            method = match.group(2).strip().upper()
            if method not in self.rules.http_methods:
                continue
            return RouteMapping(
                method_name=handler.function_name,
                path=match.group(1).strip("\"'"),
                http_method=method,
                handler_ref=(
                    f"{handler_field_name(handler.package)}."
                    f"{handler.function_name}"
                ),
                package=handler.package,
                source_file=handler.source_file,
                line=line_no,
            )
        return None

    # -- providers --------------------------------------------------------

    def _extract_provider(
        self, go: _GoSource, node: Node, package: str
    ) -> ProviderFunction | None:
        name = go.text(node.child_by_field_name("name"))
        if not name.startswith(self.rules.provider_prefix):
            return None

        results = go.result_types(node)
        if not results or not results[0]:
            return None

        return_type = results[0]
        if (
            return_type == self.rules.handler_interface_name
            and len(results) == 2
            and results[1] == self.rules.error_type
        ):
            return_type = f"{package}.{return_type}"

        return ProviderFunction(
            function_name=name,
            package=package,
            return_type=return_type,
            parameters=tuple(
                go.field_types(node.child_by_field_name("parameters"))
            ),
            source_file=go.path,
        )

    # -- interfaces / implementations -------------------------------------

    def _process_type_spec(
        self,
        go: _GoSource,
        spec: Node,
        package: str,
        interfaces: list[HandlerInterface],
        implementations: list[HandlerImplementation],
    ) -> None:
        name = go.text(spec.child_by_field_name("name"))
        body = spec.child_by_field_name("type")
        if body is None:
            return

        if body.type == "interface_type":
            if name != self.rules.handler_interface_name:
                return
            methods = [
                m
                for m in body.named_children
                if m.type in ("method_elem", "method_spec")
            ]
            if not any(self._has_handler_shape(go, m) for m in methods):
                return
            interfaces.append(
                HandlerInterface(
                    interface_name=name,
                    package=package,
                    source_file=go.path,
                    methods=tuple(
                        go.text(m.child_by_field_name("name")) for m in methods
                    ),
                )
            )
        elif body.type == "struct_type" and self.rules.is_implementation(name):
            implementations.append(
                HandlerImplementation(
                    struct_name=name, package=package, source_file=go.path
                )
            )
