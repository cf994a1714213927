"""Wire provider set generator."""

from __future__ import annotations

from collections.abc import Sequence
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
from taskw.scanner.types import ProviderFunction
from taskw.settings import WIRE_IMPORT

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProviderGroup:
    package: str
    refs: tuple[str, ...]


class DependencyGenerator:
    def __init__(self, config: Config, formatter: Formatter = format_go_source):
        self.config = config
        self.formatter = formatter

    @property
    def output_path(self) -> Path:
        return self.config.dependencies_output_path

    def provider_ref(self, provider: ProviderFunction) -> str:
        if provider.package == self.config.output_package:
            return provider.function_name
        return f"{provider.package}.{provider.function_name}"

    def group_providers(
        self, providers: Sequence[ProviderFunction]
    ) -> list[ProviderGroup]:
        by_package: dict[str, list[ProviderFunction]] = {}
        for provider in providers:
            by_package.setdefault(provider.package, []).append(provider)
        return [
            ProviderGroup(
                package=package,
                refs=tuple(
                    self.provider_ref(p)
                    for p in sorted(
                        by_package[package], key=lambda p: p.function_name
                    )
                ),
            )
            for package in sorted(by_package)
        ]

    def imports(self, providers: Sequence[ProviderFunction]) -> list[str]:
        output_package = self.config.output_package
        paths = set()
        for provider in providers:
            if not provider.package or provider.package == output_package:
                continue
            path = derive_import_path(
                self.config.project.module,
                provider.source_file,
                self.config.root,
            )
            if path:
                paths.add(path)
        paths.discard(WIRE_IMPORT)
        return [WIRE_IMPORT, *sorted(paths)]

    def render(self, providers: Sequence[ProviderFunction]) -> str:
        return render_template(
            "dependencies.go.j2",
            package=self.config.output_package,
            imports=self.imports(providers),
            groups=self.group_providers(providers),
        )

    def generate_dependencies(
        self, providers: Sequence[ProviderFunction]
    ) -> Path | None:
        """Write the provider set file; ``None`` when disabled."""
        if not self.config.generation.dependencies.enabled:
            logger.debug("dependency generation disabled")
            return None
        content = self.render(providers)
        path = write_generated_file(self.output_path, content, self.formatter)
        logger.info(
            "generated dependencies", path=str(path), providers=len(providers)
        )
        return path
