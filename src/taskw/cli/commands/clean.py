"""Clean command - remove generated files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from taskw import console
from taskw.cli._common import load_project_config
from taskw.generator import SwaggerGenerator, is_generated_file
from taskw.generator.swagger import is_swagger_docs
from taskw.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Clean:
    """Delete generated files that carry a generated-code marker."""

    config: Path | None = field(
        default=None,
        metadata={"help": "Path to taskw.yaml (default: ./taskw.yaml)"},
    )
    dry_run: bool = field(
        default=False,
        metadata={"help": "List files without deleting them"},
    )

    def _remove(self, path: Path) -> bool:
        if self.dry_run:
            console.info(f"would remove {path}")
            return False
        path.unlink()
        logger.debug("removed generated file", path=str(path))
        console.success(f"removed {path}")
        return True

    def _swagger_targets(self, swagger: SwaggerGenerator) -> list[Path]:
        """Swagger outputs, only when docs.go shows swag wrote them."""
        docs_go, *companions = swagger.output_paths()
        if not docs_go.exists():
            return []
        if not is_swagger_docs(docs_go):
            console.warning(f"skipping {docs_go}: no swag marker")
            return []
        return [p for p in (docs_go, *companions) if p.exists()]

    def run(self) -> int:
        """Execute the clean command."""
        cfg = load_project_config(self.config)
        targets = [cfg.routes_output_path, cfg.dependencies_output_path]

        removed = 0
        for path in targets:
            if not path.exists():
                continue
            if not is_generated_file(path):
                console.warning(f"skipping {path}: no generated-code marker")
                continue
            removed += self._remove(path)

        swagger = SwaggerGenerator(cfg)
        for path in self._swagger_targets(swagger):
            removed += self._remove(path)

        docs_dir = swagger.docs_dir
        if removed and docs_dir.is_dir() and not any(docs_dir.iterdir()):
            docs_dir.rmdir()
            logger.debug("removed empty docs directory", path=str(docs_dir))

        if not removed and not self.dry_run:
            console.info("nothing to clean")
        return 0
