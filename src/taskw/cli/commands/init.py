"""Init command - write taskw.yaml and .taskwignore."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from taskw import console
from taskw.config import Config, detect_go_module
from taskw.scanner import create_default_ignore_file
from taskw.scanner.file_filter import IGNORE_FILE_NAME
from taskw.settings import DEFAULT_CONFIG_FILE


@dataclass
class Init:
    """Write a default taskw.yaml and .taskwignore into a Go project."""

    directory: Path | None = field(
        default=None,
        metadata={"help": "Project root (default: current directory)"},
    )
    module: str | None = field(
        default=None,
        metadata={"help": "Go module path (default: read from go.mod)"},
    )
    merge: bool = field(
        default=False,
        metadata={"help": "Append missing default patterns to .taskwignore"},
    )

    def run(self) -> int:
        """Execute the init command."""
        root = self.directory.resolve() if self.directory else Path.cwd()
        if not root.is_dir():
            console.error(f"{root} is not a directory")
            return 1

        config_path = root / DEFAULT_CONFIG_FILE
        if config_path.exists():
            console.info(f"{config_path} already exists, leaving it alone")
        else:
            cfg = Config().with_root(root)
            cfg.project.module = self.module or detect_go_module(root)
            if not cfg.project.module:
                console.warning("no go.mod found; set project.module by hand")
            cfg.save(config_path)
            console.success(f"wrote {config_path}")

        ignore_path = root / IGNORE_FILE_NAME
        if create_default_ignore_file(ignore_path, merge=self.merge):
            console.success(f"wrote {ignore_path}")
        else:
            console.info(f"{ignore_path} is up to date")
        return 0
