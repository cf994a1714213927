"""Swagger docs generation through swaggo's ``swag`` tool."""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path

import structlog

from taskw.config import Config
from taskw.errors import GeneratorError

logger = structlog.get_logger(__name__)

DOCS_DIR = "docs"
SWAGGER_OUTPUTS = ("docs.go", "swagger.json", "swagger.yaml")
# checked in order; the first existing file is the swag entry point
MAIN_FILE_CANDIDATES = ("cmd/server/main.go", "cmd/main.go", "main.go")
SWAG_INSTALL_HINT = "go install github.com/swaggo/swag/cmd/swag@latest"

# current and older swag headers on docs.go
_SWAG_MARKER_RE = re.compile(
    r"Code generated by swaggo/swag\. DO NOT EDIT"
    r"|GENERATED BY (?:THE COMMAND ABOVE|SWAG); DO NOT EDIT"
)


def find_main_file(root: Path) -> Path | None:
    for candidate in MAIN_FILE_CANDIDATES:
        path = root / candidate
        if path.is_file():
            return path
    return None


def is_swagger_docs(path: Path, max_lines: int = 10) -> bool:
    """True if ``path`` is a docs.go written by swag."""
    try:
        with path.open(encoding="utf-8", errors="replace") as f:
            for _, line in zip(range(max_lines), f, strict=False):
                if _SWAG_MARKER_RE.search(line):
                    return True
    except OSError:
        return False
    return False


class SwaggerGenerator:
    def __init__(self, config: Config, timeout: float = 120):
        self.config = config
        self.timeout = timeout

    @property
    def docs_dir(self) -> Path:
        return self.config.root / DOCS_DIR

    def output_paths(self) -> list[Path]:
        return [self.docs_dir / name for name in SWAGGER_OUTPUTS]

    def generate_swagger(self) -> Path | None:
        """Run ``swag init`` from the project root.

        Returns the docs directory, or ``None`` when swag is not installed.
        A missing entry point or a failed swag run raises ``GeneratorError``.
        """
        swag = shutil.which("swag")
        if swag is None:
            logger.debug("swag not found, skipping swagger docs")
            return None

        root = self.config.root
        main_file = find_main_file(root)
        if main_file is None:
            raise GeneratorError(
                self.docs_dir,
                "could not find main.go (tried "
                + ", ".join(MAIN_FILE_CANDIDATES)
                + ")",
            )

        cmd = [
            swag,
            "init",
            "-g",
            main_file.relative_to(root).as_posix(),
            "-o",
            DOCS_DIR,
        ]
        logger.debug("running swag", cmd=cmd, cwd=str(root))
        try:
            result = subprocess.run(
                cmd,
                cwd=root,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            raise GeneratorError(self.docs_dir, f"swag failed: {e}") from e
        if result.returncode != 0:
            raise GeneratorError(
                self.docs_dir, result.stderr.strip() or "swag failed"
            )

        logger.info("generated swagger docs", path=str(self.docs_dir))
        return self.docs_dir
