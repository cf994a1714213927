"""Formatting and writing of generated Go files."""

from __future__ import annotations

import json
import os
import re
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import structlog
from jinja2 import Environment, PackageLoader, StrictUndefined

from taskw import console
from taskw.errors import FormatError, GeneratorError

logger = structlog.get_logger(__name__)

GENERATED_MARKER = "// Code generated by taskw. DO NOT EDIT."
# the Go toolchain's convention for machine-written files
_GENERATED_RE = re.compile(r"^// Code generated .* DO NOT EDIT\.$")

Formatter = Callable[[str], str]

_env = Environment(
    loader=PackageLoader("taskw.generator", "templates"),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)


def go_string(value: str) -> str:
    """Render ``value`` as a Go interpreted string literal."""
    return json.dumps(value, ensure_ascii=False)


_env.filters["go_string"] = go_string


def render_template(name: str, **context: object) -> str:
    return _env.get_template(name).render(marker=GENERATED_MARKER, **context)


def tidy_source(content: str) -> str:
    """Deterministic fallback when gofmt is not installed.

    Normalizes line endings, strips trailing whitespace, collapses runs of
    blank lines and ends the file with exactly one newline.
    """
    lines = [line.rstrip() for line in content.replace("\r\n", "\n").split("\n")]
    out: list[str] = []
    for line in lines:
        if not line and out and not out[-1]:
            continue
        out.append(line)
    while out and not out[-1]:
        out.pop()
    return "\n".join(out) + "\n"


def format_go_source(content: str) -> str:
    """Run gofmt over ``content``; tidy locally if gofmt is unavailable."""
    gofmt = shutil.which("gofmt")
    if gofmt is None:
        logger.debug("gofmt not found, using local tidy")
        return tidy_source(content)
    try:
        result = subprocess.run(
            [gofmt],
            input=content,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        raise FormatError(f"gofmt failed: {e}") from e
    if result.returncode != 0:
        raise FormatError(result.stderr.strip() or "gofmt failed")
    return result.stdout


def write_generated_file(
    path: Path, content: str, formatter: Formatter = format_go_source
) -> Path:
    """Format and write one generated file.

    A formatter failure is not fatal: the unformatted text is written so the
    broken output can be inspected. Directory or write failures raise
    ``GeneratorError``.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GeneratorError(path, f"failed to create directory: {e}") from e

    try:
        formatted = formatter(content)
    except FormatError as e:
        logger.warning(
            "failed to format generated code", path=str(path), error=str(e)
        )
        console.warning(f"failed to format generated code for {path}: {e}")
        formatted = content

    try:
        path.write_text(formatted, encoding="utf-8")
    except OSError as e:
        raise GeneratorError(path, str(e)) from e

    logger.debug("wrote generated file", path=str(path), bytes=len(formatted))
    return path


def is_generated_file(path: Path, max_lines: int = 10) -> bool:
    """True if one of the first lines carries a generated-code marker."""
    try:
        with path.open(encoding="utf-8", errors="replace") as f:
            for _, line in zip(range(max_lines), f, strict=False):
                if _GENERATED_RE.match(line.rstrip("\n")):
                    return True
    except OSError:
        return False
    return False


def derive_import_path(module: str, source_file: Path, project_root: Path) -> str:
    """Go import path of the package declared in ``source_file``.

    Built from the module path plus the file's directory relative to the
    project root.
    """
    directory = source_file.resolve().parent
    root = project_root.resolve()
    try:
        rel = directory.relative_to(root).as_posix()
    except ValueError:
        rel = Path(os.path.relpath(directory, root)).as_posix()
    if rel in ("", "."):
        return module
    if not module:
        return rel
    return f"{module}/{rel}"
