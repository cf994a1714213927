"""Candidate file discovery driven by .taskwignore patterns.

Pattern grammar (matched against the root-relative path, ``/`` separated):

- literal segments match themselves
- ``*`` matches any run of characters inside one segment
- ``**`` as a whole segment matches zero or more segments
- ``!pattern`` re-includes a path an earlier pattern ignored

A pattern that matches a directory matches everything below it, and the
walker never descends into such a directory.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

IGNORE_FILE_NAME = ".taskwignore"
SOURCE_SUFFIX = ".go"

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "vendor/**",
    "node_modules/**",
    ".git/**",
    ".task/**",
    "bin/**",
    "build/**",
    "dist/**",
    "**/*_test.go",
    "**/*_mock.go",
    "**/*_gen.go",
    "**/testdata/**",
)

DEFAULT_IGNORE_FILE_CONTENT = """\
# TaskW Ignore Patterns
# Files and directories skipped when scanning for handlers and providers.
# One glob per line: * stays inside a path segment, ** spans segments,
# a leading ! re-includes a path ignored by an earlier line.

# Dependencies and vendor code
vendor/**
node_modules/**

# Build artifacts
bin/**
build/**
dist/**
*.exe
*.dll
*.so
*.dylib

# Test files and test data
**/*_test.go
**/*_mock.go
**/testdata/**
**/mocks/**

# Generated code
**/*_gen.go

# IDE and tool files
.git/**
.vscode/**
.idea/**
*.swp
*.swo
*~

# Logs and temporary files
*.log
*.tmp
tmp/**
"""


def read_ignore_file(path: Path) -> list[str]:
    """Read patterns from an ignore file, skipping blanks and comments."""
    patterns: list[str] = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


@lru_cache(maxsize=512)
def _segment_regex(segment: str) -> re.Pattern[str]:
    # "**" inside a segment behaves like "*"
    pieces = [re.escape(p) for p in re.split(r"\*+", segment)]
    return re.compile("[^/]*".join(pieces) + r"\Z")


def _match_segment(pattern: str, segment: str) -> bool:
    if pattern == "*":
        return True
    if "*" not in pattern:
        return pattern == segment
    return _segment_regex(pattern).match(segment) is not None


def _match_parts(pattern: list[str], path: list[str]) -> bool:
    if not pattern:
        return not path
    head = pattern[0]
    if head == "**":
        rest = pattern[1:]
        if not rest:
            return True
        # split around the wildcard: try every suffix of the path
        return any(_match_parts(rest, path[i:]) for i in range(len(path) + 1))
    if not path:
        return False
    return _match_segment(head, path[0]) and _match_parts(pattern[1:], path[1:])


def match_pattern(pattern: str, rel_path: str) -> bool:
    """Return True if ``pattern`` matches ``rel_path`` or one of its parents."""
    pattern = pattern.strip().strip("/")
    rel_path = rel_path.replace("\\", "/").strip("/")
    if not pattern or not rel_path:
        return False

    pattern_parts = [p for p in pattern.split("/") if p]
    path_parts = [p for p in rel_path.split("/") if p and p != "."]
    return any(
        _match_parts(pattern_parts, path_parts[:end])
        for end in range(1, len(path_parts) + 1)
    )


class FileFilter:
    """Decides which Go files are candidates for parsing."""

    def __init__(
        self,
        ignore_file: Path | None = None,
        extra_patterns: Iterable[str] = (),
        include_defaults: bool = True,
    ):
        patterns: list[str] = (
            list(DEFAULT_IGNORE_PATTERNS) if include_defaults else []
        )
        if ignore_file is not None and ignore_file.is_file():
            user_patterns = read_ignore_file(ignore_file)
            logger.debug(
                "loaded ignore file",
                path=str(ignore_file),
                patterns=len(user_patterns),
            )
            patterns.extend(user_patterns)
        patterns.extend(extra_patterns)

        self.ignore_file = ignore_file
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._rules: tuple[tuple[bool, str], ...] = tuple(
            (True, p[1:]) if p.startswith("!") else (False, p)
            for p in self.patterns
        )

    def should_ignore(self, rel_path: str) -> bool:
        """Check a root-relative path against the rules; last match wins."""
        normalized = rel_path.replace(os.sep, "/")
        ignored = False
        for negated, pattern in self._rules:
            if ignored != negated:
                # only a rule that could flip the verdict needs evaluating
                continue
            if match_pattern(pattern, normalized):
                ignored = not negated
        return ignored

    def find_candidate_files(self, root: Path) -> list[Path]:
        """Walk ``root`` and return every non-ignored Go file, sorted."""
        candidates: list[Path] = []
        pruned = 0

        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = current.relative_to(root)

            kept: list[str] = []
            for name in sorted(dirnames):
                if self.should_ignore((rel_dir / name).as_posix()):
                    pruned += 1
                    continue
                kept.append(name)
            # in-place so os.walk skips the pruned subtrees
            dirnames[:] = kept

            for name in sorted(filenames):
                if not name.endswith(SOURCE_SUFFIX):
                    continue
                if self.should_ignore((rel_dir / name).as_posix()):
                    continue
                candidates.append(current / name)

        logger.debug(
            "found candidate files",
            root=str(root),
            candidates=len(candidates),
            pruned_dirs=pruned,
        )
        return sorted(candidates)


def create_default_ignore_file(path: Path, merge: bool = False) -> bool:
    """Write the default ignore file.

    An existing file is never overwritten. With ``merge`` the default
    patterns it is missing are appended. Returns True if anything was
    written.
    """
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_IGNORE_FILE_CONTENT, encoding="utf-8")
        logger.info("created ignore file", path=str(path))
        return True

    if not merge:
        return False

    existing = set(read_ignore_file(path))
    default_patterns = [
        line.strip()
        for line in DEFAULT_IGNORE_FILE_CONTENT.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    missing = [p for p in default_patterns if p not in existing]
    if not missing:
        return False

    current = path.read_text(encoding="utf-8")
    separator = "" if current.endswith("\n") or not current else "\n"
    addition = "\n# Added by taskw init --merge\n" + "\n".join(missing) + "\n"
    path.write_text(current + separator + addition, encoding="utf-8")
    logger.info("merged ignore file", path=str(path), added=len(missing))
    return True
