"""Scanner - file filtering plus parallel syntax-tree extraction."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from taskw.errors import ScanDirectoryError
from taskw.scanner.ast_scanner import ASTScanner
from taskw.scanner.file_filter import IGNORE_FILE_NAME, FileFilter
from taskw.scanner.types import (
    HandlerFunction,
    ProviderFunction,
    RouteMapping,
    ScanError,
    ScanResult,
    ScanStatistics,
)
from taskw.settings import max_workers as default_max_workers

if TYPE_CHECKING:
    from taskw.config import Config

logger = structlog.get_logger(__name__)


class _Accumulator:
    """The in-progress result. Only touched while holding ``lock``."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.parts: list[ScanResult] = []

    def add(self, part: ScanResult) -> None:
        with self.lock:
            self.parts.append(part)

    def freeze(self) -> ScanResult:
        with self.lock:
            return ScanResult.merge(*self.parts)


class Scanner:
    """Finds candidate files and extracts records from them in parallel."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        max_workers: int | None = None,
        file_filter: FileFilter | None = None,
        ast_scanner: ASTScanner | None = None,
    ):
        if max_workers is None:
            max_workers = default_max_workers()
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.config = config
        self.max_workers = max_workers
        if file_filter is None:
            root = config.root if config is not None else Path.cwd()
            file_filter = FileFilter(ignore_file=root / IGNORE_FILE_NAME)
        self.file_filter = file_filter
        self.ast_scanner = ast_scanner or ASTScanner()

    def _default_dirs(self) -> list[Path]:
        if self.config is None:
            return [Path.cwd()]
        return [self.config.resolve(d) for d in self.config.paths.scan_dirs]

    def find_candidate_files(self, scan_dirs: Iterable[Path]) -> list[Path]:
        seen: set[Path] = set()
        files: list[Path] = []
        for directory in scan_dirs:
            directory = Path(directory)
            if not directory.is_dir():
                raise ScanDirectoryError(directory, "not a directory")
            try:
                candidates = self.file_filter.find_candidate_files(directory)
            except OSError as e:
                raise ScanDirectoryError(directory, str(e)) from e
            for path in candidates:
                key = path.resolve()
                if key not in seen:
                    seen.add(key)
                    files.append(path)
        return files

    def scan_all(self, scan_dirs: Sequence[Path] | None = None) -> ScanResult:
        """Scan every configured root and return one merged result."""
        dirs = list(scan_dirs) if scan_dirs is not None else self._default_dirs()
        files = self.find_candidate_files(dirs)
        logger.info("scanning", roots=len(dirs), files=len(files))
        return self.scan_files(files)

    def scan_directory(self, directory: Path) -> ScanResult:
        return self.scan_all([directory])

    def scan_routes(
        self, scan_dirs: Sequence[Path] | None = None
    ) -> tuple[list[HandlerFunction], list[RouteMapping]]:
        result = self.scan_all(scan_dirs)
        return list(result.handlers), list(result.routes)

    def scan_providers(
        self, scan_dirs: Sequence[Path] | None = None
    ) -> list[ProviderFunction]:
        return list(self.scan_all(scan_dirs).providers)

    def scan_files(self, files: Sequence[Path]) -> ScanResult:
        """Extract from ``files`` on a bounded pool and merge the results.

        Parsing runs outside the lock; only appending a finished per-file
        result is serialized. Interface association runs once, after every
        file has been merged.
        """
        accumulator = _Accumulator()

        def work(path: Path) -> None:
            try:
                part = self.ast_scanner.extract_file(path)
            except Exception as e:
                logger.exception("extraction failed", path=str(path))
                part = ScanResult(
                    errors=(ScanError(path, f"failed to scan file {path}: {e}"),)
                )
            accumulator.add(part)

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="taskw-scan"
        ) as pool:
            # list() drains the iterator so every task has finished here
            list(pool.map(work, files))

        result = self.ast_scanner.resolve_interfaces(accumulator.freeze())
        logger.debug(
            "scan complete",
            files=len(files),
            handlers=len(result.handlers),
            routes=len(result.routes),
            providers=len(result.providers),
            errors=len(result.errors),
        )
        return result

    def get_statistics(self, result: ScanResult) -> ScanStatistics:
        return get_statistics(result)


def get_statistics(result: ScanResult) -> ScanStatistics:
    return ScanStatistics(
        handlers_found=len(result.handlers),
        routes_found=len(result.routes),
        providers_found=len(result.providers),
        errors_found=len(result.errors),
        packages_scanned=len(result.packages),
    )
