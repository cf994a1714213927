"""Tests for the parallel scan aggregator."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from textwrap import dedent

import pytest

from taskw.config import load_config
from taskw.errors import ScanDirectoryError
from taskw.scanner import ASTScanner, Scanner, get_statistics
from taskw.scanner.types import ScanResult
from taskw.settings import DEFAULT_MAX_WORKERS, ENV_MAX_WORKERS


def _handler_source(package: str, count: int) -> str:
    lines = [f"package {package}", ""]
    for i in range(count):
        lines += [
            f"// @Router /api/v1/{package}/r{i} [get]",
            f"func (h *{package.title()}Handler) Get{i}(c *fiber.Ctx) error {{",
            "\treturn nil",
            "}",
            "",
        ]
    lines += [
        f"func Provide{package.title()}Handler() *{package.title()}Handler {{",
        "\treturn nil",
        "}",
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small Go project with a few packages and some ignored files."""
    (tmp_path / "go.mod").write_text("module github.com/acme/shop\n\ngo 1.22\n")
    for package, count in [("user", 3), ("order", 2), ("product", 4)]:
        pkg_dir = tmp_path / "internal" / package
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "handler.go").write_text(_handler_source(package, count))

    (tmp_path / "internal" / "user" / "handler_test.go").write_text(
        _handler_source("user", 5)
    )
    vendor = tmp_path / "vendor" / "lib"
    vendor.mkdir(parents=True)
    (vendor / "lib.go").write_text(_handler_source("lib", 1))
    return tmp_path


def _multiset(result: ScanResult) -> tuple[Counter, Counter, Counter]:
    return (
        Counter(result.handlers),
        Counter(result.routes),
        Counter(result.providers),
    )


class TestScanner:
    """Test Scanner aggregation."""

    def test_scan_all_uses_config_dirs(self, project: Path):
        cfg = load_config(project / "taskw.yaml")
        result = Scanner(cfg).scan_all()

        assert len(result.handlers) == 9
        assert len(result.routes) == 9
        assert {p.function_name for p in result.providers} == {
            "ProvideUserHandler",
            "ProvideOrderHandler",
            "ProvideProductHandler",
        }
        assert result.errors == ()
        # test files and vendor are filtered out
        assert "lib" not in result.packages

    def test_scan_directory(self, project: Path):
        scanner = Scanner(load_config(project / "taskw.yaml"))
        result = scanner.scan_directory(project / "internal" / "order")
        assert {h.package for h in result.handlers} == {"order"}

    def test_scan_routes_and_providers(self, project: Path):
        scanner = Scanner(load_config(project / "taskw.yaml"))
        handlers, routes = scanner.scan_routes()
        providers = scanner.scan_providers()
        assert isinstance(handlers, list)
        assert len(routes) == 9
        assert len(providers) == 3

    @pytest.mark.parametrize("workers", [1, 2, 3, 16])
    def test_parallel_matches_serial(self, project: Path, workers: int):
        cfg = load_config(project / "taskw.yaml")
        serial = Scanner(cfg, max_workers=1).scan_all()
        parallel = Scanner(cfg, max_workers=workers).scan_all()
        assert _multiset(parallel) == _multiset(serial)

    def test_overlapping_roots_deduplicated(self, project: Path):
        scanner = Scanner(load_config(project / "taskw.yaml"))
        result = scanner.scan_all([project, project / "internal"])
        assert len(result.handlers) == 9

    def test_missing_root_raises(self, project: Path):
        scanner = Scanner(load_config(project / "taskw.yaml"))
        with pytest.raises(ScanDirectoryError, match="does-not-exist"):
            scanner.scan_all([project / "does-not-exist"])

    def test_invalid_pool_size(self):
        with pytest.raises(ValueError):
            Scanner(max_workers=0)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("4", 4),
            ("0", 1),
            ("auto", DEFAULT_MAX_WORKERS),
            ("", DEFAULT_MAX_WORKERS),
        ],
    )
    def test_pool_size_from_env(self, monkeypatch, value: str, expected: int):
        monkeypatch.setenv(ENV_MAX_WORKERS, value)
        assert Scanner().max_workers == expected

    def test_parse_errors_collected(self, project: Path):
        (project / "internal" / "user" / "broken.go").write_text(
            "package user\n\nfunc (h *UserHandler) X( {\n"
        )
        result = Scanner(load_config(project / "taskw.yaml")).scan_all()
        assert len(result.errors) == 1
        assert result.errors[0].source_file.name == "broken.go"
        # the other files still contribute
        assert len(result.handlers) == 9

    def test_worker_exception_recorded(self, project: Path):
        class Exploding(ASTScanner):
            def extract_file(self, path: Path) -> ScanResult:
                if path.parent.name == "order":
                    raise RuntimeError("boom")
                return super().extract_file(path)

        scanner = Scanner(
            load_config(project / "taskw.yaml"), ast_scanner=Exploding()
        )
        result = scanner.scan_all()
        assert len(result.errors) == 1
        assert "boom" in result.errors[0].message
        assert {h.package for h in result.handlers} == {"user", "product"}

    def test_interfaces_resolved_across_files(self, tmp_path: Path):
        pkg = tmp_path / "internal" / "order"
        pkg.mkdir(parents=True)
        (pkg / "handler.go").write_text(
            dedent("""
                package order

                type Handler interface {
                	List(c *fiber.Ctx) error
                }
            """)
        )
        (pkg / "impl.go").write_text(
            dedent("""
                package order

                type HandlerImpl struct{}

                // @Router /orders [get]
                func (h *HandlerImpl) List(c *fiber.Ctx) error {
                	return nil
                }
            """)
        )
        result = Scanner(max_workers=4).scan_all([tmp_path])
        assert sum(h.is_interface_based for h in result.handlers) == 1
        assert len(result.routes) == 1


class TestStatistics:
    """Test scan statistics."""

    def test_counts(self, project: Path):
        scanner = Scanner(load_config(project / "taskw.yaml"))
        result = scanner.scan_all()
        stats = scanner.get_statistics(result)

        assert stats == get_statistics(result)
        assert stats.handlers_found == 9
        assert stats.routes_found == 9
        assert stats.providers_found == 3
        assert stats.errors_found == 0
        assert stats.packages_scanned == 3

    def test_empty(self):
        stats = get_statistics(ScanResult())
        assert stats.handlers_found == 0
        assert stats.packages_scanned == 0
