"""Tests for .taskwignore matching and candidate file discovery."""

from pathlib import Path

import pytest

from taskw.scanner.file_filter import (
    DEFAULT_IGNORE_FILE_CONTENT,
    FileFilter,
    create_default_ignore_file,
    match_pattern,
    read_ignore_file,
)


def _touch(root: Path, rel: str, content: str = "package x\n") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestMatchPattern:
    """Test glob matching against root-relative paths."""

    @pytest.mark.parametrize(
        "pattern,path,expected",
        [
            ("**/*_test.go", "handler_test.go", True),
            ("**/*_test.go", "internal/user/handler_test.go", True),
            ("**/*_test.go", "internal/user/handler.go", False),
            ("**/*_test.go", "handler_test.go.bak", False),
            ("vendor/**", "vendor/github.com/x/y.go", True),
            ("vendor/**", "internal/vendor.go", False),
            ("vendor", "vendor/a/b.go", True),
            ("**/testdata/**", "pkg/testdata/sample.go", True),
            ("**/testdata/**", "testdata/sample.go", True),
            ("internal/*/mock.go", "internal/user/mock.go", True),
            ("internal/*/mock.go", "internal/user/sub/mock.go", False),
            ("*.go", "main.go", True),
        ],
    )
    def test_patterns(self, pattern: str, path: str, expected: bool):
        assert match_pattern(pattern, path) is expected

    def test_empty_pattern_never_matches(self):
        assert match_pattern("", "main.go") is False
        assert match_pattern("   ", "main.go") is False

    def test_windows_separators_normalized(self):
        assert match_pattern("vendor/**", "vendor\\pkg\\a.go")


class TestFileFilter:
    """Test FileFilter rule evaluation."""

    def test_defaults_ignore_tests_and_generated(self):
        f = FileFilter()
        assert f.should_ignore("internal/user/handler_test.go")
        assert f.should_ignore("internal/api/routes_gen.go")
        assert f.should_ignore("vendor/lib/lib.go")
        assert not f.should_ignore("internal/user/handler.go")

    def test_without_defaults(self):
        f = FileFilter(include_defaults=False)
        assert f.patterns == ()
        assert not f.should_ignore("vendor/lib/lib.go")

    def test_ignore_file_patterns_appended(self, tmp_path: Path):
        ignore = tmp_path / ".taskwignore"
        ignore.write_text("# comment\n\ninternal/legacy/**\n")
        f = FileFilter(ignore_file=ignore)
        assert "internal/legacy/**" in f.patterns
        assert f.should_ignore("internal/legacy/old.go")

    def test_missing_ignore_file_is_fine(self, tmp_path: Path):
        f = FileFilter(ignore_file=tmp_path / "nope")
        assert not f.should_ignore("main.go")

    def test_negation_reincludes(self):
        f = FileFilter(
            extra_patterns=["internal/**", "!internal/user/**"],
            include_defaults=False,
        )
        assert f.should_ignore("internal/order/handler.go")
        assert not f.should_ignore("internal/user/handler.go")

    def test_last_match_wins(self):
        f = FileFilter(
            extra_patterns=["!internal/user/**", "internal/**"],
            include_defaults=False,
        )
        assert f.should_ignore("internal/user/handler.go")


class TestFindCandidateFiles:
    """Test directory walking."""

    def test_only_go_files_sorted(self, tmp_path: Path):
        _touch(tmp_path, "b.go")
        _touch(tmp_path, "a.go")
        _touch(tmp_path, "README.md", "# hi")
        _touch(tmp_path, "internal/user/handler.go")

        files = FileFilter().find_candidate_files(tmp_path)
        rel = [p.relative_to(tmp_path).as_posix() for p in files]
        assert rel == ["a.go", "b.go", "internal/user/handler.go"]

    def test_ignored_files_and_dirs_skipped(self, tmp_path: Path):
        _touch(tmp_path, "internal/user/handler.go")
        _touch(tmp_path, "internal/user/handler_test.go")
        _touch(tmp_path, "internal/user/testdata/fixture.go")
        _touch(tmp_path, "vendor/github.com/lib/lib.go")
        _touch(tmp_path, "internal/api/routes_gen.go")

        files = FileFilter().find_candidate_files(tmp_path)
        rel = [p.relative_to(tmp_path).as_posix() for p in files]
        assert rel == ["internal/user/handler.go"]

    def test_pruned_directory_not_walked(self, tmp_path: Path, monkeypatch):
        _touch(tmp_path, "main.go")
        _touch(tmp_path, "vendor/deep/nested/x.go")

        f = FileFilter()
        checked: list[str] = []
        original = f.should_ignore

        def spy(rel_path: str) -> bool:
            checked.append(rel_path)
            return original(rel_path)

        monkeypatch.setattr(f, "should_ignore", spy)
        f.find_candidate_files(tmp_path)

        assert "vendor" in checked
        assert not any(p.startswith("vendor/") for p in checked)


class TestCreateDefaultIgnoreFile:
    """Test .taskwignore creation and merging."""

    def test_creates_when_absent(self, tmp_path: Path):
        path = tmp_path / ".taskwignore"
        assert create_default_ignore_file(path) is True
        assert path.read_text() == DEFAULT_IGNORE_FILE_CONTENT
        assert "**/*_test.go" in read_ignore_file(path)

    def test_never_overwrites(self, tmp_path: Path):
        path = tmp_path / ".taskwignore"
        path.write_text("custom/**\n")
        assert create_default_ignore_file(path) is False
        assert path.read_text() == "custom/**\n"

    def test_merge_appends_missing(self, tmp_path: Path):
        path = tmp_path / ".taskwignore"
        path.write_text("custom/**\nvendor/**")

        assert create_default_ignore_file(path, merge=True) is True
        patterns = read_ignore_file(path)
        assert patterns[:2] == ["custom/**", "vendor/**"]
        assert patterns.count("vendor/**") == 1
        assert "**/*_test.go" in patterns

    def test_merge_noop_when_complete(self, tmp_path: Path):
        path = tmp_path / ".taskwignore"
        create_default_ignore_file(path)
        assert create_default_ignore_file(path, merge=True) is False
