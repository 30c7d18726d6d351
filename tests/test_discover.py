"""Tests for source file discovery."""

from pathlib import Path

from scope_trail.core.discover import DiscoverConfig, iter_source_files


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _discover(root: Path, **overrides) -> list[Path]:
    return list(iter_source_files(DiscoverConfig(root=root, **overrides)))


class TestIterSourceFiles:
    def test_only_rust_files_by_default(self, tmp_path: Path):
        _touch(tmp_path / "src" / "lib.rs")
        _touch(tmp_path / "src" / "notes.md")
        _touch(tmp_path / "build.py")
        found = list(iter_source_files(DiscoverConfig(root=tmp_path)))
        assert [p.name for p in found] == ["lib.rs"]

    def test_ignored_directories(self, tmp_path: Path):
        _touch(tmp_path / "src" / "main.rs")
        _touch(tmp_path / "target" / "debug" / "gen.rs")
        _touch(tmp_path / ".git" / "hooks" / "x.rs")
        found = _discover(tmp_path)
        assert [p.relative_to(tmp_path.resolve()).as_posix() for p in found] == ["src/main.rs"]

    def test_results_are_sorted(self, tmp_path: Path):
        for name in ("c.rs", "a.rs", "b/z.rs", "b/a.rs"):
            _touch(tmp_path / name)
        found = _discover(tmp_path)
        rel = [p.relative_to(tmp_path.resolve()).as_posix() for p in found]
        assert rel == sorted(rel)

    def test_size_limit(self, tmp_path: Path):
        _touch(tmp_path / "big.rs", "x" * 100)
        _touch(tmp_path / "small.rs", "x")
        found = _discover(tmp_path, max_file_bytes=10)
        assert [p.name for p in found] == ["small.rs"]

    def test_custom_extensions(self, tmp_path: Path):
        _touch(tmp_path / "a.rs")
        _touch(tmp_path / "b.rs.in")
        found = _discover(tmp_path, include_exts=(".in",))
        assert [p.name for p in found] == ["b.rs.in"]

    def test_file_root(self, tmp_path: Path):
        f = _touch(tmp_path / "one.rs")
        assert list(iter_source_files(DiscoverConfig(root=f))) == [f.resolve()]

    def test_missing_root_yields_nothing(self, tmp_path: Path):
        assert _discover(tmp_path / "missing") == []

    def test_nested_ignored_directory_is_pruned(self, tmp_path: Path):
        _touch(tmp_path / "crates" / "a" / "src" / "lib.rs")
        _touch(tmp_path / "crates" / "a" / "target" / "out.rs")
        rel = [p.relative_to(tmp_path.resolve()).as_posix() for p in _discover(tmp_path)]
        assert rel == ["crates/a/src/lib.rs"]
