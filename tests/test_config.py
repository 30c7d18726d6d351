"""Tests for ScanConfig loading and precedence."""

from pathlib import Path

import pytest
import yaml

from scope_trail.core.config import MAX_FILE_BYTES_ENV, ScanConfig


class TestScanConfig:
    def test_defaults(self, tmp_path: Path):
        cfg = ScanConfig(root=tmp_path)
        assert cfg.extensions == (".rs",)
        assert "target" in cfg.ignore_dirs
        assert cfg.include_inner and cfg.include_orphans
        assert cfg.out_path is None

    def test_from_yaml(self, tmp_path: Path):
        path = tmp_path / "cfg.yml"
        path.write_text(
            "extensions: [rs, .rs.in]\n"
            "ignore_dirs: [generated]\n"
            "include_orphans: false\n"
            "max_file_bytes: 1000\n"
            "colour: blue\n",
            encoding="utf-8",
        )
        cfg = ScanConfig.from_yaml(path)
        assert cfg.root == tmp_path
        assert cfg.extensions == (".rs", ".rs.in")
        assert cfg.ignore_dirs == frozenset({"generated"})
        assert cfg.include_orphans is False
        assert cfg.max_file_bytes == 1000
        assert cfg.extra == {"colour": "blue"}

    def test_empty_yaml_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "cfg.yml"
        path.write_text("", encoding="utf-8")
        assert ScanConfig.from_yaml(path, root=tmp_path) == ScanConfig(root=tmp_path)

    def test_non_mapping_rejected(self, tmp_path: Path):
        path = tmp_path / "cfg.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ScanConfig.from_yaml(path)

    def test_malformed_yaml(self, tmp_path: Path):
        path = tmp_path / "cfg.yml"
        path.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            ScanConfig.from_yaml(path)

    def test_discover_finds_dotfile(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv(MAX_FILE_BYTES_ENV, raising=False)
        (tmp_path / ".scope-trail.yml").write_text("include_inner: false\n", encoding="utf-8")
        cfg = ScanConfig.discover(tmp_path)
        assert cfg.include_inner is False
        assert cfg.root == tmp_path

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".scope-trail.yml").write_text("max_file_bytes: 10\n", encoding="utf-8")
        monkeypatch.setenv(MAX_FILE_BYTES_ENV, "99")
        assert ScanConfig.discover(tmp_path).max_file_bytes == 99

    def test_bad_env_value(self, tmp_path: Path):
        with pytest.raises(ValueError):
            ScanConfig(root=tmp_path).with_env({MAX_FILE_BYTES_ENV: "lots"})

    def test_to_dict_is_json_friendly(self, tmp_path: Path):
        d = ScanConfig(root=Path("crates")).to_dict()
        assert d["root"] == "crates"
        assert d["ignore_dirs"] == sorted(d["ignore_dirs"])

    @pytest.mark.parametrize(
        "text",
        [
            "ignore_dirs: null\n",
            "extensions: rs\n",
            "include_inner: 'no'\n",
            "max_file_bytes: lots\n",
            "max_file_bytes: -1\n",
            "out_path: [a, b]\n",
        ],
    )
    def test_wrongly_typed_values_rejected(self, tmp_path: Path, text: str):
        path = tmp_path / "cfg.yml"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ValueError):
            ScanConfig.from_yaml(path)
