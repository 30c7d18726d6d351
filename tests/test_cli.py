"""CLI tests: ``python -m scope_trail``."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

import jsonschema
import pytest

from scope_trail.__main__ import main
from scope_trail.utils.exit_codes import ExitCode

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURE = REPO_ROOT / "tests" / "fixtures" / "repos" / "sample_crate"


@pytest.fixture()
def crate(tmp_path: Path) -> Path:
    work = tmp_path / "crate"
    shutil.copytree(FIXTURE, work)
    return work


class TestScanCommand:
    def test_text_output(self, crate: Path, capsys) -> None:
        assert main([str(crate)]) == ExitCode.SUCCESS
        out = capsys.readouterr().out.splitlines()
        assert "src/lib.rs:1: <file>: Sample crate used by the scan pipeline tests." in out
        assert "src/lib.rs:5: fn greet(name: &str) -> String: Greets the caller." in out
        assert "src/shapes/mod.rs:33: enum Kind§variant Round: Round." in out

    def test_json_output(self, crate: Path, capsys) -> None:
        assert main([str(crate), "--json", "--ci"]) == ExitCode.SUCCESS
        d = json.loads(capsys.readouterr().out)
        assert d["schema_version"] == "scan_report_v1"
        assert d["run"]["created_at"] == "2000-01-01T00:00:00+00:00"

    def test_no_inner_flag(self, crate: Path, capsys) -> None:
        main([str(crate), "--json", "--no-inner"])
        d = json.loads(capsys.readouterr().out)
        assert "inner" not in d["summary"]["counts"]["by_kind"]

    def test_out_file(self, crate: Path, tmp_path: Path, capsys) -> None:
        out = tmp_path / "artifacts" / "report.json"
        assert main([str(crate), "--out", str(out)]) == ExitCode.SUCCESS
        assert json.loads(out.read_text(encoding="utf-8"))["summary"]["files_scanned"] == 2

    def test_config_file(self, crate: Path, tmp_path: Path, capsys) -> None:
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("include_inner: false\n", encoding="utf-8")
        main([str(crate), "--json", "--config", str(cfg)])
        d = json.loads(capsys.readouterr().out)
        assert "inner" not in d["summary"]["counts"]["by_kind"]

    def test_bad_config_is_an_error(self, crate: Path, tmp_path: Path, capsys) -> None:
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("a: [unclosed\n", encoding="utf-8")
        assert main([str(crate), "--config", str(cfg)]) == ExitCode.ERROR
        assert "bad config" in capsys.readouterr().err

    def test_missing_path(self, tmp_path: Path, capsys) -> None:
        assert main([str(tmp_path / "missing")]) == ExitCode.ERROR
        assert "does not exist" in capsys.readouterr().err

    def test_no_arguments(self, capsys) -> None:
        assert main([]) == ExitCode.ERROR

    def test_fail_on_orphans(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "a.rs").write_text("fn f() {}\n/// dangling\n", encoding="utf-8")
        assert main([str(tmp_path), "--fail-on-orphans"]) == ExitCode.VIOLATION
        assert main([str(tmp_path)]) == ExitCode.SUCCESS

    def test_fail_on_orphans_rejects_no_orphans(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "a.rs").write_text("fn f() {}\n/// dangling\n", encoding="utf-8")
        assert main([str(tmp_path), "--fail-on-orphans", "--no-orphans"]) == ExitCode.ERROR
        assert "--fail-on-orphans" in capsys.readouterr().err

    def test_unwritable_out_path_is_an_error(self, crate: Path, tmp_path: Path, capsys) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        assert main([str(crate), "--out", str(blocker / "report.json")]) == ExitCode.ERROR
        assert "error:" in capsys.readouterr().err

    def test_report_schema_failure_is_an_error(self, crate: Path, capsys, monkeypatch) -> None:
        def broken_scan(config):
            raise jsonschema.ValidationError("bad report")

        monkeypatch.setattr("scope_trail.__main__.run_scan", broken_scan)
        assert main([str(crate)]) == ExitCode.ERROR
        assert "bad report" in capsys.readouterr().err

    def test_wrongly_typed_config_value_is_an_error(self, crate: Path, tmp_path: Path, capsys) -> None:
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("ignore_dirs: null\n", encoding="utf-8")
        assert main([str(crate), "--config", str(cfg)]) == ExitCode.ERROR
        assert "ignore_dirs" in capsys.readouterr().err


class TestValidateCommand:
    def test_valid_report(self, crate: Path, tmp_path: Path, capsys) -> None:
        out = tmp_path / "report.json"
        main([str(crate), "--out", str(out)])
        capsys.readouterr()
        assert main(["validate", str(out)]) == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == "OK"

    def test_schema_violation(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"schema_version": "scan_report_v1"}), encoding="utf-8")
        assert main(["validate", str(bad)]) == ExitCode.VIOLATION
        assert capsys.readouterr().err.startswith("FAIL:")

    def test_wrong_schema_version(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"schema_version": "other"}), encoding="utf-8")
        assert main(["validate", str(bad)]) == ExitCode.VIOLATION

    def test_missing_instance(self, tmp_path: Path) -> None:
        assert main(["validate", str(tmp_path / "none.json")]) == ExitCode.ERROR


def test_module_entry_point_is_deterministic(crate: Path) -> None:
    """``python -m scope_trail --ci --json`` twice gives byte-identical output."""
    env = os.environ.copy()
    env["PYTHONPATH"] = str(REPO_ROOT / "src")
    env["PYTHONIOENCODING"] = "utf-8"
    cmd = [sys.executable, "-m", "scope_trail", ".", "--json", "--ci"]
    a = subprocess.run(cmd, cwd=str(crate), env=env, encoding="utf-8", capture_output=True)
    b = subprocess.run(cmd, cwd=str(crate), env=env, encoding="utf-8", capture_output=True)
    assert a.returncode == 0, a.stderr
    assert a.stdout == b.stdout
    assert json.loads(a.stdout)["summary"]["counts"]["annotations_total"] == 13
