"""Tests for the classify_permits CLI script."""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from tests.conftest import PERMIT_CSV

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "classify_permits.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("classify_permits", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def csv_path(tmp_path: Path) -> Path:
    path = tmp_path / "permits.csv"
    path.write_text(PERMIT_CSV, encoding="utf-8")
    return path


class TestClassifyPermitsCli:
    def test_prints_summary(self, cli, csv_path, capsys):
        assert cli.main([str(csv_path)]) == 0
        out = capsys.readouterr().out
        assert "Classified 4 permits" in out
        assert "Middle housing: 2" in out
        assert "MULTIPLEX" in out

    def test_writes_output(self, cli, csv_path, tmp_path):
        output = tmp_path / "out.json"
        assert cli.main([str(csv_path), "--output", str(output)]) == 0
        records = json.loads(output.read_text())
        assert len(records) == 4
        assert records[0]["category"] == "DADU"

    def test_middle_only_output(self, cli, csv_path, tmp_path):
        output = tmp_path / "out.json"
        assert cli.main([str(csv_path), "--output", str(output), "--middle-only"]) == 0
        records = json.loads(output.read_text())
        assert [r["category"] for r in records] == ["DADU", "MULTIPLEX"]

    def test_missing_file(self, cli, tmp_path, capsys):
        assert cli.main([str(tmp_path / "missing.csv")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_bad_rules_file(self, cli, csv_path, tmp_path, capsys):
        assert cli.main([str(csv_path), "--rules", str(tmp_path / "missing.yml")]) == 1
        assert "Cannot read" in capsys.readouterr().err
