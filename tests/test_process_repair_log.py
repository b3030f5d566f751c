# tests/test_process_repair_log.py
"""
End-to-end test of the batch CLI on a temporary workbook.

Run:
    pytest tests/test_process_repair_log.py -v
"""

import json
import sys

import pandas as pd
import pytest

import process_repair_log
from repair_core.mapping import RECORDS_SHEET


@pytest.fixture
def workdir(tmp_path):
    pd.DataFrame({
        "工作屬性": ["水", "電", ""],
        "請修日期": ["2024/03/05", "2024/04/01", "2024/04/02"],
        "請修時間": ["10:00", "08:30", ""],
        "故障描述": ["南館中庭漏水", "北館A區燈不亮", "缺屬性"],
        "處理情形": ["更換水龍頭2個、濾網", "更換燈座", ""],
    }).to_excel(tmp_path / "log.xlsx", index=False, engine="openpyxl")
    (tmp_path / "faults.json").write_text(json.dumps([{"name": "漏水"}], ensure_ascii=False), encoding="utf-8")
    (tmp_path / "materials.json").write_text(
        json.dumps([{"name": "水龍頭"}, {"name": "燈座"}], ensure_ascii=False), encoding="utf-8"
    )
    return tmp_path


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["process_repair_log.py", *argv])
    return process_repair_log.main()


def test_cli_writes_report(monkeypatch, capsys, workdir):
    out = workdir / "report.xlsx"
    code = _run(
        monkeypatch,
        "--input", str(workdir / "log.xlsx"),
        "--faults", str(workdir / "faults.json"),
        "--materials", str(workdir / "materials.json"),
        "--output", str(out),
        "--uncategorized",
    )
    assert code == 0
    assert out.exists()

    report = pd.read_excel(out, sheet_name=RECORDS_SHEET)
    assert len(report) == 2
    assert "水龍頭 x2" in set(report["使用材料"].fillna(""))

    printed = capsys.readouterr().out
    assert "濾網" in printed
    assert "燈不亮" in printed


def test_cli_filter_leaves_nothing(monkeypatch, workdir):
    code = _run(
        monkeypatch,
        "--input", str(workdir / "log.xlsx"),
        "--year", "1999",
        "--output", str(workdir / "empty.xlsx"),
    )
    assert code == 1
    assert not (workdir / "empty.xlsx").exists()


def test_cli_missing_input(monkeypatch, workdir):
    assert _run(monkeypatch, "--input", str(workdir / "nope.xlsx")) == 1
