# tests/test_analytics.py
"""
Unit tests for filters and dashboard aggregates.

Run:
    pytest tests/test_analytics.py -v
"""

from dataclasses import replace

import pytest

from repair_core.analytics import (
    RecordFilter,
    apply_filter,
    area_hotspots,
    area_options,
    fault_type_counts,
    maintenance_trend,
    material_usage,
    month_options,
    summary_stats,
    top_area_fault_breakdown,
    venue_counts,
    work_type_trend,
    year_options,
)
from repair_core.record_processor import process_batch


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def records():
    rows = [
        {"工作屬性": "水", "請修日期": "2024/03/05", "故障描述": "南館中庭馬桶堵塞", "處理情形": "更換螺絲*3"},
        {"工作屬性": "水", "請修日期": "2024/03/18", "故障描述": "南館中庭漏水", "處理情形": "更換螺絲*2、墊片"},
        {"工作屬性": "電", "請修日期": "2024/04/01", "故障描述": "北館A區燈不亮", "處理情形": "更換燈座"},
        {"工作屬性": "營繕", "請修日期": "2023/12/24", "故障描述": "南館東側門損壞", "處理情形": ""},
        {"工作屬性": "空調", "請修日期": "2024/03/20", "故障描述": "南館中庭冷氣異音", "處理情形": ""},
        {"工作屬性": "", "請修日期": "2024/03/21", "故障描述": "南館中庭無效", "處理情形": "更換螺絲*9"},
    ]
    return process_batch(rows, ["堵塞", "漏水", "不亮"], ["螺絲", "墊片", "燈座"])


def _as_dict(df, value_col="count"):
    return dict(zip(df["name"], df[value_col]))


# ============================================================
# TEST: FILTER
# ============================================================

def test_filter_drops_invalid(records):
    assert len(apply_filter(records, RecordFilter())) == 5


def test_filter_year_and_month(records):
    got = apply_filter(records, RecordFilter(year="2024", month="3"))
    assert {r.request_date for r in got} == {"2024/03/05", "2024/03/18", "2024/03/20"}


def test_filter_venue_area_work_type(records):
    got = apply_filter(records, RecordFilter(venue="南館", area="中庭", work_type="水"))
    assert len(got) == 2


def test_search_matches_materials_and_tags(records):
    assert len(apply_filter(records, RecordFilter(search="墊片"))) == 1
    assert len(apply_filter(records, RecordFilter(search="未分類"))) == 2
    assert len(apply_filter(records, RecordFilter(search="墊片"), include_search=False)) == 5


def test_filter_is_active():
    assert not RecordFilter().is_active()
    assert RecordFilter(search="x").is_active()
    assert RecordFilter().describe()["年份"] == "所有"


# ============================================================
# TEST: COUNTS
# ============================================================

def test_venue_counts(records):
    valid = apply_filter(records, RecordFilter())
    assert _as_dict(venue_counts(valid)) == {"南館": 4, "北館": 1}


def test_area_hotspots_sorted(records):
    df = area_hotspots(apply_filter(records, RecordFilter()))
    assert df.iloc[0]["name"] == "南館 - 中庭"
    assert df.iloc[0]["count"] == 3
    assert list(df["count"]) == sorted(df["count"], reverse=True)


def test_fault_type_counts_legacy_bucket(records):
    valid = apply_filter(records, RecordFilter())
    legacy = replace(valid[0], fault_tags=[])
    counts = _as_dict(fault_type_counts([legacy] + valid[1:]))
    assert counts["其他/未分類 (舊)"] == 1


def test_material_usage_sums(records):
    usage = material_usage(apply_filter(records, RecordFilter()))
    assert _as_dict(usage, "quantity") == {"螺絲": 5, "墊片": 1, "燈座": 1}
    assert usage.iloc[0]["name"] == "螺絲"


def test_top_area_fault_breakdown(records):
    top = top_area_fault_breakdown(apply_filter(records, RecordFilter()), top_n=1)
    assert len(top) == 1
    assert top[0]["area"] == "南館 - 中庭"
    assert top[0]["total"] == 3
    assert _as_dict(top[0]["faults"]) == {"堵塞": 1, "漏水": 1, "未分類故障": 1}


def test_summary_stats(records):
    stats = summary_stats(apply_filter(records, RecordFilter()))
    assert stats["total"] == 5
    assert stats["top_area"] == ("南館 - 中庭", 3)
    assert summary_stats([])["top_area"] is None


# ============================================================
# TEST: TRENDS
# ============================================================

def test_maintenance_trend_granularity(records):
    valid = apply_filter(records, RecordFilter())
    assert list(maintenance_trend(valid)["name"]) == ["2023/12", "2024/03", "2024/04"]
    assert _as_dict(maintenance_trend(valid, year="2024")) == {"03月": 3, "04月": 1, "12月": 1}

    march = apply_filter(records, RecordFilter(year="2024", month="3"))
    assert list(maintenance_trend(march, "2024", "3")["name"]) == ["05日", "18日", "20日"]


def test_work_type_trend(records):
    df = work_type_trend(records)
    march = df[df["name"] == "03月"].iloc[0]
    assert march["水"] == 2
    assert march["其他"] == 1
    assert march["電"] == 0
    assert list(df.columns) == ["name", "水", "電", "消防", "營繕", "其他"]


# ============================================================
# TEST: OPTIONS
# ============================================================

def test_year_and_month_options(records):
    assert year_options(records) == ["2024", "2023"]
    assert month_options(records, "2024") == ["3", "4"]
    assert month_options([], "") == [str(i) for i in range(1, 13)]


def test_area_options(records):
    south = area_options(records, "南館")
    assert {"北側", "南側", "東側", "西側", "中庭", "戶外"} <= set(south)
    assert "無法識別" not in south
    assert "A區" in area_options(records, "北館")
    assert area_options(records, "未知場域") == ["無法識別"]
    assert set(area_options(records)) == {"中庭", "A區", "東側"}
