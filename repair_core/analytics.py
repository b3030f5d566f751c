# repair_core/analytics.py - FILTERS & DASHBOARD AGGREGATES
"""
Filtering and the aggregates behind each dashboard chart.

Every function takes a list of MaintenanceRecord and returns a pandas
DataFrame (or a plain list for dropdown options). Invalid records never
reach an aggregate: apply_filter() drops them first, and the option
helpers skip them too.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .constants import (
    LEGACY_UNCLASSIFIED_FAULT_TAG,
    NORTH_AREAS_FOR_DROPDOWN,
    SOUTH_AREAS_FOR_DROPDOWN,
    UNIDENTIFIABLE_AREA_TAG,
    VENUE_NORTH,
    VENUE_SOUTH,
    VENUE_UNKNOWN,
    WORK_TYPE_OTHER,
    WORK_TYPES,
)

COL_NAME = "name"
COL_COUNT = "count"
COL_QUANTITY = "quantity"


# ============================================================
# FILTER
# ============================================================

@dataclass
class RecordFilter:
    year: str = ""
    month: str = ""
    venue: str = ""
    area: str = ""
    work_type: str = ""
    search: str = ""

    def is_active(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def describe(self) -> Dict[str, str]:
        """Filter values for display; unset values read 所有."""
        return {
            "年份": self.year or "所有",
            "月份": self.month or "所有",
            "場域": self.venue or "所有",
            "區域": self.area or "所有",
            "工作類型": self.work_type or "所有",
        }


def _matches_search(record, term: str) -> bool:
    t = term.lower()
    return (
        t in (record.fault_description or "").lower()
        or t in (record.handling_status or "").lower()
        or any(t in m.name.lower() for m in record.materials_used)
        or any(t in tag.lower() for tag in record.fault_tags)
    )


def apply_filter(records: Iterable, record_filter: RecordFilter, include_search: bool = True) -> List:
    """
    Valid records that pass every set criterion, order kept.

    The dashboard ignores the search box (include_search=False); the record
    list honours it.
    """
    f = record_filter
    month = f.month.zfill(2) if f.month else ""
    out = []
    for r in records:
        if not r.is_valid:
            continue
        if f.year and not (r.request_date and r.request_date.startswith(f.year)):
            continue
        if month and not (r.request_date and r.request_date[5:7] == month):
            continue
        if include_search and f.search and not _matches_search(r, f.search):
            continue
        if f.venue and r.venue != f.venue:
            continue
        if f.area and r.area != f.area:
            continue
        if f.work_type and r.work_type_classification != f.work_type:
            continue
        out.append(r)
    return out


# ============================================================
# COUNTS
# ============================================================

def _count_frame(counts: Dict[str, float], value_col: str = COL_COUNT, sort: bool = True) -> pd.DataFrame:
    df = pd.DataFrame(list(counts.items()), columns=[COL_NAME, value_col])
    if sort and not df.empty:
        df = df.sort_values(value_col, ascending=False, kind="mergesort").reset_index(drop=True)
    return df


def venue_counts(records: Iterable) -> pd.DataFrame:
    counts: Dict[str, int] = {}
    for r in records:
        counts[r.venue] = counts.get(r.venue, 0) + 1
    return _count_frame(counts, sort=False)


def area_key(venue: str, area: str) -> str:
    return f"{venue} - {area}"


def area_hotspots(records: Iterable) -> pd.DataFrame:
    """Counts per "venue - area", most repairs first."""
    counts: Dict[str, int] = {}
    for r in records:
        key = area_key(r.venue, r.area)
        counts[key] = counts.get(key, 0) + 1
    return _count_frame(counts)


def fault_type_counts(records: Iterable) -> pd.DataFrame:
    """
    Counts per fault tag. Records stored before tagging existed (no tags
    but a description) are counted under the legacy bucket.
    """
    counts: Dict[str, int] = {}
    for r in records:
        if r.fault_tags:
            for tag in r.fault_tags:
                counts[tag] = counts.get(tag, 0) + 1
        elif r.fault_description:
            counts[LEGACY_UNCLASSIFIED_FAULT_TAG] = counts.get(LEGACY_UNCLASSIFIED_FAULT_TAG, 0) + 1
    return _count_frame(counts)


def material_usage(records: Iterable) -> pd.DataFrame:
    totals: Dict[str, float] = {}
    for r in records:
        for m in r.materials_used:
            totals[m.name] = totals.get(m.name, 0) + m.quantity
    return _count_frame(totals, value_col=COL_QUANTITY)


def top_area_fault_breakdown(records: Sequence, top_n: int = 3, top_faults: int = 5) -> List[Dict]:
    """
    Fault mix of the busiest areas:
        [{"area": "南館 - 中庭", "total": 12, "faults": DataFrame(name, count)}, ...]
    """
    records = list(records)
    hotspots = area_hotspots(records).head(top_n)
    out = []
    for key, total in zip(hotspots[COL_NAME], hotspots[COL_COUNT]):
        in_area = [r for r in records if area_key(r.venue, r.area) == key]
        out.append({
            "area": key,
            "total": int(total),
            "faults": fault_type_counts(in_area).head(top_faults),
        })
    return out


# ============================================================
# TRENDS
# ============================================================

def _trend_key(request_date: str, year: str, month: str) -> str:
    if year and not month:
        return request_date[5:7] + "月"
    if year and month:
        return request_date[8:10] + "日"
    return request_date[0:7]


def maintenance_trend(records: Iterable, year: str = "", month: str = "") -> pd.DataFrame:
    """
    Repairs per period. Granularity follows the filter: months of the
    chosen year, days of the chosen month, otherwise YYYY/MM.
    """
    counts: Dict[str, int] = {}
    for r in records:
        if not (r.is_valid and r.request_date):
            continue
        key = _trend_key(r.request_date, year, month)
        counts[key] = counts.get(key, 0) + 1
    df = _count_frame(counts, sort=False)
    return df.sort_values(COL_NAME, kind="mergesort").reset_index(drop=True)


def work_type_trend(records: Iterable) -> pd.DataFrame:
    """Per "MM月" row, one count column per work type."""
    monthly: Dict[str, Dict[str, int]] = {}
    for r in records:
        if not (r.is_valid and r.request_date):
            continue
        key = r.request_date[5:7] + "月"
        row = monthly.setdefault(key, {wt: 0 for wt in WORK_TYPES})
        wt = r.work_type_classification
        if wt in row:
            row[wt] += 1
        elif wt:
            row[WORK_TYPE_OTHER] += 1
    df = pd.DataFrame(
        [{COL_NAME: k, **v} for k, v in monthly.items()],
        columns=[COL_NAME, *WORK_TYPES],
    )
    return df.sort_values(COL_NAME, kind="mergesort").reset_index(drop=True)


# ============================================================
# FILTER OPTIONS
# ============================================================

def _collate(values: Iterable[str]) -> List[str]:
    return sorted(values, key=lambda v: (v.casefold(), v))


def _dedupe(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def area_options(records: Iterable, venue: str = "") -> List[str]:
    """Area dropdown for the chosen venue: fixed list plus areas seen in the data."""
    valid = [r for r in records if r.is_valid]
    include_unidentifiable = False

    if venue == VENUE_NORTH:
        options = list(NORTH_AREAS_FOR_DROPDOWN)
        include_unidentifiable = any(
            r.venue == VENUE_NORTH and r.area == UNIDENTIFIABLE_AREA_TAG for r in valid
        )
    elif venue == VENUE_SOUTH:
        options = list(SOUTH_AREAS_FOR_DROPDOWN)
        options += _dedupe(
            r.area for r in valid
            if r.venue == VENUE_SOUTH and r.area
            and r.area not in SOUTH_AREAS_FOR_DROPDOWN
            and r.area != UNIDENTIFIABLE_AREA_TAG
        )
        include_unidentifiable = any(
            r.venue == VENUE_SOUTH and r.area == UNIDENTIFIABLE_AREA_TAG for r in valid
        )
    elif venue == VENUE_UNKNOWN:
        options = _dedupe(r.area for r in valid if r.venue == VENUE_UNKNOWN and r.area)
        options = options or [UNIDENTIFIABLE_AREA_TAG]
    else:
        options = _dedupe(r.area for r in valid if r.area)

    if include_unidentifiable and UNIDENTIFIABLE_AREA_TAG not in options:
        options.append(UNIDENTIFIABLE_AREA_TAG)
    return _collate(options)


def year_options(records: Iterable) -> List[str]:
    years = {r.request_date[:4] for r in records if r.is_valid and r.request_date}
    return sorted(years, reverse=True)


def month_options(records: Sequence, year: str = "") -> List[str]:
    """Months as "1".."12" (no padding); all twelve when there is nothing loaded."""
    records = list(records)
    if not year and not records:
        return [str(i) for i in range(1, 13)]
    months = {
        r.request_date[5:7]
        for r in records
        if r.is_valid and r.request_date and (not year or r.request_date.startswith(year))
    }
    return [str(m) for m in sorted(int(m) for m in months)]


def venue_options() -> List[str]:
    return [VENUE_NORTH, VENUE_SOUTH, VENUE_UNKNOWN]


def work_type_options() -> List[str]:
    return list(WORK_TYPES)


def summary_stats(records: Sequence) -> Dict[str, Optional[object]]:
    """Headline numbers for the dashboard cards and the prompt."""
    records = list(records)
    hot = area_hotspots(records)
    faults = fault_type_counts(records)
    mats = material_usage(records)
    return {
        "total": len(records),
        "top_area": (hot.iloc[0][COL_NAME], int(hot.iloc[0][COL_COUNT])) if not hot.empty else None,
        "top_fault": (faults.iloc[0][COL_NAME], int(faults.iloc[0][COL_COUNT])) if not faults.empty else None,
        "top_material": (mats.iloc[0][COL_NAME], mats.iloc[0][COL_QUANTITY]) if not mats.empty else None,
    }
