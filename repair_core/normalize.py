# repair_core/normalize.py
"""
Canonical date/time strings for repair records.

    format_date(...)  -> "YYYY/MM/DD" or ""
    format_time(...)  -> "hh:mm AM" / "hh:mm PM" or ""

Inputs come straight from spreadsheet cells, so they can be native
datetimes, pandas Timestamps, Excel serial numbers or free strings. Both
formatters are total: a value that cannot be read becomes "".
"""
from __future__ import annotations
import re
import warnings
from datetime import date, datetime, time
from typing import Any, Optional, Tuple

import numpy as np
import pandas as pd

# Excel day 0 (accounts for the 1900 leap-year bug for every date after 1900-02-28)
EXCEL_EPOCH = "1899-12-30"
SECONDS_PER_DAY = 86400

_TIME_RE = re.compile(r"(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?\s*(AM|PM)?", re.I)
_DATE_SPLIT_RE = re.compile(r"[/-]")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


# ============================================================================
# DATES
# ============================================================================
def _date_from_serial(serial: float) -> Optional[date]:
    ts = pd.to_datetime(float(serial), unit="D", origin=EXCEL_EPOCH)
    return ts.date()


def _split_date_string(text: str) -> Optional[Tuple[int, int, int]]:
    """
    "2024/03/05", "2024-3-5 10:20" -> (2024, 3, 5)
    "03/05/2024", "3-5-2024"       -> (2024, 3, 5)
    "03/05/24"                     -> (2024, 3, 5)

    The first number decides the order: above 1000 it is a year.
    Two-digit years pivot at 50 (24 -> 2024, 98 -> 1998); any other
    year below 1000 is unreadable.
    """
    head = text.strip().split()[0] if text.strip() else ""
    head = head.split("T")[0]
    parts = _DATE_SPLIT_RE.split(head)
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    a, b, c = (int(p) for p in parts)
    if a > 1000:
        return a, b, c
    year = c
    if len(parts[2]) <= 2:
        year += 2000 if year < 50 else 1900
    if year < 1000:
        return None
    return year, a, b


def format_date(value: Any) -> str:
    """Canonical YYYY/MM/DD, or "" when the value is missing or unreadable."""
    if _is_missing(value) or (_is_number(value) and value == 0):
        return ""
    try:
        if isinstance(value, (datetime, pd.Timestamp)):
            d = value.date()
        elif isinstance(value, date):
            d = value
        elif _is_number(value):
            d = _date_from_serial(value)
        elif isinstance(value, str):
            ymd = _split_date_string(value)
            if ymd is None:
                return ""
            d = date(*ymd)
        else:
            return ""
    except (ValueError, OverflowError, TypeError) as e:
        warnings.warn(f"Cannot read date {value!r}: {e}")
        return ""
    return f"{d.year:04d}/{d.month:02d}/{d.day:02d}"


# ============================================================================
# TIMES
# ============================================================================
def _to_12h(hours: int, minutes: int) -> str:
    ampm = "PM" if hours >= 12 else "AM"
    h12 = hours % 12 or 12
    return f"{h12:02d}:{minutes:02d} {ampm}"


def format_time(value: Any) -> str:
    """Canonical "hh:mm AM/PM", or "" when the value is missing or unreadable."""
    if _is_missing(value) or (_is_number(value) and value == 0):
        return ""
    try:
        if isinstance(value, (datetime, pd.Timestamp, time)):
            return _to_12h(value.hour, value.minute)
        if _is_number(value):
            total_seconds = int(round(float(value) * SECONDS_PER_DAY))
            hours = (total_seconds // 3600) % 24
            minutes = (total_seconds % 3600) // 60
            return _to_12h(hours, minutes)
        if isinstance(value, str):
            m = _TIME_RE.search(value)
            if not m:
                return ""
            hours, minutes = int(m.group(1)), int(m.group(2))
            ampm = (m.group(4) or "").upper()
            if ampm == "PM" and hours < 12:
                hours += 12
            elif ampm == "AM" and hours == 12:
                hours = 0
            if hours > 23 or minutes > 59:
                return ""
            return _to_12h(hours, minutes)
    except (ValueError, OverflowError, TypeError) as e:
        warnings.warn(f"Cannot read time {value!r}: {e}")
    return ""


def convert_to_24_hour(time12h: Optional[str]) -> str:
    """
    "01:05 PM" -> "13:05", "12:30 AM" -> "00:30", "9:15" -> "09:15".
    Only used for ordering; anything unreadable sorts as midnight.
    """
    if not time12h or not isinstance(time12h, str):
        return "00:00"
    parts = time12h.strip().split(" ")
    clock = parts[0]
    modifier = parts[1] if len(parts) > 1 else ""

    if not modifier:
        if re.fullmatch(r"\d{1,2}:\d{2}", clock):
            return clock.zfill(5)
        return "00:00"

    m = re.fullmatch(r"(\d{1,2}):(\d{2})", clock)
    if not m:
        return "00:00"
    hours = int(m.group(1))
    if hours == 12:
        hours = 0
    if modifier.upper() == "PM":
        hours += 12
    return f"{hours:02d}:{m.group(2)}"


def chronological_key(request_date: str, request_time: str) -> Tuple[bool, str, str]:
    """Sort key; use with reverse=True for newest first (undated records last)."""
    return bool(request_date), request_date or "", convert_to_24_hour(request_time)
