# tests/test_normalize.py
"""
Unit tests for normalize module.

Run:
    pytest tests/test_normalize.py -v
"""

from datetime import date, datetime, time

import pandas as pd
import pytest

from repair_core.normalize import chronological_key, convert_to_24_hour, format_date, format_time


# ============================================================
# TEST: DATES
# ============================================================

@pytest.mark.parametrize("value", [
    "2024/03/05",
    "2024-03-05",
    "2024-3-5 10:20",
    "03/05/2024",
    45356,
    45356.0,
    datetime(2024, 3, 5, 14, 30),
    date(2024, 3, 5),
    pd.Timestamp("2024-03-05"),
])
def test_format_date_equivalent_inputs(value):
    assert format_date(value) == "2024/03/05"


@pytest.mark.parametrize("value", ["not-a-date", "", "   ", None, float("nan"), 0, "2024/02/30", "2024/13/01"])
def test_format_date_unreadable(value):
    assert format_date(value) == ""


@pytest.mark.parametrize("value,expected", [
    ("03/05/24", "2024/03/05"),
    ("3-5-98", "1998/03/05"),
    ("03/05/524", ""),
    ("03/05/024", ""),
    ("0024/03/05", ""),
])
def test_format_date_short_years(value, expected):
    assert format_date(value) == expected


def test_format_date_is_idempotent():
    assert format_date(format_date("3-5-2024")) == "2024/03/05"


# ============================================================
# TEST: TIMES
# ============================================================

@pytest.mark.parametrize("value,expected", [
    ("13:05", "01:05 PM"),
    ("1:05 PM", "01:05 PM"),
    ("12:30 AM", "12:30 AM"),
    ("00:15", "12:15 AM"),
    ("09:00:59", "09:00 AM"),
    (time(18, 45), "06:45 PM"),
    (datetime(2024, 3, 5, 12, 0), "12:00 PM"),
    (0.5, "12:00 PM"),
    (0.75, "06:00 PM"),
])
def test_format_time(value, expected):
    assert format_time(value) == expected


@pytest.mark.parametrize("value", ["", None, "morning", "25:00", "10:75"])
def test_format_time_unreadable(value):
    assert format_time(value) == ""


def test_convert_to_24_hour():
    assert convert_to_24_hour("01:05 PM") == "13:05"
    assert convert_to_24_hour("12:30 AM") == "00:30"
    assert convert_to_24_hour("12:30 PM") == "12:30"
    assert convert_to_24_hour("9:15") == "09:15"
    assert convert_to_24_hour("") == "00:00"
    assert convert_to_24_hour("garbage") == "00:00"


def test_chronological_key_orders_newest_first():
    keys = [
        ("2024/03/05", "09:00 AM"),
        ("", ""),
        ("2024/03/05", "01:00 PM"),
        ("2023/12/31", "11:00 PM"),
    ]
    ordered = sorted(keys, key=lambda k: chronological_key(*k), reverse=True)
    assert ordered == [
        ("2024/03/05", "01:00 PM"),
        ("2024/03/05", "09:00 AM"),
        ("2023/12/31", "11:00 PM"),
        ("", ""),
    ]
