# tests/test_quantity.py
"""
Unit tests for quantity module.

Run:
    pytest tests/test_quantity.py -v
"""

import pytest

from repair_core.quantity import format_quantity, parse_quantity, strip_quantity, to_number


# ============================================================
# TEST: PARSE
# ============================================================

@pytest.mark.parametrize("fragment,name,qty,unit", [
    ("螺絲*3", "螺絲", 3, "個"),
    ("螺絲 x 2", "螺絲", 2, "個"),
    ("水龍頭2個", "水龍頭", 2, "個"),
    ("矽利康2支", "矽利康", 2, "支"),
    ("水管 2.5m", "水管", 2.5, "m"),
    ("磁磚3m²", "磁磚", 3, "m²"),
    ("燈座", "燈座", 1, "個"),
])
def test_parse_quantity(fragment, name, qty, unit):
    m = parse_quantity(fragment)
    assert m.name_part == name
    assert m.quantity == qty
    assert m.unit == unit


def test_model_code_is_not_a_quantity():
    """Digits glued to a Latin letter belong to the name"""
    m = parse_quantity("T5燈管")
    assert m.name_part == "T5燈管"
    assert m.quantity == 1
    assert m.has_quantity is False


@pytest.mark.parametrize("fragment", ["T12燈管", "PL13W", "PL13W燈管", "FL40D"])
def test_multi_digit_model_code_is_not_a_quantity(fragment):
    m = parse_quantity(fragment)
    assert m.name_part == fragment
    assert m.quantity == 1
    assert m.has_quantity is False


def test_quantity_after_model_code():
    m = parse_quantity("PL13W燈管2支")
    assert (m.name_part, m.quantity, m.unit) == ("PL13W燈管", 2, "支")


def test_parse_quantity_is_total():
    assert parse_quantity(None).name_part == ""
    assert parse_quantity(123).name_part == ""
    assert parse_quantity("").name_part == ""


def test_integral_quantity_stays_int():
    assert isinstance(parse_quantity("螺絲*3").quantity, int)
    assert to_number("2.50") == 2.5
    assert to_number("4") == 4


def test_strip_quantity():
    assert strip_quantity("水龍頭2個") == "水龍頭"
    assert strip_quantity("螺絲*3") == "螺絲"
    assert strip_quantity("燈座") == "燈座"
    assert strip_quantity(None) == ""


def test_format_quantity():
    assert format_quantity(5) == "5"
    assert format_quantity(5.0) == "5"
    assert format_quantity(2.5) == "2.5"
