# repair_core/quantity.py
"""
Quantity/unit splitting for material fragments.

    "螺絲*3"       -> ("螺絲", 3, "個")
    "水管 2.5m"    -> ("水管", 2.5, "m")
    "矽利康2支"    -> ("矽利康", 2, "支")
    "T5燈管"       -> ("T5燈管", 1, "個")     model codes are not quantities
    "燈座"         -> ("燈座", 1, "個")
"""
from __future__ import annotations
import regex as re
from dataclasses import dataclass
from typing import Any, Union

from .constants import DEFAULT_UNIT, MULTIPLY_MARKERS

Number = Union[int, float]

_NUM = r"\d+(?:\.\d+)?"
_UNIT = r"[A-Za-z一-龥]{1,4}[²³]?"

# Lazy name, then either "<marker> qty [unit]" or "qty unit" anchored at the end.
# A bare quantity glued to a Latin letter (T5, T12, PL13W...) is part of a model code,
# and a quantity never starts inside a number.
QTY_UNIT_PATTERN = re.compile(
    rf"^(?P<name>.*?)\s*"
    rf"(?:[{re.escape(MULTIPLY_MARKERS)}]\s*(?P<mqty>{_NUM})\s*(?P<munit>{_UNIT})?"
    rf"|(?<![A-Za-z0-9.])(?P<qty>{_NUM})\s*(?P<unit>{_UNIT}))?$",
    re.S,
)


@dataclass(frozen=True)
class QuantityMatch:
    name_part: str
    quantity: Number = 1
    unit: str = DEFAULT_UNIT
    has_quantity: bool = False


def to_number(text: str) -> Number:
    """'3' -> 3, '2.50' -> 2.5"""
    value = float(text)
    return int(value) if value.is_integer() and "." not in text else value


def parse_quantity(fragment: Any) -> QuantityMatch:
    """
    Split a fragment into (name, quantity, unit).

    Never raises: anything that is not a string yields an empty name part,
    and a fragment without a recognisable suffix is returned whole with
    quantity 1 and the default unit.
    """
    if not isinstance(fragment, str):
        return QuantityMatch(name_part="")

    text = fragment.strip()
    m = QTY_UNIT_PATTERN.match(text)
    if not m:
        return QuantityMatch(name_part=text)

    qty = m.group("mqty") or m.group("qty")
    unit = m.group("munit") or m.group("unit")
    name = (m.group("name") or "").strip()

    if qty is None:
        return QuantityMatch(name_part=name or text)

    return QuantityMatch(
        name_part=name,
        quantity=to_number(qty),
        unit=unit.strip() if unit else DEFAULT_UNIT,
        has_quantity=True,
    )


def strip_quantity(fragment: Any) -> str:
    """Base name of a fragment, used when prefilling a vocabulary entry."""
    if not isinstance(fragment, str):
        return ""
    name = parse_quantity(fragment).name_part
    return name or fragment.strip()


def format_quantity(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
