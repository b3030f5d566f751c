# repair_core/buckets.py
"""
Uncategorized buckets: what the managed vocabularies do not cover yet.

Both are pure functions of (records, vocabulary). They only read records;
adding a term to a vocabulary changes the buckets right away but leaves
every record as it is until recategorize() runs.
"""
from __future__ import annotations
from typing import Iterable, List

from .fault_tagger import is_covered
from .materials import is_guarded, material_names
from .quantity import parse_quantity


def _dedupe(items: Iterable[str]) -> List[str]:
    seen, out = set(), []
    for it in items:
        if it not in seen:
            seen.add(it)
            out.append(it)
    return out


def uncategorized_fault_descriptions(records: Iterable, fault_reasons: Iterable) -> List[str]:
    """Distinct non-empty descriptions of valid records that no managed reason occurs in."""
    reasons = list(fault_reasons or [])
    return _dedupe(
        r.fault_description
        for r in records
        if r.is_valid and r.fault_description and not is_covered(r.fault_description, reasons)
    )


def _material_still_open(item: str, names: List[str], managed_lower: set) -> bool:
    name_part = parse_quantity(item).name_part
    if not name_part:
        return False
    if is_guarded(name_part, managed_lower):
        return True
    lower = name_part.lower()
    return not any(n.lower() in lower or lower in n.lower() for n in names)


def uncategorized_material_strings(records: Iterable, material_vocabulary: Iterable) -> List[str]:
    """
    Distinct leftover material fragments across valid records, re-checked
    against the current vocabulary so newly managed names drop out.
    """
    names = material_names(material_vocabulary)
    managed_lower = {n.lower() for n in names}

    candidates = _dedupe(
        s.strip()
        for r in records
        if r.is_valid
        for s in r.uncategorized_material_strings
        if isinstance(s, str) and s.strip()
    )
    return [s for s in candidates if _material_still_open(s, names, managed_lower)]
