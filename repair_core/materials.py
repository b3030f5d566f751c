# repair_core/materials.py - MATERIAL EXTRACTION PIPELINE
"""
Material extraction from the handling narrative ("處理情形").

Pipeline per record:
    narrative
      → [duplicate-phrase repair + segmentation + affix stripping]  (cleaning.py)
      → [hose/wire compound patch]
      → [quantity/unit parse]                                       (quantity.py)
      → [incomplete-prefix guard]
      → [vocabulary match, longest managed name first]
      → [aggregate by name, guard re-applied]
      → [toilet quantity patch]
      → MaterialExtraction(materials_used, uncategorized)

Nothing here raises on odd input: fragments that cannot be placed end up in
the record's uncategorized list for a human to curate.
"""
from __future__ import annotations
import regex as re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .cleaning import clean_segments
from .constants import (
    BENIGN_REMAINDER_CHARS,
    HOSE_WIRE_COMPOUND,
    HOSE_WIRE_PARTS,
    INCOMPLETE_MATERIAL_STEMS,
    TOILET_FIXTURE_NAMES,
    TOILET_MENTION_PATTERN,
)
from .quantity import Number, parse_quantity

_INCOMPLETE_PREFIX_RE = re.compile(
    r"^(?:" + "|".join(re.escape(s) for s in INCOMPLETE_MATERIAL_STEMS) + r")-$",
    re.I,
)
_BENIGN_REMAINDER_RE = re.compile(r"^[" + BENIGN_REMAINDER_CHARS + r"]*$")
_TOILET_MENTION_RE = re.compile(TOILET_MENTION_PATTERN, re.I)


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class MaterialUsage:
    name: str
    quantity: Number = 1


@dataclass
class _Candidate:
    name: str
    quantity: Number


@dataclass
class MaterialExtraction:
    materials_used: List[MaterialUsage] = field(default_factory=list)
    uncategorized: List[str] = field(default_factory=list)


# ============================================================
# VOCABULARY HELPERS
# ============================================================

def _material_name(entry) -> str:
    return entry if isinstance(entry, str) else getattr(entry, "name", "")


def material_names(vocabulary: Optional[Iterable]) -> List[str]:
    return [n for n in (_material_name(e) for e in (vocabulary or [])) if n]


def longest_first(names: Iterable[str]) -> List[str]:
    """Longest name first; equal lengths ordered by folded text so results never depend on insertion order."""
    return sorted(set(names), key=lambda n: (-len(n), n.lower(), n))


def is_incomplete_prefix(name: str) -> bool:
    """'LED燈泡-' style stem with nothing after the dash."""
    return bool(name) and bool(_INCOMPLETE_PREFIX_RE.match(name))


def is_guarded(name: str, managed_lower: Set[str]) -> bool:
    """A bare stem that nobody put in the vocabulary on purpose."""
    return is_incomplete_prefix(name) and name.lower() not in managed_lower


# ============================================================
# MATCHING
# ============================================================

def match_managed_name(
    name_part: str,
    sorted_names: Sequence[str],
    managed_lower: Set[str],
) -> Optional[str]:
    """
    Stored material name for a parsed fragment, or None.

    For each managed name (longest first):
      1. fragment starts with it and the rest is only size/punctuation
         noise → keep the fragment's own wording (more specific)
      2. fragment contains it, or it contains the fragment → canonical name
    """
    lower = name_part.lower()
    for managed in sorted_names:
        m_lower = managed.lower()
        if lower.startswith(m_lower):
            remainder = name_part[len(managed):].strip()
            if not remainder or _BENIGN_REMAINDER_RE.match(remainder):
                stored = parse_quantity(name_part).name_part or name_part
                if not is_guarded(stored, managed_lower):
                    return stored
        if m_lower in lower or lower in m_lower:
            return managed
    return None


def _split_hose_wire(managed_lower: Set[str]) -> Tuple[List[_Candidate], List[str]]:
    found, missing = [], []
    for part in HOSE_WIRE_PARTS:
        if part.lower() in managed_lower:
            found.append(_Candidate(part, 1))
        else:
            missing.append(part)
    return found, missing


def _aggregate(candidates: List[_Candidate], managed_lower: Set[str]) -> List[MaterialUsage]:
    totals = {}
    for c in candidates:
        if is_guarded(c.name, managed_lower):
            continue
        totals[c.name] = totals.get(c.name, 0) + c.quantity
    return [MaterialUsage(name, qty) for name, qty in totals.items()]


def _fix_toilet_quantity(materials: List[MaterialUsage], narrative: str) -> List[MaterialUsage]:
    out = []
    for m in materials:
        if m.name in TOILET_FIXTURE_NAMES and m.quantity > 1:
            if len(_TOILET_MENTION_RE.findall(narrative)) == 1:
                m = MaterialUsage(m.name, 1)
        out.append(m)
    return out


# ============================================================
# MAIN ENTRY
# ============================================================

def extract_materials(narrative: Optional[str], vocabulary: Optional[Iterable]) -> MaterialExtraction:
    """
    Materials used (aggregated) and unplaced fragments for one narrative.

    Args:
        narrative: handling-status text
        vocabulary: managed material entries (objects with .name, or str)
    """
    narrative = narrative if isinstance(narrative, str) else ""
    names = material_names(vocabulary)
    managed_lower = {n.lower() for n in names}
    sorted_names = longest_first(names)

    candidates: List[_Candidate] = []
    uncategorized: List[str] = []

    for segment in clean_segments(narrative):
        if segment == HOSE_WIRE_COMPOUND:
            found, missing = _split_hose_wire(managed_lower)
            candidates.extend(found)
            uncategorized.extend(missing)
            continue

        parsed = parse_quantity(segment)
        name_part = parsed.name_part
        if not name_part:
            continue

        if is_incomplete_prefix(name_part):
            if name_part.lower() not in managed_lower:
                uncategorized.append(segment)
                continue

        stored = match_managed_name(name_part, sorted_names, managed_lower)
        if stored is None:
            uncategorized.append(segment)
            continue
        candidates.append(_Candidate(stored, parsed.quantity))

    materials = _fix_toilet_quantity(_aggregate(candidates, managed_lower), narrative)
    return MaterialExtraction(materials_used=materials, uncategorized=uncategorized)
