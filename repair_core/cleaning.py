# repair_core/cleaning.py
"""
Handling-narrative cleaning ahead of material extraction:
1. Repair phrases known to be duplicated in the source sheets
2. Split the narrative into candidate material fragments
3. Strip action verbs / closing phrases around each fragment
"""
from __future__ import annotations
import regex as re
from typing import List

from .constants import (
    DUPLICATED_PHRASE_FIXES,
    LEADING_VERBS,
    SEGMENT_SEPARATORS,
    TRAILING_PHRASES,
    TRAILING_QUALIFIERS,
)

# ============================================================================
# COMPILED PATTERNS
# ============================================================================
# "各" (each) glued to a separator belongs to a quantity expression: "螺絲及螺帽各2個"
_SEGMENT_RE = re.compile(
    r"(?<!各)\s*(?:" + "|".join(re.escape(s) for s in SEGMENT_SEPARATORS) + r")\s*(?!各)"
)

_LEADING_VERB_RE = re.compile(
    r"^(?:" + "|".join(re.escape(v) for v in LEADING_VERBS) + r")\s*",
    re.I,
)

_TRAILING_JUNK_RE = re.compile(
    r"(?:" + "|".join(TRAILING_QUALIFIERS) + r")?"
    r"(?:" + "|".join(TRAILING_PHRASES) + r")。?$",
    re.I,
)


def repair_duplicated_phrases(text: str) -> str:
    for doubled, single in DUPLICATED_PHRASE_FIXES:
        text = text.replace(doubled, single)
    return text


def split_segments(text: str) -> List[str]:
    """Raw (untrimmed) fragments of a narrative."""
    if not text:
        return []
    return _SEGMENT_RE.split(text)


def strip_affixes(segment: str) -> str:
    """
    "更換水龍頭2個測試正常。" -> "水龍頭2個"

    Only the first leading verb and one trailing closing phrase are removed.
    """
    s = segment.strip()
    if not s:
        return ""
    s = _LEADING_VERB_RE.sub("", s, count=1).strip()
    s = _TRAILING_JUNK_RE.sub("", s, count=1).strip()
    if s.endswith("."):
        s = s[:-1]
    return s


def clean_segments(narrative: str) -> List[str]:
    """Duplicate repair + split + strip; empty fragments are dropped."""
    text = repair_duplicated_phrases(narrative or "")
    out = []
    for seg in split_segments(text):
        cleaned = strip_affixes(seg)
        if cleaned:
            out.append(cleaned)
    return out


__all__ = [
    "repair_duplicated_phrases",
    "split_segments",
    "strip_affixes",
    "clean_segments",
]
