# repair_core/fault_tagger.py
"""
Fault tags: managed fault reasons that occur in a description.

Matching is a case-insensitive substring test. A non-empty description
that no reason covers gets the unclassified tag.
"""
from __future__ import annotations
from typing import Iterable, List, Optional

from .constants import UNCLASSIFIED_FAULT_TAG


def _reason_text(reason) -> str:
    return reason if isinstance(reason, str) else getattr(reason, "text", "")


def tag_faults(description: Optional[str], fault_reasons: Iterable) -> List[str]:
    """
    Managed reasons found in the description, in vocabulary order.

    A non-empty description that matches nothing gets the single
    UNCLASSIFIED_FAULT_TAG, so adding reasons can only move a record out of
    "unclassified", never into it.
    """
    description = description or ""
    text = description.lower()
    tags: List[str] = []

    if description:
        for reason in fault_reasons:
            reason_text = _reason_text(reason)
            if reason_text and reason_text.lower() in text and reason_text not in tags:
                tags.append(reason_text)

    if not tags and description:
        tags.append(UNCLASSIFIED_FAULT_TAG)
    return tags


def is_covered(description: Optional[str], fault_reasons: Iterable) -> bool:
    """True if any managed reason occurs in the description."""
    text = (description or "").lower()
    return any(
        _reason_text(r) and _reason_text(r).lower() in text
        for r in fault_reasons
    )
