# repair_core/vocabulary.py
"""
User-curated lists of fault reasons and material names.

Entries are immutable; the list itself is the only mutable state and every
change bumps `revision` so dependants (buckets, cached views) know when to
recompute. Uniqueness is case-insensitive.
"""
from __future__ import annotations
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .quantity import strip_quantity

KIND_FAULT = "fault"
KIND_MATERIAL = "material"

MSG_EMPTY = {
    KIND_FAULT: "請輸入故障原因。",
    KIND_MATERIAL: "請輸入材料名稱。",
}
MSG_DUPLICATE = {
    KIND_FAULT: "此故障原因已存在。",
    KIND_MATERIAL: "此材料名稱已存在。",
}
MSG_ADDED = {
    KIND_FAULT: "已新增故障原因：{}",
    KIND_MATERIAL: "已新增材料名稱：{}",
}
MSG_BAD_IMPORT = "檔案格式不符，應為 JSON 陣列。"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ManagedFaultReason:
    id: str
    text: str
    created_at: str


@dataclass(frozen=True)
class ManagedMaterialName:
    id: str
    name: str
    created_at: str


ManagedEntry = Union[ManagedFaultReason, ManagedMaterialName]


def collation_key(text: str) -> Tuple[str, str]:
    return (text.casefold(), text)


class ManagedVocabulary:
    """Ordered, case-insensitively unique list of fault reasons or material names."""

    def __init__(self, kind: str, items: Optional[Iterable[str]] = None):
        if kind not in (KIND_FAULT, KIND_MATERIAL):
            raise ValueError(f"Unknown vocabulary kind: {kind!r}")
        self.kind = kind
        self._entries: List[ManagedEntry] = []
        self.revision = 0
        for text in items or []:
            self.add(text)

    # ---------------------------------------------------------- access
    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def entries(self) -> List[ManagedEntry]:
        """Entries in display order."""
        return sorted(self._entries, key=lambda e: collation_key(self.text_of(e)) + (e.id,))

    def texts(self) -> List[str]:
        return [self.text_of(e) for e in self.entries]

    @staticmethod
    def text_of(entry: ManagedEntry) -> str:
        return entry.text if isinstance(entry, ManagedFaultReason) else entry.name

    def _lower_set(self) -> set:
        return {self.text_of(e).lower() for e in self._entries}

    def _new_entry(self, text: str) -> ManagedEntry:
        if self.kind == KIND_FAULT:
            return ManagedFaultReason(id=str(uuid.uuid4()), text=text, created_at=_now_iso())
        return ManagedMaterialName(id=str(uuid.uuid4()), name=text, created_at=_now_iso())

    # ---------------------------------------------------------- edits
    def add(self, text: Any) -> Tuple[bool, str]:
        """
        Add one term. Returns (added, message); a rejected add leaves the
        list untouched.
        """
        cleaned = text.strip() if isinstance(text, str) else ""
        if not cleaned:
            return False, MSG_EMPTY[self.kind]
        if cleaned.lower() in self._lower_set():
            return False, MSG_DUPLICATE[self.kind]
        self._entries.append(self._new_entry(cleaned))
        self.revision += 1
        return True, MSG_ADDED[self.kind].format(cleaned)

    def remove(self, entry_id: str) -> bool:
        kept = [e for e in self._entries if e.id != entry_id]
        if len(kept) == len(self._entries):
            return False
        self._entries = kept
        self.revision += 1
        return True

    def import_items(self, items: Any) -> Tuple[int, int]:
        """
        Merge a JSON-style list of {"name": ...} / {"text": ...} objects
        (bare strings are accepted too). Returns (added, skipped).
        """
        if not isinstance(items, list):
            raise ValueError(MSG_BAD_IMPORT)

        seen = self._lower_set()
        fresh: List[ManagedEntry] = []
        skipped = 0
        for item in items:
            if isinstance(item, dict):
                raw = item.get("text") if self.kind == KIND_FAULT else item.get("name")
                raw = raw if raw is not None else (item.get("name") or item.get("text"))
            else:
                raw = item
            cleaned = raw.strip() if isinstance(raw, str) else ""
            if not cleaned or cleaned.lower() in seen:
                skipped += 1
                continue
            seen.add(cleaned.lower())
            fresh.append(self._new_entry(cleaned))

        if fresh:
            self._entries.extend(fresh)
            self.revision += 1
        return len(fresh), skipped

    # ---------------------------------------------------------- (de)serialise
    def export_items(self) -> List[Dict[str, str]]:
        return [{"name": t} for t in self.texts()]

    def to_json(self) -> str:
        return json.dumps(self.export_items(), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, kind: str, payload: Union[str, bytes]) -> "ManagedVocabulary":
        vocab = cls(kind)
        try:
            items = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(MSG_BAD_IMPORT) from e
        vocab.import_items(items)
        return vocab

    def import_json(self, payload: Union[str, bytes]) -> Tuple[int, int]:
        try:
            items = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(MSG_BAD_IMPORT) from e
        return self.import_items(items)


def prefill_from_uncategorized(item: str, kind: str) -> str:
    """
    Text to put in the "add" box when a user picks an uncategorized item.
    Material fragments lose their quantity suffix ("水龍頭2個" -> "水龍頭").
    """
    if not isinstance(item, str):
        return ""
    if kind == KIND_MATERIAL:
        return strip_quantity(item)
    return item.strip()
