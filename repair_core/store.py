# repair_core/store.py
"""
In-memory session state: records + both managed vocabularies.

Every mutation bumps a revision number. Derived views (the uncategorized
buckets) remember the revisions they were built from and are rebuilt on
the next read after any of them changes. Bulk operations build the new
record list first and swap it in with a single assignment.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .analytics import RecordFilter, apply_filter
from .buckets import uncategorized_fault_descriptions, uncategorized_material_strings
from .record_processor import MaintenanceRecord, process_batch, recategorize, sort_records
from .vocabulary import KIND_FAULT, KIND_MATERIAL, ManagedVocabulary


@dataclass
class IngestSummary:
    valid: int = 0
    invalid: int = 0
    invalid_reasons: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.valid + self.invalid

    def message(self) -> str:
        msg = f"成功匯入 {self.valid} 筆有效紀錄。"
        if self.invalid:
            msg += f" {self.invalid} 筆紀錄無效 ({'、'.join(self.invalid_reasons)})，已略過分析。"
        return msg


class RepairStore:
    def __init__(
        self,
        fault_reasons: Optional[ManagedVocabulary] = None,
        material_names: Optional[ManagedVocabulary] = None,
    ):
        self.records: List[MaintenanceRecord] = []
        self.fault_reasons = fault_reasons if fault_reasons is not None else ManagedVocabulary(KIND_FAULT)
        self.material_names = material_names if material_names is not None else ManagedVocabulary(KIND_MATERIAL)
        self.records_revision = 0
        self._views: Dict[str, Tuple[Tuple[int, int, int], Any]] = {}

    # ============================================================
    # REVISIONS / DERIVED VIEWS
    # ============================================================
    def _revision_key(self) -> Tuple[int, int, int]:
        return (self.records_revision, self.fault_reasons.revision, self.material_names.revision)

    def _replace_records(self, records: List[MaintenanceRecord]) -> None:
        self.records = records
        self.records_revision += 1

    def _cached(self, name: str, build):
        key = self._revision_key()
        hit = self._views.get(name)
        if hit is not None and hit[0] == key:
            return hit[1]
        value = build()
        self._views[name] = (key, value)
        return value

    @property
    def uncategorized_faults(self) -> List[str]:
        return self._cached(
            "faults",
            lambda: uncategorized_fault_descriptions(self.records, self.fault_reasons.entries),
        )

    @property
    def uncategorized_materials(self) -> List[str]:
        return self._cached(
            "materials",
            lambda: uncategorized_material_strings(self.records, self.material_names.entries),
        )

    # ============================================================
    # RECORDS
    # ============================================================
    def ingest(self, rows, verbose: bool = False) -> IngestSummary:
        """Process rows with the current vocabularies and append them (newest first overall)."""
        fresh = process_batch(
            rows,
            self.fault_reasons.entries,
            self.material_names.entries,
            verbose=verbose,
        )
        reasons: List[str] = []
        for rec in fresh:
            for err in rec.validation_errors:
                if err not in reasons:
                    reasons.append(err)

        n_valid = sum(1 for r in fresh if r.is_valid)
        self._replace_records(sort_records(self.records + fresh))
        return IngestSummary(valid=n_valid, invalid=len(fresh) - n_valid, invalid_reasons=reasons)

    def recategorize(self, verbose: bool = False) -> int:
        """Rebuild every record with the current vocabularies; returns the record count."""
        rebuilt = recategorize(
            self.records,
            self.fault_reasons.entries,
            self.material_names.entries,
            verbose=verbose,
        )
        self._replace_records(rebuilt)
        return len(rebuilt)

    def delete_record(self, record_id: str) -> bool:
        return self.delete_records([record_id]) == 1

    def delete_records(self, ids: Iterable[str]) -> int:
        doomed = set(ids)
        kept = [r for r in self.records if r.id not in doomed]
        removed = len(self.records) - len(kept)
        if removed:
            self._replace_records(kept)
        return removed

    def delete_filtered(self, record_filter: RecordFilter) -> int:
        """Delete every record the filter currently shows (search included)."""
        return self.delete_records(r.id for r in self.filtered_records(record_filter))

    def clear(self) -> None:
        self._replace_records([])

    def valid_records(self) -> List[MaintenanceRecord]:
        return [r for r in self.records if r.is_valid]

    def filtered_records(
        self,
        record_filter: Optional[RecordFilter] = None,
        include_search: bool = True,
    ) -> List[MaintenanceRecord]:
        return apply_filter(self.records, record_filter or RecordFilter(), include_search=include_search)

    # ============================================================
    # VOCABULARIES
    # ============================================================
    def vocabulary(self, kind: str) -> ManagedVocabulary:
        return self.fault_reasons if kind == KIND_FAULT else self.material_names

    def add_term(self, kind: str, text: str) -> Tuple[bool, str]:
        return self.vocabulary(kind).add(text)

    def remove_term(self, kind: str, entry_id: str) -> bool:
        return self.vocabulary(kind).remove(entry_id)

    def import_terms(self, kind: str, items) -> Tuple[int, int]:
        """`items` is a parsed list or a raw JSON payload (str / bytes)."""
        vocab = self.vocabulary(kind)
        if isinstance(items, (str, bytes)):
            return vocab.import_json(items)
        return vocab.import_items(items)
