# repair_core/record_processor.py - RECORD ASSEMBLY & RECATEGORIZATION
"""
Raw spreadsheet rows → canonical MaintenanceRecord.

Architecture:
    RawRow → [Field normalization] → [Venue/Area + work type] → [Fault tags]
           → [Material extraction] → [Validation] → MaintenanceRecord

Records are never edited field by field. When the managed vocabularies
change, recategorize() rebuilds every derived field from the stored
source fields, keeping id / original_index / upload_timestamp, so running
it twice with the same vocabularies gives identical records.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .constants import ERR_BAD_REQUEST_DATE, ERR_MISSING_WORK_ATTRIBUTE
from .fault_tagger import tag_faults
from .location import classify_location, classify_work_type
from .mapping import (
    FIELD_FAULT_DESCRIPTION,
    FIELD_HANDLING_STATUS,
    FIELD_REQUEST_DATE,
    FIELD_REQUEST_TIME,
    FIELD_WORK_ATTRIBUTE,
)
from .materials import MaterialUsage, extract_materials
from .normalize import chronological_key, format_date, format_time
from .quantity import format_quantity


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass
class MaintenanceRecord:
    """One canonical repair record; derived fields are filled by process_record()."""
    id: str
    original_index: int
    work_attribute: str = ""
    request_date: str = ""
    request_time: str = ""
    fault_description: str = ""
    handling_status: str = ""

    # Derived
    venue: str = ""
    area: str = ""
    work_type_classification: str = ""
    fault_tags: List[str] = field(default_factory=list)
    materials_used: List[MaterialUsage] = field(default_factory=list)
    uncategorized_material_strings: List[str] = field(default_factory=list)
    is_valid: bool = False
    validation_errors: List[str] = field(default_factory=list)
    upload_timestamp: str = ""

    def derived_fields(self) -> Dict[str, Any]:
        """Everything recategorize() is allowed to change."""
        return {
            "request_date": self.request_date,
            "request_time": self.request_time,
            "venue": self.venue,
            "area": self.area,
            "work_type_classification": self.work_type_classification,
            "fault_tags": list(self.fault_tags),
            "materials_used": list(self.materials_used),
            "uncategorized_material_strings": list(self.uncategorized_material_strings),
            "is_valid": self.is_valid,
            "validation_errors": list(self.validation_errors),
        }

    def to_raw_row(self) -> Dict[str, Any]:
        """Source fields in spreadsheet-label form, for re-processing."""
        return {
            FIELD_WORK_ATTRIBUTE: self.work_attribute,
            FIELD_REQUEST_DATE: self.request_date,
            FIELD_REQUEST_TIME: self.request_time,
            FIELD_FAULT_DESCRIPTION: self.fault_description,
            FIELD_HANDLING_STATUS: self.handling_status,
        }


def _to_text(x: Any) -> str:
    """Cell value → stripped str; None/NaN → ""."""
    if x is None:
        return ""
    if isinstance(x, float) and x != x:
        return ""
    if isinstance(x, str):
        return x.strip()
    if isinstance(x, (float, np.floating)) and float(x).is_integer():
        return str(int(x))
    try:
        if pd.isna(x):
            return ""
    except (TypeError, ValueError):
        pass
    return str(x).strip()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_record(work_attribute: str, request_date: str) -> List[str]:
    errors = []
    if not work_attribute:
        errors.append(ERR_MISSING_WORK_ATTRIBUTE)
    if not request_date:
        errors.append(ERR_BAD_REQUEST_DATE)
    return errors


# ============================================================
# SINGLE RECORD
# ============================================================

def process_record(
    raw: Mapping[str, Any],
    index: int,
    fault_reasons: Optional[Iterable] = None,
    material_names: Optional[Iterable] = None,
    *,
    record_id: Optional[str] = None,
    upload_timestamp: Optional[str] = None,
) -> MaintenanceRecord:
    """
    Assemble one record from a raw row.

    Args:
        raw: mapping keyed by the spreadsheet labels (工作屬性, 請修日期, ...)
        index: 1-based row number in the uploaded sheet
        fault_reasons: managed fault reasons (objects with .text, or str)
        material_names: managed material names (objects with .name, or str)
        record_id / upload_timestamp: kept as given when re-processing
    """
    fault_reasons = list(fault_reasons or [])

    work_attribute = _to_text(raw.get(FIELD_WORK_ATTRIBUTE))
    request_date = format_date(raw.get(FIELD_REQUEST_DATE))
    request_time = format_time(raw.get(FIELD_REQUEST_TIME))
    description = _to_text(raw.get(FIELD_FAULT_DESCRIPTION))
    handling = _to_text(raw.get(FIELD_HANDLING_STATUS))

    errors = validate_record(work_attribute, request_date)
    venue, area = classify_location(description)
    extraction = extract_materials(handling, material_names)

    return MaintenanceRecord(
        id=record_id or str(uuid.uuid4()),
        original_index=index,
        work_attribute=work_attribute,
        request_date=request_date,
        request_time=request_time,
        fault_description=description,
        handling_status=handling,
        venue=venue,
        area=area,
        work_type_classification=classify_work_type(work_attribute),
        fault_tags=tag_faults(description, fault_reasons),
        materials_used=extraction.materials_used,
        uncategorized_material_strings=extraction.uncategorized,
        is_valid=not errors,
        validation_errors=errors,
        upload_timestamp=upload_timestamp or _now_iso(),
    )


# ============================================================
# BATCH
# ============================================================

def sort_records(records: Iterable[MaintenanceRecord]) -> List[MaintenanceRecord]:
    """Newest request first; undated records at the end in their current order."""
    return sorted(
        records,
        key=lambda r: chronological_key(r.request_date, r.request_time),
        reverse=True,
    )


def _iter_rows(rows) -> List[Mapping[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict(orient="records")
    return list(rows or [])


def process_batch(
    rows,
    fault_reasons: Optional[Iterable] = None,
    material_names: Optional[Iterable] = None,
    verbose: bool = False,
) -> List[MaintenanceRecord]:
    """
    Ingest raw rows (list of mappings or a DataFrame) in sheet order.

    original_index is the 1-based row position; one upload timestamp is
    shared by the whole batch.
    """
    rows = _iter_rows(rows)
    fault_reasons = list(fault_reasons or [])
    material_names = list(material_names or [])
    stamp = _now_iso()

    if verbose:
        print(f"🚀 Processing {len(rows)} repair rows...")

    records = [
        process_record(row, i, fault_reasons, material_names, upload_timestamp=stamp)
        for i, row in enumerate(rows, start=1)
    ]

    if verbose and records:
        n_valid = sum(1 for r in records if r.is_valid)
        n_unclassified = sum(1 for r in records if r.uncategorized_material_strings)
        print(f"   ✅ Valid: {n_valid}/{len(records)} ({n_valid/len(records)*100:.1f}%)")
        print(f"   Records with unplaced material text: {n_unclassified}")

    return records


def recategorize(
    records: Sequence[MaintenanceRecord],
    fault_reasons: Optional[Iterable] = None,
    material_names: Optional[Iterable] = None,
    verbose: bool = False,
) -> List[MaintenanceRecord]:
    """
    Rebuild every record with the current vocabularies.

    Identity fields (id, original_index, upload_timestamp) are kept; the
    result is a new list, sorted newest first.
    """
    fault_reasons = list(fault_reasons or [])
    material_names = list(material_names or [])

    rebuilt = []
    n_changed = 0
    for rec in records:
        fresh = process_record(
            rec.to_raw_row(),
            rec.original_index,
            fault_reasons,
            material_names,
            record_id=rec.id,
            upload_timestamp=rec.upload_timestamp,
        )
        if fresh.derived_fields() != rec.derived_fields():
            n_changed += 1
        rebuilt.append(fresh)

    if verbose:
        print(f"🔄 Recategorized {len(rebuilt)} records ({n_changed} changed)")

    return sort_records(rebuilt)


# ============================================================
# OUTPUT
# ============================================================

def to_dataframe(records: Sequence[MaintenanceRecord]) -> pd.DataFrame:
    """Flat view for display; list fields joined the same way as the export."""
    rows = []
    for r in records:
        rows.append({
            "id": r.id,
            "original_index": r.original_index,
            "work_attribute": r.work_attribute,
            "request_date": r.request_date,
            "request_time": r.request_time,
            "fault_description": r.fault_description,
            "handling_status": r.handling_status,
            "venue": r.venue,
            "area": r.area,
            "work_type_classification": r.work_type_classification,
            "fault_tags": ", ".join(r.fault_tags),
            "materials_used": format_materials(r.materials_used),
            "is_valid": r.is_valid,
            "validation_errors": "; ".join(r.validation_errors),
        })
    return pd.DataFrame(rows)


def format_materials(materials: Iterable[MaterialUsage]) -> str:
    return ", ".join(f"{m.name} x{format_quantity(m.quantity)}" for m in materials)
