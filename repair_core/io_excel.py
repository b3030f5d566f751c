# repair_core/io_excel.py
from datetime import date

import pandas as pd

from .mapping import ORDER_OUTCOLS, RECORDS_SHEET, SUMMARY_SHEET
from .record_processor import format_materials


def load_repair_excel(file):
    """First sheet as a list of raw rows; empty cells become ''."""
    df = pd.read_excel(file, sheet_name=0)
    df.columns = [str(c).strip() for c in df.columns]
    # object dtype first, otherwise fillna("") on a datetime column is refused
    df = df.astype(object).where(df.notna(), "")
    return df.to_dict(orient="records")


def _export_value(record, field):
    if field == "fault_tags":
        return ", ".join(record.fault_tags)
    if field == "materials_used":
        return format_materials(record.materials_used)
    return getattr(record, field)


def to_export_frame(records):
    rows = [
        {label: _export_value(r, field) for label, field in ORDER_OUTCOLS}
        for r in records
    ]
    return pd.DataFrame(rows, columns=[label for label, _ in ORDER_OUTCOLS])


def default_report_name(today=None):
    today = today or date.today()
    return f"維修紀錄分析報告_{today.isoformat()}.xlsx"


def write_report(records, path=None):
    """Export sheet + summary sheet; returns the path (or the buffer) written to."""
    records = list(records)
    if not records:
        raise ValueError("沒有資料可供匯出。")
    path = path or default_report_name()
    summary = pd.DataFrame([{"統計項目": "篩選後維修案件數", "數值": len(records)}])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        to_export_frame(records).to_excel(writer, sheet_name=RECORDS_SHEET, index=False)
        summary.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
    return path
