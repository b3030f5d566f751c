#!/usr/bin/env python3
"""
Batch classification of a repair-log spreadsheet.

Reads the sheet, classifies every row with the given fault-reason and
material lists, prints an ingest summary (and optionally the uncategorized
buckets), then writes the two-sheet Excel report.

Usage:
    python process_repair_log.py --input log.xlsx --faults faults.json --materials materials.json
    python process_repair_log.py --input log.xlsx --materials materials.json --uncategorized
    python process_repair_log.py --input log.xlsx --year 2024 --venue 南館 --output south_2024.xlsx
"""
import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional

from repair_core.analytics import RecordFilter, area_hotspots, fault_type_counts, material_usage
from repair_core.io_excel import default_report_name, load_repair_excel, write_report
from repair_core.store import RepairStore
from repair_core.vocabulary import KIND_FAULT, KIND_MATERIAL, ManagedVocabulary


# ============================================================================
# UTILITIES
# ============================================================================
class Colors:
    """ANSI colors for terminal output."""
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    END = "\033[0m"


def print_status(msg: str, status: str = "INFO"):
    color_map = {
        "INFO": Colors.BLUE,
        "SUCCESS": Colors.GREEN,
        "WARNING": Colors.YELLOW,
        "ERROR": Colors.RED,
    }
    color = color_map.get(status, "")
    print(f"{color}[{status}]{Colors.END} {msg}")


def print_header(title: str):
    print("\n" + "=" * 70)
    print(f"{Colors.BOLD}{title}{Colors.END}")
    print("=" * 70 + "\n")


def load_vocabulary(kind: str, path: Optional[str]) -> ManagedVocabulary:
    """JSON array of {"name": ...} / {"text": ...}; missing path gives an empty list."""
    vocab = ManagedVocabulary(kind)
    if not path:
        return vocab
    added, skipped = vocab.import_items(json.loads(Path(path).read_text(encoding="utf-8")))
    print_status(f"{Path(path).name}: {added} terms loaded, {skipped} skipped", "INFO")
    return vocab


def print_top(title: str, df, value_col: str, n: int = 10):
    print(f"{Colors.BOLD}{title}{Colors.END}")
    if df.empty:
        print("  (none)")
        return
    for name, value in zip(df["name"].head(n), df[value_col].head(n)):
        print(f"  {name:<30} {value}")


# ============================================================================
# MAIN
# ============================================================================
def main():
    parser = argparse.ArgumentParser(
        description="Classify a facility repair log and export the Excel report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--input", required=True, help="Repair log spreadsheet (.xlsx)")
    parser.add_argument("--faults", help="Fault-reason list (JSON array)")
    parser.add_argument("--materials", help="Material-name list (JSON array)")
    parser.add_argument("--output", help="Report path (default: 維修紀錄分析報告_<today>.xlsx)")
    parser.add_argument(
        "--uncategorized",
        action="store_true",
        help="Print descriptions and material fragments not covered by the lists",
    )
    parser.add_argument("--verbose", action="store_true", help="Print processing progress")

    # Report filter
    parser.add_argument("--year", default="", help="Only this year (e.g. 2024)")
    parser.add_argument("--month", default="", help="Only this month (1-12)")
    parser.add_argument("--venue", default="", help="Only this venue (北館 / 南館 / 未知場域)")
    parser.add_argument("--area", default="", help="Only this area")
    parser.add_argument("--work-type", default="", help="Only this work type (水 / 電 / 消防 / 營繕 / 其他)")

    args = parser.parse_args()

    print_header("Repair Log Classification")
    start = time.time()

    try:
        faults = load_vocabulary(KIND_FAULT, args.faults)
        materials = load_vocabulary(KIND_MATERIAL, args.materials)
    except (OSError, ValueError) as e:
        print_status(f"Cannot load vocabulary: {e}", "ERROR")
        return 1

    try:
        rows = load_repair_excel(args.input)
    except Exception as e:
        print_status(f"Cannot read {args.input}: {e}", "ERROR")
        return 1

    store = RepairStore(fault_reasons=faults, material_names=materials)
    summary = store.ingest(rows, verbose=args.verbose)
    print_status(f"{summary.valid} valid / {summary.total} rows", "SUCCESS" if summary.valid else "WARNING")
    if summary.invalid:
        print_status(f"{summary.invalid} invalid rows: {', '.join(summary.invalid_reasons)}", "WARNING")

    record_filter = RecordFilter(
        year=args.year, month=args.month, venue=args.venue,
        area=args.area, work_type=args.work_type,
    )
    selected = store.filtered_records(record_filter)
    print_status(f"{len(selected)} records selected for the report", "INFO")
    print()

    print_top("Area hotspots", area_hotspots(selected), "count")
    print_top("Fault types", fault_type_counts(selected), "count")
    print_top("Materials", material_usage(selected), "quantity")

    if args.uncategorized:
        print()
        print_top_list("Uncategorized fault descriptions", store.uncategorized_faults)
        print_top_list("Uncategorized material fragments", store.uncategorized_materials)

    print()
    if not selected:
        print_status("No records to export.", "WARNING")
        return 1

    out = args.output or default_report_name()
    try:
        write_report(selected, out)
    except (OSError, ValueError) as e:
        print_status(f"Cannot write report: {e}", "ERROR")
        return 1

    print_status(f"Report written to {out} ({time.time() - start:.1f}s)", "SUCCESS")
    return 0


def print_top_list(title: str, items):
    print(f"{Colors.BOLD}{title} ({len(items)}){Colors.END}")
    for it in items:
        print(f"  - {it}")


if __name__ == "__main__":
    sys.exit(main())
