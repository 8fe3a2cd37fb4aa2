"""
CSV / XLSX metric import.

Expected header (case-insensitive, extra columns ignored):

    company_id, reporting_year, category, metric_key, value, unit

Bad rows are reported with their line number and skipped; the rest of the
file is still imported.
"""

import csv
import logging

from esg_compliance.exceptions import InputShapeError
from esg_compliance.records import normalize_entry

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = ("company_id", "reporting_year", "category", "metric_key", "value", "unit")


def _clean(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _normalize_header(header):
    return [str(h or "").strip().lower() for h in header]


def _read_csv(filepath):
    with open(filepath, "r", newline="", errors="replace") as f:
        reader = csv.reader(f)
        header = None
        for row in reader:
            if header is None:
                header = _normalize_header(row)
                continue
            if not any(cell.strip() for cell in row):
                continue
            yield reader.line_num, dict(zip(header, row))


def _read_xlsx(filepath):
    from openpyxl import load_workbook
    wb = load_workbook(filepath, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        header = None
        for line, row in enumerate(ws.iter_rows(values_only=True), start=1):
            if header is None:
                header = _normalize_header(row)
                continue
            if all(c is None or str(c).strip() == "" for c in row):
                continue
            yield line, dict(zip(header, row))
    finally:
        wb.close()


def read_rows(filepath):
    """Yield (line number, row dict) from a CSV or XLSX file."""
    ext = filepath.rsplit(".", 1)[-1].lower() if "." in filepath else ""
    if ext == "csv":
        return _read_csv(filepath)
    if ext == "xlsx":
        return _read_xlsx(filepath)
    raise InputShapeError(f"Unsupported import file type: {ext or filepath}")


def parse_rows(rows):
    """Turn (line, row) pairs into metric entries. Returns (entries, errors)."""
    entries = []
    errors = []
    for line, row in rows:
        raw = {col: _clean(row.get(col)) for col in IMPORT_COLUMNS}
        try:
            entries.append(normalize_entry(raw))
        except InputShapeError as e:
            logger.warning(f"Import line {line} skipped: {e}")
            errors.append({"line": line, "error": str(e)})
    return entries, errors


def parse_metric_file(filepath):
    return parse_rows(read_rows(filepath))


def import_metric_file(filepath, store):
    """
    Import a metric file into a store.

    Returns dict with stored (entries written), errors ([{line, error}]) and
    rows (data rows read).
    """
    entries, errors = parse_metric_file(filepath)
    stored = store.save_entries(entries, source="import") if entries else 0
    logger.info(f"Imported {stored} metric entries from {filepath} ({len(errors)} rows skipped)")
    return {"stored": stored, "errors": errors, "rows": len(entries) + len(errors)}
