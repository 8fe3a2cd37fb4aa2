"""
Plain-record helpers shared by the engine modules.

A submission is the nested shape used by data entry:

    {"company_id": 7, "reporting_year": 2024,
     "environmental": {"scope1Emissions": 1200, ...},
     "social": {...}, "governance": {...}}

A metric entry is one flattened row of it:

    {"company_id": 7, "reporting_year": 2024, "category": "environmental",
     "metric_key": "scope1Emissions", "value": 1200, "unit": "tCO2e"}
"""

import math
import re

from esg_compliance.exceptions import InputShapeError, ReferenceDataError
from esg_compliance.thresholds import METRIC_UNITS

CATEGORIES = ("environmental", "social", "governance")

# Leading numeric prefix, same leniency as JavaScript parseFloat ("12.5%" -> 12.5)
_NUMBER_PREFIX = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


def parse_number(value):
    """Return value as a float, or None when it is empty or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value))
        if not match:
            return None
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value):
    """Round .5 upward (JavaScript Math.round), not to even."""
    # absorb float noise such as 0.3 * 70 = 20.999999999999996
    return int(math.floor(round(value, 9) + 0.5))


def clamp(value, low=0, high=100):
    return max(low, min(high, value))


def is_filled(value):
    """Missing or empty-string values are unfilled; numeric zero is filled."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def require_identity(record, what="submission"):
    """Return (company_id, reporting_year) or raise InputShapeError."""
    if not isinstance(record, dict):
        raise InputShapeError(f"{what} must be a mapping, got {type(record).__name__}")

    company_id = _first_present(record, ("company_id", "companyId"))
    year = _first_present(record, ("reporting_year", "reportingYear", "year"))
    if company_id is None or str(company_id).strip() == "":
        raise InputShapeError(f"{what} is missing company_id")
    if year is None or str(year).strip() == "":
        raise InputShapeError(f"{what} is missing reporting_year")
    try:
        year = int(str(year).strip())
    except ValueError:
        raise InputShapeError(f"{what} has a non-numeric reporting_year: {year!r}")
    return company_id, year


def normalize_entry(raw):
    """Coerce a raw metric record into the canonical entry dict."""
    company_id, year = require_identity(raw, "metric entry")
    category = str(raw.get("category") or "").strip().lower()
    if category not in CATEGORIES:
        raise InputShapeError(f"metric entry has unknown category {raw.get('category')!r}")
    metric_key = _first_present(raw, ("metric_key", "metricKey", "metric"))
    if not metric_key or not str(metric_key).strip():
        raise InputShapeError("metric entry is missing metric_key")
    metric_key = str(metric_key).strip()

    return {
        "company_id": company_id,
        "reporting_year": year,
        "category": category,
        "metric_key": metric_key,
        "value": raw.get("value"),
        "unit": raw.get("unit") or METRIC_UNITS.get(metric_key, ""),
        "verified": bool(raw.get("verified", False)),
    }


def latest_entries(entries):
    """De-duplicate entries, later ones superseding earlier ones.

    Callers hand entries over in submission order (the SQL store orders by
    submitted_at, id), so the last entry for a key is the current value.
    """
    latest = {}
    for raw in entries:
        entry = normalize_entry(raw)
        key = (entry["company_id"], entry["reporting_year"], entry["category"], entry["metric_key"])
        latest.pop(key, None)
        latest[key] = entry
    return list(latest.values())


def single_identity(entries):
    """Return the one (company_id, reporting_year) shared by all entries, or None when empty."""
    identities = {(e["company_id"], e["reporting_year"]) for e in entries}
    if len(identities) > 1:
        raise InputShapeError(
            f"entries span several company/year pairs: {sorted(identities, key=str)}"
        )
    return identities.pop() if identities else None


def submission_to_entries(submission):
    """Flatten a nested submission into metric entries."""
    company_id, year = require_identity(submission)
    units = submission.get("units") or {}
    verified = bool(submission.get("verified", False))

    entries = []
    for category in CATEGORIES:
        block = submission.get(category)
        if block is None:
            continue
        if not isinstance(block, dict):
            raise InputShapeError(f"submission block {category!r} must be a mapping")
        for metric_key, value in block.items():
            entries.append({
                "company_id": company_id,
                "reporting_year": year,
                "category": category,
                "metric_key": metric_key,
                "value": value,
                "unit": units.get(metric_key) or METRIC_UNITS.get(metric_key, ""),
                "verified": verified,
            })
    return entries


def entries_to_submission(entries, company_id, reporting_year, metadata=None):
    """Build the nested submission from (already de-duplicated) entries."""
    submission = {
        "company_id": company_id,
        "reporting_year": reporting_year,
    }
    if metadata:
        for key in ("company_name", "sector", "region"):
            if metadata.get(key) is not None:
                submission[key] = metadata[key]
    for category in CATEGORIES:
        submission[category] = {}
    for entry in latest_entries(entries):
        submission[entry["category"]][entry["metric_key"]] = entry["value"]
    return submission


def _first_present(record, keys):
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


# Operational record types and the fields each keeps: (kind, default)
OPERATIONAL_FIELDS = {
    "waste": {"waste_type": ("text", ""), "quantity": ("number", None), "recycling_rate": ("number", None)},
    "air": {"pollutant": ("text", ""), "measured_value": ("number", None), "compliance_status": ("text", "compliant")},
    "workforce": {"department": ("text", ""), "gender": ("text", None)},
    "safety_incidents": {"severity": ("text", "minor"), "description": ("text", "")},
    "ethics": {"audit_type": ("text", ""), "audit_score": ("number", None), "compliance_status": ("text", "compliant")},
}


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def operational_type(record_type):
    """Resolve "safety-incidents" / "safety_incidents" to a known record type."""
    key = str(record_type or "").strip().lower().replace("-", "_")
    if key not in OPERATIONAL_FIELDS:
        raise ReferenceDataError(
            f"Unknown record type {record_type!r}. Known: {', '.join(OPERATIONAL_FIELDS)}"
        )
    return key


def normalize_operational_record(record_type, raw):
    """Return (company_id, reporting_year, fields) for one operational record.

    Accepts snake_case or camelCase field names; unknown fields are dropped.
    """
    record_type = operational_type(record_type)
    company_id, year = require_identity(raw, f"{record_type} record")

    fields = {}
    for name, (kind, default) in OPERATIONAL_FIELDS[record_type].items():
        value = _first_present(raw, (name, _camel(name)))
        if not is_filled(value):
            fields[name] = default
        elif kind == "number":
            number = parse_number(value)
            if number is None:
                raise InputShapeError(f"{record_type} record has a non-numeric {name}: {value!r}")
            fields[name] = number
        else:
            fields[name] = str(value).strip()
    return str(company_id), year, fields
