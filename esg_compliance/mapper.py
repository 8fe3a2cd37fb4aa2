"""
Framework Mapper

Maps a company's metric entries onto one framework's requirement catalog
and rolls the per-requirement outcome up into category and overall
compliance.
"""

import logging

from esg_compliance.exceptions import InputShapeError
from esg_compliance.frameworks import (
    FRAMEWORK_GUIDANCE,
    METRIC_REPORTING_CODES,
    canonical_metric_key,
    get_framework,
    get_requirements,
)
from esg_compliance.records import CATEGORIES, is_filled, latest_entries, normalize_entry, round_half_up, single_identity

logger = logging.getLogger(__name__)

COMPLIANCE_STATUSES = ("COMPLIANT", "PARTIAL", "NON_COMPLIANT", "IN_PROGRESS", "NOT_STARTED")
VERIFICATION_STATUSES = ("VERIFIED", "SELF_ASSESSED", "PENDING")

__all__ = [
    "canonical_metric_key",
    "map_to_framework",
    "framework_compliance",
    "map_entry_to_codes",
    "generate_framework_report",
    "framework_guidance",
]


def _alert_keys(alerts, severities, framework_id):
    """Metric keys carrying an alert of the given severities."""
    keys = set()
    for alert in alerts or []:
        if alert.get("severity") in severities:
            field = str(alert.get("field", "")).rsplit(".", 1)[-1]
            keys.add(canonical_metric_key(field, framework_id))
    return keys


def _present_entries(entries, framework_id):
    present = {}
    for entry in entries:
        if is_filled(entry["value"]):
            present[canonical_metric_key(entry["metric_key"], framework_id)] = entry
    return present


def _status(req, matched, prior_keys):
    if req["match"] == "any":
        if matched:
            return "COMPLIANT"
    elif len(matched) == len(req["required_metric_keys"]):
        return "COMPLIANT"
    elif matched:
        return "PARTIAL"
    if req["required_metric_keys"] & prior_keys:
        return "NON_COMPLIANT"
    return "NOT_STARTED"


def map_to_framework(entries, framework_id, prior_entries=None, alerts=None, company_id=None, reporting_year=None):
    """
    Evaluate every requirement of a framework against one company-year.

    entries: metric entries for a single (company_id, reporting_year)
    prior_entries: entries from an earlier period; a requirement with nothing
        submitted now but something submitted before is NON_COMPLIANT
        rather than NOT_STARTED
    alerts: validation alerts for the same submission, used for the data
        quality score and verification status
    company_id / reporting_year: identity to stamp on the records when
        entries is empty

    Returns a list of ComplianceRecord dicts, in catalog order.
    """
    requirements = get_requirements(framework_id)
    fid, meta = get_framework(framework_id)

    entries = latest_entries(entries)
    company_id, reporting_year = single_identity(entries) or (company_id, reporting_year)
    present = _present_entries(entries, fid)

    prior_keys = set()
    for raw in prior_entries or []:
        entry = normalize_entry(raw)
        if is_filled(entry["value"]):
            prior_keys.add(canonical_metric_key(entry["metric_key"], fid))

    flagged = _alert_keys(alerts, ("error", "critical"), fid)
    errored = _alert_keys(alerts, ("error",), fid)

    records = []
    for req in requirements:
        keys = req["required_metric_keys"]
        matched = sorted(k for k in keys if k in present)
        missing = sorted(k for k in keys if k not in present)

        if req["match"] == "any":
            completeness = 100 if matched else 0
        else:
            completeness = round_half_up(len(matched) / len(keys) * 100)

        if matched:
            clean = sum(1 for k in matched if k not in flagged)
            data_quality = round_half_up(clean / len(matched) * 100)
        else:
            data_quality = 0

        if matched and all(present[k].get("verified") for k in matched):
            verification = "VERIFIED"
        elif any(k in errored for k in matched):
            verification = "PENDING"
        else:
            verification = "SELF_ASSESSED"

        records.append({
            "company_id": company_id,
            "reporting_year": reporting_year,
            "framework_id": fid,
            "framework_version": meta["version"],
            "standard_id": req["standard_id"],
            "requirement_id": req["requirement_id"],
            "title": req["title"],
            "category": req["category"],
            "materiality_level": req["materiality_level"],
            "compliance_status": _status(req, matched, prior_keys),
            "compliance_score": round_half_up(completeness * data_quality / 100),
            "data_quality_score": data_quality,
            "completeness_score": completeness,
            "matched_metric_keys": matched,
            "missing_metric_keys": missing,
            "verification_status": verification,
        })
    return records


def framework_compliance(entries, framework_id, prior_entries=None, alerts=None, company_id=None, reporting_year=None):
    """
    Category and overall compliance for one framework.

    Returns dict with:
    - framework / framework_version
    - total_requirements / met_requirements
    - compliance_score: unweighted mean of applicable category percentages
    - category_scores: {category: {total, met, percentage, missing, applicable}}
    - missing_requirements: ids of requirements not yet COMPLIANT
    - missing_details: status and missing metric keys for each of them
    - records: the ComplianceRecords behind the numbers
    """
    records = map_to_framework(entries, framework_id, prior_entries, alerts, company_id, reporting_year)
    fid, meta = get_framework(framework_id)

    category_scores = {}
    for category in CATEGORIES:
        in_category = [r for r in records if r["category"] == category]
        met = [r for r in in_category if r["compliance_status"] == "COMPLIANT"]
        total = len(in_category)
        category_scores[category] = {
            "total": total,
            "met": len(met),
            # nothing to satisfy counts as fully satisfied
            "percentage": round_half_up(len(met) / total * 100) if total else 100,
            "missing": [r["requirement_id"] for r in in_category if r["compliance_status"] != "COMPLIANT"],
            "applicable": total > 0,
        }

    applicable = [c["percentage"] for c in category_scores.values() if c["applicable"]]
    overall = round_half_up(sum(applicable) / len(applicable)) if applicable else 0

    return {
        "framework": fid,
        "framework_version": meta["version"],
        "total_requirements": len(records),
        "met_requirements": sum(1 for r in records if r["compliance_status"] == "COMPLIANT"),
        "compliance_score": overall,
        "category_scores": category_scores,
        "missing_requirements": [r["requirement_id"] for r in records if r["compliance_status"] != "COMPLIANT"],
        "missing_details": [
            {
                "requirement_id": r["requirement_id"],
                "title": r["title"],
                "category": r["category"],
                "status": r["compliance_status"],
                "missing_metric_keys": r["missing_metric_keys"],
            }
            for r in records if r["compliance_status"] != "COMPLIANT"
        ],
        "records": records,
    }


def map_entry_to_codes(entry, framework_id):
    """Reporting codes a single metric entry feeds, e.g. scope1Emissions -> GRI-305-1."""
    fid, _ = get_framework(framework_id)
    key = canonical_metric_key(entry["metric_key"], fid)
    codes = METRIC_REPORTING_CODES.get(fid, {}).get(key)
    if codes:
        return list(codes)
    return [r["requirement_id"] for r in get_requirements(fid) if key in r["required_metric_keys"]]


def compliance_level(score):
    if score >= 80:
        return "High"
    if score >= 60:
        return "Medium"
    return "Low"


def framework_recommendations(compliance):
    fid = compliance["framework"]
    score = compliance["compliance_score"]
    recommendations = []

    if score < 60:
        recommendations.append({
            "priority": "High",
            "category": "Foundation",
            "action": f"Establish systematic data collection for core {fid} requirements",
            "impact": "Critical for basic framework compliance",
        })

    for category, stats in compliance["category_scores"].items():
        if stats["applicable"] and stats["percentage"] < 70:
            recommendations.append({
                "priority": "High" if stats["percentage"] < 50 else "Medium",
                "category": category,
                "action": f"Address {len(stats['missing'])} missing {fid} requirements in {category}",
                "impact": f"Improve {category} compliance from {stats['percentage']}%",
            })

    if score >= 80:
        recommendations.append({
            "priority": "Low",
            "category": "Enhancement",
            "action": f"Consider advanced {fid} disclosures and third-party assurance",
            "impact": "Strengthen reporting credibility",
        })

    return recommendations


def generate_framework_report(entries, framework_id, industry=None, prior_entries=None, alerts=None):
    """
    Framework report for one company-year.

    Returns dict with the compliance result, each entry with the reporting
    codes it feeds, the compliance level, recommendations and guidance.
    """
    compliance = framework_compliance(entries, framework_id, prior_entries, alerts)
    fid = compliance["framework"]

    mapped = []
    for entry in latest_entries(entries):
        codes = map_entry_to_codes(entry, fid)
        if codes:
            mapped.append({
                "metric_key": entry["metric_key"],
                "category": entry["category"],
                "value": entry["value"],
                "unit": entry["unit"],
                "codes": codes,
            })

    company_id = compliance["records"][0]["company_id"] if compliance["records"] else None
    logger.info(
        f"{fid} report for company {company_id}: "
        f"score {compliance['compliance_score']}, {len(mapped)} mapped metrics"
    )

    return {
        "framework": fid,
        "framework_version": compliance["framework_version"],
        "industry": industry,
        "compliance_level": compliance_level(compliance["compliance_score"]),
        "compliance": compliance,
        "mapped_metrics": mapped,
        "recommendations": framework_recommendations(compliance),
        "guidance": framework_guidance(fid),
    }


def framework_guidance(framework_id, category=None):
    """Static guidance text for a framework, or one category of it."""
    fid, meta = get_framework(framework_id)
    guidance = FRAMEWORK_GUIDANCE.get(fid, {"general": meta["description"]})
    if category is None:
        return dict(guidance)
    if category not in CATEGORIES and category != "general":
        raise InputShapeError(f"Unknown guidance category: {category!r}")
    return guidance.get(category) or guidance.get("general", meta["description"])
