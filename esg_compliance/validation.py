"""
Validation Engine

Three independent passes over a submission:
1. Cross-field consistency rules (domain checks spanning several metrics)
2. Per-metric threshold rules from VALIDATION_THRESHOLDS
3. Completeness of each GRI standard's required / recommended fields

Nothing here raises on bad data: every finding is returned as an alert.
Critical alerts (fatalities, corruption) are kept in their own channel and
do not make a submission invalid; they are compliance failures, not data
errors.
"""

import logging

from esg_compliance.exceptions import InputShapeError
from esg_compliance.records import CATEGORIES, is_filled, parse_number
from esg_compliance.thresholds import GRI_COMPLETENESS_REQUIREMENTS, SEVERITY_LEVELS, VALIDATION_THRESHOLDS

logger = logging.getLogger(__name__)


def _alert(field, message, severity, alert_type):
    return {"field": field, "message": message, "severity": severity, "type": alert_type}


def _block(submission, category):
    block = submission.get(category)
    return block if isinstance(block, dict) else {}


# ---------------------------------------------------------------------------
# Cross-field rules
# ---------------------------------------------------------------------------

def validate_cross_field(submission):
    """Apply domain consistency rules. Returns a list of alerts."""
    alerts = []

    env = _block(submission, "environmental")
    if env:
        scope1 = parse_number(env.get("scope1Emissions")) or 0
        scope2 = parse_number(env.get("scope2Emissions")) or 0
        scope3 = parse_number(env.get("scope3Emissions"))
        if scope3 is not None and scope1 + scope2 > 0 and scope3 > 10 * (scope1 + scope2):
            alerts.append(_alert(
                "scope3Emissions",
                "Scope 3 emissions seem unusually high compared to Scope 1+2",
                "warning", "cross_field",
            ))

        renewable = parse_number(env.get("renewableEnergyPercentage"))
        if renewable is not None and renewable > 100:
            alerts.append(_alert(
                "renewableEnergyPercentage",
                "Renewable energy percentage cannot exceed 100%",
                "error", "cross_field",
            ))

        energy = parse_number(env.get("energyConsumption"))
        scope2_raw = parse_number(env.get("scope2Emissions"))
        if energy and scope2_raw is not None and scope2_raw / energy > 1:
            alerts.append(_alert(
                "scope2Emissions",
                "Scope 2 emissions to energy ratio seems high. Verify emission factors.",
                "warning", "cross_field",
            ))

    social = _block(submission, "social")
    if social:
        female = parse_number(social.get("femaleEmployeesPercentage"))
        if female is not None and (female < 0 or female > 100):
            alerts.append(_alert(
                "femaleEmployeesPercentage",
                "Female employees percentage must be between 0 and 100",
                "error", "cross_field",
            ))

        fatality = parse_number(social.get("fatalityRate"))
        if fatality is not None and fatality > 0:
            alerts.append(_alert(
                "fatalityRate",
                "Fatality incidents detected. Immediate review required.",
                "critical", "cross_field",
            ))

        ltir = parse_number(social.get("lostTimeInjuryRate"))
        if ltir is not None and ltir > 20:
            alerts.append(_alert(
                "lostTimeInjuryRate",
                "Lost time injury rate is very high. Review safety protocols.",
                "warning", "cross_field",
            ))

    gov = _block(submission, "governance")
    if gov:
        board = parse_number(gov.get("boardSize"))
        independent = parse_number(gov.get("independentDirectorsPercentage"))
        if board and independent:
            independent_count = int(board * independent / 100 + 0.5)
            if independent_count < 2:
                alerts.append(_alert(
                    "independentDirectorsPercentage",
                    "Board should have at least 2 independent directors",
                    "warning", "cross_field",
                ))

        female_directors = parse_number(gov.get("femaleDirectorsPercentage"))
        if female_directors is not None and female_directors < 20:
            alerts.append(_alert(
                "femaleDirectorsPercentage",
                "Board gender diversity below recommended 30% threshold",
                "info", "cross_field",
            ))

        corruption = parse_number(gov.get("corruptionIncidents"))
        if corruption is not None and corruption > 0:
            alerts.append(_alert(
                "corruptionIncidents",
                "Corruption incidents reported. Requires immediate action and disclosure.",
                "critical", "cross_field",
            ))

    return alerts


# ---------------------------------------------------------------------------
# Threshold rules
# ---------------------------------------------------------------------------

def check_threshold(field, value, rule):
    """Evaluate one numeric value against one threshold rule."""
    alerts = []

    if value < rule["min"]:
        alerts.append(_alert(field, f"Value {value:g} is below minimum threshold {rule['min']}", "error", "threshold"))
    if value > rule["max"]:
        alerts.append(_alert(field, f"Value {value:g} exceeds maximum threshold {rule['max']}", "error", "threshold"))

    warning = rule.get("warning")
    if isinstance(warning, dict):
        low = warning.get("low")
        high = warning.get("high")
        if low is not None and value < low:
            alerts.append(_alert(field, f"Value {value:g} is below recommended threshold {low}", "warning", "threshold"))
        if high is not None and value > high:
            alerts.append(_alert(field, f"Value {value:g} exceeds recommended threshold {high}", "warning", "threshold"))
    elif warning is not None and value > warning:
        alerts.append(_alert(field, f"Value {value:g} exceeds warning threshold {warning}", "warning", "threshold"))

    critical = rule.get("critical")
    if critical is not None and value >= critical:
        alerts.append(_alert(field, f"CRITICAL: Value {value:g} requires immediate attention", "critical", "threshold"))

    return alerts


def validate_thresholds(submission, thresholds=None):
    """Apply per-metric threshold rules. Non-numeric values are skipped."""
    if thresholds is None:
        thresholds = VALIDATION_THRESHOLDS
    alerts = []
    for category in CATEGORIES:
        rules = thresholds.get(category)
        if not rules:
            continue
        for metric, raw in _block(submission, category).items():
            rule = rules.get(metric)
            value = parse_number(raw)
            if not rule or value is None:
                continue
            alerts.extend(check_threshold(f"{category}.{metric}", value, rule))
    return alerts


# ---------------------------------------------------------------------------
# Completeness
# ---------------------------------------------------------------------------

def _lookup(submission, field):
    if field in submission and not isinstance(submission[field], dict):
        return submission[field]
    for category in CATEGORIES:
        block = _block(submission, category)
        if field in block:
            return block[field]
    return None


def _pct(filled, total):
    return int(filled / total * 100 + 0.5) if total else 100


def check_completeness(submission, requirements=None):
    """Compute per-standard and overall completeness percentages."""
    if requirements is None:
        requirements = GRI_COMPLETENESS_REQUIREMENTS
    standards = {}
    total_required = total_required_filled = 0
    total_recommended = total_recommended_filled = 0

    for standard, fields in requirements.items():
        required = fields.get("required", [])
        recommended = fields.get("recommended", [])
        filled_required = sum(1 for f in required if is_filled(_lookup(submission, f)))
        filled_recommended = sum(1 for f in recommended if is_filled(_lookup(submission, f)))

        standards[standard] = {
            "required": {
                "total": len(required),
                "filled": filled_required,
                "percentage": _pct(filled_required, len(required)),
                "missing": [f for f in required if not is_filled(_lookup(submission, f))],
            },
            "recommended": {
                "total": len(recommended),
                "filled": filled_recommended,
                "percentage": _pct(filled_recommended, len(recommended)),
            },
            "overall": _pct(filled_required + filled_recommended, len(required) + len(recommended)),
        }
        total_required += len(required)
        total_required_filled += filled_required
        total_recommended += len(recommended)
        total_recommended_filled += filled_recommended

    overall = {
        "required": _pct(total_required_filled, total_required),
        "recommended": _pct(total_recommended_filled, total_recommended),
        "overall": _pct(total_required_filled + total_recommended_filled, total_required + total_recommended),
    }
    return {"standards": standards, "overall": overall}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def perform_full_validation(submission):
    """
    Validate a submission: cross-field rules, thresholds and completeness.

    Returns dict with:
    - errors / warnings / critical / info: alerts split by severity
    - alerts: every alert, cross-field first, in evaluation order
    - completeness: output of check_completeness()
    - summary: counts, GRI completeness score and is_valid
    """
    if not isinstance(submission, dict):
        raise InputShapeError(f"submission must be a mapping, got {type(submission).__name__}")

    alerts = validate_cross_field(submission) + validate_thresholds(submission)
    completeness = check_completeness(submission)

    by_severity = {level: [a for a in alerts if a["severity"] == level]
                   for level in SEVERITY_LEVELS}

    if by_severity["critical"]:
        logger.warning(
            f"Critical ESG alerts for company {submission.get('company_id')}: "
            f"{', '.join(a['field'] for a in by_severity['critical'])}"
        )

    return {
        "errors": by_severity["error"],
        "warnings": by_severity["warning"],
        "critical": by_severity["critical"],
        "info": by_severity["info"],
        "alerts": alerts,
        "completeness": completeness,
        "summary": {
            "total_errors": len(by_severity["error"]),
            "total_warnings": len(by_severity["warning"]),
            "total_critical": len(by_severity["critical"]),
            "total_info": len(by_severity["info"]),
            "gri_completeness_score": completeness["overall"]["overall"],
            "is_valid": not by_severity["error"],
        },
    }
