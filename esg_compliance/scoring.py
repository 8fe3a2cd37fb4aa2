"""
Compliance Scorer

Turns operational records into environmental, social and governance
sub-scores (0-100), a weighted composite and a letter rating.

Records arrive as a bundle of plain dicts:

    {"entries": [...],            # metric entries
     "waste": [...],              # {"recycling_rate": 62.5}
     "air": [...],                # {"compliance_status": "compliant"}
     "workforce": [...],          # {"gender": "female"}
     "safety_incidents": [...],   # {"severity": "minor"}
     "ethics": [...]}             # {"audit_score": 82, "compliance_status": "compliant"}

When a company has no workforce or ethics records, the social and
governance scores fall back to its submitted metrics:

- social: diversity from femaleEmployeesPercentage, safety from
  lostTimeInjuryRate (100 - 5 per point), zeroed by any fatality
- governance: mean of ethicsTrainingCompletion and
  independentDirectorsPercentage

Sparse data never raises: a category without data scores 0, is listed in
missing_categories and lowers the confidence flag.
"""

import logging
import math
from collections import Counter

from esg_compliance.exceptions import InputShapeError, ReferenceDataError
from esg_compliance.frameworks import canonical_metric_key
from esg_compliance.records import CATEGORIES, clamp, is_filled, parse_number, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_WEIGHTS = {"environmental": 0.4, "social": 0.3, "governance": 0.3}

DEFAULT_RATING_BANDS = (
    (80, "AAA", "Excellent"),
    (60, "AA", "Good"),
    (40, "A", "Fair"),
    (0, "B", "Needs Improvement"),
)

DEFAULT_RECOMMENDATION_THRESHOLD = 70

RECOMMENDATION_ACTIONS = {
    "environmental": "Raise waste recycling rates, renewable energy share and air permit compliance",
    "social": "Broaden workforce diversity and reduce safety incidents",
    "governance": "Close ethics audit findings and strengthen board oversight",
}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def build_scoring_config(mapping=None):
    """
    Validate weights, rating bands and recommendation threshold.

    Accepts a Flask config (or any mapping) using the ESG_CATEGORY_WEIGHTS,
    ESG_RATING_BANDS and ESG_RECOMMENDATION_THRESHOLD keys; missing keys fall
    back to the defaults. Raises ReferenceDataError on an invalid table.
    """
    mapping = mapping or {}
    weights = dict(mapping.get("ESG_CATEGORY_WEIGHTS") or DEFAULT_CATEGORY_WEIGHTS)
    bands = mapping.get("ESG_RATING_BANDS") or DEFAULT_RATING_BANDS
    threshold = mapping.get("ESG_RECOMMENDATION_THRESHOLD", DEFAULT_RECOMMENDATION_THRESHOLD)

    if set(weights) != set(CATEGORIES):
        raise ReferenceDataError(f"Category weights must cover exactly {', '.join(CATEGORIES)}")
    for category, weight in weights.items():
        if not isinstance(weight, (int, float)) or isinstance(weight, bool) or weight < 0:
            raise ReferenceDataError(f"Weight for {category} must be a non-negative number")
    if not math.isclose(sum(weights.values()), 1.0, abs_tol=1e-9):
        raise ReferenceDataError(f"Category weights must sum to 1, got {sum(weights.values())}")

    bands = tuple(tuple(band) for band in bands)
    if not bands:
        raise ReferenceDataError("Rating bands must not be empty")
    previous = None
    for band in bands:
        if len(band) != 3 or not isinstance(band[0], (int, float)):
            raise ReferenceDataError(f"Rating band must be (min score, rating, label): {band!r}")
        if previous is not None and band[0] >= previous:
            raise ReferenceDataError("Rating bands must be ordered by strictly decreasing cut point")
        previous = band[0]
    if bands[-1][0] > 0:
        raise ReferenceDataError("Lowest rating band must start at 0")

    if not isinstance(threshold, (int, float)) or not 0 <= threshold <= 100:
        raise ReferenceDataError(f"Recommendation threshold must be within 0-100, got {threshold!r}")

    return {"weights": weights, "bands": bands, "recommendation_threshold": threshold}


DEFAULT_SCORING_CONFIG = build_scoring_config()


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------

def _mean(values):
    return sum(values) / len(values) if values else None


def _numbers(records, field):
    values = (parse_number(r.get(field)) for r in records or [])
    return [v for v in values if v is not None]


def _is_compliant(record):
    return str(record.get("compliance_status") or "").strip().lower() == "compliant"


def renewable_shares(entries):
    """renewableEnergyPercentage values found in metric entries."""
    return [
        v for v in (
            parse_number(e.get("value")) for e in entries or []
            if canonical_metric_key(e.get("metric_key", "")) == "renewableEnergyPercentage"
        )
        if v is not None
    ]


def environmental_score(waste, air, energy_entries=None):
    """Mean of the available waste, air and renewable-energy factors."""
    factors = []

    recycling = _mean(_numbers(waste, "recycling_rate"))
    if recycling is not None:
        factors.append(min(recycling * 1.2, 100))

    if air:
        factors.append(sum(1 for r in air if _is_compliant(r)) / len(air) * 100)

    renewable = _mean(renewable_shares(energy_entries))
    if renewable is not None:
        factors.append(clamp(renewable))

    if not factors:
        return 0
    return round_half_up(clamp(_mean(factors)))


def _entropy_score(shares):
    entropy = sum(-p * math.log2(p) for p in shares if p > 0)
    return min(entropy * 50, 100)


def diversity_score(workforce, field="gender"):
    """Shannon entropy of the category shares, scaled by 50 and capped at 100."""
    counts = Counter((r.get(field) or "unknown") for r in workforce or [])
    total = sum(counts.values())
    if not total:
        return 0
    return _entropy_score([count / total for count in counts.values()])


def safety_score(incidents):
    return max(100 - 5 * len(incidents or []), 0)


def latest_metric_values(entries):
    """Latest numeric value per canonical metric key; a blank resubmission clears the key."""
    values = {}
    for entry in entries or []:
        key = canonical_metric_key(entry.get("metric_key", ""))
        number = parse_number(entry.get("value")) if is_filled(entry.get("value")) else None
        if number is None:
            values.pop(key, None)
        else:
            values[key] = number
    return values


def entry_social_factors(values):
    """Diversity and safety factors from submitted social metrics."""
    factors = []
    female = values.get("femaleEmployeesPercentage")
    if female is not None:
        share = clamp(female) / 100
        factors.append(_entropy_score([share, 1 - share]))

    fatality = values.get("fatalityRate")
    ltir = values.get("lostTimeInjuryRate")
    if fatality is not None and fatality > 0:
        factors.append(0)
    elif ltir is not None:
        factors.append(max(100 - 5 * ltir, 0))
    elif fatality is not None:
        factors.append(100)
    return factors


def entry_governance_factors(values):
    """Board independence and ethics training percentages."""
    return [
        clamp(values[key]) for key in ("ethicsTrainingCompletion", "independentDirectorsPercentage")
        if key in values
    ]


def social_score(workforce, incidents, entries=None):
    """Workforce records when there are any, otherwise the submitted social metrics."""
    if workforce:
        return round_half_up(clamp((diversity_score(workforce) + safety_score(incidents)) / 2))
    factors = entry_social_factors(latest_metric_values(entries))
    if not factors:
        return 0
    return round_half_up(clamp(_mean(factors)))


def governance_score(ethics, entries=None):
    audit = _mean(_numbers(ethics, "audit_score"))
    if audit is None:
        audit = _mean(entry_governance_factors(latest_metric_values(entries)))
    if audit is None:
        return 0
    return round_half_up(clamp(audit))


def compliance_rate(ethics):
    """Share of ethics records whose status is compliant, 0-100."""
    if not ethics:
        return 0
    return round_half_up(sum(1 for r in ethics if _is_compliant(r)) / len(ethics) * 100)


# ---------------------------------------------------------------------------
# Composite and rating
# ---------------------------------------------------------------------------

def composite_score(environmental, social, governance, config=None):
    weights = (config or DEFAULT_SCORING_CONFIG)["weights"]
    total = (weights["environmental"] * environmental
             + weights["social"] * social
             + weights["governance"] * governance)
    return round_half_up(clamp(total))


def rating_for(composite, config=None):
    """Return (rating, label) for a composite score."""
    bands = (config or DEFAULT_SCORING_CONFIG)["bands"]
    for cut, rating, label in bands:
        if composite >= cut:
            return rating, label
    return bands[-1][1], bands[-1][2]


def momentum_for(composite, prior_composite=None):
    """Return (momentum, outlook). Without a prior period the outlook is Unknown."""
    if prior_composite is None:
        return None, "Unknown"
    momentum = composite - prior_composite
    if momentum > 0:
        return momentum, "Positive"
    if momentum < 0:
        return momentum, "Negative"
    return momentum, "Stable"


def _recommendations(scores, missing, threshold):
    recommendations = []
    for category in CATEGORIES:
        value = scores[category]
        if value >= threshold:
            continue
        if category in missing:
            action = f"Start collecting {category} data"
            impact = f"{category.capitalize()} is currently scored 0 for lack of data"
        else:
            action = RECOMMENDATION_ACTIONS[category]
            impact = f"Raise {category} score from {value} to at least {threshold}"
        recommendations.append({
            "priority": "High" if value < 50 else "Medium",
            "category": category,
            "action": action,
            "impact": impact,
        })
    return recommendations


def score(company_id, reporting_year, records, config=None, prior_composite=None):
    """
    Score one company-year.

    Returns dict with:
    - environmental / social / governance: integer sub-scores 0-100
    - composite / rating / rating_label
    - momentum / outlook: change against prior_composite, None/"Unknown" without one
    - confidence: "high", "low" or "none" depending on how many categories had data
    - missing_categories
    - recommendations: one per category under the configured threshold
    - industry_percentile: filled in by benchmarking, None here
    """
    if company_id is None or str(company_id).strip() == "":
        raise InputShapeError("score requires a company_id")
    if reporting_year is None or str(reporting_year).strip() == "":
        raise InputShapeError("score requires a reporting_year")
    try:
        reporting_year = int(str(reporting_year).strip())
    except ValueError:
        raise InputShapeError(f"non-numeric reporting_year: {reporting_year!r}")

    config = config or DEFAULT_SCORING_CONFIG
    records = records or {}
    waste = records.get("waste") or []
    air = records.get("air") or []
    entries = records.get("entries") or []
    workforce = records.get("workforce") or []
    incidents = records.get("safety_incidents") or []
    ethics = records.get("ethics") or []

    values = latest_metric_values(entries)
    present = {
        "environmental": bool(_numbers(waste, "recycling_rate") or air or renewable_shares(entries)),
        "social": bool(workforce or entry_social_factors(values)),
        "governance": bool(_numbers(ethics, "audit_score") or entry_governance_factors(values)),
    }
    missing = [c for c in CATEGORIES if not present[c]]

    scores = {
        "environmental": environmental_score(waste, air, entries),
        "social": social_score(workforce, incidents, entries),
        "governance": governance_score(ethics, entries),
    }
    composite = composite_score(scores["environmental"], scores["social"], scores["governance"], config)
    rating, label = rating_for(composite, config)
    momentum, outlook = momentum_for(composite, prior_composite)

    if not missing:
        confidence = "high"
    elif len(missing) < len(CATEGORIES):
        confidence = "low"
    else:
        confidence = "none"

    if missing:
        logger.info(f"Company {company_id} {reporting_year}: no data for {', '.join(missing)}")

    return {
        "company_id": company_id,
        "reporting_year": reporting_year,
        "environmental": scores["environmental"],
        "social": scores["social"],
        "governance": scores["governance"],
        "composite": composite,
        "rating": rating,
        "rating_label": label,
        "industry_percentile": None,
        "momentum": momentum,
        "outlook": outlook,
        "confidence": confidence,
        "missing_categories": missing,
        "compliance_rate": compliance_rate(ethics),
        "recommendations": _recommendations(scores, missing, config["recommendation_threshold"]),
    }
