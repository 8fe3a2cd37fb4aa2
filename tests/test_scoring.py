import pytest

from esg_compliance.exceptions import InputShapeError, ReferenceDataError
from esg_compliance.scoring import (
    DEFAULT_SCORING_CONFIG,
    build_scoring_config,
    compliance_rate,
    composite_score,
    diversity_score,
    environmental_score,
    governance_score,
    momentum_for,
    rating_for,
    safety_score,
    score,
    social_score,
)
from conftest import make_entries


def test_composite_uses_default_weights():
    assert composite_score(80, 70, 90) == 80
    assert rating_for(80) == ("AAA", "Excellent")


@pytest.mark.parametrize("composite, rating", [
    (100, "AAA"), (80, "AAA"), (79, "AA"), (60, "AA"), (59, "A"), (40, "A"), (39, "B"), (0, "B"),
])
def test_rating_bands(composite, rating):
    assert rating_for(composite)[0] == rating


@pytest.mark.parametrize("genders, expected", [
    (["female", "male"], 50),
    (["female", "female"], 0),
    (["a", "b", "c", "d"], 100),
    (["female", None], 50),
    ([], 0),
])
def test_diversity_score(genders, expected):
    assert diversity_score([{"gender": g} for g in genders]) == pytest.approx(expected)


@pytest.mark.parametrize("count, expected", [(0, 100), (3, 85), (20, 0), (25, 0)])
def test_safety_score(count, expected):
    assert safety_score([{"severity": "minor"}] * count) == expected


def test_social_score():
    workforce = [{"gender": "female"}, {"gender": "male"}]
    assert social_score(workforce, []) == 75
    assert social_score(workforce, [{"severity": "major"}] * 2) == 70
    assert social_score([], []) == 0


def _social(*values):
    return make_entries("acme", 2024, [("social", key, value) for key, value in values])


@pytest.mark.parametrize("values, expected", [
    # diversity 50 and safety 100 - 5 * 2
    ([("femaleEmployeesPercentage", 50), ("lostTimeInjuryRate", 2)], 70),
    ([("femaleEmployeesPercentage", 50), ("lostTimeInjuryRate", 2), ("fatalityRate", 0.5)], 25),
    ([("fatalityRate", 0)], 100),
    ([("femaleEmployeesPercentage", 50), ("femaleEmployeesPercentage", ""), ("lostTimeInjuryRate", 2)], 90),
    ([("trainingHoursPerEmployee", 24)], 0),
])
def test_social_score_from_submitted_metrics(values, expected):
    assert social_score([], [], _social(*values)) == expected


def test_workforce_records_take_precedence_over_metrics():
    workforce = [{"gender": "female"}, {"gender": "male"}]
    assert social_score(workforce, [], _social(("femaleEmployeesPercentage", 10))) == 75


def test_governance_score_from_submitted_metrics():
    entries = make_entries("acme", 2024, [
        ("governance", "ethicsTrainingCompletion", 96),
        ("governance", "independentDirectorsPercentage", "55"),
    ])
    assert governance_score([], entries) == 76
    assert governance_score([{"audit_score": 40}], entries) == 40
    assert governance_score([], make_entries("acme", 2024, [("governance", "boardSize", 9)])) == 0


def test_score_from_metrics_alone_covers_every_category():
    entries = make_entries("acme", 2024, [
        ("environmental", "renewableEnergyPercentage", 35),
        ("social", "femaleEmployeesPercentage", 42),
        ("social", "lostTimeInjuryRate", 1.2),
        ("governance", "ethicsTrainingCompletion", 96),
        ("governance", "independentDirectorsPercentage", 55),
    ])
    result = score("acme", 2024, {"entries": entries})

    assert (result["environmental"], result["social"], result["governance"]) == (35, 72, 76)
    assert result["composite"] == 58
    assert result["missing_categories"] == []
    assert result["confidence"] == "high"


def test_environmental_score_averages_available_factors():
    waste = [{"recycling_rate": 40}, {"recycling_rate": 60}]
    air = [{"compliance_status": "compliant"}, {"compliance_status": "non_compliant"}]
    assert environmental_score(waste, air) == 55
    assert environmental_score([{"recycling_rate": 90}], []) == 100

    energy = make_entries(1, 2024, [("environmental", "renewableEnergyPercentage", "80")])
    assert environmental_score(waste, air, energy) == 63
    assert environmental_score([], [], []) == 0


def test_governance_score_rounds_half_up():
    assert governance_score([{"audit_score": 80}, {"audit_score": 91}]) == 86
    assert governance_score([]) == 0


def test_compliance_rate():
    ethics = [{"compliance_status": "compliant"}, {"compliance_status": "Compliant"}, {"compliance_status": "breach"}]
    assert compliance_rate(ethics) == 67
    assert compliance_rate([]) == 0


def test_momentum():
    assert momentum_for(70) == (None, "Unknown")
    assert momentum_for(70, 65) == (5, "Positive")
    assert momentum_for(60, 65) == (-5, "Negative")
    assert momentum_for(65, 65) == (0, "Stable")


def test_score_without_data_is_flagged_not_raised():
    summary = score("acme", "2024", {})

    assert summary["reporting_year"] == 2024
    assert (summary["environmental"], summary["social"], summary["governance"]) == (0, 0, 0)
    assert summary["composite"] == 0
    assert summary["rating"] == "B"
    assert summary["confidence"] == "none"
    assert summary["missing_categories"] == ["environmental", "social", "governance"]
    assert summary["momentum"] is None
    assert summary["outlook"] == "Unknown"
    assert summary["industry_percentile"] is None
    assert [r["priority"] for r in summary["recommendations"]] == ["High", "High", "High"]


def test_score_full_bundle():
    records = {
        "waste": [{"recycling_rate": 70}],
        "air": [{"compliance_status": "compliant"}],
        "workforce": [{"gender": "female"}, {"gender": "male"}],
        "safety_incidents": [{"severity": "minor"}],
        "ethics": [{"audit_score": 64, "compliance_status": "compliant"}],
    }
    summary = score("acme", 2024, records, prior_composite=70)

    # environmental: mean(84, 100) = 92; social: (50 + 95) / 2 = 72.5
    # composite: 0.4 * 92 + 0.3 * 73 + 0.3 * 64 = 77.9
    assert summary["environmental"] == 92
    assert summary["social"] == 73
    assert summary["governance"] == 64
    assert summary["composite"] == 78
    assert summary["rating"] == "AA"
    assert summary["momentum"] == 8
    assert summary["outlook"] == "Positive"
    assert summary["confidence"] == "high"
    assert summary["compliance_rate"] == 100
    assert summary["recommendations"] == [{
        "priority": "Medium",
        "category": "governance",
        "action": "Close ethics audit findings and strengthen board oversight",
        "impact": "Raise governance score from 64 to at least 70",
    }]


def test_composite_matches_reported_sub_scores():
    records = {"workforce": [{"gender": "f"}, {"gender": "m"}, {"gender": "x"}], "ethics": [{"audit_score": 77.5}]}
    summary = score(1, 2024, records)
    expected = composite_score(summary["environmental"], summary["social"], summary["governance"])
    assert summary["composite"] == expected
    assert summary["confidence"] == "low"


@pytest.mark.parametrize("company_id, year", [(None, 2024), ("", 2024), (1, None), (1, "twenty")])
def test_score_requires_identity(company_id, year):
    with pytest.raises(InputShapeError):
        score(company_id, year, {})


def test_custom_weights_and_bands():
    config = build_scoring_config({
        "ESG_CATEGORY_WEIGHTS": {"environmental": 1.0, "social": 0.0, "governance": 0.0},
        "ESG_RATING_BANDS": [(90, "Leader", "Leader"), (0, "Other", "Other")],
        "ESG_RECOMMENDATION_THRESHOLD": 50,
    })
    assert composite_score(85, 10, 10, config) == 85
    assert rating_for(85, config) == ("Other", "Other")
    assert rating_for(90, config) == ("Leader", "Leader")


def test_default_config_matches_documented_tables():
    assert DEFAULT_SCORING_CONFIG["weights"] == {"environmental": 0.4, "social": 0.3, "governance": 0.3}
    assert DEFAULT_SCORING_CONFIG["recommendation_threshold"] == 70


@pytest.mark.parametrize("mapping", [
    {"ESG_CATEGORY_WEIGHTS": {"environmental": 0.5, "social": 0.3, "governance": 0.3}},
    {"ESG_CATEGORY_WEIGHTS": {"environmental": 1.2, "social": -0.2, "governance": 0.0}},
    {"ESG_CATEGORY_WEIGHTS": {"environmental": 0.5, "social": 0.5}},
    {"ESG_RATING_BANDS": [(40, "A", "Fair"), (80, "AAA", "Excellent"), (0, "B", "Low")]},
    {"ESG_RATING_BANDS": [(80, "AAA", "Excellent"), (40, "A", "Fair")]},
    {"ESG_RECOMMENDATION_THRESHOLD": 150},
])
def test_invalid_scoring_config(mapping):
    with pytest.raises(ReferenceDataError):
        build_scoring_config(mapping)
