import pytest

from esg_compliance.exceptions import InputShapeError, ReferenceDataError
from esg_compliance.mapper import (
    COMPLIANCE_STATUSES,
    VERIFICATION_STATUSES,
    framework_compliance,
    framework_guidance,
    generate_framework_report,
    map_entry_to_codes,
    map_to_framework,
)
from conftest import make_entries

GRI_FULL = [
    ("environmental", "energyConsumption", 45000),
    ("environmental", "waterWithdrawal", 12000),
    ("environmental", "scope1Emissions", 1200),
    ("environmental", "scope2Emissions", 800),
    ("environmental", "wasteGenerated", 300),
    ("social", "totalEmployees", 850),
    ("social", "femaleEmployeesPercentage", 42),
    ("social", "trainingHoursPerEmployee", 24),
    ("social", "lostTimeInjuryRate", 1.2),
    ("governance", "boardSize", 9),
    ("governance", "independentDirectorsPercentage", 55),
    ("governance", "ethicsTrainingCompletion", 96),
    ("governance", "corruptionIncidents", 0),
]


def _records_by_id(records):
    return {r["requirement_id"]: r for r in records}


def test_full_gri_submission_is_compliant():
    result = framework_compliance(make_entries("acme", 2024, GRI_FULL), "GRI")

    assert result["compliance_score"] == 100
    assert result["met_requirements"] == result["total_requirements"] == 12
    assert result["missing_requirements"] == []
    for record in result["records"]:
        assert record["compliance_status"] == "COMPLIANT"
        assert record["compliance_score"] == 100
        assert record["verification_status"] == "SELF_ASSESSED"
        assert record["company_id"] == "acme"


def test_partial_requirement():
    records = _records_by_id(map_to_framework(
        make_entries(1, 2024, [("governance", "boardSize", 9)]), "GRI"))
    board = records["GRI-2-9"]
    assert board["compliance_status"] == "PARTIAL"
    assert board["completeness_score"] == 50
    assert board["data_quality_score"] == 100
    assert board["compliance_score"] == 50
    assert board["missing_metric_keys"] == ["independentDirectorsPercentage"]


def test_missing_requirement_with_prior_data_is_non_compliant():
    entries = make_entries(1, 2024, [("environmental", "scope1Emissions", 1000)])
    prior = make_entries(1, 2023, [("environmental", "waterWithdrawal", 900)])
    records = _records_by_id(map_to_framework(entries, "GRI", prior_entries=prior))

    assert records["GRI-303-3"]["compliance_status"] == "NON_COMPLIANT"
    assert records["GRI-306-3"]["compliance_status"] == "NOT_STARTED"
    assert records["GRI-306-3"]["data_quality_score"] == 0


def test_latest_entry_decides_presence():
    entries = make_entries(1, 2024, [
        ("environmental", "wasteGenerated", 300),
        ("environmental", "wasteGenerated", ""),
    ])
    records = _records_by_id(map_to_framework(entries, "GRI"))
    assert records["GRI-306-3"]["compliance_status"] == "NOT_STARTED"


def test_aliased_keys_satisfy_requirements():
    entries = make_entries(1, 2024, [
        ("environmental", "scope_1_emissions", 10),
        ("environmental", "ghg_emissions", 10),
    ])
    gri = _records_by_id(map_to_framework(entries, "GRI"))
    assert gri["GRI-305-1"]["compliance_status"] == "COMPLIANT"
    sasb = _records_by_id(map_to_framework(make_entries(1, 2024, [("environmental", "ghg_emissions", 10)]), "SASB"))
    assert sasb["TC-SI-110a.1"]["compliance_status"] == "COMPLIANT"


def test_entries_for_several_companies_are_rejected():
    entries = make_entries(1, 2024, [("social", "totalEmployees", 5)]) + \
        make_entries(2, 2024, [("social", "totalEmployees", 5)])
    with pytest.raises(InputShapeError):
        map_to_framework(entries, "GRI")


def test_unknown_framework_is_rejected():
    with pytest.raises(ReferenceDataError):
        framework_compliance([], "NOT-A-FRAMEWORK")


def test_alerts_lower_data_quality_and_hold_verification():
    entries = make_entries(1, 2024, [("environmental", "scope1Emissions", 2000000)], verified=False)
    alerts = [{"field": "environmental.scope1Emissions", "severity": "error",
               "message": "too high", "type": "threshold"}]
    record = _records_by_id(map_to_framework(entries, "GRI", alerts=alerts))["GRI-305-1"]

    assert record["compliance_status"] == "COMPLIANT"
    assert record["data_quality_score"] == 0
    assert record["compliance_score"] == 0
    assert record["verification_status"] == "PENDING"


def test_verified_entries():
    entries = make_entries(1, 2024, [("governance", "corruptionIncidents", 0)], verified=True)
    record = _records_by_id(map_to_framework(entries, "GRI"))["GRI-205-3"]
    assert record["verification_status"] == "VERIFIED"


def test_any_match_requirements():
    entries = make_entries("mine", 2024, [("environmental", "tailings", "dam inspection report")])
    record = _records_by_id(map_to_framework(entries, "ICMM"))["ICMM-5"]
    assert record["compliance_status"] == "COMPLIANT"
    assert record["completeness_score"] == 100
    assert record["missing_metric_keys"] == ["biodiversity", "water"]


def test_vacuous_category_is_excluded_from_mean():
    empty = framework_compliance([], "TCFD", company_id="acme", reporting_year=2024)
    social = empty["category_scores"]["social"]
    assert social == {"total": 0, "met": 0, "percentage": 100, "missing": [], "applicable": False}
    assert empty["compliance_score"] == 0
    assert empty["records"][0]["company_id"] == "acme"

    env_only = framework_compliance(make_entries(1, 2024, [
        ("environmental", "climateRisks", "yes"),
        ("environmental", "businessImpact", "yes"),
        ("environmental", "scope1Emissions", 10),
        ("environmental", "scope2Emissions", 10),
        ("environmental", "scope3Emissions", 10),
    ]), "TCFD")
    assert env_only["category_scores"]["environmental"]["percentage"] == 100
    assert env_only["category_scores"]["governance"]["percentage"] == 0
    assert env_only["compliance_score"] == 50


def test_overall_is_mean_of_category_percentages():
    # (20 + 0 + 0) / 3
    result = framework_compliance(make_entries(1, 2024, GRI_FULL[:1]), "GRI")
    assert result["category_scores"]["environmental"]["percentage"] == 20
    assert result["compliance_score"] == 7


@pytest.mark.parametrize("metric_key, framework_id, codes", [
    ("scope1Emissions", "GRI", ["GRI-305-1"]),
    ("scope3Emissions", "GRI", ["GRI-305-3"]),
    ("female_directors", "GRI", ["GRI-405-1"]),
    ("dataBreaches", "SASB", ["TC-SI-230a.1"]),
    ("scope1Emissions", "BRSR", ["BRSR-P6-E7"]),
    ("scope3Emissions", "TCFD", ["TCFD-MT-b3"]),
    ("unknownMetric", "GRI", []),
])
def test_map_entry_to_codes(metric_key, framework_id, codes):
    assert map_entry_to_codes({"metric_key": metric_key}, framework_id) == codes


def test_report_for_empty_company():
    report = generate_framework_report([], "GRI")
    assert report["compliance_level"] == "Low"
    assert report["mapped_metrics"] == []
    priorities = [(r["priority"], r["category"]) for r in report["recommendations"]]
    assert priorities == [
        ("High", "Foundation"),
        ("High", "environmental"),
        ("High", "social"),
        ("High", "governance"),
    ]


def test_report_for_complete_company():
    report = generate_framework_report(make_entries("acme", 2024, GRI_FULL), "GRI", industry="manufacturing")
    assert report["compliance_level"] == "High"
    assert report["industry"] == "manufacturing"
    assert [r["category"] for r in report["recommendations"]] == ["Enhancement"]
    codes = {m["metric_key"]: m["codes"] for m in report["mapped_metrics"]}
    assert codes["boardSize"] == ["GRI-2-9"]
    assert "environmental" in report["guidance"]


def test_framework_guidance():
    assert framework_guidance("GRI", "social").startswith("Cover employment")
    assert framework_guidance("ICMM", "environmental") == framework_guidance("ICMM")["general"]
    with pytest.raises(ReferenceDataError):
        framework_guidance("XYZ")


@pytest.mark.parametrize("framework_id", ["GRI", "SASB", "TCFD", "BRSR", "ICMM", "ZSE_LISTING"])
def test_statuses_come_from_the_documented_sets(framework_id):
    entries = make_entries(1, 2024, GRI_FULL[:6])
    for record in map_to_framework(entries, framework_id):
        assert record["compliance_status"] in COMPLIANCE_STATUSES
        assert record["compliance_status"] != "IN_PROGRESS"
        assert record["verification_status"] in VERIFICATION_STATUSES


def test_missing_requirements_are_ids_with_details_alongside():
    result = framework_compliance(make_entries(1, 2024, [("governance", "boardSize", 9)]), "GRI")

    assert "GRI-2-9" in result["missing_requirements"]
    assert all(isinstance(rid, str) for rid in result["missing_requirements"])
    assert len(result["missing_requirements"]) == 12
    details = {d["requirement_id"]: d for d in result["missing_details"]}
    assert list(details) == result["missing_requirements"]
    assert details["GRI-2-9"]["status"] == "PARTIAL"
    assert details["GRI-2-9"]["missing_metric_keys"] == ["independentDirectorsPercentage"]
