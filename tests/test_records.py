import pytest

from esg_compliance.exceptions import InputShapeError
from esg_compliance.records import (
    entries_to_submission,
    is_filled,
    latest_entries,
    parse_number,
    require_identity,
    round_half_up,
    single_identity,
    submission_to_entries,
)
from conftest import make_entries


@pytest.mark.parametrize("raw, expected", [
    (12, 12.0),
    ("12.5", 12.5),
    ("12.5%", 12.5),
    (" 3e2 ", 300.0),
    ("abc", None),
    ("", None),
    (None, None),
    (True, None),
    (float("nan"), None),
])
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_is_filled_treats_zero_as_filled():
    assert is_filled(0)
    assert is_filled("0")
    assert not is_filled(None)
    assert not is_filled("   ")


@pytest.mark.parametrize("value, expected", [(2.5, 3), (0.5, 1), (1.49, 1), (-0.5, 0), (84.2105, 84)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_require_identity_accepts_camel_case():
    assert require_identity({"companyId": 7, "reportingYear": "2024"}) == (7, 2024)


@pytest.mark.parametrize("record", [
    {"reporting_year": 2024},
    {"company_id": "", "reporting_year": 2024},
    {"company_id": 1},
    {"company_id": 1, "reporting_year": "last year"},
    ["not", "a", "dict"],
])
def test_require_identity_rejects_bad_records(record):
    with pytest.raises(InputShapeError):
        require_identity(record)


def test_latest_entries_later_submission_wins():
    entries = make_entries(1, 2024, [
        ("environmental", "scope1Emissions", 100),
        ("environmental", "scope2Emissions", 50),
        ("environmental", "scope1Emissions", 120),
    ])
    latest = latest_entries(entries)
    assert len(latest) == 2
    by_key = {e["metric_key"]: e["value"] for e in latest}
    assert by_key["scope1Emissions"] == 120
    # superseded key moves to the end
    assert latest[-1]["metric_key"] == "scope1Emissions"


def test_latest_entries_rejects_unknown_category():
    with pytest.raises(InputShapeError):
        latest_entries(make_entries(1, 2024, [("economic", "revenue", 10)]))


def test_single_identity():
    assert single_identity([]) is None
    entries = make_entries(1, 2024, [("social", "totalEmployees", 10)])
    assert single_identity(entries) == (1, 2024)
    with pytest.raises(InputShapeError):
        single_identity(entries + make_entries(1, 2023, [("social", "totalEmployees", 9)]))


def test_submission_flattening_keeps_units_and_defaults(sample_submission):
    sample_submission["units"] = {"energyConsumption": "MWh"}
    entries = submission_to_entries(sample_submission)
    assert len(entries) == 16
    units = {e["metric_key"]: e["unit"] for e in entries}
    assert units["energyConsumption"] == "MWh"
    assert units["scope1Emissions"] == "tCO2e"


def test_submission_rejects_non_mapping_block():
    with pytest.raises(InputShapeError):
        submission_to_entries({"company_id": 1, "reporting_year": 2024, "social": [1, 2]})


def test_entries_to_submission_copies_metadata():
    entries = make_entries("acme", 2024, [("governance", "boardSize", 9), ("governance", "boardSize", 11)])
    submission = entries_to_submission(entries, "acme", 2024, {"sector": "finance", "region": None})
    assert submission["governance"] == {"boardSize": 11}
    assert submission["sector"] == "finance"
    assert "region" not in submission
    assert submission["environmental"] == {}
