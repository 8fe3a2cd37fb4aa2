import pytest
from openpyxl import Workbook

from esg_compliance.exceptions import InputShapeError
from esg_compliance.importer import import_metric_file, parse_metric_file
from esg_compliance.store import InMemoryMetricStore

CSV_TEXT = """Company_ID,reporting_year,category,metric_key,value,unit,notes
acme,2024,environmental,scope1Emissions,1200,tCO2e,from meter
acme,2024,economic,revenue,5000000,USD,
,2024,social,totalEmployees,850,,

acme,2024,social,totalEmployees,850,,
acme,2024,governance,,9,,
"""


def _write_csv(tmp_path):
    path = tmp_path / "metrics.csv"
    path.write_text(CSV_TEXT)
    return str(path)


def test_csv_rows_with_errors_are_skipped(tmp_path):
    entries, errors = parse_metric_file(_write_csv(tmp_path))

    assert [e["metric_key"] for e in entries] == ["scope1Emissions", "totalEmployees"]
    assert entries[0]["value"] == "1200"
    assert entries[1]["unit"] == "count"
    assert [e["line"] for e in errors] == [3, 4, 7]
    assert "unknown category" in errors[0]["error"]
    assert "company_id" in errors[1]["error"]
    assert "metric_key" in errors[2]["error"]


def test_xlsx_import(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.append(["company_id", "reporting_year", "category", "metric_key", "value", "unit"])
    ws.append(["acme", 2024, "environmental", "energyConsumption", 45000, "GJ"])
    ws.append([None, None, None, None, None, None])
    ws.append(["acme", 2024, "Social", "femaleEmployeesPercentage", 42, None])
    path = tmp_path / "metrics.xlsx"
    wb.save(path)

    entries, errors = parse_metric_file(str(path))

    assert errors == []
    assert [(e["category"], e["metric_key"], e["value"]) for e in entries] == [
        ("environmental", "energyConsumption", 45000),
        ("social", "femaleEmployeesPercentage", 42),
    ]
    assert entries[1]["unit"] == "%"


def test_import_writes_to_store(tmp_path):
    store = InMemoryMetricStore()
    result = import_metric_file(_write_csv(tmp_path), store)

    assert result == {"stored": 2, "errors": result["errors"], "rows": 5}
    assert len(result["errors"]) == 3
    assert len(store.entries("acme", 2024)) == 2


def test_unsupported_file_type(tmp_path):
    path = tmp_path / "metrics.json"
    path.write_text("{}")
    with pytest.raises(InputShapeError):
        parse_metric_file(str(path))
