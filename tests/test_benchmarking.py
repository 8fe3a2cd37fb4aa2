import pytest

from esg_compliance.benchmarking import (
    aggregate_framework_metrics,
    benchmark,
    build_dashboard,
    competitive_insights,
    market_position,
    performance_gap,
)
from esg_compliance.scoring import score


@pytest.fixture
def summary():
    return {
        "company_id": "acme",
        "reporting_year": 2024,
        "environmental": 80,
        "social": 70,
        "governance": 60,
        "composite": 71,
    }


@pytest.mark.parametrize("value, status", [(81, "leader"), (80, "average"), (71, "average"), (70, "laggard")])
def test_performance_gap_status(value, status):
    assert performance_gap(value, 75)["status"] == status


def test_performance_gap_percentile():
    assert performance_gap(75, 75)["percentile"] == 50
    assert performance_gap(90, 75)["percentile"] == 84
    assert performance_gap(60, 75)["percentile"] == 16


def test_market_position():
    position = market_position(70, [60, 70, 80, 90])
    assert position == {"rank": 3, "total_companies": 5, "percentile_rank": 38, "quartile": "Third Quartile"}
    assert market_position(95, [60, 70, 80, 90])["quartile"] == "Top Quartile"


def test_benchmark_with_peer_group(summary):
    result = benchmark(summary, "Technology", peer_scores=[50, 60, 65, 80, 90], min_peers=5)

    assert result["status"] == "ok"
    assert result["data_source"] == "peer_group"
    assert result["illustrative"] is False
    assert result["rank"] == 3
    assert result["percentile"] == 60
    assert result["comparative_analysis"]["overall"]["benchmark"] == 82


def test_benchmark_without_enough_peers_uses_static_averages(summary):
    result = benchmark(summary, "manufacturing", peer_scores=[70, 71], min_peers=5)

    assert result["status"] == "insufficient_peer_data"
    assert result["data_source"] == "static_sector_average"
    assert result["illustrative"] is True
    assert result["rank"] is None
    assert result["percentile"] is None
    assert result["peer_count"] == 2
    analysis = result["comparative_analysis"]
    assert analysis["environmental"]["status"] == "leader"
    assert analysis["governance"]["status"] == "laggard"
    assert result["estimated_percentile"] == analysis["overall"]["percentile"]
    assert result["insights"] == [
        "Strong performance in environmental - 15 points above industry average",
        "Improvement needed in governance - 15 points below industry average",
    ]


def test_benchmark_for_unknown_sector(summary):
    result = benchmark(summary, "aerospace")
    assert result["status"] == "insufficient_peer_data"
    assert result["data_source"] == "unavailable"
    assert result["comparative_analysis"] is None
    assert result["estimated_percentile"] is None


def test_benchmark_is_deterministic(summary):
    assert benchmark(summary, "finance", [1, 2]) == benchmark(summary, "finance", [1, 2])


def test_competitive_insights_skip_average_categories():
    analysis = {"environmental": performance_gap(76, 75), "social": performance_gap(90, 75)}
    assert competitive_insights(analysis) == ["Strong performance in social - 15 points above industry average"]


def _record(framework_id, status, verification="SELF_ASSESSED", score_value=100):
    return {
        "framework_id": framework_id,
        "compliance_status": status,
        "compliance_score": score_value,
        "data_quality_score": 100 if status == "COMPLIANT" else 0,
        "completeness_score": 100 if status == "COMPLIANT" else 0,
        "verification_status": verification,
    }


def test_aggregate_framework_metrics():
    records = [
        _record("GRI", "COMPLIANT", "VERIFIED"),
        _record("GRI", "NOT_STARTED", score_value=0),
        _record("SASB", "COMPLIANT"),
    ]
    metrics = aggregate_framework_metrics(records)

    assert metrics["total_requirements"] == 3
    assert metrics["overall_compliance_rate"] == 67
    assert metrics["avg_data_quality"] == 67
    assert metrics["verification_rate"] == 33
    assert metrics["framework_breakdown"]["GRI"] == {
        "total": 2, "compliant": 1, "compliance_rate": 50, "avg_score": 50,
    }


def test_aggregate_framework_metrics_empty():
    metrics = aggregate_framework_metrics([])
    assert metrics["total_requirements"] == 0
    assert metrics["framework_breakdown"] == {}


def test_dashboard_carries_critical_alerts_verbatim():
    summary = score("acme", 2024, {})
    critical = [{"field": "fatalityRate", "message": "Fatality", "severity": "critical", "type": "cross_field"}]
    validation = {"critical": critical, "summary": {"total_critical": 1}}
    framework_results = [{"framework": "GRI", "compliance_score": 40}]

    dashboard = build_dashboard(summary, framework_results, [], benchmark(summary, None), validation)

    assert dashboard["critical_alerts"] == critical
    assert dashboard["framework_scores"] == {"GRI": 40}
    assert dashboard["overall_score"] == 0
    assert dashboard["category_scores"] == {"environmental": 0, "social": 0, "governance": 0}
    assert dashboard["benchmark"]["data_source"] == "unavailable"
