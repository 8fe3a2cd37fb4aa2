"""
Dashboard / Benchmark Aggregator

Positions a score summary against peers and static sector averages, and
assembles the KPI dashboard view.

Sector averages in INDUSTRY_BENCHMARKS are illustrative reference points,
not survey data. Results built on them carry illustrative=True. A real rank
and percentile are only reported when enough peer composites exist; there is
no fallback to made-up numbers.
"""

import math

from esg_compliance.records import CATEGORIES, parse_number, round_half_up

INDUSTRY_BENCHMARKS = {
    "technology": {"environmental": 75, "social": 82, "governance": 88},
    "manufacturing": {"environmental": 65, "social": 70, "governance": 75},
    "finance": {"environmental": 70, "social": 85, "governance": 90},
    "healthcare": {"environmental": 68, "social": 88, "governance": 82},
    "energy": {"environmental": 55, "social": 65, "governance": 70},
    "mining": {"environmental": 52, "social": 62, "governance": 68},
}

BENCHMARK_STD_DEV = 15


def _normal_cdf(x, mean, std_dev):
    return 0.5 * (1 + math.erf((x - mean) / (std_dev * math.sqrt(2))))


def performance_gap(score, benchmark):
    """Gap to a benchmark, estimated percentile and leader/average/laggard status."""
    gap = score - benchmark
    if gap > 5:
        status = "leader"
    elif gap > -5:
        status = "average"
    else:
        status = "laggard"
    return {
        "score": score,
        "benchmark": benchmark,
        "gap": gap,
        "percentile": round_half_up(_normal_cdf(score, benchmark, BENCHMARK_STD_DEV) * 100),
        "status": status,
    }


def _quartile(percentile):
    if percentile >= 75:
        return "Top Quartile"
    if percentile >= 50:
        return "Second Quartile"
    if percentile >= 25:
        return "Third Quartile"
    return "Bottom Quartile"


def market_position(score, peer_scores):
    """Rank and percentile among peer composites (the company itself excluded from peers)."""
    peers = [p for p in (parse_number(s) for s in peer_scores or []) if p is not None]
    if not peers:
        return {"rank": 1, "total_companies": 1, "percentile_rank": None, "quartile": None}

    higher = sum(1 for p in peers if p > score)
    below = sum(1 for p in peers if p < score)
    ties = sum(1 for p in peers if p == score)
    percentile = round_half_up((below + 0.5 * ties) / len(peers) * 100)
    return {
        "rank": higher + 1,
        "total_companies": len(peers) + 1,
        "percentile_rank": percentile,
        "quartile": _quartile(percentile),
    }


def comparative_analysis(summary, sector_averages):
    analysis = {c: performance_gap(summary[c], sector_averages[c]) for c in CATEGORIES}
    overall_benchmark = round_half_up(sum(sector_averages[c] for c in CATEGORIES) / len(CATEGORIES))
    analysis["overall"] = performance_gap(summary["composite"], overall_benchmark)
    return analysis


def competitive_insights(analysis):
    """One sentence per category that leads or lags the sector average."""
    insights = []
    for category in CATEGORIES:
        gap = analysis.get(category)
        if not gap:
            continue
        if gap["status"] == "leader":
            insights.append(f"Strong performance in {category} - {gap['gap']} points above industry average")
        elif gap["status"] == "laggard":
            insights.append(f"Improvement needed in {category} - {abs(gap['gap'])} points below industry average")
    return insights


def benchmark(summary, sector, peer_scores=None, min_peers=5):
    """
    Position an ESGScoreSummary within its sector.

    Returns dict with:
    - status: "ok" with at least min_peers peer composites, else
      "insufficient_peer_data"
    - data_source: "peer_group", "static_sector_average" or "unavailable"
    - illustrative: True when the figures come from the static table
    - percentile / rank / total_companies / quartile: real peer position,
      None without enough peers
    - comparative_analysis / estimated_percentile / insights: gap against
      the static sector average where the sector is known
    """
    sector_key = str(sector or "").strip().lower()
    peers = [p for p in (parse_number(s) for s in peer_scores or []) if p is not None]
    sector_averages = INDUSTRY_BENCHMARKS.get(sector_key)

    result = {
        "sector": sector_key or None,
        "status": "insufficient_peer_data",
        "data_source": "unavailable",
        "illustrative": False,
        "peer_count": len(peers),
        "percentile": None,
        "rank": None,
        "total_companies": None,
        "quartile": None,
        "comparative_analysis": None,
        "estimated_percentile": None,
        "insights": [],
    }

    if len(peers) >= min_peers:
        position = market_position(summary["composite"], peers)
        result.update({
            "status": "ok",
            "data_source": "peer_group",
            "percentile": position["percentile_rank"],
            "rank": position["rank"],
            "total_companies": position["total_companies"],
            "quartile": position["quartile"],
        })

    if sector_averages:
        analysis = comparative_analysis(summary, sector_averages)
        result["comparative_analysis"] = analysis
        result["estimated_percentile"] = analysis["overall"]["percentile"]
        result["insights"] = competitive_insights(analysis)
        if result["status"] != "ok":
            result["data_source"] = "static_sector_average"
            result["illustrative"] = True

    return result


def aggregate_framework_metrics(records):
    """
    Roll ComplianceRecords up into framework KPIs.

    Returns dict with total_requirements, overall_compliance_rate,
    avg_data_quality, avg_completeness, verification_rate and a
    framework_breakdown of {total, compliant, compliance_rate, avg_score}.
    """
    records = list(records or [])
    total = len(records)
    if not total:
        return {
            "total_requirements": 0,
            "overall_compliance_rate": 0,
            "avg_data_quality": 0,
            "avg_completeness": 0,
            "framework_breakdown": {},
            "verification_rate": 0,
        }

    breakdown = {}
    for record in records:
        fw = breakdown.setdefault(record["framework_id"], {"total": 0, "compliant": 0, "score_sum": 0})
        fw["total"] += 1
        fw["score_sum"] += record["compliance_score"]
        if record["compliance_status"] == "COMPLIANT":
            fw["compliant"] += 1

    framework_breakdown = {
        fid: {
            "total": fw["total"],
            "compliant": fw["compliant"],
            "compliance_rate": round_half_up(fw["compliant"] / fw["total"] * 100),
            "avg_score": round_half_up(fw["score_sum"] / fw["total"]),
        }
        for fid, fw in breakdown.items()
    }

    compliant = sum(1 for r in records if r["compliance_status"] == "COMPLIANT")
    verified = sum(1 for r in records if r["verification_status"] == "VERIFIED")
    return {
        "total_requirements": total,
        "overall_compliance_rate": round_half_up(compliant / total * 100),
        "avg_data_quality": round_half_up(sum(r["data_quality_score"] for r in records) / total),
        "avg_completeness": round_half_up(sum(r["completeness_score"] for r in records) / total),
        "framework_breakdown": framework_breakdown,
        "verification_rate": round_half_up(verified / total * 100),
    }


def build_dashboard(summary, framework_results, records, benchmark_result, validation=None):
    """KPI dashboard for one company-year. Critical alerts are passed through as-is."""
    return {
        "company_id": summary["company_id"],
        "reporting_year": summary["reporting_year"],
        "overall_score": summary["composite"],
        "rating": summary["rating"],
        "rating_label": summary["rating_label"],
        "category_scores": {c: summary[c] for c in CATEGORIES},
        "confidence": summary["confidence"],
        "missing_categories": summary["missing_categories"],
        "momentum": summary["momentum"],
        "outlook": summary["outlook"],
        "compliance_rate": summary.get("compliance_rate", 0),
        "framework_scores": {
            r["framework"]: r["compliance_score"] for r in framework_results or []
        },
        "framework_metrics": aggregate_framework_metrics(records),
        "benchmark": benchmark_result,
        "recommendations": summary["recommendations"],
        "critical_alerts": list(validation["critical"]) if validation else [],
        "validation_summary": validation["summary"] if validation else None,
    }
