from flask import Blueprint, current_app, jsonify, request

from esg_compliance.engine import ComplianceEngine
from esg_compliance.store import SqlMetricStore

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/kpi")


def _engine():
    return ComplianceEngine(SqlMetricStore(), current_app.config)


@dashboard_bp.route("/<company_id>")
def index(company_id):
    """KPI dashboard; defaults to the company's latest reporting year."""
    year = request.args.get("year", type=int)
    sector = request.args.get("sector") or None
    return jsonify(_engine().dashboard(company_id, year, sector))


@dashboard_bp.route("/<company_id>/score/<int:year>", methods=["GET", "POST"])
def score(company_id, year):
    """Score a company-year. POST also keeps the result as its peer snapshot."""
    persist = request.method == "POST"
    return jsonify(_engine().score(company_id, year, persist=persist, sector=request.args.get("sector")))


@dashboard_bp.route("/<company_id>/benchmark/<int:year>")
def benchmark(company_id, year):
    return jsonify(_engine().benchmark(company_id, year, request.args.get("sector") or None))
