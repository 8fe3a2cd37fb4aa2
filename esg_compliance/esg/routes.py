from flask import Blueprint, current_app, jsonify, request

from esg_compliance.engine import ComplianceEngine
from esg_compliance.store import SqlMetricStore

esg_bp = Blueprint("esg", __name__, url_prefix="/api/esg")


def _engine():
    return ComplianceEngine(SqlMetricStore(), current_app.config)


@esg_bp.route("/<record_type>", methods=["POST"])
def create_records(record_type):
    """Store one operational record (JSON object) or a batch (JSON list)."""
    result = _engine().record_operational(record_type, request.get_json(silent=True))
    return jsonify(result), 201


@esg_bp.route("/<record_type>/<company_id>/<int:year>")
def list_records(record_type, company_id, year):
    return jsonify({
        "record_type": record_type,
        "company_id": company_id,
        "reporting_year": year,
        "records": _engine().operational(record_type, company_id, year),
    })
