from flask import Blueprint, current_app, jsonify, request

from esg_compliance.engine import ComplianceEngine
from esg_compliance.frameworks import (
    CATALOG_COUNTS,
    FRAMEWORKS,
    get_framework,
    get_requirements,
    requirement_to_dict,
)
from esg_compliance.mapper import framework_guidance
from esg_compliance.store import SqlMetricStore

frameworks_bp = Blueprint("frameworks", __name__, url_prefix="/api/frameworks")


def _flag(name):
    return request.args.get(name, "").lower() in ("1", "true", "yes")


@frameworks_bp.route("")
def list_frameworks():
    return jsonify({
        "frameworks": [
            {
                "framework_id": fid,
                "name": meta["name"],
                "version": meta["version"],
                "description": meta["description"],
                "requirement_count": CATALOG_COUNTS[fid],
            }
            for fid, meta in FRAMEWORKS.items()
        ]
    })


@frameworks_bp.route("/<framework_id>/requirements")
def list_requirements(framework_id):
    fid, meta = get_framework(framework_id)
    return jsonify({
        "framework_id": fid,
        "version": meta["version"],
        "guidance": framework_guidance(fid),
        "requirements": [requirement_to_dict(r) for r in get_requirements(fid)],
    })


@frameworks_bp.route("/<framework_id>/compliance/<company_id>/<int:year>")
def compliance(framework_id, company_id, year):
    """Framework compliance for a company-year; ?persist=1 caches the records."""
    engine = ComplianceEngine(SqlMetricStore(), current_app.config)
    return jsonify(engine.framework_compliance(framework_id, company_id, year, persist=_flag("persist")))


@frameworks_bp.route("/<framework_id>/report/<company_id>/<int:year>")
def report(framework_id, company_id, year):
    engine = ComplianceEngine(SqlMetricStore(), current_app.config)
    return jsonify(engine.framework_report(framework_id, company_id, year, request.args.get("industry")))
