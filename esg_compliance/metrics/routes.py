import os
import uuid

from flask import Blueprint, current_app, jsonify, request
from werkzeug.utils import secure_filename

from esg_compliance.engine import ComplianceEngine
from esg_compliance.exceptions import InputShapeError
from esg_compliance.importer import import_metric_file
from esg_compliance.records import latest_entries
from esg_compliance.store import SqlMetricStore
from esg_compliance.validation import perform_full_validation

metrics_bp = Blueprint("metrics", __name__, url_prefix="/api/metrics")


def _engine():
    return ComplianceEngine(SqlMetricStore(), current_app.config)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InputShapeError("Request body must be a JSON object")
    return data


def _allowed_file(filename):
    return "." in filename and \
        filename.rsplit(".", 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]


def _save_uploaded_file(file):
    """Save an uploaded file and return its path on disk."""
    upload_dir = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(upload_dir, exist_ok=True)

    original_name = secure_filename(file.filename)
    ext = original_name.rsplit(".", 1)[1].lower() if "." in original_name else ""
    path = os.path.join(upload_dir, f"{uuid.uuid4().hex}.{ext}")
    file.save(path)
    return path


@metrics_bp.route("", methods=["POST"])
def submit_metrics():
    """Store a submission as metric entries and return its validation."""
    result = _engine().submit(_json_body())
    return jsonify(result), 201


@metrics_bp.route("/validate", methods=["POST"])
def validate_metrics():
    return jsonify(perform_full_validation(_json_body()))


@metrics_bp.route("/import", methods=["POST"])
def import_metrics():
    file = request.files.get("file")
    if file is None or file.filename == "":
        raise InputShapeError("No file uploaded")
    if not _allowed_file(file.filename):
        raise InputShapeError(
            f"Unsupported file type. Allowed: {', '.join(sorted(current_app.config['ALLOWED_EXTENSIONS']))}"
        )

    path = _save_uploaded_file(file)
    try:
        result = import_metric_file(path, SqlMetricStore())
    finally:
        os.remove(path)
    return jsonify(result), 201 if result["stored"] else 200


@metrics_bp.route("/<company_id>/<int:year>")
def get_metrics(company_id, year):
    """Current (latest-wins) entries for a company-year."""
    entries = SqlMetricStore().entries(company_id, year)
    return jsonify({
        "company_id": company_id,
        "reporting_year": year,
        "entries": latest_entries(entries),
    })
