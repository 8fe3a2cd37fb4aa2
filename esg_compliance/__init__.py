import os
import logging
import traceback

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from config import Config

db = SQLAlchemy()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))
    logger = logging.getLogger(__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    os.makedirs(app.config.get("UPLOAD_FOLDER", os.path.join(app.instance_path, "uploads")), exist_ok=True)

    # HTTPS support behind Render's proxy
    if os.environ.get("RENDER"):
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Broken reference data or scoring tables must stop startup
    from esg_compliance.frameworks import validate_catalog
    from esg_compliance.scoring import build_scoring_config
    catalog_counts = validate_catalog()
    build_scoring_config(app.config)
    logger.info(f"Framework catalog loaded: {sum(catalog_counts.values())} requirements across {len(catalog_counts)} frameworks")

    db.init_app(app)

    from flask_compress import Compress
    Compress(app)

    from esg_compliance.metrics.routes import metrics_bp
    from esg_compliance.frameworks_api.routes import frameworks_bp
    from esg_compliance.dashboard.routes import dashboard_bp
    from esg_compliance.esg.routes import esg_bp

    app.register_blueprint(metrics_bp)
    app.register_blueprint(frameworks_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(esg_bp)

    @app.route("/health")
    def health():
        """Health check: database connectivity and loaded catalog."""
        db_url = app.config["SQLALCHEMY_DATABASE_URI"]
        db_type = db_url.split("://")[0] if "://" in db_url else "sqlite"

        db_ok = False
        db_error = None
        try:
            from sqlalchemy import text
            db.session.execute(text("SELECT 1"))
            db_ok = True
        except Exception as e:
            db_error = str(e)

        return jsonify({
            "status": "ok" if db_ok else "db_error",
            "database_type": db_type,
            "database_connected": db_ok,
            "database_error": db_error,
            "frameworks": sorted(catalog_counts),
        })

    from esg_compliance.exceptions import InputShapeError, ReferenceDataError

    @app.errorhandler(InputShapeError)
    def bad_input(error):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(ReferenceDataError)
    def unknown_reference(error):
        return jsonify({"error": str(error)}), 404

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({"error": getattr(error, "description", "Bad request")}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(413)
    def file_too_large(error):
        max_mb = app.config.get("MAX_CONTENT_LENGTH", 0) // (1024 * 1024)
        return jsonify({"error": f"File too large. Maximum size is {max_mb} MB."}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        original = getattr(error, "original_exception", None) or error
        logger.error(f"500 error: {type(original).__name__}: {original}\n{traceback.format_exc()}")
        return jsonify({"error": "Internal server error"}), 500

    with app.app_context():
        from esg_compliance import models  # noqa: F401  register tables
        db.create_all()
        logger.info("Database tables created/verified.")

    return app
