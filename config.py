import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    # Database: use DATABASE_URL from environment (PostgreSQL in production), fallback to SQLite for local dev
    _db_url = os.environ.get("DATABASE_URL", f"sqlite:///{os.path.join(basedir, 'instance', 'esg_compliance.db')}")
    # Heroku-style URLs use postgres:// but SQLAlchemy requires postgresql://
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 5,
        "max_overflow": 10,
    } if "DATABASE_URL" in os.environ else {}
    UPLOAD_FOLDER = os.path.join(basedir, "instance", "uploads")
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024  # 20 MB max import file
    ALLOWED_EXTENSIONS = {"csv", "xlsx"}

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Composite ESG score weights (must sum to 1)
    ESG_CATEGORY_WEIGHTS = {
        "environmental": 0.4,
        "social": 0.3,
        "governance": 0.3,
    }

    # Rating bands, highest cut point first: (min composite, rating, label)
    ESG_RATING_BANDS = [
        (80, "AAA", "Excellent"),
        (60, "AA", "Good"),
        (40, "A", "Fair"),
        (0, "B", "Needs Improvement"),
    ]

    # Category scores below this produce an improvement recommendation
    ESG_RECOMMENDATION_THRESHOLD = 70

    # Minimum number of peer composites before a real percentile is reported
    BENCHMARK_MIN_PEERS = int(os.environ.get("BENCHMARK_MIN_PEERS", "5"))
