import pytest

from config import Config
from esg_compliance import create_app, db


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    BENCHMARK_MIN_PEERS = 3


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_submission():
    return {
        "company_id": "acme",
        "reporting_year": 2024,
        "company_name": "Acme Manufacturing",
        "sector": "manufacturing",
        "region": "APAC",
        "environmental": {
            "scope1Emissions": 1200,
            "scope2Emissions": 800,
            "scope3Emissions": 5000,
            "energyConsumption": 45000,
            "renewableEnergyPercentage": 35,
            "waterWithdrawal": 12000,
            "wasteGenerated": 300,
        },
        "social": {
            "totalEmployees": 850,
            "femaleEmployeesPercentage": 42,
            "trainingHoursPerEmployee": 24,
            "lostTimeInjuryRate": 1.2,
        },
        "governance": {
            "boardSize": 9,
            "independentDirectorsPercentage": 55,
            "femaleDirectorsPercentage": 33,
            "ethicsTrainingCompletion": 96,
            "corruptionIncidents": 0,
        },
    }


def make_entries(company_id, year, values, verified=False):
    """[(category, metric_key, value), ...] -> metric entries."""
    return [
        {
            "company_id": company_id,
            "reporting_year": year,
            "category": category,
            "metric_key": key,
            "value": value,
            "verified": verified,
        }
        for category, key, value in values
    ]
