import pytest

from app import create_app
from agroscore.catalogs import DEPTHS


@pytest.fixture
def app():
    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ph_only_ideals():
    return {"ph": {"min": 6.0, "max": 7.5, "ideal": 6.8, "weight": 20}}


@pytest.fixture
def neutral_soil_by_depth():
    values = {
        "ph": 7.0, "organic_carbon": 2.0, "nitrogen": 0.2,
        "cec": 15.0, "ecec": 12.0,
        "sand": 40.0, "silt": 35.0, "clay": 25.0, "bulk_density": 1.3,
    }
    return {depth: dict(values) for depth in DEPTHS}


@pytest.fixture
def make_day():
    def _make(conditions, temperature=25.0, date="2026-10-20"):
        return {
            "date": date,
            "temperature": temperature,
            "humidity": 60,
            "wind_speed": 3.0,
            "conditions": conditions,
        }
    return _make
