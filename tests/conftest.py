import sys
from pathlib import Path

import pytest

# Add root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import create_app
from database import init_db, utcnow
from storage import EnvironmentalStorage
from sources import ReadingSource
from recommendation_engine import RecommendationProvider


class FixedReadingSource(ReadingSource):
    """Returns the same readings for every coordinate it is asked about."""

    def __init__(self, aqi=42.0, water_stress=35.0, flood_risk=20.0, ndvi=0.5, coverage=55.0):
        self.aqi = aqi
        self.water_stress = water_stress
        self.flood_risk = flood_risk
        self.ndvi = ndvi
        self.coverage = coverage

    def fetch_air_quality(self, lat, lon, timestamp=None):
        return [{"latitude": lat, "longitude": lon, "aqi": self.aqi, "pm25": 12.0,
                 "source": "local", "timestamp": timestamp or utcnow()}]

    def fetch_water_security(self, lat, lon, timestamp=None):
        return [{"latitude": lat, "longitude": lon, "water_stress_level": self.water_stress,
                 "flood_risk": self.flood_risk, "source": "local_rainfall",
                 "timestamp": timestamp or utcnow()}]

    def fetch_green_space(self, lat, lon, timestamp=None):
        return [{"latitude": lat, "longitude": lon, "ndvi": self.ndvi,
                 "vegetation_coverage": self.coverage, "green_space_type": "park",
                 "source": "local", "timestamp": timestamp or utcnow()}]


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def storage(database_url):
    return EnvironmentalStorage(init_db(database_url))


@pytest.fixture
def reading_source():
    return FixedReadingSource()


@pytest.fixture
def app(database_url, reading_source):
    app = create_app({
        "TESTING": True,
        "DATABASE_URL": database_url,
        "READING_SOURCE": reading_source,
        "RECOMMENDATION_PROVIDER": RecommendationProvider(),
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_storage(app):
    return app.extensions["storage"]
