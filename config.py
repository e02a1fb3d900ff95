"""
Configuration Module
This module handles application configuration, logging setup and the
immutable scoring/alerting settings shared by the services.
"""

import os
import math
import logging
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
_handlers = [logging.StreamHandler()]
if os.getenv("LOG_FILE"):
    _handlers.append(logging.FileHandler(os.getenv("LOG_FILE")))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s %(levelname)s: %(message)s',
    handlers=_handlers
)


def env_number(name, default, cast=float):
    """Numeric env setting; an unparseable value is logged and the default used."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logging.warning(f"Invalid {name}={raw!r}; using {default}")
        return default


class Config:
    """Application configuration class."""

    # Flask settings
    DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"
    HOST = '0.0.0.0'
    PORT = env_number("PORT", 8001, int)
    THREADED = True

    # Database settings
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///environmental.db")

    # Gemini settings
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    RECOMMENDATION_TIMEOUT = env_number("RECOMMENDATION_TIMEOUT", 10.0)
    TEMPERATURE = 0.2

    # Spatial query settings (degrees)
    READING_RADIUS = 0.1
    SCORE_RADIUS = 0.01

    # Time windows (hours)
    SCORE_WINDOW_HOURS = 24
    ALERT_WINDOW_HOURS = 6

    # Dashboard settings
    DASHBOARD_ALERT_LIMIT = 10
    DASHBOARD_HISTORY_LIMIT = 24

    # Worker pool for fan-out queries
    MAX_WORKERS = 6

    @classmethod
    def validate(cls):
        """
        Check settings at startup.

        A missing GEMINI_API_KEY is only logged (static recommendations are
        used instead). A non-positive RECOMMENDATION_TIMEOUT raises ValueError.
        """
        if not cls.GEMINI_API_KEY:
            logging.warning("GEMINI_API_KEY not set; static recommendations will be used")
        if cls.RECOMMENDATION_TIMEOUT <= 0:
            raise ValueError("RECOMMENDATION_TIMEOUT must be positive")


@dataclass(frozen=True)
class ScoringWeights:
    """Livability weights. Fixed so scores stay comparable across locations."""
    air_quality: float = 0.40
    water_security: float = 0.35
    green_space: float = 0.25

    def __post_init__(self):
        total = self.air_quality + self.water_security + self.green_space
        if not math.isclose(total, 1.0):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")


@dataclass(frozen=True)
class LivabilityConfig:
    """
    Step tables for normalizing raw metrics.

    Each band is (limit, score). Air quality and water security are
    "lower is better" (value <= limit); green space is "higher is better"
    (value >= limit). The floor applies when no band matches.
    """
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    air_quality_bands: tuple = ((0, 100), (50, 85), (100, 60), (200, 35), (300, 15))
    air_quality_floor: int = 5
    water_security_bands: tuple = ((0, 100), (20, 80), (40, 60), (60, 40), (80, 20))
    water_security_floor: int = 10
    green_space_bands: tuple = ((80, 100), (60, 80), (40, 60), (20, 40), (10, 20))
    green_space_floor: int = 10
    category_bands: tuple = (
        (85, "Excellent", "Outstanding environmental conditions", "green"),
        (70, "Good", "Generally favorable environmental conditions", "lightgreen"),
        (55, "Moderate", "Acceptable environmental conditions with some concerns", "yellow"),
        (40, "Poor", "Environmental conditions need improvement", "orange"),
    )
    lowest_category: tuple = ("Very Poor", "Significant environmental concerns requiring action", "red")
    recommendation_threshold: int = 60
    priority_threshold: int = 50


@dataclass(frozen=True)
class Threshold:
    warning: float
    danger: float


@dataclass(frozen=True)
class AlertThresholds:
    """Static alert thresholds. Green space alerts fire at or *below* the limits."""
    air_quality: Threshold = field(default_factory=lambda: Threshold(warning=100, danger=150))
    water_security: Threshold = field(default_factory=lambda: Threshold(warning=60, danger=80))
    green_space: Threshold = field(default_factory=lambda: Threshold(warning=30, danger=15))
    flood_risk: Threshold = field(default_factory=lambda: Threshold(warning=40, danger=70))
    rapid_aqi_increase: float = 50

    def to_dict(self):
        return asdict(self)
