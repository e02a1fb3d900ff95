# database.py
import datetime
import uuid

from sqlalchemy import create_engine, inspect, Column, String, Text, Float, Boolean, DateTime, JSON
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def utcnow():
    """Naive UTC timestamp; SQLite drops tzinfo on the way in."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _new_id():
    return str(uuid.uuid4())


class SerializableMixin:
    """Row -> JSON-ready dict keyed by column name."""

    def to_dict(self):
        data = {}
        for attr in inspect(self).mapper.column_attrs:
            value = getattr(self, attr.key)
            if isinstance(value, datetime.datetime):
                value = value.isoformat()
            data[attr.columns[0].name] = value
        return data


class AirQualityData(SerializableMixin, Base):
    __tablename__ = 'air_quality_data'
    id = Column(String(36), primary_key=True, default=_new_id)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    aqi = Column(Float, nullable=False)
    pm25 = Column(Float)
    pm10 = Column(Float)
    ozone = Column(Float)
    no2 = Column(Float)
    so2 = Column(Float)
    source = Column(String(32), nullable=False)  # nasa_omi, nasa_tempo, local
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    reading_metadata = Column("metadata", JSON)


class WaterSecurityData(SerializableMixin, Base):
    __tablename__ = 'water_security_data'
    id = Column(String(36), primary_key=True, default=_new_id)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    water_stress_level = Column(Float, nullable=False)  # 0-100
    precipitation_level = Column(Float)
    groundwater_level = Column(Float)
    flood_risk = Column(Float)  # 0-100
    source = Column(String(32), nullable=False)  # nasa_grace, nasa_swot, local_rainfall
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    reading_metadata = Column("metadata", JSON)


class GreenSpaceData(SerializableMixin, Base):
    __tablename__ = 'green_space_data'
    id = Column(String(36), primary_key=True, default=_new_id)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    ndvi = Column(Float, nullable=False)
    vegetation_coverage = Column(Float)  # percentage
    green_space_type = Column(String(32))  # urban_sparse, urban_green, park, forest
    source = Column(String(32), nullable=False)  # nasa_landsat, nasa_modis, local
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    reading_metadata = Column("metadata", JSON)


class LivabilityScore(SerializableMixin, Base):
    __tablename__ = 'livability_scores'
    id = Column(String(36), primary_key=True, default=_new_id)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    air_quality_score = Column(Float, nullable=False)
    water_security_score = Column(Float, nullable=False)
    green_space_score = Column(Float, nullable=False)
    overall_score = Column(Float, nullable=False)
    location = Column(Text)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)


class EnvironmentalAlert(SerializableMixin, Base):
    __tablename__ = 'environmental_alerts'
    id = Column(String(36), primary_key=True, default=_new_id)
    alert_type = Column("type", String(16), nullable=False)  # info, warning, danger
    category = Column(String(32), nullable=False)  # air_quality, water_security, green_space
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    location = Column(Text)
    severity = Column(Float, nullable=False)  # 0-100
    is_active = Column(Boolean, nullable=False, default=True)
    actionable = Column(Boolean, nullable=False, default=False)
    recommendations = Column(JSON)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)


def init_db(database_url):
    """
    Create the engine, make sure every table exists and return a session factory.

    Sessions keep attributes loaded after commit so rows can be handed to
    callers once the session is closed.
    """
    engine_kwargs = {}
    if database_url.startswith("sqlite"):
        # worker threads reuse pooled connections
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
