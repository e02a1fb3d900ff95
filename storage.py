"""
Storage Module
Persistence gateway for environmental readings, livability scores and alerts.
Readings and scores are append-only; alerts can only be dismissed.
"""

import datetime
import logging
from concurrent.futures import ThreadPoolExecutor

from database import (
    AirQualityData,
    WaterSecurityData,
    GreenSpaceData,
    LivabilityScore,
    EnvironmentalAlert,
    utcnow,
)

READING_MODELS = {
    "air_quality": AirQualityData,
    "water_security": WaterSecurityData,
    "green_space": GreenSpaceData,
}


class EnvironmentalStorage:
    """Stores and queries environmental records through a SQLAlchemy session factory."""

    def __init__(self, session_factory, max_workers=3):
        self.Session = session_factory
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Inserts
    # ------------------------------------------------------------------

    def _insert(self, model, data):
        with self.Session() as session:
            row = model(**data)
            session.add(row)
            session.commit()
            return row

    def insert_air_quality(self, data):
        return self._insert(AirQualityData, _reading_columns(data))

    def insert_water_security(self, data):
        return self._insert(WaterSecurityData, _reading_columns(data))

    def insert_green_space(self, data):
        return self._insert(GreenSpaceData, _reading_columns(data))

    def insert_livability_score(self, data):
        return self._insert(LivabilityScore, data)

    def insert_alert(self, data):
        return self._insert(EnvironmentalAlert, data)

    def store_readings(self, readings):
        """
        Persist a reading bundle as returned by ReadingSource.fetch_all.

        Args:
            readings (dict): category -> list of reading dicts

        Returns:
            dict: category -> list of stored rows, in input order
        """
        stored = {category: [] for category in READING_MODELS}
        with self.Session() as session:
            for category, model in READING_MODELS.items():
                for reading in readings.get(category) or []:
                    row = model(**_reading_columns(reading))
                    session.add(row)
                    stored[category].append(row)
            session.commit()
        logging.info(
            "Stored readings: %s",
            ", ".join(f"{k}={len(v)}" for k, v in stored.items())
        )
        return stored

    # ------------------------------------------------------------------
    # Location queries
    # ------------------------------------------------------------------

    def _by_location(self, model, lat, lon, radius, limit=None):
        with self.Session() as session:
            query = (
                session.query(model)
                .filter(
                    model.latitude >= lat - radius,
                    model.latitude <= lat + radius,
                    model.longitude >= lon - radius,
                    model.longitude <= lon + radius,
                )
                .order_by(model.timestamp.desc())
            )
            if limit:
                query = query.limit(limit)
            return query.all()

    def get_air_quality_by_location(self, lat, lon, radius=0.1):
        return self._by_location(AirQualityData, lat, lon, radius)

    def get_water_security_by_location(self, lat, lon, radius=0.1):
        return self._by_location(WaterSecurityData, lat, lon, radius)

    def get_green_space_by_location(self, lat, lon, radius=0.1):
        return self._by_location(GreenSpaceData, lat, lon, radius)

    def get_livability_score_by_location(self, lat, lon, radius=0.01):
        """Latest score near (lat, lon). Scores use a tighter box than readings."""
        rows = self._by_location(LivabilityScore, lat, lon, radius, limit=1)
        return rows[0] if rows else None

    def get_recent_environmental_data(self, lat, lon, hours=24, radius=0.1):
        """
        Readings around (lat, lon) no older than `hours`, most recent first.

        The three category queries run concurrently; the cutoff is applied
        after the bounding-box query.
        """
        cutoff = utcnow() - datetime.timedelta(hours=hours)
        queries = {
            "air_quality": self.get_air_quality_by_location,
            "water_security": self.get_water_security_by_location,
            "green_space": self.get_green_space_by_location,
        }
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                category: executor.submit(query, lat, lon, radius)
                for category, query in queries.items()
            }
            results = {category: future.result() for category, future in futures.items()}

        return {
            category: [row for row in rows if row.timestamp >= cutoff]
            for category, rows in results.items()
        }

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def get_active_alerts(self, limit=None):
        with self.Session() as session:
            query = (
                session.query(EnvironmentalAlert)
                .filter(EnvironmentalAlert.is_active.is_(True))
                .order_by(EnvironmentalAlert.severity.desc(), EnvironmentalAlert.timestamp.desc())
            )
            if limit:
                query = query.limit(limit)
            return query.all()

    def get_alert(self, alert_id):
        with self.Session() as session:
            return session.get(EnvironmentalAlert, alert_id)

    def dismiss_alert(self, alert_id):
        """
        Deactivate an alert.

        Returns:
            EnvironmentalAlert or None: the updated alert, None if the id is unknown
        """
        with self.Session() as session:
            alert = session.get(EnvironmentalAlert, alert_id)
            if alert is None:
                return None
            alert.is_active = False
            session.commit()
            logging.info(f"Dismissed alert {alert_id}")
            return alert


def _reading_columns(reading):
    """Map a source reading dict onto model columns; timestamps are stored as naive UTC."""
    data = dict(reading)
    observed_at = data.pop("timestamp", None)
    metadata = dict(data.pop("metadata", None) or {})
    if isinstance(observed_at, datetime.datetime):
        if observed_at.tzinfo is not None:
            observed_at = observed_at.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        data["timestamp"] = observed_at
        metadata.setdefault("observed_at", observed_at.isoformat())
    data["reading_metadata"] = metadata
    return data
