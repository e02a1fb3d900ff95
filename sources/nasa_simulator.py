"""
Simulated NASA Earth Observation Source
Produces plausible air quality, water and vegetation readings for a
coordinate. Stands in for real Aura OMI / TEMPO / GRACE / SWOT / Landsat /
MODIS integrations and can be swapped for one behind ReadingSource.
"""

import math
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Any, Optional

import numpy as np

from database import utcnow
from sources.base import ReadingSource

# Major city coordinates and their typical AQI offsets
MAJOR_CITIES = [
    {"name": "San Francisco", "lat": 37.7749, "lon": -122.4194, "offset": 15},
    {"name": "Los Angeles", "lat": 34.0522, "lon": -118.2437, "offset": 35},
    {"name": "New York", "lat": 40.7128, "lon": -74.0060, "offset": 25},
    {"name": "Chicago", "lat": 41.8781, "lon": -87.6298, "offset": 20},
]

# TEMPO only observes North America
TEMPO_LAT_RANGE = (25, 70)
TEMPO_LON_RANGE = (-180, -40)
TEMPO_HOURS = 12

AQI_RANGE = (0, 500)
PERCENT_RANGE = (0, 100)
NDVI_RANGE = (-1, 1)


def _clamp(value, low, high):
    return max(low, min(high, value))


def _is_rush_hour(hour):
    return 7 <= hour <= 9 or 17 <= hour <= 19


def in_tempo_coverage(lat, lon):
    return (TEMPO_LAT_RANGE[0] <= lat <= TEMPO_LAT_RANGE[1]
            and TEMPO_LON_RANGE[0] <= lon <= TEMPO_LON_RANGE[1])


class SimulatedNASASource(ReadingSource):
    """Randomized reading generator shaped like the NASA instruments it replaces."""

    def __init__(self, seed: Optional[int] = None, clock=None):
        """
        Args:
            seed (int): optional seed for reproducible runs
            clock (callable): returns the current naive-UTC datetime
        """
        self.rng = np.random.default_rng(seed)
        self.clock = clock or utcnow
        # category fetches run on worker threads and share one generator
        self._lock = threading.Lock()

    def _uniform(self, low, high):
        with self._lock:
            return float(self.rng.uniform(low, high))

    # ------------------------------------------------------------------
    # ReadingSource
    # ------------------------------------------------------------------

    def fetch_air_quality(self, lat, lon, timestamp=None):
        return self.fetch_aura_omi(lat, lon, timestamp) + self.fetch_tempo(lat, lon, timestamp)

    def fetch_water_security(self, lat, lon, timestamp=None):
        return self.fetch_grace(lat, lon, timestamp) + self.fetch_swot(lat, lon, timestamp)

    def fetch_green_space(self, lat, lon, timestamp=None):
        return self.fetch_landsat(lat, lon, timestamp) + self.fetch_modis(lat, lon, timestamp)

    # ------------------------------------------------------------------
    # Instruments
    # ------------------------------------------------------------------

    def fetch_aura_omi(self, lat: float, lon: float,
                       timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Aura OMI: one global air quality reading."""
        try:
            observed = timestamp or self.clock()
            aqi = (self._base_aqi()
                   + self._time_variation(observed.hour)
                   + self._location_factor(lat, lon))
            return [{
                "latitude": lat,
                "longitude": lon,
                "aqi": round(_clamp(aqi, *AQI_RANGE), 2),
                "ozone": round(self._uniform(0.02, 0.10), 4),
                "no2": round(self._no2_level(), 2),
                "so2": round(self._uniform(2, 17), 2),
                "source": "nasa_omi",
                "timestamp": observed,
            }]
        except Exception as e:
            logging.error(f"Error fetching Aura OMI data: {e}")
            return []

    def fetch_tempo(self, lat: float, lon: float,
                    timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """TEMPO: hourly readings for the past 12 hours, North America only, oldest first."""
        try:
            if not in_tempo_coverage(lat, lon):
                return []

            top_of_hour = (timestamp or self.clock()).replace(minute=0, second=0, microsecond=0)
            readings = []
            for i in range(TEMPO_HOURS):
                observed = top_of_hour - timedelta(hours=i)
                hour = observed.hour
                aqi = self._base_aqi() + self._hourly_variation(hour)
                readings.append({
                    "latitude": lat,
                    "longitude": lon,
                    "aqi": round(_clamp(aqi, *AQI_RANGE), 2),
                    "pm25": round(max(0.0, self._uniform(5, 25) + self._hourly_variation(hour) / 10), 2),
                    "pm10": round(max(0.0, self._uniform(10, 50) + self._hourly_variation(hour) / 5), 2),
                    "no2": round(self._no2_level(hour), 2),
                    "source": "nasa_tempo",
                    "timestamp": observed,
                })
            readings.reverse()
            return readings
        except Exception as e:
            logging.error(f"Error fetching TEMPO data: {e}")
            return []

    def fetch_grace(self, lat: float, lon: float,
                    timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """GRACE: groundwater anomaly driven water stress and flood risk."""
        try:
            anomaly = self._uniform(-100, 100)
            stress = self._uniform(20, 60) + (abs(anomaly) / 2 if anomaly < 0 else -anomaly / 4)
            flood = self._terrain_flood_risk() + (anomaly / 2 if anomaly > 50 else 0)
            return [{
                "latitude": lat,
                "longitude": lon,
                "water_stress_level": round(_clamp(stress, *PERCENT_RANGE), 2),
                "groundwater_level": round(anomaly, 2),
                "precipitation_level": round(self._uniform(20, 170), 2),
                "flood_risk": round(_clamp(flood, *PERCENT_RANGE), 2),
                "source": "nasa_grace",
                "timestamp": timestamp or self.clock(),
            }]
        except Exception as e:
            logging.error(f"Error fetching GRACE data: {e}")
            return []

    def fetch_swot(self, lat: float, lon: float,
                   timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """SWOT: surface water level (meters vs normal) driven stress and flood risk."""
        try:
            water_level = self._uniform(-5, 5)
            if water_level < -2:
                stress = self._uniform(50, 80)
            elif water_level > 2:
                stress = self._uniform(10, 30)
            else:
                stress = self._uniform(30, 70)
            flood = self._terrain_flood_risk() + (water_level * 10 if water_level > 0 else 0)
            return [{
                "latitude": lat,
                "longitude": lon,
                "water_stress_level": round(_clamp(stress, *PERCENT_RANGE), 2),
                "flood_risk": round(_clamp(flood, *PERCENT_RANGE), 2),
                "source": "nasa_swot",
                "timestamp": timestamp or self.clock(),
            }]
        except Exception as e:
            logging.error(f"Error fetching SWOT data: {e}")
            return []

    def fetch_landsat(self, lat: float, lon: float,
                      timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Landsat: NDVI, vegetation coverage and green space type."""
        try:
            observed = timestamp or self.clock()
            ndvi = self._ndvi(observed.month)
            return [{
                "latitude": lat,
                "longitude": lon,
                "ndvi": round(ndvi, 4),
                "vegetation_coverage": round(self._vegetation_coverage(ndvi), 2),
                "green_space_type": classify_green_space(ndvi),
                "source": "nasa_landsat",
                "timestamp": observed,
            }]
        except Exception as e:
            logging.error(f"Error fetching Landsat data: {e}")
            return []

    def fetch_modis(self, lat: float, lon: float,
                    timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """MODIS: coarser, more frequent NDVI with a little jitter relative to Landsat."""
        try:
            observed = timestamp or self.clock()
            ndvi = _clamp(self._ndvi(observed.month) + self._uniform(-0.05, 0.05), *NDVI_RANGE)
            return [{
                "latitude": lat,
                "longitude": lon,
                "ndvi": round(ndvi, 4),
                "vegetation_coverage": round(self._vegetation_coverage(ndvi), 2),
                "source": "nasa_modis",
                "timestamp": observed,
            }]
        except Exception as e:
            logging.error(f"Error fetching MODIS data: {e}")
            return []

    # ------------------------------------------------------------------
    # Simulation heuristics
    # ------------------------------------------------------------------

    def _base_aqi(self):
        urban = self._uniform(0, 15)
        industrial = self._uniform(0, 10)
        geographic = self._uniform(-4, 4)
        return 30 + urban + industrial + geographic

    def _time_variation(self, hour):
        if _is_rush_hour(hour):
            return self._uniform(10, 30)
        return self._uniform(-5, 5)

    def _hourly_variation(self, hour):
        if _is_rush_hour(hour):
            return self._uniform(10, 35)
        if hour >= 22 or hour <= 5:
            return self._uniform(-10, -5)
        return self._uniform(-5, 5)

    def _location_factor(self, lat, lon):
        """Offset of the nearest major city, decaying exponentially with distance."""
        nearest = min(MAJOR_CITIES, key=lambda c: math.hypot(lat - c["lat"], lon - c["lon"]))
        distance = math.hypot(lat - nearest["lat"], lon - nearest["lon"])
        return nearest["offset"] * math.exp(-distance * 10)

    def _no2_level(self, hour=None):
        base = self._uniform(10, 40)
        return base * 1.5 if hour is not None and _is_rush_hour(hour) else base

    def _terrain_flood_risk(self):
        return self._uniform(10, 40)

    def _ndvi(self, month):
        urban_density = self._uniform(0, 0.3)
        base = self._uniform(0.2, 0.8)
        return _clamp(base - urban_density + self._seasonal_vegetation(month), *NDVI_RANGE)

    def _seasonal_vegetation(self, month):
        # northern hemisphere growing season
        if 3 <= month <= 6:
            return self._uniform(0, 0.2)
        if 7 <= month <= 9:
            return self._uniform(0.1, 0.2)
        if 10 <= month <= 12:
            return -self._uniform(0, 0.2)
        return -self._uniform(0, 0.3)

    def _vegetation_coverage(self, ndvi):
        if ndvi < 0.1:
            coverage = self._uniform(0, 5)
        elif ndvi < 0.3:
            coverage = self._uniform(5, 30)
        elif ndvi < 0.6:
            coverage = self._uniform(30, 70)
        else:
            coverage = self._uniform(70, 100)
        return _clamp(coverage, *PERCENT_RANGE)


def classify_green_space(ndvi):
    if ndvi < 0.2:
        return "urban_sparse"
    if ndvi < 0.4:
        return "urban_green"
    if ndvi < 0.6:
        return "park"
    return "forest"
