"""
Reading Source Interface
Every environmental data provider (simulated or real) implements one fetch
method per category; callers never depend on which one they have.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Any, Optional
from datetime import datetime

CATEGORIES = ("air_quality", "water_security", "green_space")


class ReadingSource(ABC):
    """Capability interface for environmental reading providers."""

    max_workers = 3

    @abstractmethod
    def fetch_air_quality(self, lat: float, lon: float,
                          timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Air quality readings (aqi plus optional pollutant levels)."""

    @abstractmethod
    def fetch_water_security(self, lat: float, lon: float,
                             timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Water security readings (water_stress_level plus optional flood risk etc.)."""

    @abstractmethod
    def fetch_green_space(self, lat: float, lon: float,
                          timestamp: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Green space readings (ndvi plus optional vegetation coverage)."""

    def fetch_all(self, lat: float, lon: float,
                  timestamp: Optional[datetime] = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Fetch every category concurrently.

        A category that fails contributes an empty list instead of aborting
        the whole fetch.
        """
        fetchers = {
            "air_quality": self.fetch_air_quality,
            "water_security": self.fetch_water_security,
            "green_space": self.fetch_green_space,
        }
        results = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                category: executor.submit(fetch, lat, lon, timestamp)
                for category, fetch in fetchers.items()
            }
            for category, future in futures.items():
                try:
                    results[category] = future.result()
                except Exception as e:
                    logging.error(f"Error fetching {category} readings for ({lat}, {lon}): {e}")
                    results[category] = []
        return results
