"""
Environmental Reading Sources
=============================

Providers of air quality, water security and green space readings.
"""

from .base import ReadingSource, CATEGORIES
from .nasa_simulator import SimulatedNASASource, MAJOR_CITIES

__all__ = ['ReadingSource', 'CATEGORIES', 'SimulatedNASASource', 'MAJOR_CITIES']
