#!/usr/bin/env python3
"""
Seed the database with simulated readings (and optionally livability scores)
for one coordinate or for the built-in major cities.
"""
import argparse
import logging

from config import Config
from database import init_db
from storage import EnvironmentalStorage
from sources import SimulatedNASASource, MAJOR_CITIES
from livability_calculator import LivabilityCalculator, InsufficientDataError

logger = logging.getLogger(__name__)


def seed_location(storage, source, lat, lon, calculator=None, label=None):
    """
    Fetch and store readings for one coordinate.

    Returns:
        dict: reading counts per category, plus "overall_score" when scored
    """
    stored = storage.store_readings(source.fetch_all(lat, lon))
    summary = {category: len(rows) for category, rows in stored.items()}

    if calculator is not None:
        env_data = storage.get_recent_environmental_data(lat, lon, Config.SCORE_WINDOW_HOURS)
        try:
            result = calculator.calculate_livability_score(calculator.metrics_from_readings(env_data))
        except InsufficientDataError as e:
            logger.warning(f"Skipping score for ({lat}, {lon}): {e}")
            return summary
        storage.insert_livability_score({
            "latitude": lat,
            "longitude": lon,
            "air_quality_score": result.air_quality_score,
            "water_security_score": result.water_security_score,
            "green_space_score": result.green_space_score,
            "overall_score": result.overall_score,
            "location": label or f"{lat:.3f}, {lon:.3f}",
        })
        summary["overall_score"] = result.overall_score

    return summary


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--lat', type=float, help='latitude of a single location')
    parser.add_argument('--lon', type=float, help='longitude of a single location')
    parser.add_argument('--label', help='location label stored with the score')
    parser.add_argument('--score', action='store_true', help='also compute and store livability scores')
    parser.add_argument('--seed', type=int, help='random seed for reproducible readings')
    parser.add_argument('--database-url', default=Config.DATABASE_URL)
    args = parser.parse_args(argv)

    if (args.lat is None) != (args.lon is None):
        parser.error('--lat and --lon must be given together')

    storage = EnvironmentalStorage(init_db(args.database_url))
    source = SimulatedNASASource(seed=args.seed)
    calculator = LivabilityCalculator() if args.score else None

    if args.lat is not None:
        targets = [(args.label, args.lat, args.lon)]
    else:
        targets = [(city["name"], city["lat"], city["lon"]) for city in MAJOR_CITIES]

    results = {}
    for label, lat, lon in targets:
        summary = seed_location(storage, source, lat, lon, calculator, label)
        name = label or f"{lat:.3f}, {lon:.3f}"
        logger.info(f"✅ {name}: {summary}")
        results[name] = summary
    return results


if __name__ == '__main__':
    main()
