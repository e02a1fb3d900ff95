"""
Livability Calculator
Combines air quality, water security and green space metrics into a single
0-100 livability score.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Any, List

from config import LivabilityConfig

AIR_QUALITY_RANGE = (0, 500)
WATER_STRESS_RANGE = (0, 100)
GREEN_COVERAGE_RANGE = (0, 100)


class InsufficientDataError(Exception):
    """Raised when a category has no readings to score."""


@dataclass
class LivabilityResult:
    air_quality_score: int
    water_security_score: int
    green_space_score: int
    overall_score: int
    factors: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "air_quality_score": self.air_quality_score,
            "water_security_score": self.water_security_score,
            "green_space_score": self.green_space_score,
            "overall_score": self.overall_score,
            "factors": self.factors,
        }


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def _bounded(value, bounds):
    """Clamp into bounds; None for NaN/inf so callers can take the worst bucket."""
    if value is None or not math.isfinite(value):
        return None
    low, high = bounds
    return max(low, min(high, value))


def green_coverage(reading):
    """Vegetation coverage in percent, falling back to NDVI x 100."""
    if reading.vegetation_coverage is not None:
        return reading.vegetation_coverage
    return reading.ndvi * 100


class LivabilityCalculator:
    """Weighted livability scoring over step-normalized metrics."""

    def __init__(self, config: LivabilityConfig = None):
        self.config = config or LivabilityConfig()
        self.weights = self.config.weights

    def calculate_livability_score(self, metrics: Dict[str, float]) -> LivabilityResult:
        """
        Calculate livability score from environmental metrics.

        Args:
            metrics (dict): air_quality (AQI), water_security (stress %),
                green_space (vegetation coverage %)

        Returns:
            LivabilityResult: sub-scores, overall score and per-factor breakdown
        """
        air_score = self.normalize_air_quality(metrics["air_quality"])
        water_score = self.normalize_water_security(metrics["water_security"])
        green_score = self.normalize_green_space(metrics["green_space"])

        air_contribution = air_score * self.weights.air_quality
        water_contribution = water_score * self.weights.water_security
        green_contribution = green_score * self.weights.green_space

        return LivabilityResult(
            air_quality_score=air_score,
            water_security_score=water_score,
            green_space_score=green_score,
            overall_score=_round_half_up(air_contribution + water_contribution + green_contribution),
            factors={
                "air_quality": {
                    "weight": self.weights.air_quality,
                    "normalized_value": air_score,
                    "contribution": air_contribution,
                },
                "water_security": {
                    "weight": self.weights.water_security,
                    "normalized_value": water_score,
                    "contribution": water_contribution,
                },
                "green_space": {
                    "weight": self.weights.green_space,
                    "normalized_value": green_score,
                    "contribution": green_contribution,
                },
            },
        )

    def normalize_air_quality(self, aqi: float) -> int:
        """Lower AQI is better."""
        aqi = _bounded(aqi, AIR_QUALITY_RANGE)
        if aqi is None:
            return self.config.air_quality_floor
        for limit, score in self.config.air_quality_bands:
            if aqi <= limit:
                return score
        return self.config.air_quality_floor

    def normalize_water_security(self, stress_level: float) -> int:
        """Lower water stress is better."""
        stress_level = _bounded(stress_level, WATER_STRESS_RANGE)
        if stress_level is None:
            return self.config.water_security_floor
        for limit, score in self.config.water_security_bands:
            if stress_level <= limit:
                return score
        return self.config.water_security_floor

    def normalize_green_space(self, coverage: float) -> int:
        """Higher vegetation coverage is better."""
        coverage = _bounded(coverage, GREEN_COVERAGE_RANGE)
        if coverage is None:
            return self.config.green_space_floor
        for limit, score in self.config.green_space_bands:
            if coverage >= limit:
                return score
        return self.config.green_space_floor

    def get_livability_category(self, score: float) -> Dict[str, str]:
        for minimum, category, description, color in self.config.category_bands:
            if score >= minimum:
                return {"category": category, "description": description, "color": color}
        category, description, color = self.config.lowest_category
        return {"category": category, "description": description, "color": color}

    def generate_recommendations(self, result: LivabilityResult) -> List[str]:
        """Rule-based recommendations for weak sub-scores."""
        threshold = self.config.recommendation_threshold
        recommendations = []

        if result.air_quality_score < threshold:
            recommendations.extend([
                'Implement traffic reduction measures in high-pollution areas',
                'Increase monitoring of industrial emissions',
                'Promote public transportation and electric vehicle adoption',
            ])

        if result.water_security_score < threshold:
            recommendations.extend([
                'Improve water conservation and efficiency programs',
                'Invest in flood protection infrastructure',
                'Enhance groundwater monitoring and management',
            ])

        if result.green_space_score < threshold:
            recommendations.extend([
                'Expand urban parks and green corridors',
                'Implement green building requirements',
                'Create community gardens and green roofs',
                'Protect existing natural areas from development',
            ])

        factors = [
            ('air quality', result.air_quality_score),
            ('water security', result.water_security_score),
            ('green space', result.green_space_score),
        ]
        # min() keeps the first of equal scores
        weakest_name, weakest_score = min(factors, key=lambda f: f[1])
        if weakest_score < self.config.priority_threshold:
            recommendations.append(f'Priority focus needed on {weakest_name} improvements')

        return recommendations

    def calculate_regional_livability(self, locations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Score and rank several named locations.

        Args:
            locations (list): [{"name": str, "metrics": {...}}, ...]

        Returns:
            list: [{"name", "result", "ranking"}] best first; ties keep input order
        """
        results = [
            {"name": location["name"], "result": self.calculate_livability_score(location["metrics"])}
            for location in locations
        ]
        results.sort(key=lambda r: r["result"].overall_score, reverse=True)
        for index, entry in enumerate(results, start=1):
            entry["ranking"] = index
        return results

    def metrics_from_readings(self, env_data: Dict[str, list]) -> Dict[str, float]:
        """
        Average recent readings into scorer metrics.

        Raises:
            InsufficientDataError: if any category has no readings
        """
        air = env_data.get("air_quality") or []
        water = env_data.get("water_security") or []
        green = env_data.get("green_space") or []
        if not air or not water or not green:
            raise InsufficientDataError("Insufficient environmental data for livability calculation")

        return {
            "air_quality": sum(r.aqi for r in air) / len(air),
            "water_security": sum(r.water_stress_level for r in water) / len(water),
            "green_space": sum(green_coverage(r) for r in green) / len(green),
        }
