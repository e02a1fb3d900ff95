"""
Alert Service
Compares recent environmental readings against static thresholds and builds
alert records. Categories are evaluated independently and every rule can
fire on its own.
"""

import logging
from typing import Dict, Any, List, Optional

from config import AlertThresholds
from livability_calculator import green_coverage
from recommendation_engine import RecommendationProvider


def _severity(value):
    return max(0.0, min(100.0, value))


class AlertService:
    """Threshold-based alert evaluation."""

    def __init__(self, thresholds: AlertThresholds = None,
                 recommender: Optional[RecommendationProvider] = None):
        self.thresholds = thresholds or AlertThresholds()
        self.recommender = recommender or RecommendationProvider()

    def get_thresholds(self) -> Dict[str, Any]:
        return self.thresholds.to_dict()

    def generate_alerts(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Analyze environmental data and generate alerts.

        Args:
            data (dict): air_quality / water_security / green_space reading
                sequences (most recent first) and optional location,
                latitude, longitude context

        Returns:
            list: alert dicts ready for EnvironmentalStorage.insert_alert
        """
        alerts = []
        if data.get("air_quality"):
            alerts.extend(self.analyze_air_quality(data["air_quality"], data))
        if data.get("water_security"):
            alerts.extend(self.analyze_water_security(data["water_security"], data))
        if data.get("green_space"):
            alerts.extend(self.analyze_green_space(data["green_space"], data))
        logging.info(f"Generated {len(alerts)} alerts")
        return alerts

    def analyze_air_quality(self, readings, context=None) -> List[Dict[str, Any]]:
        limits = self.thresholds.air_quality
        latest = readings[0]
        aqi = latest.aqi
        alerts = []

        if aqi >= limits.danger:
            alerts.append(self._alert(
                "danger", "air_quality", latest, context,
                title="Unhealthy Air Quality Detected",
                message=f"AQI level of {aqi:.0f} exceeds safe limits. "
                        "Immediate action recommended for sensitive individuals.",
                severity=aqi / limits.danger * 70,
                recommendations=self._recommend("air_quality", "danger", latest),
            ))
        elif aqi >= limits.warning:
            alerts.append(self._alert(
                "warning", "air_quality", latest, context,
                title="Moderate Air Quality Alert",
                message=f"AQI level of {aqi:.0f} may affect sensitive individuals. "
                        "Consider limiting outdoor activities.",
                severity=aqi / limits.warning * 50,
                recommendations=self._recommend("air_quality", "warning", latest),
            ))

        if len(readings) >= 2:
            change = aqi - readings[1].aqi
            if change > self.thresholds.rapid_aqi_increase:
                alerts.append(self._alert(
                    "warning", "air_quality", latest, context,
                    title="Rapid Air Quality Deterioration",
                    message=f"Air quality index increased by {change:.0f} points in the last reading. "
                            "Monitor conditions closely.",
                    severity=change / self.thresholds.rapid_aqi_increase * 40,
                    recommendations={
                        "trend": "deteriorating",
                        "actions": ["Monitor air quality frequently", "Prepare for potential restrictions"],
                    },
                ))

        return alerts

    def analyze_water_security(self, readings, context=None) -> List[Dict[str, Any]]:
        stress_limits = self.thresholds.water_security
        flood_limits = self.thresholds.flood_risk
        latest = readings[0]
        stress = latest.water_stress_level
        alerts = []

        if stress >= stress_limits.danger:
            alerts.append(self._alert(
                "danger", "water_security", latest, context,
                title="Critical Water Stress Level",
                message=f"Water stress at {stress:.1f}% indicates severe water scarcity risk.",
                severity=stress / 100 * 80,
                recommendations=self._recommend("water_security", "danger", latest),
            ))
        elif stress >= stress_limits.warning:
            alerts.append(self._alert(
                "warning", "water_security", latest, context,
                title="Elevated Water Stress",
                message=f"Water stress level of {stress:.1f}% requires conservation measures.",
                severity=stress / 100 * 60,
                recommendations=self._recommend("water_security", "warning", latest),
            ))

        flood = latest.flood_risk
        if flood is not None and flood >= flood_limits.danger:
            alerts.append(self._alert(
                "danger", "water_security", latest, context,
                title="High Flood Risk Alert",
                message=f"Flood risk at {flood:.1f}% indicates potential flooding conditions.",
                severity=flood / 100 * 75,
                recommendations={
                    "emergency": True,
                    "actions": ["Monitor weather conditions", "Prepare evacuation routes", "Secure property"],
                },
            ))
        elif flood is not None and flood >= flood_limits.warning:
            alerts.append(self._alert(
                "warning", "water_security", latest, context,
                title="Moderate Flood Risk",
                message=f"Flood risk at {flood:.1f}% warrants preparation measures.",
                severity=flood / 100 * 50,
                recommendations={
                    "preparedness": True,
                    "actions": ["Review emergency plans", "Check drainage systems"],
                },
            ))

        return alerts

    def analyze_green_space(self, readings, context=None) -> List[Dict[str, Any]]:
        limits = self.thresholds.green_space
        latest = readings[0]
        coverage = green_coverage(latest)
        alerts = []

        if coverage <= limits.danger:
            alerts.append(self._alert(
                "danger", "green_space", latest, context,
                title="Critical Green Space Deficiency",
                message=f"Vegetation coverage at {coverage:.1f}% is critically low "
                        "and affects air quality and livability.",
                severity=(limits.danger - coverage) / limits.danger * 70,
                recommendations=self._recommend("green_space", "danger", latest),
            ))
        elif coverage <= limits.warning:
            alerts.append(self._alert(
                "warning", "green_space", latest, context,
                title="Low Green Space Coverage",
                message=f"Vegetation coverage at {coverage:.1f}% is below recommended levels for urban areas.",
                severity=(limits.warning - coverage) / limits.warning * 50,
                recommendations=self._recommend("green_space", "warning", latest),
            ))

        return alerts

    def _recommend(self, category, severity, reading):
        metrics = {
            name: getattr(reading, name, None)
            for name in ("aqi", "pm25", "ozone", "no2", "water_stress_level", "groundwater_level",
                         "flood_risk", "ndvi", "vegetation_coverage", "green_space_type")
        }
        return self.recommender.recommend(category, severity, metrics)

    def _alert(self, alert_type, category, reading, context, title, message, severity, recommendations):
        context = context or {}
        latitude = context.get("latitude")
        longitude = context.get("longitude")
        if latitude is None:
            latitude = reading.latitude
        if longitude is None:
            longitude = reading.longitude
        location = context.get("location") or f"{reading.latitude:.3f}, {reading.longitude:.3f}"

        return {
            "alert_type": alert_type,
            "category": category,
            "title": title,
            "message": message,
            "latitude": latitude,
            "longitude": longitude,
            "location": location,
            "severity": _severity(severity),
            "is_active": True,
            "actionable": True,
            "recommendations": recommendations,
        }
