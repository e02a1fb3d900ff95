from dataclasses import FrozenInstanceError

import pytest

from alert_service import AlertService
from config import AlertThresholds, Threshold
from database import AirQualityData, WaterSecurityData, GreenSpaceData
from recommendation_engine import FALLBACK_RECOMMENDATIONS


def air(aqi, lat=10.0, lon=20.0):
    return AirQualityData(latitude=lat, longitude=lon, aqi=aqi, source="test")


def water(stress, flood=None, lat=10.0, lon=20.0):
    return WaterSecurityData(latitude=lat, longitude=lon, water_stress_level=stress,
                             flood_risk=flood, source="test")


def green(ndvi, coverage=None, lat=10.0, lon=20.0):
    return GreenSpaceData(latitude=lat, longitude=lon, ndvi=ndvi,
                          vegetation_coverage=coverage, source="test")


@pytest.fixture
def service():
    return AlertService()


class RecordingRecommender:
    def __init__(self):
        self.calls = []

    def recommend(self, category, severity, metrics):
        self.calls.append((category, severity, metrics))
        return {"called": True}


class TestAirQualityAlerts:
    def test_danger_and_rapid_increase(self, service):
        alerts = service.generate_alerts({"air_quality": [air(160), air(90)]})
        assert len(alerts) == 2

        danger, rapid = alerts
        assert danger["alert_type"] == "danger"
        assert danger["category"] == "air_quality"
        assert danger["severity"] == pytest.approx(160 / 150 * 70)
        assert danger["recommendations"] == FALLBACK_RECOMMENDATIONS["air_quality"]["danger"]

        assert rapid["alert_type"] == "warning"
        assert rapid["title"] == "Rapid Air Quality Deterioration"
        assert rapid["severity"] == pytest.approx(70 / 50 * 40)
        assert rapid["recommendations"]["trend"] == "deteriorating"

    def test_warning(self, service):
        alerts = service.generate_alerts({"air_quality": [air(120)]})
        assert len(alerts) == 1
        assert alerts[0]["alert_type"] == "warning"
        assert alerts[0]["severity"] == pytest.approx(60)

    def test_increase_of_exactly_threshold_does_not_fire(self, service):
        alerts = service.generate_alerts({"air_quality": [air(80), air(30)]})
        assert alerts == []

    def test_clean_air_no_alerts(self, service):
        assert service.generate_alerts({"air_quality": [air(40)]}) == []

    def test_severity_capped_at_100(self, service):
        alerts = service.generate_alerts({"air_quality": [air(500)]})
        assert alerts[0]["severity"] == 100


class TestWaterSecurityAlerts:
    def test_stress_and_flood_danger(self, service):
        alerts = service.generate_alerts({"water_security": [water(85, flood=75)]})
        assert len(alerts) == 2
        assert all(alert["alert_type"] == "danger" for alert in alerts)
        assert alerts[0]["title"] == "Critical Water Stress Level"
        assert alerts[0]["severity"] == pytest.approx(68)
        assert alerts[1]["title"] == "High Flood Risk Alert"
        assert alerts[1]["severity"] == pytest.approx(56.25)
        assert alerts[1]["recommendations"]["emergency"] is True

    def test_warnings(self, service):
        alerts = service.generate_alerts({"water_security": [water(65, flood=50)]})
        assert [alert["alert_type"] for alert in alerts] == ["warning", "warning"]
        assert alerts[0]["severity"] == pytest.approx(39)
        assert alerts[1]["severity"] == pytest.approx(25)
        assert alerts[1]["recommendations"]["preparedness"] is True

    def test_missing_flood_risk_skips_flood_rules(self, service):
        alerts = service.generate_alerts({"water_security": [water(30, flood=None)]})
        assert alerts == []

    def test_zero_flood_risk_is_evaluated(self, service):
        alerts = service.generate_alerts({"water_security": [water(30, flood=0)]})
        assert alerts == []


class TestGreenSpaceAlerts:
    def test_ndvi_fallback_danger(self, service):
        alerts = service.generate_alerts({"green_space": [green(0.1, coverage=None)]})
        assert len(alerts) == 1
        assert alerts[0]["alert_type"] == "danger"
        assert alerts[0]["severity"] == pytest.approx((15 - 10) / 15 * 70)

    def test_zero_coverage_used_over_ndvi(self, service):
        alerts = service.generate_alerts({"green_space": [green(0.9, coverage=0)]})
        assert alerts[0]["alert_type"] == "danger"
        assert alerts[0]["severity"] == pytest.approx(70)

    def test_warning(self, service):
        alerts = service.generate_alerts({"green_space": [green(0.3, coverage=25)]})
        assert alerts[0]["alert_type"] == "warning"
        assert alerts[0]["severity"] == pytest.approx(5 / 30 * 50)

    def test_healthy_coverage(self, service):
        assert service.generate_alerts({"green_space": [green(0.6, coverage=60)]}) == []


class TestAlertContext:
    def test_location_falls_back_to_coordinates(self, service):
        alert = service.generate_alerts({"air_quality": [air(200, lat=10.0, lon=20.0)]})[0]
        assert alert["location"] == "10.000, 20.000"
        assert alert["latitude"] == 10.0
        assert alert["longitude"] == 20.0
        assert alert["is_active"] is True
        assert alert["actionable"] is True

    def test_context_overrides_reading_position(self, service):
        alert = service.generate_alerts({
            "air_quality": [air(200, lat=10.0, lon=20.0)],
            "location": "Downtown",
            "latitude": 0.0,
            "longitude": 0.0,
        })[0]
        assert alert["location"] == "Downtown"
        assert alert["latitude"] == 0.0
        assert alert["longitude"] == 0.0

    def test_empty_data_no_alerts(self, service):
        assert service.generate_alerts({}) == []

    def test_all_categories_evaluated_independently(self, service):
        alerts = service.generate_alerts({
            "air_quality": [air(160), air(90)],
            "water_security": [water(85, flood=75)],
            "green_space": [green(0.1)],
        })
        assert len(alerts) == 5


class TestThresholdsAndRecommender:
    def test_thresholds_snapshot(self, service):
        thresholds = service.get_thresholds()
        assert thresholds["air_quality"] == {"warning": 100, "danger": 150}
        assert thresholds["green_space"] == {"warning": 30, "danger": 15}
        assert thresholds["rapid_aqi_increase"] == 50

    def test_thresholds_are_immutable(self, service):
        with pytest.raises(FrozenInstanceError):
            service.thresholds.air_quality = Threshold(warning=1, danger=2)

    def test_custom_thresholds(self):
        service = AlertService(AlertThresholds(air_quality=Threshold(warning=20, danger=40)))
        alerts = service.generate_alerts({"air_quality": [air(30)]})
        assert alerts[0]["alert_type"] == "warning"

    def test_recommender_receives_reading_metrics(self):
        recommender = RecordingRecommender()
        service = AlertService(recommender=recommender)
        alerts = service.generate_alerts({"air_quality": [air(200)]})

        assert alerts[0]["recommendations"] == {"called": True}
        category, severity, metrics = recommender.calls[0]
        assert (category, severity) == ("air_quality", "danger")
        assert metrics["aqi"] == 200
