"""
API Routes Module
Flask route handlers for the environmental dashboard.
Fetches readings, scores livability, manages alerts and assembles the
dashboard payload.
"""

from __future__ import annotations

import math
import logging
from concurrent.futures import ThreadPoolExecutor
from flask import request, jsonify

from config import Config
from livability_calculator import InsufficientDataError


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def parse_coordinates(lat: str, lon: str) -> tuple[float, float] | None:
    """
    Parse path segments into finite floats.
    Returns (lat, lon) or None when either value is not a finite number.
    """
    try:
        lat_value, lon_value = float(lat), float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
        return None
    return lat_value, lon_value


def _radius_arg(default: float) -> float:
    """?radius= query value; anything unusable falls back to the default."""
    try:
        radius = float(request.args.get("radius", default))
    except (TypeError, ValueError):
        return default
    if not math.isfinite(radius) or radius <= 0:
        return default
    return radius


def _location_label(lat: float, lon: float) -> str:
    return f"{lat:.3f}, {lon:.3f}"


def _rows(rows) -> list[dict]:
    return [row.to_dict() for row in rows]


def _invalid_coordinates():
    return jsonify({"error": "Invalid coordinates"}), 400


# -----------------------------------------------------------------------------
# Route factory
# -----------------------------------------------------------------------------

def create_routes(app, storage, data_source, calculator, alert_service):
    """
    Register Flask routes on the provided app.
    """
    max_workers = app.config.get("MAX_WORKERS", Config.MAX_WORKERS)

    @app.route('/')
    def home():
        return jsonify({"message": "Environmental livability monitor running"})

    # ------------------------------------------------------------------
    # Readings
    # ------------------------------------------------------------------

    @app.route('/api/environmental-data/<lat>/<lon>', methods=['GET'])
    def environmental_data(lat, lon):
        """Fetch fresh readings for a coordinate and store them."""
        coords = parse_coordinates(lat, lon)
        if coords is None:
            return _invalid_coordinates()
        lat, lon = coords

        try:
            readings = data_source.fetch_all(lat, lon)
            stored = storage.store_readings(readings)
            return jsonify({category: _rows(rows) for category, rows in stored.items()})
        except Exception:
            logging.exception("Error fetching environmental data")
            return jsonify({"error": "Failed to fetch environmental data"}), 500

    def _history_route(query, label):
        def handler(lat, lon):
            coords = parse_coordinates(lat, lon)
            if coords is None:
                return _invalid_coordinates()
            try:
                rows = query(coords[0], coords[1], _radius_arg(Config.READING_RADIUS))
                return jsonify(_rows(rows))
            except Exception:
                logging.exception(f"Error fetching {label} data")
                return jsonify({"error": f"Failed to fetch {label} data"}), 500
        return handler

    app.add_url_rule('/api/air-quality/<lat>/<lon>', 'air_quality_history',
                     _history_route(storage.get_air_quality_by_location, "air quality"))
    app.add_url_rule('/api/water-security/<lat>/<lon>', 'water_security_history',
                     _history_route(storage.get_water_security_by_location, "water security"))
    app.add_url_rule('/api/green-space/<lat>/<lon>', 'green_space_history',
                     _history_route(storage.get_green_space_by_location, "green space"))

    # ------------------------------------------------------------------
    # Livability
    # ------------------------------------------------------------------

    @app.route('/api/livability/<lat>/<lon>', methods=['GET'])
    def livability(lat, lon):
        """Score the last 24h of readings around a coordinate and store the score."""
        coords = parse_coordinates(lat, lon)
        if coords is None:
            return _invalid_coordinates()
        lat, lon = coords

        try:
            env_data = storage.get_recent_environmental_data(lat, lon, Config.SCORE_WINDOW_HOURS)
            try:
                metrics = calculator.metrics_from_readings(env_data)
            except InsufficientDataError as e:
                return jsonify({"error": str(e)}), 404

            result = calculator.calculate_livability_score(metrics)
            stored = storage.insert_livability_score({
                "latitude": lat,
                "longitude": lon,
                "air_quality_score": result.air_quality_score,
                "water_security_score": result.water_security_score,
                "green_space_score": result.green_space_score,
                "overall_score": result.overall_score,
                "location": request.args.get("location") or _location_label(lat, lon),
            })

            payload = result.to_dict()
            payload.update({
                "category": calculator.get_livability_category(result.overall_score),
                "recommendations": calculator.generate_recommendations(result),
                "id": stored.id,
                "location": stored.location,
                "timestamp": stored.timestamp.isoformat(),
            })
            return jsonify(payload)
        except Exception:
            logging.exception("Error calculating livability score")
            return jsonify({"error": "Failed to calculate livability score"}), 500

    @app.route('/api/livability/compare', methods=['POST'])
    def compare_livability():
        """
        Rank several locations by livability.
        Body: {"locations": [{"name": ..., "metrics": {"air_quality", "water_security", "green_space"}}]}
        """
        data = request.get_json(silent=True) or {}
        locations = data.get("locations")
        if not isinstance(locations, list) or not locations:
            return jsonify({"error": "No locations provided"}), 400

        try:
            parsed = [
                {
                    "name": str(location["name"]),
                    "metrics": {
                        key: float(location["metrics"][key])
                        for key in ("air_quality", "water_security", "green_space")
                    },
                }
                for location in locations
            ]
        except (KeyError, TypeError, ValueError):
            return jsonify({"error": "Each location needs a name and numeric air_quality, "
                                     "water_security and green_space metrics"}), 400

        try:
            ranked = calculator.calculate_regional_livability(parsed)
            return jsonify([
                {
                    "name": entry["name"],
                    "ranking": entry["ranking"],
                    "result": entry["result"].to_dict(),
                    "category": calculator.get_livability_category(entry["result"].overall_score),
                }
                for entry in ranked
            ])
        except Exception:
            logging.exception("Error comparing livability")
            return jsonify({"error": "Failed to compare livability"}), 500

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    @app.route('/api/alerts', methods=['GET'])
    def alerts():
        try:
            return jsonify(_rows(storage.get_active_alerts()))
        except Exception:
            logging.exception("Error fetching alerts")
            return jsonify({"error": "Failed to fetch alerts"}), 500

    @app.route('/api/alerts/thresholds', methods=['GET'])
    def alert_thresholds():
        return jsonify(alert_service.get_thresholds())

    @app.route('/api/alerts/generate/<lat>/<lon>', methods=['POST'])
    def generate_alerts(lat, lon):
        """Evaluate the last 6h of readings and store any new alerts."""
        coords = parse_coordinates(lat, lon)
        if coords is None:
            return _invalid_coordinates()
        lat, lon = coords

        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        location = body.get("location")
        if location is not None and not isinstance(location, str):
            return jsonify({"error": "location must be a string"}), 400

        try:
            env_data = storage.get_recent_environmental_data(lat, lon, Config.ALERT_WINDOW_HOURS)
            new_alerts = alert_service.generate_alerts({
                **env_data,
                "location": location or _location_label(lat, lon),
                "latitude": lat,
                "longitude": lon,
            })
            stored = [storage.insert_alert(alert) for alert in new_alerts]
            return jsonify(_rows(stored))
        except Exception:
            logging.exception("Error generating alerts")
            return jsonify({"error": "Failed to generate alerts"}), 500

    @app.route('/api/alerts/<alert_id>/dismiss', methods=['PATCH'])
    def dismiss_alert(alert_id):
        try:
            alert = storage.dismiss_alert(alert_id)
            if alert is None:
                return jsonify({"error": "Alert not found"}), 404
            return jsonify({"success": True, "message": "Alert dismissed", "alert": alert.to_dict()})
        except Exception:
            logging.exception("Error dismissing alert")
            return jsonify({"error": "Failed to dismiss alert"}), 500

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    @app.route('/api/dashboard/<lat>/<lon>', methods=['GET'])
    def dashboard(lat, lon):
        """Current metrics, latest score, active alerts and recent history in one payload."""
        coords = parse_coordinates(lat, lon)
        if coords is None:
            return _invalid_coordinates()
        lat, lon = coords

        try:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                env_future = executor.submit(
                    storage.get_recent_environmental_data, lat, lon, Config.SCORE_WINDOW_HOURS)
                score_future = executor.submit(
                    storage.get_livability_score_by_location, lat, lon, Config.SCORE_RADIUS)
                alerts_future = executor.submit(
                    storage.get_active_alerts, Config.DASHBOARD_ALERT_LIMIT)
                env_data = env_future.result()
                score = score_future.result()
                active_alerts = alerts_future.result()

            history_limit = Config.DASHBOARD_HISTORY_LIMIT
            return jsonify({
                "location": _location_label(lat, lon),
                "current_metrics": {
                    category: rows[0].to_dict() if rows else None
                    for category, rows in env_data.items()
                },
                "livability_score": score.to_dict() if score else None,
                "alerts": _rows(active_alerts),
                "historical_data": {
                    category: _rows(rows[:history_limit])
                    for category, rows in env_data.items()
                },
            })
        except Exception:
            logging.exception("Error fetching dashboard data")
            return jsonify({"error": "Failed to fetch dashboard data"}), 500
