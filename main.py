"""
Main Application Entry Point
This module serves as the main entry point for the environmental dashboard
backend. It initializes all components and starts the Flask server.
"""

from flask import Flask
from config import Config, LivabilityConfig, AlertThresholds
from database import init_db
from storage import EnvironmentalStorage
from sources import SimulatedNASASource
from livability_calculator import LivabilityCalculator
from alert_service import AlertService
from recommendation_engine import build_recommendation_provider
from api_routes import create_routes


def create_app(test_config=None):
    """
    Create and configure the Flask application.

    Args:
        test_config (dict): overrides for app.config. READING_SOURCE,
            RECOMMENDATION_PROVIDER, LIVABILITY_CONFIG and ALERT_THRESHOLDS
            replace the default collaborators.

    Returns:
        Flask: Configured Flask application
    """
    # Initialize Flask app
    app = Flask(__name__)
    app.config.from_mapping(
        DATABASE_URL=Config.DATABASE_URL,
        MAX_WORKERS=Config.MAX_WORKERS,
    )
    if test_config:
        app.config.update(test_config)

    Config.validate()

    # Initialize persistence
    session_factory = init_db(app.config["DATABASE_URL"])
    storage = EnvironmentalStorage(session_factory, max_workers=app.config["MAX_WORKERS"])

    # Initialize services
    data_source = app.config.get("READING_SOURCE") or SimulatedNASASource()
    recommender = app.config.get("RECOMMENDATION_PROVIDER") or build_recommendation_provider()
    calculator = LivabilityCalculator(app.config.get("LIVABILITY_CONFIG") or LivabilityConfig())
    alert_service = AlertService(app.config.get("ALERT_THRESHOLDS") or AlertThresholds(), recommender)

    # Create routes
    create_routes(app, storage, data_source, calculator, alert_service)
    app.extensions["storage"] = storage

    return app


def main():
    """Main function to run the application."""
    app = create_app()

    # Run the Flask application
    app.run(
        debug=Config.DEBUG,
        host=Config.HOST,
        port=Config.PORT,
        threaded=Config.THREADED
    )


if __name__ == '__main__':
    main()
