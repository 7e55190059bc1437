"""Home Finance Planner Flask Application Factory."""

from typing import Optional

from flask import Flask

from homeplanner.config import Settings, get_global_settings


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Settings to use instead of the global environment settings

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = settings or get_global_settings()
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["ENV"] = settings.app_env
    app.config["DEBUG"] = settings.app_env == "development"
    app.config["TESTING"] = settings.app_env == "testing"
    app.config["MAX_SCENARIOS"] = settings.max_scenarios
    app.config["MAX_HORIZON_MONTHS"] = settings.max_horizon_months
    app.logger.setLevel(settings.log_level)

    from homeplanner.services.language_client import LanguageClient

    app.extensions["language_client"] = LanguageClient.from_settings(settings)

    # Register blueprints
    from homeplanner.blueprints.health import health_bp
    from homeplanner.blueprints.projections import projections_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(projections_bp)

    return app
