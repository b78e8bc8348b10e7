"""Application factory and app-wide configuration."""

from datetime import date
from typing import Callable, Optional

from flask import Flask
from flask_cors import CORS

from illustration_engine.app.api.routes import api_bp
from illustration_engine.config import settings
from illustration_engine.logs import configure_logging


def create_app(today_provider: Optional[Callable[[], date]] = None) -> Flask:
    """Build the Flask app instance.

    ``today_provider`` supplies the calendar date used for age derivation;
    tests pass a fixed one.
    """
    configure_logging()

    app = Flask(__name__)
    app.config["TODAY_PROVIDER"] = today_provider or date.today
    app.config["BULK_MAX_POLICIES"] = settings.BULK_MAX_POLICIES

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.CORS_ORIGINS}},
        supports_credentials=True,
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    return app
