"""Application factory and app-wide configuration."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, g, request
from flask_cors import CORS

from compound_calc.app.api.routes import api_bp
from compound_calc.app.config import Settings, get_settings
from compound_calc.app.logging_setup import setup_logging

access_logger = logging.getLogger("compound_calc.access")


def _log_request(response):
    """One access line per API call; the calculator mode is attached when the route set one."""
    mode = g.get("calc_mode")
    access_logger.info(
        "%s %s -> %s",
        request.method,
        request.path,
        response.status_code,
        extra={
            "method": request.method,
            "path": request.path,
            "status_code": response.status_code,
            "mode": mode.value if mode is not None else None,
        },
    )
    return response


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_json)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.json.sort_keys = False

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    app.after_request(_log_request)
    return app
