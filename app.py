"""
Online Learning Platform API — Flask application

JSON REST backend for learner accounts, the course catalog (educators,
lessons, live classes, tests), progress tracking and course subscriptions.
"""

from __future__ import annotations

import hashlib
import os
from typing import Any

from flask import Flask, Response, request as flask_request

import database
from blueprints import register_blueprints
from errors import register_error_handlers
from extensions import limiter, login_manager

CORS_ALLOW_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, X-Request-ID"


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    from config import TestingConfig, config_by_name
    if test_config is not None:
        app.config.from_object(TestingConfig)
        app.config.update(test_config)
    else:
        env = os.environ.get("FLASK_ENV", "development")
        cfg = config_by_name.get(env, config_by_name["development"])
        app.config.from_object(cfg)
        cfg.validate()

    app.secret_key = app.config["SECRET_KEY"]
    app.json.sort_keys = False

    # Structured logging
    from logging_config import init_logging
    init_logging(app)

    # Register database teardown
    database.init_app(app)

    # Rate limiter (disabled in testing)
    limiter.init_app(app)
    if app.config.get("TESTING"):
        limiter.enabled = False

    # Bearer-token authentication (see auth.py)
    login_manager.init_app(app)

    register_error_handlers(app)
    register_blueprints(app)

    # CORS for the configured front-end origins
    @app.after_request
    def set_cors_headers(response: Response) -> Response:
        origin = flask_request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ORIGINS", []):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
            response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
            response.headers["Vary"] = "Origin"
        return response

    # Security headers
    @app.after_request
    def set_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        if not app.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # ETag support for JSON API responses
    @app.after_request
    def set_etag(response: Response) -> Response:
        if (
            flask_request.method == "GET"
            and response.status_code == 200
            and response.content_type
            and "application/json" in response.content_type
            and response.content_length
            and response.content_length < 1_048_576  # < 1 MB
        ):
            data = response.get_data()
            etag = '"' + hashlib.md5(data).hexdigest() + '"'
            response.headers["ETag"] = etag
            if_none_match = flask_request.headers.get("If-None-Match")
            if if_none_match and if_none_match == etag:
                response.status_code = 304
                response.set_data(b"")
        return response

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(
        host="0.0.0.0",
        port=application.config["PORT"],
        debug=application.config.get("DEBUG", False),
    )
