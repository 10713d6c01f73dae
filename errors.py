"""
API error taxonomy and the handlers that render it.

Every failure leaves the service as the standard envelope:

    {"success": false, "error": "...", "details": [...]}

Stores and blueprints raise the APIError subclasses below; anything else that
escapes a request becomes a generic 500.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base API exception carrying an HTTP status and optional details."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(APIError):
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401


class AuthorizationError(APIError):
    status_code = 403


class NotFoundError(APIError):
    status_code = 404


class ConflictError(APIError):
    status_code = 409


class ResourceGoneError(APIError):
    """The resource exists but can no longer be claimed (e.g. a full class)."""

    status_code = 410


# Messages for framework-raised HTTP errors
_HTTP_MESSAGES = {
    400: "Bad request",
    404: "Endpoint not found",
    405: "Method not allowed",
    413: "Request entity too large",
    429: "Too many requests, please try again later.",
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def _api_error(exc: APIError):
        if exc.status_code >= 500:
            logger.error("API error: %s", exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        code = exc.code or 500
        body: dict[str, Any] = {
            "success": False,
            "error": _HTTP_MESSAGES.get(code, exc.name),
        }
        if code == 404:
            body["message"] = f"Cannot {request.method} {request.path}"
        return jsonify(body), code

    @app.errorhandler(sqlite3.IntegrityError)
    def _integrity_error(exc: sqlite3.IntegrityError):
        logger.warning("Constraint violation: %s", exc)
        body: dict[str, Any] = {"success": False, "error": "Database constraint violation"}
        if current_app.config.get("SHOW_ERROR_DETAILS"):
            body["details"] = str(exc)
        return jsonify(body), 400

    @app.errorhandler(Exception)
    def _unexpected_error(exc: Exception):
        logger.exception("Unhandled error")
        body: dict[str, Any] = {"success": False, "error": "Internal server error"}
        if current_app.config.get("SHOW_ERROR_DETAILS"):
            body["details"] = str(exc)
        return jsonify(body), 500
