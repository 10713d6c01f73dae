"""
Logging setup for the API.

Every record written through the root handler carries the id of the request
it belongs to and the id of the authenticated learner, so a store-level line
such as a payment transition can be traced back to the call that caused it.
Production emits one JSON object per line; development uses plain text.

Each request also produces one line on the ``access`` logger. Health checks
are logged at DEBUG and server errors at WARNING.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any

from flask import Flask, g, has_request_context, request

access_log = logging.getLogger("access")

QUIET_PATHS = ("/health", "/ready")
CONTEXT_FIELDS = ("request_id", "user_id", "status", "duration_ms")


def _request_fields() -> dict[str, Any]:
    if not has_request_context():
        return {"request_id": "-", "user_id": "-"}
    # Read what the login manager already resolved; never trigger the loader here
    user = g.get("_login_user")
    return {
        "request_id": g.get("request_id", "-"),
        "user_id": getattr(user, "id", None) or "-",
    }


class RequestContextFilter(logging.Filter):
    """Stamp each record with the current request and user ids."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _request_fields().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def init_logging(app: Flask) -> None:
    """Install the root handler and the per-request hooks on `app`."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    if app.config.get("LOG_FORMAT", "text") == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s req=%(request_id)s user=%(user_id)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    @app.before_request
    def _start_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.request_start = time.perf_counter()

    @app.after_request
    def _log_request(response):
        elapsed_ms = (time.perf_counter() - g.get("request_start", time.perf_counter())) * 1000
        response.headers["X-Request-ID"] = g.get("request_id", "-")

        if response.status_code >= 500:
            level = logging.WARNING
        elif request.path in QUIET_PATHS:
            level = logging.DEBUG
        else:
            level = logging.INFO
        fields = _request_fields()
        access_log.log(
            level,
            "%s %s %s %.0fms user=%s ip=%s",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
            fields["user_id"],
            request.remote_addr or "-",
            extra={**fields, "status": response.status_code, "duration_ms": round(elapsed_ms)},
        )
        return response
