"""Core routes: API index and health checks."""

from __future__ import annotations

import logging
import sqlite3
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from database import get_db
from extensions import limiter

logger = logging.getLogger(__name__)

bp = Blueprint("core", __name__)

API_VERSION = "1.0.0"

ENDPOINTS = {
    "auth": "/api/auth",
    "courses": "/api/courses",
    "educators": "/api/educators",
    "lessons": "/api/lessons",
    "liveClasses": "/api/live-classes",
    "tests": "/api/tests",
    "progress": "/api/progress",
    "subscriptions": "/api/subscriptions",
}


@bp.route("/")
def index():
    return jsonify({
        "success": True,
        "message": "Online Learning Platform API",
        "version": API_VERSION,
        "endpoints": ENDPOINTS,
    })


# ── Health checks ─────────────────────────────────────────

_start_time = time.time()


@bp.route("/health")
@limiter.exempt
def health():
    return jsonify({
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.time() - _start_time, 3),
    })


@bp.route("/ready")
@limiter.exempt
def ready():
    try:
        get_db().execute("SELECT 1").fetchone()
    except sqlite3.Error as exc:
        logger.error("Readiness check failed: %s", exc, exc_info=True)
        return jsonify({"success": False, "status": "not_ready"}), 503
    return jsonify({"success": True, "status": "ready"})
