"""
Audit logging — records security-relevant events.

Registrations, logins and subscription changes are written to both the
audit_log table and structured logging.
"""

from __future__ import annotations

import logging
import sqlite3

from flask import has_request_context, request

from database import get_db, now_iso

logger = logging.getLogger(__name__)


def log_event(action: str, user_id: int | None = None, detail: str = "") -> None:
    """Insert an audit log entry and emit a structured log line."""
    ip = ""
    ua = ""
    if has_request_context():
        ip = request.remote_addr or ""
        ua = request.headers.get("User-Agent", "")

    try:
        db = get_db()
        db.execute(
            "INSERT INTO audit_log (user_id, action, detail, ip_address, user_agent, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (user_id, action, detail, ip, ua, now_iso()),
        )
        db.commit()
    except sqlite3.Error as e:
        # The audited operation already succeeded; keep the request alive.
        logger.warning("audit write failed for %s: %s", action, e)

    logger.info("audit: %s user_id=%s detail=%s ip=%s", action, user_id, detail, ip)

