"""
Shared helpers used across blueprints.

Response envelope, request parsing and role gating live here so the
blueprints only describe their routes.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, jsonify, request
from flask_login import current_user

from errors import AuthorizationError, ValidationError


def role_required(*roles: str) -> Callable:
    """Decorator that requires the token's role to be one of `roles`."""
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated(*args: Any, **kwargs: Any) -> Any:
            if not current_user.is_authenticated:
                return current_app.login_manager.unauthorized()
            if roles and getattr(current_user, "role", "student") not in roles:
                raise AuthorizationError("Access denied: insufficient privileges")
            return f(*args, **kwargs)
        return decorated
    return decorator


# ── Envelope ────────────────────────────────────────────────

def success_response(
    data: Any = None,
    message: str | None = None,
    status: int = 200,
    meta: dict | None = None,
) -> tuple[Any, int]:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if meta is not None:
        body["meta"] = meta
    return jsonify(body), status


def error_response(error: str, status: int, details: Any = None) -> tuple[Any, int]:
    body: dict[str, Any] = {"success": False, "error": error}
    if details:
        body["details"] = details
    return jsonify(body), status


# ── Request parsing ─────────────────────────────────────────

def json_body() -> dict[str, Any]:
    """Parsed JSON object from the request body, or {} when there is none."""
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Invalid JSON in request body")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_id(value: Any, label: str) -> int:
    """Turn a path segment into a positive integer id or fail with 400."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} ID")
    if parsed <= 0:
        raise ValidationError(f"Invalid {label} ID")
    return parsed


def require_fields(data: dict[str, Any], *fields: str) -> None:
    """Reject the request when any of `fields` is missing or empty."""
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise ValidationError("Missing required fields", details=[f"{f} is required" for f in missing])


def require_strings(data: dict[str, Any], *fields: str) -> None:
    """Reject the request when any of `fields` is present but not a string."""
    wrong = [f for f in fields if data.get(f) is not None and not isinstance(data[f], str)]
    if wrong:
        raise ValidationError("Invalid field types", details=[f"{f} must be a string" for f in wrong])


# ── Pagination ──────────────────────────────────────────────

def paginate_args(default_limit: int = 50, max_limit: int = 100) -> tuple[int, int]:
    """Extract limit/offset from request.args. Returns (limit, offset)."""
    try:
        limit = min(max_limit, max(1, int(request.args.get("limit", default_limit))))
    except (ValueError, TypeError):
        limit = default_limit
    try:
        offset = max(0, int(request.args.get("offset", 0)))
    except (ValueError, TypeError):
        offset = 0
    return limit, offset


def page_meta(limit: int, offset: int, count: int) -> dict[str, int]:
    """Standard `meta` block for list responses."""
    return {"limit": limit, "offset": offset, "count": count}
