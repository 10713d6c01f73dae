"""
User Authentication — bearer tokens on top of Flask-Login.

Tokens are HS256 JWTs carrying the user's id, email, name and role. Flask-Login's
request loader turns a valid ``Authorization: Bearer`` header into
``current_user`` without touching the database, so ``login_required`` works
unchanged for a stateless JSON API.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from flask import Blueprint, current_app, g
from flask_login import UserMixin, current_user, login_required

from audit import log_event
from errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from extensions import limiter, login_manager
from helpers import error_response, json_body, success_response
import user_store
from validation import login_errors, profile_errors, registration_errors, validate

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
limiter.limit(lambda: current_app.config["AUTH_RATE_LIMIT"])(auth_bp)

NO_TOKEN = "Access denied. No valid token provided."
INVALID_TOKEN = "Invalid token"
EXPIRED_TOKEN = "Token expired"


class User(UserMixin):
    """The identity carried by a verified token."""

    def __init__(self, id: int, email: str, name: str, role: str = "student"):
        self.id = id
        self.email = email
        self.name = name
        self.role = role


def issue_token(user_id: int, email: str, name: str, role: str = "student") -> str:
    """Sign a token valid for JWT_EXPIRES_DAYS days."""
    cfg = current_app.config
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "name": name,
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=cfg["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(payload, cfg["JWT_SECRET"], algorithm=cfg["JWT_ALGORITHM"])


def decode_token(token: str) -> dict:
    """Verify signature and expiry. Raises AuthenticationError with the reason."""
    cfg = current_app.config
    try:
        return jwt.decode(token, cfg["JWT_SECRET"], algorithms=[cfg["JWT_ALGORITHM"]])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(EXPIRED_TOKEN)
    except jwt.InvalidTokenError:
        raise AuthenticationError(INVALID_TOKEN)


@auth_bp.before_app_request
def _reset_identity():
    # The token is re-read on every request, even when an app context is reused.
    g.pop("_login_user", None)
    g.pop("auth_error", None)


@login_manager.request_loader
def load_user_from_request(request):
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer ") or not header[7:].strip():
        g.auth_error = NO_TOKEN
        return None
    try:
        payload = decode_token(header[7:].strip())
    except AuthenticationError as e:
        g.auth_error = e.message
        return None
    if not isinstance(payload.get("userId"), int):
        g.auth_error = INVALID_TOKEN
        return None
    return User(
        payload["userId"],
        payload.get("email", ""),
        payload.get("name", ""),
        payload.get("role", "student"),
    )


@login_manager.unauthorized_handler
def unauthorized():
    message = g.get("auth_error", NO_TOKEN)
    return error_response(message, 401)


# ── Routes ──────────────────────────────────────────────────


@auth_bp.route("/register", methods=["POST"])
@validate(registration_errors)
def register():
    data = json_body()
    email = data["email"].strip().lower()

    if user_store.get_by_email(email):
        raise ConflictError("Email already registered")

    user_id = user_store.create_user(
        name=data["name"],
        email=email,
        password=data["password"],
        target_exam=data["targetExam"],
        preferred_language=data["preferredLanguage"],
        preparation_level=data["preparationLevel"],
    )
    name = data["name"].strip()
    log_event("register", user_id, f"email={email}")

    return success_response(
        {
            "userId": user_id,
            "name": name,
            "email": email,
            "targetExam": data["targetExam"],
            "token": issue_token(user_id, email, name),
        },
        message="User registered successfully",
        status=201,
    )


@auth_bp.route("/login", methods=["POST"])
@validate(login_errors)
def login():
    data = json_body()
    email = data["email"].strip().lower()

    user = user_store.verify_credentials(email, data["password"])
    if user is None:
        log_event("login_failed", None, f"email={email}")
        raise AuthenticationError("Invalid email or password")

    log_event("login_success", user["id"])
    profile = user_store.to_profile(user)
    profile["token"] = issue_token(user["id"], user["email"], user["name"], user["role"])
    return success_response(profile, message="Login successful")


@auth_bp.route("/profile", methods=["GET"])
@login_required
def get_profile():
    user = user_store.get_by_id(current_user.id)
    if user is None:
        raise NotFoundError("User not found")
    return success_response(user_store.to_profile(user))


@auth_bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    data = json_body()
    problems = profile_errors(data)
    if problems:
        raise ValidationError("Validation failed", details=problems)

    update = user_store.UserUpdate.from_payload(data)
    if update.name is not None:
        update.name = update.name.strip()
    user = user_store.update_user(current_user.id, update)
    if user is None:
        raise NotFoundError("User not found")
    return success_response(user_store.to_profile(user), message="Profile updated successfully")


@auth_bp.route("/refresh", methods=["POST"])
@login_required
def refresh():
    token = issue_token(current_user.id, current_user.email, current_user.name, current_user.role)
    return success_response({"token": token}, message="Token refreshed successfully")


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    # Tokens are stateless; the client discards its copy.
    log_event("logout", current_user.id)
    return success_response(message="Logout successful")


@auth_bp.route("/verify", methods=["GET"])
@login_required
def verify():
    return success_response(
        {"userId": current_user.id, "email": current_user.email, "name": current_user.name},
        message="Token is valid",
    )
