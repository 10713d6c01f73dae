"""
Application configuration — environment-aware settings.

All environment variables are documented here. Values are read once at import
time; a local .env file is loaded first when present.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent

load_dotenv()


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class BaseConfig:
    # Token signing (required in every environment)
    JWT_SECRET = os.environ.get("JWT_SECRET", "")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_DAYS = int(os.environ.get("JWT_EXPIRES_DAYS", "7"))

    # Flask needs a key for its (unused) cookie session; reuse the token secret.
    SECRET_KEY = os.environ.get("SECRET_KEY", "") or JWT_SECRET

    PORT = int(os.environ.get("PORT", "5000"))

    # SQLite database file
    DATABASE = os.environ.get("DATABASE_PATH", str(BASE_DIR / "learning_platform.db"))

    # Request body limit
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10 MB

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rate limiting (in-memory unless a storage URI is given)
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "") or "memory://"
    RATELIMIT_DEFAULT = "100 per 15 minutes"
    AUTH_RATE_LIMIT = "5 per 15 minutes"

    # CORS
    CORS_ORIGINS = _csv(os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://localhost:8080",
    ))

    # Include exception text in 500 responses
    SHOW_ERROR_DETAILS = False

    @classmethod
    def validate(cls):
        """Fail fast on missing configuration."""
        errors: list[str] = []

        if not cls.JWT_SECRET:
            errors.append("JWT_SECRET must be set.")

        if errors:
            raise RuntimeError(
                "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SHOW_ERROR_DETAILS = True
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")
    CORS_ORIGINS = _csv(os.environ.get("FRONTEND_URL", "https://yourdomain.com"))


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_SECRET = "test-jwt-secret-for-the-learning-platform-suite"
    SECRET_KEY = "test-jwt-secret-for-the-learning-platform-suite"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
