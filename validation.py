"""
Request payload validation.

Each validator takes the decoded JSON body and returns a list of
human-readable problems (empty when the payload is acceptable). The
``validate`` decorator turns a non-empty list into a 400 response with the
problems under ``details``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from functools import wraps
from typing import Any

from email_validator import EmailNotValidError, validate_email

from errors import ValidationError
from helpers import json_body

VALID_EXAMS = ["JEE", "NEET", "GATE", "UPSC", "CAT", "GRE", "GMAT", "IELTS", "TOEFL"]
VALID_LANGUAGES = ["English", "Hindi", "Telugu", "Tamil", "Malayalam", "Kannada", "Bengali"]
VALID_LEVELS = ["Beginner", "Intermediate", "Advanced"]
VALID_COURSE_TYPES = ["Video", "Live", "Mixed", "Text"]

_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
MAX_EMAIL_LENGTH = 100


def is_valid_email(email: Any) -> bool:
    if not isinstance(email, str) or len(email) > MAX_EMAIL_LENGTH:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_password(password: Any) -> bool:
    return (
        isinstance(password, str)
        and 8 <= len(password) <= 128
        and _PASSWORD_RE.match(password) is not None
    )


def is_valid_name(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    name = name.strip()
    return 2 <= len(name) <= 50 and _NAME_RE.match(name) is not None


def registration_errors(data: dict[str, Any]) -> list[str]:
    errors = []
    name = data.get("name")
    email = data.get("email")
    password = data.get("password")
    target_exam = data.get("targetExam")
    language = data.get("preferredLanguage")
    level = data.get("preparationLevel")

    if not name:
        errors.append("Name is required")
    if not email:
        errors.append("Email is required")
    if not password:
        errors.append("Password is required")
    elif not isinstance(password, str):
        errors.append("Password must be a string")
    if not target_exam:
        errors.append("Target exam is required")
    if not language:
        errors.append("Preferred language is required")
    if not level:
        errors.append("Preparation level is required")

    if name and not is_valid_name(name):
        errors.append("Name must be 2-50 characters and contain only letters and spaces")
    if email and not is_valid_email(email):
        errors.append("Please provide a valid email address")
    if isinstance(password, str) and password and not is_valid_password(password):
        errors.append(
            "Password must be 8-128 characters with at least one uppercase, "
            "lowercase, number, and special character"
        )
    if target_exam and target_exam not in VALID_EXAMS:
        errors.append(f"Target exam must be one of: {', '.join(VALID_EXAMS)}")
    if language and language not in VALID_LANGUAGES:
        errors.append(f"Preferred language must be one of: {', '.join(VALID_LANGUAGES)}")
    if level and level not in VALID_LEVELS:
        errors.append(f"Preparation level must be one of: {', '.join(VALID_LEVELS)}")
    return errors


def login_errors(data: dict[str, Any]) -> list[str]:
    errors = []
    email = data.get("email")
    if not email:
        errors.append("Email is required")
    if not data.get("password"):
        errors.append("Password is required")
    elif not isinstance(data["password"], str):
        errors.append("Password must be a string")
    if email and not is_valid_email(email):
        errors.append("Please provide a valid email address")
    return errors


def profile_errors(data: dict[str, Any]) -> list[str]:
    """Checks for the optional fields of a profile update."""
    errors = []
    if data.get("name") is not None and not is_valid_name(data["name"]):
        errors.append("Name must be 2-50 characters and contain only letters and spaces")
    exam = data.get("targetExam", data.get("target_exam"))
    if exam is not None and exam not in VALID_EXAMS:
        errors.append(f"Target exam must be one of: {', '.join(VALID_EXAMS)}")
    language = data.get("preferredLanguage", data.get("preferred_language"))
    if language is not None and language not in VALID_LANGUAGES:
        errors.append(f"Preferred language must be one of: {', '.join(VALID_LANGUAGES)}")
    level = data.get("preparationLevel", data.get("preparation_level"))
    if level is not None and level not in VALID_LEVELS:
        errors.append(f"Preparation level must be one of: {', '.join(VALID_LEVELS)}")
    return errors


def is_non_negative_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return float(value) >= 0
    except (TypeError, ValueError):
        return False


def course_errors(data: dict[str, Any]) -> list[str]:
    errors = []
    title = data.get("title")
    description = data.get("description")
    educator_id = data.get("educatorId")
    price = data.get("price")
    course_type = data.get("courseType")

    if not title:
        errors.append("Title is required")
    if not description:
        errors.append("Description is required")
    if not educator_id:
        errors.append("Educator ID is required")
    if not data.get("targetExam"):
        errors.append("Target exam is required")
    if not data.get("duration"):
        errors.append("Duration is required")
    if not data.get("validityPeriod"):
        errors.append("Validity period is required")
    if price is None:
        errors.append("Price is required")
    if not course_type:
        errors.append("Course type is required")

    if title and not (isinstance(title, str) and 3 <= len(title) <= 200):
        errors.append("Title must be 3-200 characters")
    if description and not (isinstance(description, str) and 10 <= len(description) <= 1000):
        errors.append("Description must be 10-1000 characters")
    if educator_id and (
        isinstance(educator_id, bool) or not isinstance(educator_id, int) or educator_id <= 0
    ):
        errors.append("Educator ID must be a positive integer")
    if price is not None and not is_non_negative_number(price):
        errors.append("Price must be a non-negative number")
    if data.get("discount") is not None and not is_non_negative_number(data["discount"]):
        errors.append("Discount must be a non-negative number")
    if data.get("targetExam") and not isinstance(data["targetExam"], str):
        errors.append("Target exam must be a string")
    if course_type and course_type not in VALID_COURSE_TYPES:
        errors.append(f"Course type must be one of: {', '.join(VALID_COURSE_TYPES)}")
    return errors


def validate(check: Callable[[dict[str, Any]], list[str]]) -> Callable:
    """Decorator: run `check` on the JSON body and reject the request on problems."""
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated(*args: Any, **kwargs: Any) -> Any:
            problems = check(json_body())
            if problems:
                raise ValidationError("Validation failed", details=problems)
            return f(*args, **kwargs)
        return decorated
    return decorator
