"""
Learner accounts.

Passwords are stored as salted werkzeug hashes and never leave this module:
every read except ``get_by_email`` strips the hash column.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from database import get_db, now_iso
from updates import FieldUpdate, apply_update

PUBLIC_COLUMNS = (
    "id, name, email, target_exam, preferred_language, preparation_level, "
    "role, created_at, updated_at"
)


@dataclass
class UserUpdate(FieldUpdate):
    table = "users"

    name: Optional[str] = None
    target_exam: Optional[str] = None
    preferred_language: Optional[str] = None
    preparation_level: Optional[str] = None


def create_user(
    name: str,
    email: str,
    password: str,
    target_exam: str,
    preferred_language: str,
    preparation_level: str,
    role: str = "student",
) -> int:
    now = now_iso()
    db = get_db()
    cur = db.execute(
        "INSERT INTO users (name, email, password, target_exam, preferred_language, "
        "preparation_level, role, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            name.strip(),
            email.strip().lower(),
            generate_password_hash(password),
            target_exam,
            preferred_language,
            preparation_level,
            role,
            now,
            now,
        ),
    )
    db.commit()
    return cur.lastrowid


def get_by_email(email: str) -> dict | None:
    """Full user row, password hash included. For credential checks only."""
    row = get_db().execute(
        "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
    ).fetchone()
    return dict(row) if row else None


def get_by_id(user_id: int) -> dict | None:
    row = get_db().execute(
        f"SELECT {PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,)
    ).fetchone()
    return dict(row) if row else None


def update_user(user_id: int, update: UserUpdate) -> dict | None:
    if not apply_update(update, user_id):
        return None
    return get_by_id(user_id)


def verify_credentials(email: str, password: str) -> dict | None:
    """Return the public user record when `password` matches, else None."""
    row = get_by_email(email)
    if row is None or not check_password_hash(row["password"], password):
        return None
    row.pop("password")
    return row


def to_profile(user: dict) -> dict:
    """Client-facing profile shape."""
    return {
        "userId": user["id"],
        "name": user["name"],
        "email": user["email"],
        "targetExam": user["target_exam"],
        "preferredLanguage": user["preferred_language"],
        "preparationLevel": user["preparation_level"],
        "role": user["role"],
        "createdAt": user["created_at"],
    }
