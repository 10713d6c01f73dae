"""Educators and the courses they own."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from database import get_db, now_iso, rows_to_dicts
from updates import FieldUpdate, apply_update

# course_count comes from a LEFT JOIN so educators without courses report 0.
_SELECT_WITH_COUNT = (
    "SELECT e.*, COUNT(c.id) AS course_count "
    "FROM educators e LEFT JOIN courses c ON c.educator_id = e.id "
)


@dataclass
class EducatorUpdate(FieldUpdate):
    table = "educators"

    name: Optional[str] = None
    bio: Optional[str] = None
    expertise: Optional[str] = None
    experience: Optional[int] = None
    qualification: Optional[str] = None


def create(name: str, email: str, bio: str, expertise: str, experience: int, qualification: str) -> int:
    now = now_iso()
    db = get_db()
    cur = db.execute(
        "INSERT INTO educators (name, email, bio, expertise, experience, qualification, "
        "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (name, email.strip().lower(), bio, expertise, experience, qualification, now, now),
    )
    db.commit()
    return cur.lastrowid


def get(educator_id: int) -> dict | None:
    row = get_db().execute(
        _SELECT_WITH_COUNT + "WHERE e.id = ? GROUP BY e.id", (educator_id,)
    ).fetchone()
    return dict(row) if row else None


def get_by_email(email: str) -> dict | None:
    row = get_db().execute(
        "SELECT * FROM educators WHERE email = ?", (email.strip().lower(),)
    ).fetchone()
    return dict(row) if row else None


def list_educators(limit: int = 50, offset: int = 0) -> list[dict]:
    rows = get_db().execute(
        _SELECT_WITH_COUNT + "GROUP BY e.id ORDER BY e.created_at DESC, e.id DESC LIMIT ? OFFSET ?",
        (limit, offset),
    ).fetchall()
    return rows_to_dicts(rows)


def update(educator_id: int, changes: EducatorUpdate) -> dict | None:
    if not apply_update(changes, educator_id):
        return None
    return get(educator_id)


def delete(educator_id: int) -> bool:
    db = get_db()
    cur = db.execute("DELETE FROM educators WHERE id = ?", (educator_id,))
    db.commit()
    return cur.rowcount > 0


def courses(educator_id: int) -> list[dict]:
    rows = get_db().execute(
        "SELECT * FROM courses WHERE educator_id = ? ORDER BY created_at DESC, id DESC",
        (educator_id,),
    ).fetchall()
    return rows_to_dicts(rows)
