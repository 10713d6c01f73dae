"""
Course catalog.

Listing supports optional filters combined with AND; every read joins the
owning educator's name so clients don't need a second round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from database import get_db, now_iso, rows_to_dicts
from updates import FieldUpdate, apply_update

_SELECT = (
    "SELECT c.*, e.name AS educator_name "
    "FROM courses c LEFT JOIN educators e ON c.educator_id = e.id "
)


@dataclass
class CourseUpdate(FieldUpdate):
    table = "courses"

    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    validity_period: Optional[str] = None
    price: Optional[float] = None
    discount: Optional[float] = None


def create(
    title: str,
    description: str,
    educator_id: int,
    target_exam: str,
    duration: str,
    validity_period: str,
    price: float,
    discount: float,
    course_type: str,
) -> int:
    now = now_iso()
    db = get_db()
    cur = db.execute(
        "INSERT INTO courses (title, description, educator_id, target_exam, duration, "
        "validity_period, price, discount, course_type, created_at, updated_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (title, description, educator_id, target_exam, duration, validity_period,
         price, discount, course_type, now, now),
    )
    db.commit()
    return cur.lastrowid


def get(course_id: int) -> dict | None:
    row = get_db().execute(
        "SELECT c.*, e.name AS educator_name, e.bio AS educator_bio "
        "FROM courses c LEFT JOIN educators e ON c.educator_id = e.id "
        "WHERE c.id = ?",
        (course_id,),
    ).fetchone()
    return dict(row) if row else None


def exists(course_id: int) -> bool:
    row = get_db().execute("SELECT 1 FROM courses WHERE id = ?", (course_id,)).fetchone()
    return row is not None


def list_courses(
    filters: dict[str, Any] | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    """Courses newest first.

    Recognised filters: target_exam, course_type, educator_id (equality) and
    min_price / max_price (inclusive range). Missing keys are ignored.
    """
    filters = filters or {}
    clauses = []
    params: list[Any] = []

    if filters.get("target_exam") is not None:
        clauses.append("c.target_exam = ?")
        params.append(filters["target_exam"])
    if filters.get("course_type") is not None:
        clauses.append("c.course_type = ?")
        params.append(filters["course_type"])
    if filters.get("educator_id") is not None:
        clauses.append("c.educator_id = ?")
        params.append(filters["educator_id"])
    if filters.get("min_price") is not None:
        clauses.append("c.price >= ?")
        params.append(filters["min_price"])
    if filters.get("max_price") is not None:
        clauses.append("c.price <= ?")
        params.append(filters["max_price"])

    where = ("WHERE " + " AND ".join(clauses) + " ") if clauses else ""
    params.extend([limit, offset])
    rows = get_db().execute(
        _SELECT + where + "ORDER BY c.created_at DESC, c.id DESC LIMIT ? OFFSET ?",
        params,
    ).fetchall()
    return rows_to_dicts(rows)


def search(term: str, limit: int = 20, offset: int = 0) -> list[dict]:
    """Case-insensitive substring match on title or description."""
    pattern = f"%{term}%"
    rows = get_db().execute(
        _SELECT + "WHERE c.title LIKE ? OR c.description LIKE ? "
        "ORDER BY c.created_at DESC, c.id DESC LIMIT ? OFFSET ?",
        (pattern, pattern, limit, offset),
    ).fetchall()
    return rows_to_dicts(rows)


def update(course_id: int, changes: CourseUpdate) -> dict | None:
    if not apply_update(changes, course_id):
        return None
    return get(course_id)


def delete(course_id: int) -> bool:
    # Lessons, tests and live classes of the course are left in place.
    db = get_db()
    cur = db.execute("DELETE FROM courses WHERE id = ?", (course_id,))
    db.commit()
    return cur.rowcount > 0
