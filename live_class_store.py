"""
Live classes and seat registration.

Registration is a read-then-insert: the duplicate check and the capacity
check run as separate statements with no transaction around them, so two
concurrent registrations at the boundary can both succeed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from database import get_db, now_iso, rows_to_dicts
from errors import ConflictError, NotFoundError, ResourceGoneError
from updates import FieldUpdate, apply_update

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTICIPANTS = 100

_SELECT = (
    "SELECT lc.*, c.title AS course_title "
    "FROM live_classes lc LEFT JOIN courses c ON lc.course_id = c.id "
)


@dataclass
class LiveClassUpdate(FieldUpdate):
    table = "live_classes"

    title: Optional[str] = None
    description: Optional[str] = None
    scheduled_time: Optional[str] = None
    duration: Optional[int] = None
    meeting_url: Optional[str] = None
    max_participants: Optional[int] = None
    status: Optional[str] = None


def create(
    course_id: int,
    title: str,
    description: str,
    scheduled_time: str,
    duration: int,
    meeting_url: str = "",
    max_participants: int = DEFAULT_MAX_PARTICIPANTS,
) -> int:
    now = now_iso()
    db = get_db()
    cur = db.execute(
        "INSERT INTO live_classes (course_id, title, description, scheduled_time, duration, "
        "meeting_url, max_participants, status, created_at, updated_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, 'scheduled', ?, ?)",
        (course_id, title, description, scheduled_time, duration,
         meeting_url, max_participants, now, now),
    )
    db.commit()
    return cur.lastrowid


def get(class_id: int) -> dict | None:
    row = get_db().execute(_SELECT + "WHERE lc.id = ?", (class_id,)).fetchone()
    return dict(row) if row else None


def list_classes(limit: int = 50, offset: int = 0, status: str | None = None) -> list[dict]:
    """Classes soonest first, optionally narrowed to one status."""
    if status:
        rows = get_db().execute(
            _SELECT + "WHERE lc.status = ? ORDER BY lc.scheduled_time ASC, lc.id ASC LIMIT ? OFFSET ?",
            (status, limit, offset),
        ).fetchall()
    else:
        rows = get_db().execute(
            _SELECT + "ORDER BY lc.scheduled_time ASC, lc.id ASC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
    return rows_to_dicts(rows)


def by_course(course_id: int) -> list[dict]:
    rows = get_db().execute(
        "SELECT * FROM live_classes WHERE course_id = ? ORDER BY scheduled_time ASC, id ASC",
        (course_id,),
    ).fetchall()
    return rows_to_dicts(rows)


def update(class_id: int, changes: LiveClassUpdate) -> dict | None:
    if not apply_update(changes, class_id):
        return None
    return get(class_id)


def delete(class_id: int) -> bool:
    db = get_db()
    cur = db.execute("DELETE FROM live_classes WHERE id = ?", (class_id,))
    db.commit()
    return cur.rowcount > 0


def register(user_id: int, class_id: int) -> int:
    """Claim a seat for `user_id`. Returns the registration id.

    Raises ConflictError if already registered, NotFoundError for an unknown
    class and ResourceGoneError once max_participants seats are taken.
    """
    db = get_db()
    existing = db.execute(
        "SELECT id FROM live_class_registrations WHERE user_id = ? AND class_id = ?",
        (user_id, class_id),
    ).fetchone()
    if existing:
        raise ConflictError("Already registered for this class")

    live_class = db.execute(
        "SELECT max_participants FROM live_classes WHERE id = ?", (class_id,)
    ).fetchone()
    if live_class is None:
        raise NotFoundError("Live class not found")

    taken = db.execute(
        "SELECT COUNT(*) FROM live_class_registrations WHERE class_id = ?", (class_id,)
    ).fetchone()[0]
    if taken >= live_class["max_participants"]:
        logger.info("Live class %s is full (%s seats)", class_id, taken)
        raise ResourceGoneError("Class is full")

    cur = db.execute(
        "INSERT INTO live_class_registrations (user_id, class_id, registered_at) VALUES (?, ?, ?)",
        (user_id, class_id, now_iso()),
    )
    db.commit()
    return cur.lastrowid


def registrations(class_id: int) -> list[dict]:
    rows = get_db().execute(
        "SELECT r.*, u.name AS user_name, u.email AS user_email "
        "FROM live_class_registrations r LEFT JOIN users u ON r.user_id = u.id "
        "WHERE r.class_id = ? ORDER BY r.registered_at ASC, r.id ASC",
        (class_id,),
    ).fetchall()
    return rows_to_dicts(rows)
