"""Lessons within a course, displayed in order_index order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from database import get_db, now_iso, rows_to_dicts
from updates import FieldUpdate, apply_update


@dataclass
class LessonUpdate(FieldUpdate):
    table = "lessons"

    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    duration: Optional[int] = None
    order_index: Optional[int] = None
    video_url: Optional[str] = None


def create(
    course_id: int,
    title: str,
    description: str,
    duration: int,
    lesson_type: str,
    content: str = "",
    order_index: int = 0,
    video_url: str | None = None,
) -> int:
    now = now_iso()
    db = get_db()
    cur = db.execute(
        "INSERT INTO lessons (course_id, title, description, content, duration, order_index, "
        "lesson_type, video_url, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (course_id, title, description, content, duration, order_index,
         lesson_type, video_url, now, now),
    )
    db.commit()
    return cur.lastrowid


def get(lesson_id: int) -> dict | None:
    row = get_db().execute(
        "SELECT l.*, c.title AS course_title "
        "FROM lessons l LEFT JOIN courses c ON l.course_id = c.id WHERE l.id = ?",
        (lesson_id,),
    ).fetchone()
    return dict(row) if row else None


def list_lessons(limit: int = 50, offset: int = 0) -> list[dict]:
    rows = get_db().execute(
        "SELECT l.*, c.title AS course_title "
        "FROM lessons l LEFT JOIN courses c ON l.course_id = c.id "
        "ORDER BY l.created_at DESC, l.id DESC LIMIT ? OFFSET ?",
        (limit, offset),
    ).fetchall()
    return rows_to_dicts(rows)


def by_course(course_id: int) -> list[dict]:
    rows = get_db().execute(
        "SELECT * FROM lessons WHERE course_id = ? ORDER BY order_index ASC, id ASC",
        (course_id,),
    ).fetchall()
    return rows_to_dicts(rows)


def update(lesson_id: int, changes: LessonUpdate) -> dict | None:
    if not apply_update(changes, lesson_id):
        return None
    return get(lesson_id)


def delete(lesson_id: int) -> bool:
    db = get_db()
    cur = db.execute("DELETE FROM lessons WHERE id = ?", (lesson_id,))
    db.commit()
    return cur.rowcount > 0
