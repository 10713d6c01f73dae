"""
Per-learner progress through a course's lessons and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from database import get_db, now_iso, rows_to_dicts
from errors import AuthorizationError, NotFoundError
from updates import FieldUpdate, apply_update

PROGRESS_TYPES = ("lesson", "test")


@dataclass
class ProgressUpdate(FieldUpdate):
    table = "progress"

    status: Optional[str] = None
    score: Optional[float] = None
    time_spent: Optional[int] = None


def completion_rate(completed: int, total: int) -> float:
    """Percentage rounded to two decimals; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return round(completed / total * 100, 2)


class ProgressStoreDB:
    """DB-backed progress records for one user."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def record(
        self,
        course_id: int,
        progress_type: str,
        status: str,
        lesson_id: int | None = None,
        test_id: int | None = None,
        score: float | None = None,
        time_spent: int = 0,
    ) -> int:
        now = now_iso()
        db = get_db()
        cur = db.execute(
            "INSERT INTO progress (user_id, course_id, lesson_id, test_id, progress_type, "
            "status, score, time_spent, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (self.user_id, course_id, lesson_id, test_id, progress_type,
             status, score, time_spent, now, now),
        )
        db.commit()
        return cur.lastrowid

    def for_course(self, course_id: int) -> list[dict]:
        rows = get_db().execute(
            "SELECT p.*, l.title AS lesson_title, t.title AS test_title "
            "FROM progress p "
            "LEFT JOIN lessons l ON p.lesson_id = l.id "
            "LEFT JOIN tests t ON p.test_id = t.id "
            "WHERE p.user_id = ? AND p.course_id = ? "
            "ORDER BY p.created_at DESC, p.id DESC",
            (self.user_id, course_id),
        ).fetchall()
        return rows_to_dicts(rows)

    def all(self) -> list[dict]:
        rows = get_db().execute(
            "SELECT p.*, c.title AS course_title, l.title AS lesson_title, t.title AS test_title "
            "FROM progress p "
            "LEFT JOIN courses c ON p.course_id = c.id "
            "LEFT JOIN lessons l ON p.lesson_id = l.id "
            "LEFT JOIN tests t ON p.test_id = t.id "
            "WHERE p.user_id = ? "
            "ORDER BY p.created_at DESC, p.id DESC",
            (self.user_id,),
        ).fetchall()
        return rows_to_dicts(rows)

    def update(self, progress_id: int, changes: ProgressUpdate) -> dict:
        """Apply `changes` to one of this user's records and return it."""
        db = get_db()
        row = db.execute(
            "SELECT user_id FROM progress WHERE id = ?", (progress_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError("Progress record not found")
        if row["user_id"] != self.user_id:
            raise AuthorizationError("Access denied")

        apply_update(changes, progress_id)
        return dict(db.execute("SELECT * FROM progress WHERE id = ?", (progress_id,)).fetchone())

    def completion(self, course_id: int) -> dict:
        """Completed lessons and tests against the course's totals.

        Every completed record counts, so recording the same lesson twice
        counts twice.
        """
        db = get_db()
        total_lessons = db.execute(
            "SELECT COUNT(*) FROM lessons WHERE course_id = ?", (course_id,)
        ).fetchone()[0]
        total_tests = db.execute(
            "SELECT COUNT(*) FROM tests WHERE course_id = ?", (course_id,)
        ).fetchone()[0]
        done = db.execute(
            "SELECT "
            "COALESCE(SUM(CASE WHEN progress_type = 'lesson' AND status = 'completed' THEN 1 ELSE 0 END), 0) AS lessons, "
            "COALESCE(SUM(CASE WHEN progress_type = 'test' AND status = 'completed' THEN 1 ELSE 0 END), 0) AS tests "
            "FROM progress WHERE user_id = ? AND course_id = ?",
            (self.user_id, course_id),
        ).fetchone()

        completed = done["lessons"] + done["tests"]
        return {
            "totalLessons": total_lessons,
            "totalTests": total_tests,
            "completedLessons": done["lessons"],
            "completedTests": done["tests"],
            "completionRate": completion_rate(completed, total_lessons + total_tests),
        }
