"""
Course tests and their questions.

Question options are a list in Python and JSON text in the database; the
conversion happens only in this module.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from database import get_db, now_iso, rows_to_dicts
from updates import FieldUpdate, apply_update

_SELECT = (
    "SELECT t.*, c.title AS course_title "
    "FROM tests t LEFT JOIN courses c ON t.course_id = c.id "
)


@dataclass
class AssessmentUpdate(FieldUpdate):
    table = "tests"

    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    total_marks: Optional[int] = None
    passing_marks: Optional[int] = None


def create(
    course_id: int,
    title: str,
    description: str,
    duration: int,
    total_marks: int,
    passing_marks: int,
    test_type: str,
) -> int:
    now = now_iso()
    db = get_db()
    cur = db.execute(
        "INSERT INTO tests (course_id, title, description, duration, total_marks, passing_marks, "
        "test_type, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (course_id, title, description, duration, total_marks, passing_marks, test_type, now, now),
    )
    db.commit()
    return cur.lastrowid


def get(test_id: int) -> dict | None:
    row = get_db().execute(_SELECT + "WHERE t.id = ?", (test_id,)).fetchone()
    return dict(row) if row else None


def list_tests(limit: int = 50, offset: int = 0) -> list[dict]:
    rows = get_db().execute(
        _SELECT + "ORDER BY t.created_at DESC, t.id DESC LIMIT ? OFFSET ?",
        (limit, offset),
    ).fetchall()
    return rows_to_dicts(rows)


def by_course(course_id: int) -> list[dict]:
    rows = get_db().execute(
        "SELECT * FROM tests WHERE course_id = ? ORDER BY created_at DESC, id DESC",
        (course_id,),
    ).fetchall()
    return rows_to_dicts(rows)


def update(test_id: int, changes: AssessmentUpdate) -> dict | None:
    if not apply_update(changes, test_id):
        return None
    return get(test_id)


def delete(test_id: int) -> bool:
    db = get_db()
    cur = db.execute("DELETE FROM tests WHERE id = ?", (test_id,))
    db.commit()
    return cur.rowcount > 0


# ── Questions ───────────────────────────────────────────────


def add_question(
    test_id: int,
    question: str,
    options: list[Any],
    correct_answer: str,
    marks: int,
    explanation: str = "",
) -> int:
    db = get_db()
    cur = db.execute(
        "INSERT INTO test_questions (test_id, question, options, correct_answer, marks, "
        "explanation, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
        (test_id, question, json.dumps(options), correct_answer, marks, explanation, now_iso()),
    )
    db.commit()
    return cur.lastrowid


def questions(test_id: int) -> list[dict]:
    rows = get_db().execute(
        "SELECT * FROM test_questions WHERE test_id = ? ORDER BY id ASC", (test_id,)
    ).fetchall()
    result = []
    for r in rows:
        q = dict(r)
        q["options"] = json.loads(q["options"] or "[]")
        result.append(q)
    return result
