"""Tests for database.py — schema creation, migrations, connection setup."""

import sqlite3

import pytest

import course_store
import lesson_store
from database import MIGRATIONS, get_db, init_db, run_migrations


class TestSchema:
    """Verify all tables are created correctly."""

    def test_tables_exist(self, app):
        db = get_db()
        tables = [r["name"] for r in db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()]
        expected = [
            "audit_log", "courses", "educators", "live_class_registrations",
            "live_classes", "lessons", "progress", "schema_version",
            "subscriptions", "test_questions", "tests", "users",
        ]
        for t in expected:
            assert t in tables, f"Table {t} not found"

    def test_wal_mode(self, db):
        assert db.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_user_role_defaults_to_student(self, db):
        db.execute(
            "INSERT INTO users (name, email, password) VALUES ('A B', 'ab@example.com', 'x')"
        )
        row = db.execute("SELECT role FROM users WHERE email = 'ab@example.com'").fetchone()
        assert row["role"] == "student"

    def test_user_email_unique(self, db):
        db.execute("INSERT INTO users (name, email, password) VALUES ('A', 'dup@example.com', 'x')")
        db.commit()
        with pytest.raises(sqlite3.IntegrityError):
            db.execute("INSERT INTO users (name, email, password) VALUES ('B', 'dup@example.com', 'y')")

    def test_course_delete_leaves_lessons(self, db, course):
        lesson_id = lesson_store.create(course["id"], "Orphan", "d", 10, "text")
        course_store.delete(course["id"])
        assert lesson_store.get(lesson_id) is not None


class TestMigrations:
    def test_all_versions_recorded(self, db):
        versions = {r["version"] for r in db.execute("SELECT version FROM schema_version").fetchall()}
        assert versions == {1} | {v for v, _ in MIGRATIONS}

    def test_idempotent(self, db):
        init_db()
        run_migrations()
        count = db.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
        assert count == 1 + len(MIGRATIONS)

    def test_indexes_created(self, db):
        indexes = {r["name"] for r in db.execute(
            "SELECT name FROM sqlite_master WHERE type='index'"
        ).fetchall()}
        assert "idx_lessons_course_order" in indexes
        assert "idx_subscriptions_user_course" in indexes
