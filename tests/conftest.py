"""
Test fixtures for the learning platform API.

Provides app, client and db fixtures with file-based SQLite, plus bearer
token headers for two students and an admin, and a seeded educator/course.
"""

from __future__ import annotations

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

STUDENT_PASSWORD = "Student@123"


def _make_user(name: str, email: str, role: str = "student") -> int:
    import user_store
    from database import get_db

    user_id = user_store.create_user(
        name=name,
        email=email,
        password=STUDENT_PASSWORD,
        target_exam="JEE",
        preferred_language="English",
        preparation_level="Beginner",
    )
    if role != "student":
        db = get_db()
        db.execute("UPDATE users SET role = ? WHERE id = ?", (role, user_id))
        db.commit()
    return user_id


def _headers(user_id: int, email: str, name: str, role: str = "student") -> dict:
    from auth import issue_token
    return {"Authorization": f"Bearer {issue_token(user_id, email, name, role)}"}


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite for testing."""
    from app import create_app

    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "test.db"),
    })

    with app.app_context():
        from database import init_db, run_migrations

        init_db()
        run_migrations()
        yield app


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Direct database access for store tests."""
    from database import get_db
    return get_db()


@pytest.fixture
def student_id(app):
    return _make_user("Test Student", "student@example.com")


@pytest.fixture
def auth_headers(app, student_id):
    """Bearer token for the seeded student."""
    return _headers(student_id, "student@example.com", "Test Student")


@pytest.fixture
def second_student_id(app):
    return _make_user("Other Student", "other@example.com")


@pytest.fixture
def second_auth_headers(app, second_student_id):
    return _headers(second_student_id, "other@example.com", "Other Student")


@pytest.fixture
def admin_headers(app):
    admin_id = _make_user("Platform Admin", "admin@example.com", role="admin")
    return _headers(admin_id, "admin@example.com", "Platform Admin", "admin")


@pytest.fixture
def educator(app):
    """A seeded educator row (dict)."""
    import educator_store

    educator_id = educator_store.create(
        name="Dr Rao",
        email="rao@example.com",
        bio="Physics educator with a decade of JEE coaching",
        expertise="Physics",
        experience=10,
        qualification="PhD",
    )
    return educator_store.get(educator_id)


@pytest.fixture
def course(app, educator):
    """A seeded course owned by `educator` (dict)."""
    import course_store

    course_id = course_store.create(
        title="JEE Physics Crash Course",
        description="Mechanics, optics and modern physics for JEE Main.",
        educator_id=educator["id"],
        target_exam="JEE",
        duration="3 months",
        validity_period="6 months",
        price=499.0,
        discount=0.0,
        course_type="Video",
    )
    return course_store.get(course_id)
