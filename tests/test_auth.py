"""Tests for auth.py: register, login, tokens, profile."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

STUDENT_PASSWORD = "Student@123"


def _registration(**overrides):
    payload = {
        "name": "Asha Verma",
        "email": "asha@example.com",
        "password": "Secure@123",
        "targetExam": "NEET",
        "preferredLanguage": "Hindi",
        "preparationLevel": "Intermediate",
    }
    payload.update(overrides)
    return payload


class TestRegister:
    def test_register_success(self, client):
        resp = client.post("/api/auth/register", json=_registration())
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["email"] == "asha@example.com"
        assert body["data"]["targetExam"] == "NEET"
        assert body["data"]["userId"] > 0
        assert body["data"]["token"]

    def test_password_is_hashed(self, app, client):
        client.post("/api/auth/register", json=_registration())
        with app.app_context():
            from database import get_db
            row = get_db().execute(
                "SELECT password FROM users WHERE email = ?", ("asha@example.com",)
            ).fetchone()
        assert row["password"] != "Secure@123"
        assert "Secure@123" not in row["password"]

    def test_same_password_gets_different_hashes(self, app, client):
        client.post("/api/auth/register", json=_registration())
        client.post("/api/auth/register", json=_registration(email="asha2@example.com"))
        with app.app_context():
            from database import get_db
            rows = get_db().execute("SELECT password FROM users ORDER BY id").fetchall()
        assert rows[0]["password"] != rows[1]["password"]

    def test_email_is_lowercased(self, client):
        resp = client.post("/api/auth/register", json=_registration(email="Asha@Example.COM"))
        assert resp.get_json()["data"]["email"] == "asha@example.com"

    def test_duplicate_email(self, client):
        client.post("/api/auth/register", json=_registration())
        resp = client.post("/api/auth/register", json=_registration(name="Someone Else"))
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Email already registered"

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/register", json={})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Validation failed"
        assert "Name is required" in body["details"]
        assert "Preparation level is required" in body["details"]

    def test_weak_password(self, client):
        resp = client.post("/api/auth/register", json=_registration(password="password"))
        assert resp.status_code == 400
        assert any("Password must be" in d for d in resp.get_json()["details"])

    def test_non_string_password(self, client):
        resp = client.post("/api/auth/register", json=_registration(password=123456789))
        assert resp.status_code == 400
        assert resp.get_json()["details"] == ["Password must be a string"]

    def test_invalid_name(self, client):
        resp = client.post("/api/auth/register", json=_registration(name="R2D2"))
        assert resp.status_code == 400

    def test_invalid_email(self, client):
        resp = client.post("/api/auth/register", json=_registration(email="not-an-email"))
        assert resp.status_code == 400
        assert "Please provide a valid email address" in resp.get_json()["details"]

    def test_unknown_exam(self, client):
        resp = client.post("/api/auth/register", json=_registration(targetExam="SAT"))
        assert resp.status_code == 400
        assert any(d.startswith("Target exam must be one of") for d in resp.get_json()["details"])

    def test_unknown_language_and_level(self, client):
        resp = client.post(
            "/api/auth/register",
            json=_registration(preferredLanguage="French", preparationLevel="Expert"),
        )
        details = resp.get_json()["details"]
        assert any(d.startswith("Preferred language") for d in details)
        assert any(d.startswith("Preparation level") for d in details)

    def test_register_writes_audit_entry(self, app, client):
        client.post("/api/auth/register", json=_registration())
        with app.app_context():
            from database import get_db
            row = get_db().execute(
                "SELECT action, detail FROM audit_log WHERE action = 'register'"
            ).fetchone()
        assert row is not None
        assert "asha@example.com" in row["detail"]


class TestLogin:
    def test_login_success(self, client, student_id):
        resp = client.post("/api/auth/login", json={
            "email": "student@example.com", "password": STUDENT_PASSWORD,
        })
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["userId"] == student_id
        assert data["preferredLanguage"] == "English"
        assert data["token"]
        assert "password" not in data

    def test_login_one_character_off(self, client, student_id):
        wrong = STUDENT_PASSWORD[:-1] + "4"
        resp = client.post("/api/auth/login", json={
            "email": "student@example.com", "password": wrong,
        })
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid email or password"

    def test_login_unknown_email(self, client):
        resp = client.post("/api/auth/login", json={
            "email": "ghost@example.com", "password": "Ghost@1234",
        })
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid email or password"

    def test_login_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={"email": "student@example.com"})
        assert resp.status_code == 400
        assert "Password is required" in resp.get_json()["details"]

    @pytest.mark.parametrize("password", [12345678, ["Student@123"], {"value": "Student@123"}])
    def test_login_non_string_password(self, client, student_id, password):
        resp = client.post("/api/auth/login", json={
            "email": "student@example.com", "password": password,
        })
        assert resp.status_code == 400
        assert resp.get_json()["details"] == ["Password must be a string"]

    def test_register_then_login(self, client):
        client.post("/api/auth/register", json=_registration())
        resp = client.post("/api/auth/login", json={
            "email": "asha@example.com", "password": "Secure@123",
        })
        assert resp.status_code == 200


class TestTokens:
    def test_no_token(self, client):
        resp = client.get("/api/auth/profile")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Access denied. No valid token provided."

    def test_malformed_header(self, client):
        resp = client.get("/api/auth/profile", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Access denied. No valid token provided."

    def test_bad_signature(self, client, student_id):
        token = jwt.encode(
            {"userId": student_id, "email": "student@example.com", "name": "Test Student",
             "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "some-other-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )
        resp = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid token"

    def test_expired_token(self, app, client, student_id):
        token = jwt.encode(
            {"userId": student_id, "email": "student@example.com", "name": "Test Student",
             "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            app.config["JWT_SECRET"],
            algorithm="HS256",
        )
        resp = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Token expired"

    def test_token_carries_identity(self, app, client):
        resp = client.post("/api/auth/register", json=_registration())
        token = resp.get_json()["data"]["token"]
        payload = jwt.decode(token, app.config["JWT_SECRET"], algorithms=["HS256"])
        assert payload["email"] == "asha@example.com"
        assert payload["name"] == "Asha Verma"
        assert payload["role"] == "student"
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_verify(self, client, auth_headers, student_id):
        resp = client.get("/api/auth/verify", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"] == {
            "userId": student_id, "email": "student@example.com", "name": "Test Student",
        }

    def test_refresh_issues_working_token(self, client, auth_headers):
        resp = client.post("/api/auth/refresh", headers=auth_headers)
        assert resp.status_code == 200
        token = resp.get_json()["data"]["token"]
        resp = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200

    def test_logout(self, client, auth_headers):
        resp = client.post("/api/auth/logout", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logout successful"

    def test_identity_not_reused_between_requests(self, client, auth_headers):
        assert client.get("/api/auth/verify", headers=auth_headers).status_code == 200
        assert client.get("/api/auth/verify").status_code == 401


class TestProfile:
    def test_get_profile(self, client, auth_headers):
        resp = client.get("/api/auth/profile", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["email"] == "student@example.com"
        assert data["targetExam"] == "JEE"
        assert "password" not in data

    def test_profile_for_deleted_user(self, app, client, auth_headers, student_id):
        with app.app_context():
            from database import get_db
            db = get_db()
            db.execute("DELETE FROM users WHERE id = ?", (student_id,))
            db.commit()
        resp = client.get("/api/auth/profile", headers=auth_headers)
        assert resp.status_code == 404

    def test_update_profile(self, client, auth_headers):
        resp = client.put("/api/auth/profile", headers=auth_headers, json={
            "targetExam": "GATE",
            "preparationLevel": "Advanced",
            "email": "hijack@example.com",
        })
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["targetExam"] == "GATE"
        assert data["preparationLevel"] == "Advanced"
        assert data["email"] == "student@example.com"

    def test_update_profile_nothing_allowed(self, client, auth_headers):
        resp = client.put("/api/auth/profile", headers=auth_headers, json={"email": "x@example.com"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "No valid fields to update"

    def test_update_profile_rejects_bad_enum(self, client, auth_headers):
        resp = client.put("/api/auth/profile", headers=auth_headers, json={"targetExam": "SAT"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Validation failed"
