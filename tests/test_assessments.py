"""Tests for course tests (/api/tests) and their questions."""

import assessment_store


def _seed_test(course_id, title="Mechanics Mock 1"):
    return assessment_store.create(
        course_id=course_id,
        title=title,
        description="Full-length mock",
        duration=180,
        total_marks=300,
        passing_marks=120,
        test_type="mock",
    )


class TestAssessments:
    def test_create(self, client, auth_headers, course):
        resp = client.post("/api/tests", headers=auth_headers, json={
            "courseId": course["id"],
            "title": "Optics Chapter Test",
            "description": "Ray and wave optics",
            "duration": "60",
            "totalMarks": 100,
            "passingMarks": 40,
            "testType": "chapter",
        })
        assert resp.status_code == 201
        test = assessment_store.get(resp.get_json()["data"]["testId"])
        assert test["duration"] == 60
        assert test["course_title"] == course["title"]

    def test_create_non_numeric_marks(self, client, auth_headers, course):
        resp = client.post("/api/tests", headers=auth_headers, json={
            "courseId": course["id"], "title": "t", "description": "d", "duration": 60,
            "totalMarks": "many", "passingMarks": 40, "testType": "chapter",
        })
        assert resp.status_code == 400

    def test_create_numeric_title(self, client, auth_headers, course):
        resp = client.post("/api/tests", headers=auth_headers, json={
            "courseId": course["id"], "title": 2024, "description": "d", "duration": 60,
            "totalMarks": 100, "passingMarks": 40, "testType": "chapter",
        })
        assert resp.status_code == 400
        assert resp.get_json()["details"] == ["title must be a string"]

    def test_create_unknown_course(self, client, auth_headers):
        resp = client.post("/api/tests", headers=auth_headers, json={
            "courseId": 999, "title": "t", "description": "d", "duration": 60,
            "totalMarks": 100, "passingMarks": 40, "testType": "chapter",
        })
        assert resp.status_code == 404

    def test_questions_round_trip_options(self, client, auth_headers, course):
        test_id = _seed_test(course["id"])
        resp = client.post(f"/api/tests/{test_id}/questions", headers=auth_headers, json={
            "question": "SI unit of force?",
            "options": ["Joule", "Newton", "Watt", "Pascal"],
            "correctAnswer": "Newton",
            "marks": 4,
            "explanation": "1 N = 1 kg m/s^2",
        })
        assert resp.status_code == 201

        data = client.get(f"/api/tests/{test_id}").get_json()["data"]
        assert data["title"] == "Mechanics Mock 1"
        assert len(data["questions"]) == 1
        question = data["questions"][0]
        assert question["options"] == ["Joule", "Newton", "Watt", "Pascal"]
        assert question["correct_answer"] == "Newton"

    def test_options_must_be_list(self, client, auth_headers, course):
        test_id = _seed_test(course["id"])
        resp = client.post(f"/api/tests/{test_id}/questions", headers=auth_headers, json={
            "question": "q", "options": "A,B", "correctAnswer": "A", "marks": 1,
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Options must be a list"

    def test_question_text_must_be_string(self, client, auth_headers, course):
        test_id = _seed_test(course["id"])
        resp = client.post(f"/api/tests/{test_id}/questions", headers=auth_headers, json={
            "question": 7, "options": ["A", "B"], "correctAnswer": "A", "marks": 1,
        })
        assert resp.status_code == 400
        assert resp.get_json()["details"] == ["question must be a string"]

    def test_question_for_unknown_test(self, client, auth_headers):
        resp = client.post("/api/tests/999/questions", headers=auth_headers, json={
            "question": "q", "options": ["A"], "correctAnswer": "A", "marks": 1,
        })
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Test not found"

    def test_by_course(self, client, course):
        _seed_test(course["id"])
        _seed_test(course["id"], title="Mechanics Mock 2")
        assert len(client.get(f"/api/tests/course/{course['id']}").get_json()["data"]) == 2

    def test_update_and_delete(self, client, auth_headers, course):
        test_id = _seed_test(course["id"])
        resp = client.put(f"/api/tests/{test_id}", headers=auth_headers, json={"passingMarks": 150})
        assert resp.get_json()["data"]["passing_marks"] == 150
        assert client.delete(f"/api/tests/{test_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/tests/{test_id}").status_code == 404
