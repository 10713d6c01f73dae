"""Tests for lesson routes."""

import lesson_store


def _seed(course_id, title, order_index):
    return lesson_store.create(
        course_id=course_id,
        title=title,
        description=f"{title} notes",
        duration=30,
        lesson_type="video",
        order_index=order_index,
    )


class TestLessons:
    def test_create(self, client, auth_headers, course):
        resp = client.post("/api/lessons", headers=auth_headers, json={
            "courseId": course["id"],
            "title": "Newton's Laws",
            "description": "Inertia, F = ma, action and reaction",
            "duration": 45,
            "lessonType": "video",
            "videoUrl": "https://cdn.example.com/newton.mp4",
        })
        assert resp.status_code == 201
        lesson = lesson_store.get(resp.get_json()["data"]["lessonId"])
        assert lesson["order_index"] == 0
        assert lesson["course_title"] == course["title"]
        assert lesson["video_url"].endswith("newton.mp4")

    def test_create_missing_fields(self, client, auth_headers, course):
        resp = client.post("/api/lessons", headers=auth_headers, json={"courseId": course["id"]})
        assert resp.status_code == 400
        assert "lessonType is required" in resp.get_json()["details"]

    def test_create_unknown_course(self, client, auth_headers):
        resp = client.post("/api/lessons", headers=auth_headers, json={
            "courseId": 999, "title": "t", "description": "d", "duration": 5, "lessonType": "text",
        })
        assert resp.status_code == 404

    def test_create_wrongly_typed_fields(self, client, auth_headers, course):
        resp = client.post("/api/lessons", headers=auth_headers, json={
            "courseId": course["id"], "title": "t", "description": {"text": "d"}, "duration": 5,
            "lessonType": "text", "content": 12,
        })
        assert resp.status_code == 400
        assert resp.get_json()["details"] == ["description must be a string", "content must be a string"]

    def test_course_lessons_in_order(self, client, course):
        third = _seed(course["id"], "Work and Energy", 3)
        first = _seed(course["id"], "Kinematics", 1)
        second_a = _seed(course["id"], "Laws of Motion", 2)
        second_b = _seed(course["id"], "Friction", 2)

        data = client.get(f"/api/lessons/course/{course['id']}").get_json()["data"]
        assert [l["id"] for l in data] == [first, second_a, second_b, third]

    def test_course_lessons_unknown_course(self, client):
        assert client.get("/api/lessons/course/999").status_code == 404

    def test_update_and_delete(self, client, auth_headers, course):
        lesson_id = _seed(course["id"], "Kinematics", 1)
        resp = client.put(f"/api/lessons/{lesson_id}", headers=auth_headers, json={"orderIndex": 5})
        assert resp.get_json()["data"]["order_index"] == 5

        assert client.delete(f"/api/lessons/{lesson_id}", headers=auth_headers).status_code == 200
        resp = client.get(f"/api/lessons/{lesson_id}")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Lesson not found"

    def test_list(self, client, course):
        _seed(course["id"], "Kinematics", 1)
        body = client.get("/api/lessons").get_json()
        assert body["meta"]["count"] == 1
