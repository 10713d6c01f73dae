"""End-to-end flows through the HTTP API."""

from datetime import date, timedelta

from subscription_store import add_months, has_active_subscription


class TestCatalogFlow:
    def test_educator_course_lessons(self, client, auth_headers):
        resp = client.post("/api/educators", headers=auth_headers, json={
            "name": "Ms Kapoor",
            "email": "kapoor@example.com",
            "bio": "Quantitative aptitude for CAT",
            "expertise": "Mathematics",
            "experience": 6,
            "qualification": "MBA",
        })
        educator_id = resp.get_json()["data"]["educatorId"]

        resp = client.post("/api/courses", headers=auth_headers, json={
            "title": "CAT Quant Mastery",
            "description": "Arithmetic, algebra and geometry drills.",
            "educatorId": educator_id,
            "targetExam": "CAT",
            "duration": "4 months",
            "validityPeriod": "8 months",
            "price": 2499,
            "courseType": "Video",
        })
        assert resp.status_code == 201
        course_id = resp.get_json()["data"]["courseId"]

        lesson_ids = []
        for index, title in enumerate(["Percentages", "Ratios"]):
            resp = client.post("/api/lessons", headers=auth_headers, json={
                "courseId": course_id,
                "title": title,
                "description": f"{title} from first principles",
                "duration": 40,
                "lessonType": "video",
                "orderIndex": index,
            })
            lesson_ids.append(resp.get_json()["data"]["lessonId"])

        lessons = client.get(f"/api/lessons/course/{course_id}").get_json()["data"]
        assert [l["id"] for l in lessons] == lesson_ids
        assert [l["order_index"] for l in lessons] == [0, 1]

        courses = client.get(f"/api/educators/{educator_id}/courses").get_json()["data"]
        assert [c["id"] for c in courses] == [course_id]


class TestSubscriptionFlow:
    def test_register_login_subscribe_pay(self, app, client, course):
        resp = client.post("/api/auth/register", json={
            "name": "Rohan Das",
            "email": "rohan@example.com",
            "password": "Rohan@2026",
            "targetExam": "JEE",
            "preferredLanguage": "Bengali",
            "preparationLevel": "Beginner",
        })
        assert resp.status_code == 201
        user_id = resp.get_json()["data"]["userId"]

        resp = client.post("/api/auth/login", json={
            "email": "rohan@example.com", "password": "Rohan@2026",
        })
        headers = {"Authorization": f"Bearer {resp.get_json()['data']['token']}"}

        resp = client.post("/api/subscriptions", headers=headers, json={
            "courseId": course["id"], "subscriptionType": "monthly", "duration": 1, "amount": 499,
        })
        assert resp.status_code == 201
        subscription_id = resp.get_json()["data"]["subscriptionId"]

        access = client.get(f"/api/subscriptions/access/{course['id']}", headers=headers)
        assert access.get_json()["data"]["hasAccess"] is False

        client.patch(f"/api/subscriptions/{subscription_id}/payment", headers=headers,
                     json={"paymentStatus": "completed", "transactionId": "pay_001"})

        access = client.get(f"/api/subscriptions/access/{course['id']}", headers=headers)
        assert access.get_json()["data"]["hasAccess"] is True

        end = add_months(date.today(), 1)
        subscription = client.get(f"/api/subscriptions/{subscription_id}", headers=headers).get_json()["data"]
        assert subscription["end_date"] == end.isoformat()
        assert has_active_subscription(user_id, course["id"], on=end)
        assert not has_active_subscription(user_id, course["id"], on=end + timedelta(days=1))

        resp = client.patch(f"/api/subscriptions/{subscription_id}/cancel", headers=headers)
        assert resp.status_code == 200
        access = client.get(f"/api/subscriptions/access/{course['id']}", headers=headers)
        assert access.get_json()["data"]["hasAccess"] is False
