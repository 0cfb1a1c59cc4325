import hashlib
import hmac
import json
from unittest.mock import patch

from pydantic import SecretStr
import pytest

from mentorhub.core.config import settings
from mentorhub.models.booking import SessionStatus
from mentorhub.models.notification import Notification
from tests.helpers import WEDNESDAY, auth_headers


class TestAvailabilityRoutes:
    def test_mentor_sets_and_reads_week(self, client, mentor, student):
        response = client.put(
            "/availability",
            json={"day_of_week": 3, "start_time": "9:00", "end_time": "12:00"},
            headers=auth_headers(mentor),
        )
        assert response.status_code == 200
        assert response.json()["start_time"] == "09:00"

        listed = client.get(f"/availability/{mentor.id}", headers=auth_headers(student))
        assert listed.status_code == 200
        assert [r["day_of_week"] for r in listed.json()] == [3]

    def test_student_cannot_set_availability(self, client, student):
        response = client.put(
            "/availability",
            json={"day_of_week": 3, "start_time": "09:00", "end_time": "12:00"},
            headers=auth_headers(student),
        )
        assert response.status_code == 403

    def test_exception_round_trip(self, client, mentor, wednesday_rule):
        added = client.post(
            "/availability/3/exceptions",
            json={"date": WEDNESDAY.isoformat(), "reason": "Conference"},
            headers=auth_headers(mentor),
        )
        assert added.status_code == 200
        assert added.json()["type"] == "unavailable"

        removed = client.delete(
            f"/availability/3/exceptions/{WEDNESDAY.isoformat()}", headers=auth_headers(mentor)
        )
        assert removed.status_code == 200

        again = client.delete(
            f"/availability/3/exceptions/{WEDNESDAY.isoformat()}", headers=auth_headers(mentor)
        )
        assert again.status_code == 404

    def test_slots(self, client, student, mentor, wednesday_rule, make_session):
        make_session(session_time="09:00", duration="2hours")
        response = client.get(
            f"/availability/{mentor.id}/slots",
            params={"date": WEDNESDAY.isoformat(), "duration": "1hour"},
            headers=auth_headers(student),
        )
        assert response.status_code == 200
        assert response.json()["slots"] == ["11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]

    def test_slots_require_identity(self, client, mentor):
        response = client.get(
            f"/availability/{mentor.id}/slots", params={"date": WEDNESDAY.isoformat()}
        )
        assert response.status_code == 401

    def test_slots_unknown_duration(self, client, student, mentor):
        response = client.get(
            f"/availability/{mentor.id}/slots",
            params={"date": WEDNESDAY.isoformat(), "duration": "45min"},
            headers=auth_headers(student),
        )
        assert response.status_code == 400


class TestReviewRoutes:
    def test_create_and_list(self, client, student, mentor, make_session):
        booking = make_session(status=SessionStatus.COMPLETED.value)
        created = client.post(
            "/reviews",
            json={
                "session_id": booking.id,
                "rating": 5,
                "comment": "Patient and very well prepared.",
                "would_recommend": True,
            },
            headers=auth_headers(student),
        )
        assert created.status_code == 200
        review_id = created.json()["id"]

        listed = client.get("/reviews", params={"mentor_id": mentor.id}, headers=auth_headers(student))
        assert listed.status_code == 200
        assert [r["id"] for r in listed.json()["items"]] == [review_id]

        response = client.put(
            f"/reviews/{review_id}",
            json={"mentor_response": "Thanks, see you next week"},
            headers=auth_headers(mentor),
        )
        assert response.status_code == 200
        assert response.json()["mentor_response"] == "Thanks, see you next week"

    def test_review_of_pending_session_rejected(self, client, student, make_session):
        booking = make_session()
        response = client.post(
            "/reviews",
            json={
                "session_id": booking.id,
                "rating": 4,
                "comment": "Looking forward to it.",
                "would_recommend": True,
            },
            headers=auth_headers(student),
        )
        assert response.status_code == 400


def _sign(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestPaymentRoutes:
    @pytest.fixture
    def registered(self, client, student, make_session):
        booking = make_session()
        response = client.post(
            "/payments",
            json={"session_id": booking.id, "payment_method": "card", "external_reference": "pi_42"},
            headers=auth_headers(student),
        )
        assert response.status_code == 200
        return booking

    def test_unsigned_callback_without_secret(self, client, registered, mentor):
        response = client.post(
            "/payments/callback", json={"external_reference": "pi_42", "status": "succeeded"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

        booking = client.get(f"/bookings/{registered.id}", headers=auth_headers(mentor))
        assert booking.json()["status"] == "confirmed"

    def test_signed_callback(self, client, registered):
        body = json.dumps({"external_reference": "pi_42", "status": "failed"}).encode()
        with patch.object(settings, "payment_callback_secret", SecretStr("s3cret")):
            response = client.post(
                "/payments/callback",
                content=body,
                headers={"X-Payment-Signature": _sign(body, "s3cret")},
            )
        assert response.status_code == 200
        assert response.json()["status"] == "failed"

    def test_bad_signature(self, client, registered):
        body = json.dumps({"external_reference": "pi_42", "status": "succeeded"}).encode()
        with patch.object(settings, "payment_callback_secret", SecretStr("s3cret")):
            response = client.post(
                "/payments/callback",
                content=body,
                headers={"X-Payment-Signature": _sign(body, "wrong")},
            )
        assert response.status_code == 401

    def test_malformed_json(self, client):
        response = client.post("/payments/callback", content=b"{not json")
        assert response.status_code == 400


class TestNotificationRoutes:
    @pytest.fixture
    def notices(self, db, mentor, student):
        rows = [
            Notification(user_id=mentor.id, type="booking", title="Booked", message="body", data={}),
            Notification(user_id=mentor.id, type="payment", title="Paid", message="body", data={}),
            Notification(user_id=student.id, type="booking", title="Yours", message="body", data={}),
        ]
        db.add_all(rows)
        db.commit()
        return rows

    def test_inbox_lifecycle(self, client, mentor, notices):
        listed = client.get("/notifications", headers=auth_headers(mentor))
        assert listed.status_code == 200
        body = listed.json()
        assert body["total"] == 2
        assert body["unread_count"] == 2
        assert {n["title"] for n in body["items"]} == {"Booked", "Paid"}

        read = client.patch(f"/notifications/{notices[0].id}", headers=auth_headers(mentor))
        assert read.status_code == 200
        assert read.json()["is_read"] is True

        unread = client.get("/notifications?unread_only=true", headers=auth_headers(mentor))
        assert [n["title"] for n in unread.json()["items"]] == ["Paid"]

        marked = client.post("/notifications/mark-all-read", headers=auth_headers(mentor))
        assert marked.status_code == 200
        assert marked.json()["count"] == 1

        deleted = client.delete(f"/notifications/{notices[1].id}", headers=auth_headers(mentor))
        assert deleted.status_code == 200
        assert client.get("/notifications", headers=auth_headers(mentor)).json()["total"] == 1

    def test_other_users_notification_is_not_found(self, client, student, notices):
        response = client.patch(f"/notifications/{notices[0].id}", headers=auth_headers(student))
        assert response.status_code == 404
        response = client.delete(f"/notifications/{notices[0].id}", headers=auth_headers(student))
        assert response.status_code == 404

    def test_type_filter_validation(self, client, mentor):
        response = client.get("/notifications?type=marketing", headers=auth_headers(mentor))
        assert response.status_code == 400

    def test_requires_identity(self, client):
        assert client.get("/notifications").status_code == 401


class TestHealthRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics(self, client, student):
        client.get("/bookings", headers=auth_headers(student))
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "mentorhub_service_operations_total" in response.text

    def test_unknown_route_is_problem_json(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["title"] == "Not Found"
