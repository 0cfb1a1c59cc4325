from mentorhub.core.exceptions import (
    ForbiddenException,
    InvalidStateTransitionException,
    NotFoundException,
)
from mentorhub.errors import PROBLEM_MEDIA_TYPE
from mentorhub.models.booking import SessionStatus
from mentorhub.services.conflict_checker import ALREADY_BOOKED_REASON, OUTSIDE_HOURS_REASON

from tests.helpers import auth_headers, booking_payload


class TestCreateBookingRoute:
    def test_books_session(self, client, student, mentor, wednesday_rule):
        response = client.post(
            "/bookings", json=booking_payload(mentor.id), headers=auth_headers(student)
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Session booked successfully"
        assert body["amount"] == "50.00"
        assert body["currency"] == "USD"
        assert body["session"]["status"] == "pending"
        assert body["session"]["session_date"] == "2024-12-25"
        assert body["session"]["session_time"] == "10:00"

    def test_conflict_reason_is_the_detail(self, client, student, mentor, wednesday_rule):
        client.post("/bookings", json=booking_payload(mentor.id), headers=auth_headers(student))
        response = client.post(
            "/bookings", json=booking_payload(mentor.id), headers=auth_headers(student)
        )
        assert response.status_code == 409
        assert response.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
        problem = response.json()
        assert problem["detail"] == ALREADY_BOOKED_REASON
        assert problem["errors"]["reason"] == ALREADY_BOOKED_REASON
        assert problem["instance"] == "/bookings"

    def test_outside_hours(self, client, student, mentor, wednesday_rule):
        response = client.post(
            "/bookings",
            json=booking_payload(mentor.id, session_time="18:00"),
            headers=auth_headers(student),
        )
        assert response.status_code == 409
        assert response.json()["detail"] == OUTSIDE_HOURS_REASON

    def test_validation_errors(self, client, student):
        response = client.post(
            "/bookings", json={"mentor_id": "x", "duration": "45min"}, headers=auth_headers(student)
        )
        assert response.status_code == 400
        problem = response.json()
        assert problem["code"] == "VALIDATION_ERROR"
        assert {e["field"] for e in problem["errors"]["errors"]} >= {"duration", "subject"}

    def test_empty_body(self, client, student):
        response = client.post("/bookings", headers=auth_headers(student))
        assert response.status_code == 400

    def test_unknown_fields_rejected(self, client, student, mentor):
        response = client.post(
            "/bookings",
            json=booking_payload(mentor.id, amount="0.01"),
            headers=auth_headers(student),
        )
        assert response.status_code == 400

    def test_requires_identity(self, client, mentor):
        response = client.post("/bookings", json=booking_payload(mentor.id))
        assert response.status_code == 401
        assert response.json()["title"] == "Unauthorized"

    def test_rejects_unknown_role(self, client, student, mentor):
        response = client.post(
            "/bookings",
            json=booking_payload(mentor.id),
            headers=auth_headers(student, role="owner"),
        )
        assert response.status_code == 401

    def test_mentor_is_forbidden(self, client, mentor, wednesday_rule):
        response = client.post(
            "/bookings", json=booking_payload(mentor.id), headers=auth_headers(mentor)
        )
        assert response.status_code == 403

    def test_unknown_mentor(self, client, student):
        response = client.post(
            "/bookings", json=booking_payload("nobody"), headers=auth_headers(student)
        )
        assert response.status_code == 404


class TestReadRoutes:
    def test_list_includes_counterparty(self, client, student, mentor, make_session):
        make_session()
        response = client.get("/bookings", headers=auth_headers(student))
        assert response.status_code == 200
        page = response.json()
        assert (page["total"], page["page"], page["total_pages"]) == (1, 1, 1)
        assert page["has_next"] is False
        [item] = page["items"]
        assert item["counterparty_name"] == mentor.name
        assert item["counterparty_email"] == mentor.email

    def test_list_limit_above_cap_rejected(self, client, student):
        response = client.get("/bookings?limit=500", headers=auth_headers(student))
        assert response.status_code == 400

    def test_list_unknown_status(self, client, student):
        response = client.get("/bookings?status=lost", headers=auth_headers(student))
        assert response.status_code == 400

    def test_outsider_gets_404(self, client, other_student, make_session):
        booking = make_session()
        response = client.get(f"/bookings/{booking.id}", headers=auth_headers(other_student))
        assert response.status_code == 404


class TestLifecycleRoutes:
    def test_cancel_with_reason(self, client, student, make_session):
        booking = make_session()
        response = client.post(
            f"/bookings/{booking.id}/cancel",
            json={"reason": "Conflict at work"},
            headers=auth_headers(student),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancellation_reason"] == "Conflict at work"

    def test_cancel_without_body(self, client, mentor, make_session):
        booking = make_session()
        response = client.post(f"/bookings/{booking.id}/cancel", headers=auth_headers(mentor))
        assert response.status_code == 200

    def test_complete_pending_is_conflict(self, client, mentor, make_session):
        booking = make_session()
        response = client.post(f"/bookings/{booking.id}/complete", headers=auth_headers(mentor))
        assert response.status_code == 409
        assert response.json()["errors"]["current_status"] == "pending"

    def test_complete_confirmed(self, client, mentor, make_session):
        booking = make_session(status=SessionStatus.CONFIRMED.value)
        response = client.post(f"/bookings/{booking.id}/complete", headers=auth_headers(mentor))
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_reschedule(self, client, student, make_session, wednesday_rule):
        booking = make_session()
        response = client.post(
            f"/bookings/{booking.id}/reschedule",
            json={"session_date": "2025-01-01", "session_time": "15:00"},
            headers=auth_headers(student),
        )
        assert response.status_code == 200
        body = response.json()
        assert (body["session_date"], body["session_time"], body["status"]) == (
            "2025-01-01",
            "15:00",
            "pending",
        )
        assert body["original_date"] == "2024-12-25"

    def test_delete_requires_admin(self, client, student, admin, make_session):
        booking = make_session()
        forbidden = client.delete(f"/bookings/{booking.id}", headers=auth_headers(student))
        assert forbidden.status_code == 403

        response = client.delete(f"/bookings/{booking.id}", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Session deleted"}
        assert client.get(f"/bookings/{booking.id}", headers=auth_headers(admin)).status_code == 404


class TestErrorMessages:
    def test_not_found_is_generic(self, client, student):
        response = client.post(
            "/bookings", json=booking_payload("nobody"), headers=auth_headers(student)
        )
        problem = response.json()
        assert problem["code"] == "NOT_FOUND"
        assert problem["detail"] == NotFoundException.public_message
        assert "nobody" not in response.text

    def test_forbidden_is_generic(self, client, mentor, wednesday_rule):
        response = client.post(
            "/bookings", json=booking_payload(mentor.id), headers=auth_headers(mentor)
        )
        problem = response.json()
        assert problem["code"] == "FORBIDDEN"
        assert problem["detail"] == ForbiddenException.public_message

    def test_invalid_transition_keeps_kind_and_status(self, client, mentor, make_session):
        booking = make_session()
        response = client.post(f"/bookings/{booking.id}/complete", headers=auth_headers(mentor))
        problem = response.json()
        assert problem["code"] == "INVALID_STATE_TRANSITION"
        assert problem["detail"] == InvalidStateTransitionException.public_message
        assert problem["errors"] == {"current_status": "pending", "event": "complete"}
