"""
Tests for named payload validation.
"""

import pytest

from mentorhub.core.exceptions import ValidationException
from mentorhub.schemas.booking import BookingCreate
from mentorhub.schemas.registry import SCHEMAS, validate_or_raise, validate_payload
from tests.helpers import booking_payload


def _fields(result):
    return {error["field"] for error in result.errors}


class TestBookingCreate:
    def test_valid_payload(self):
        result = validate_payload("booking-create", booking_payload("m1", session_time="9:30"))
        assert result.valid
        assert result.errors == []
        assert result.data.session_time == "09:30"
        assert result.data.session_type.value == "one_on_one"

    def test_missing_fields_reported_per_field(self):
        result = validate_payload("booking-create", {})
        assert not result.valid
        assert _fields(result) == {"mentor_id", "session_date", "session_time", "duration", "subject"}

    @pytest.mark.parametrize("bad_time", ["25:00", "10:60", "10", "ten", "10:00:00"])
    def test_invalid_time(self, bad_time):
        result = validate_payload("booking-create", booking_payload("m1", session_time=bad_time))
        assert _fields(result) == {"session_time"}

    def test_unknown_duration(self):
        result = validate_payload("booking-create", booking_payload("m1", duration="45min"))
        assert _fields(result) == {"duration"}

    def test_unknown_session_type(self):
        result = validate_payload("booking-create", booking_payload("m1", session_type="webinar"))
        assert _fields(result) == {"session_type"}

    def test_subject_too_short(self):
        result = validate_payload("booking-create", booking_payload("m1", subject=" a "))
        assert _fields(result) == {"subject"}

    def test_message_too_long(self):
        result = validate_payload("booking-create", booking_payload("m1", message="x" * 501))
        assert _fields(result) == {"message"}

    def test_datetime_is_not_a_date(self):
        result = validate_payload(
            "booking-create", booking_payload("m1", session_date="2024-12-25T10:00:00")
        )
        assert _fields(result) == {"session_date"}

    def test_unknown_fields_rejected(self):
        result = validate_payload("booking-create", booking_payload("m1", amount=1))
        assert _fields(result) == {"amount"}

    def test_non_object_payload(self):
        result = validate_payload("booking-create", ["not", "a", "dict"])
        assert not result.valid
        assert _fields(result) == {"__root__"}


class TestOtherSchemas:
    def test_all_names_registered(self):
        assert set(SCHEMAS) == {
            "booking-create",
            "booking-reschedule",
            "booking-cancel",
            "review-create",
            "review-update",
            "availability-rule",
            "availability-exception",
            "payment-create",
            "payment-callback",
        }

    def test_unknown_schema_name(self):
        with pytest.raises(KeyError):
            validate_payload("nope", {})

    def test_review_rating_range(self):
        payload = {
            "session_id": "s1",
            "rating": 6,
            "comment": "Really helpful session",
            "would_recommend": True,
        }
        assert _fields(validate_payload("review-create", payload)) == {"rating"}

    def test_review_comment_length(self):
        payload = {"session_id": "s1", "rating": 5, "comment": "short", "would_recommend": True}
        assert _fields(validate_payload("review-create", payload)) == {"comment"}

    def test_review_skills_limit(self):
        payload = {
            "session_id": "s1",
            "rating": 5,
            "comment": "Really helpful session",
            "would_recommend": True,
            "skills": [f"skill{i}" for i in range(11)],
        }
        assert _fields(validate_payload("review-create", payload)) == {"skills"}

    def test_availability_rule_order(self):
        result = validate_payload(
            "availability-rule", {"day_of_week": 3, "start_time": "17:00", "end_time": "09:00"}
        )
        assert not result.valid
        assert result.errors[0]["message"] == "Start time must be before end time"

    def test_availability_rule_day_range(self):
        result = validate_payload(
            "availability-rule", {"day_of_week": 7, "start_time": "09:00", "end_time": "17:00"}
        )
        assert _fields(result) == {"day_of_week"}

    def test_custom_hours_need_bounds(self):
        result = validate_payload(
            "availability-exception", {"date": "2024-12-25", "type": "custom_hours"}
        )
        assert not result.valid
        assert result.errors[0]["message"] == "Custom hours require start_time and end_time"

    def test_unavailable_exception_needs_no_bounds(self):
        assert validate_payload("availability-exception", {"date": "2024-12-25"}).valid

    def test_payment_callback_status(self):
        result = validate_payload(
            "payment-callback", {"external_reference": "pi_1", "status": "refunded"}
        )
        assert _fields(result) == {"status"}


class TestValidateOrRaise:
    def test_returns_model(self):
        data = validate_or_raise("booking-create", booking_payload("m1"), BookingCreate)
        assert isinstance(data, BookingCreate)
        assert data.mentor_id == "m1"

    def test_model_instance_passes_through(self):
        model = BookingCreate(**booking_payload("m1"))
        assert validate_or_raise("booking-create", model, BookingCreate) is model

    def test_raises_with_field_errors(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_or_raise("booking-create", {"mentor_id": "m1"}, BookingCreate)
        exc = exc_info.value
        assert exc.code == "VALIDATION_ERROR"
        assert {e["field"] for e in exc.details["errors"]} >= {"session_date", "subject"}
