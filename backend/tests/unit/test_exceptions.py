"""
Tests for how domain exceptions are rendered for HTTP responses.
"""

import pytest

from mentorhub.core.exceptions import (
    BookingConflictException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)


@pytest.mark.parametrize(
    "exc, code",
    [
        (UnauthorizedException("Missing X-User-Id header"), "UNAUTHORIZED"),
        (ForbiddenException("Mentors can only respond to reviews"), "FORBIDDEN"),
        (NotFoundException("Session s-123 not found"), "NOT_FOUND"),
        (ServiceException("psycopg2 OperationalError"), "INTERNAL_ERROR"),
    ],
)
def test_non_conflict_messages_are_generic(exc, code):
    detail = exc.to_http_exception().detail
    assert detail["code"] == code
    assert detail["message"] == type(exc).public_message
    assert detail["message"] != exc.message
    # The specific message stays available for logging
    assert str(exc) == exc.message


def test_conflicts_keep_their_reason():
    exc = BookingConflictException("Mentor is not available on this day")
    detail = exc.to_http_exception().detail
    assert detail["message"] == "Mentor is not available on this day"
    assert detail["details"]["reason"] == "Mentor is not available on this day"

    exc = ConflictException("This session is already paid", code="SESSION_ALREADY_PAID")
    assert exc.to_http_exception().detail["message"] == "This session is already paid"


def test_validation_message_moves_into_errors():
    http_exc = ValidationException("No fields to update").to_http_exception()
    assert http_exc.status_code == 400
    assert http_exc.detail["message"] == "Invalid request data"
    assert http_exc.detail["details"]["errors"] == [
        {"field": None, "message": "No fields to update"}
    ]


def test_field_errors_are_kept():
    exc = ValidationException.for_field("rating", "Must be between 1 and 5")
    assert exc.details["errors"] == [{"field": "rating", "message": "Must be between 1 and 5"}]


def test_service_exception_hides_details():
    exc = ServiceException("boom", details={"sql": "SELECT 1"})
    assert exc.to_http_exception().detail["details"] == {}
