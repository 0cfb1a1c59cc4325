# backend/mentorhub/schemas/booking.py
"""
Booking schemas.

Request models are closed (unknown fields rejected) and normalize HH:MM
times to zero-padded form. Whether a date is in the past depends on the
clock, so that check runs in the booking service.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from ..models.booking import SessionDuration, SessionType
from ..utils.time_helpers import normalize_hhmm
from ._strict_base import StrictModel, StrictRequestModel


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, datetime):
        raise ValueError(f"{field_name} must be a date (YYYY-MM-DD), not a datetime")
    if isinstance(value, str) and ("T" in value or " " in value.strip()):
        raise ValueError(f"{field_name} must be a date (YYYY-MM-DD)")
    return value


class BookingCreate(StrictRequestModel):
    """Payload for booking a session with a mentor."""

    mentor_id: str = Field(..., min_length=1, description="Mentor to book")
    session_date: date = Field(..., description="Date of the session")
    session_time: str = Field(..., description="Start time, HH:MM")
    duration: SessionDuration = Field(..., description="Session length")
    subject: str = Field(..., min_length=2, max_length=200)
    session_type: SessionType = Field(default=SessionType.ONE_ON_ONE)
    message: Optional[str] = Field(None, max_length=500, description="Optional note to the mentor")

    @field_validator("session_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "session_date")

    @field_validator("session_time")
    @classmethod
    def _normalize_time(cls, v: str) -> str:
        return normalize_hhmm(v)

    @field_validator("message")
    @classmethod
    def _clean_message(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BookingReschedule(StrictRequestModel):
    session_date: date
    session_time: str
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("session_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "session_date")

    @field_validator("session_time")
    @classmethod
    def _normalize_time(cls, v: str) -> str:
        return normalize_hhmm(v)


class BookingCancel(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    student_id: str
    mentor_id: str
    session_date: date
    session_time: str
    duration: str
    subject: str
    session_type: str
    message: Optional[str] = None
    status: str
    payment_status: str
    amount: Decimal
    currency: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    original_date: Optional[date] = None
    original_time: Optional[str] = None
    cancellation_reason: Optional[str] = None


class BookingListItem(BookingResponse):
    """A session with the counterparty's public details."""

    counterparty_name: str
    counterparty_email: str


class BookingCreateResponse(StrictModel):
    session: BookingResponse
    amount: Decimal
    currency: str
    message: str = "Session booked successfully"
