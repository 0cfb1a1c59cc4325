# backend/mentorhub/models/booking.py
"""
Session (booking) model for the MentorHub platform.

A booking is a self-contained record of one mentoring session: who, when,
how long, for how much, and where it is in its lifecycle. The table is named
``sessions``; the class is ``Booking`` to stay clear of the ORM ``Session``.

Invariant: two active (pending or confirmed) bookings for the same mentor
never start at the same date and time. A partial unique index enforces this
at the storage layer; overlapping intervals are rejected by the conflict
checker under the per-mentor lock.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_helpers import utc_now

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"  # transient marker, immediately re-enters pending


class PaymentStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    REJECTED = "rejected"
    REFUNDED = "refunded"


class SessionDuration(str, Enum):
    THIRTY_MINUTES = "30min"
    ONE_HOUR = "1hour"
    NINETY_MINUTES = "1.5hours"
    TWO_HOURS = "2hours"


class SessionType(str, Enum):
    ONE_ON_ONE = "one_on_one"
    GROUP = "group"


ACTIVE_STATUSES = (SessionStatus.PENDING.value, SessionStatus.CONFIRMED.value)

_ACTIVE_SLOT_PREDICATE = text("status IN ('pending', 'confirmed')")


class Booking(Base):
    """A mentoring session booked by a student with a mentor."""

    __tablename__ = "sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    mentor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)

    session_date = Column(Date, nullable=False, index=True)
    session_time = Column(String(5), nullable=False)
    duration = Column(String(10), nullable=False, default=SessionDuration.ONE_HOUR.value)
    subject = Column(String(200), nullable=False)
    session_type = Column(String(20), nullable=False, default=SessionType.ONE_ON_ONE.value)
    message = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=SessionStatus.PENDING.value, index=True)
    payment_status = Column(
        String(30), nullable=False, default=PaymentStatus.PENDING_VERIFICATION.value
    )
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Set on the first reschedule and kept afterwards
    original_date = Column(Date, nullable=True)
    original_time = Column(String(5), nullable=True)
    reschedule_reason = Column(Text, nullable=True)

    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    student = relationship("User", foreign_keys=[student_id])
    mentor = relationship("User", foreign_keys=[mentor_id])
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled', 'rescheduled')",
            name="ck_sessions_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending_verification', 'verified', 'rejected', 'refunded')",
            name="ck_sessions_payment_status",
        ),
        CheckConstraint(
            "duration IN ('30min', '1hour', '1.5hours', '2hours')",
            name="ck_sessions_duration",
        ),
        CheckConstraint(
            "session_type IN ('one_on_one', 'group')",
            name="ck_sessions_session_type",
        ),
        CheckConstraint("amount >= 0", name="check_amount_non_negative"),
        Index("idx_sessions_mentor_date", "mentor_id", "session_date"),
        Index(
            "uq_sessions_mentor_active_slot",
            "mentor_id",
            "session_date",
            "session_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = SessionStatus.PENDING.value
        logger.info(f"Creating session for student {self.student_id} with mentor {self.mentor_id}")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def involves(self, user_id: str) -> bool:
        return user_id in (self.student_id, self.mentor_id)

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: student={self.student_id}, "
            f"mentor={self.mentor_id}, date={self.session_date}, "
            f"time={self.session_time}, duration={self.duration}, status={self.status}>"
        )
