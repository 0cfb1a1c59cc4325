# backend/mentorhub/models/availability.py
"""
Availability models for the MentorHub platform.

A mentor has at most one weekly rule per day of week (Sunday = 0). Each rule
may carry dated exceptions that either block the whole date or replace the
rule's hours for that date.

Classes:
    AvailabilityRule: Recurring weekly window for one day of week
    AvailabilityException: Date-specific override of a rule
"""

from enum import Enum
import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_helpers import utc_now

logger = logging.getLogger(__name__)


class ExceptionType(str, Enum):
    UNAVAILABLE = "unavailable"
    CUSTOM_HOURS = "custom_hours"


class AvailabilityRule(Base):
    """Recurring weekly availability window."""

    __tablename__ = "availability_rules"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    mentor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    exceptions = relationship(
        "AvailabilityException",
        back_populates="rule",
        cascade="all, delete-orphan",
        order_by="AvailabilityException.date",
    )

    __table_args__ = (
        UniqueConstraint("mentor_id", "day_of_week", name="unique_mentor_day_of_week"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="check_day_of_week_range"),
        CheckConstraint("start_time < end_time", name="check_rule_time_order"),
        Index("idx_availability_rules_mentor_day", "mentor_id", "day_of_week"),
    )

    def exception_for(self, on_date):
        for exception in self.exceptions:
            if exception.date == on_date:
                return exception
        return None

    def __repr__(self) -> str:
        return (
            f"<AvailabilityRule mentor={self.mentor_id} day={self.day_of_week} "
            f"{self.start_time}-{self.end_time} active={self.is_active}>"
        )


class AvailabilityException(Base):
    """Date-specific override: a blackout or custom hours."""

    __tablename__ = "availability_exceptions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    rule_id = Column(
        String(26), ForeignKey("availability_rules.id", ondelete="CASCADE"), nullable=False
    )
    date = Column(Date, nullable=False, index=True)
    type = Column(String(20), nullable=False, default=ExceptionType.UNAVAILABLE.value)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    reason = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    rule = relationship("AvailabilityRule", back_populates="exceptions")

    __table_args__ = (
        UniqueConstraint("rule_id", "date", name="unique_rule_exception_date"),
        CheckConstraint(
            "type IN ('unavailable', 'custom_hours')", name="ck_availability_exceptions_type"
        ),
        CheckConstraint(
            "type = 'unavailable' OR (start_time IS NOT NULL AND end_time IS NOT NULL "
            "AND start_time < end_time)",
            name="check_custom_hours_bounds",
        ),
    )

    @property
    def is_unavailable(self) -> bool:
        return self.type == ExceptionType.UNAVAILABLE.value

    def __repr__(self) -> str:
        return f"<AvailabilityException {self.date} {self.type} - {self.reason or 'No reason'}>"
