# backend/mentorhub/models/mentor_profile.py
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_helpers import utc_now


class MentorProfile(Base):
    """Pricing profile and running counters for a mentor."""

    __tablename__ = "mentor_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True, index=True)

    headline = Column(String(200), nullable=True)
    bio = Column(Text, nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    # Counters maintained as side effects of bookings, payments and reviews
    total_sessions = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    average_rating = Column(Numeric(3, 2), nullable=False, default=Decimal("0.00"))
    total_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    user = relationship("User", back_populates="mentor_profile")

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="check_hourly_rate_non_negative"),
        CheckConstraint("total_sessions >= 0", name="check_total_sessions_non_negative"),
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5", name="check_average_rating_range"
        ),
    )

    def __repr__(self) -> str:
        return f"<MentorProfile user={self.user_id} rate={self.hourly_rate}>"
