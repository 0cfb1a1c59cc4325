# backend/mentorhub/models/review.py
"""
Review model.

One review per completed session, written by the session's student. The
mentor may attach a single public response.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..utils.time_helpers import utc_now


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    session_id = Column(String(26), ForeignKey("sessions.id"), nullable=False, unique=True)
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    mentor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    would_recommend = Column(Boolean, nullable=False, default=True)
    skills = Column(JSON, nullable=False, default=list)

    mentor_response = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    is_approved = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    session = relationship("Booking")
    student = relationship("User", foreign_keys=[student_id])
    mentor = relationship("User", foreign_keys=[mentor_id])

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_range"),
        Index("idx_reviews_mentor_created", "mentor_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id}: session={self.session_id} rating={self.rating}>"
