# backend/mentorhub/models/user.py
"""
User model.

Identity itself is owned by the upstream identity provider; this table keeps
what the booking core needs: role, public name/email and the mentor
eligibility flags.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import RoleName
from ..database import Base
from ..utils.time_helpers import utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    mentor_profile = relationship(
        "MentorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'mentor', 'admin', 'super_admin')",
            name="ck_users_role",
        ),
    )

    @property
    def role_name(self) -> RoleName:
        return RoleName(self.role)

    @property
    def is_bookable_mentor(self) -> bool:
        return (
            self.role == RoleName.MENTOR.value
            and bool(self.onboarding_completed)
            and bool(self.is_active)
        )

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} ({self.role})>"
