# backend/tests/conftest.py
"""
Shared fixtures.

Each test gets its own in-memory SQLite database, so services can commit
and roll back freely without leaking state between tests.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mentorhub.core.enums import RoleName
from mentorhub.database import Base
import mentorhub.models  # noqa: F401  registers tables
from mentorhub.models.availability import AvailabilityRule
from mentorhub.models.booking import Booking, SessionStatus
from mentorhub.models.mentor_profile import MentorProfile
from mentorhub.models.user import User

from .helpers import WEDNESDAY


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(
        role: RoleName = RoleName.STUDENT,
        name: Optional[str] = None,
        onboarding_completed: bool = True,
        is_active: bool = True,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=f"{role.value}{counter['n']}@example.com",
            name=name or f"{role.value.title()} {counter['n']}",
            role=role.value,
            onboarding_completed=onboarding_completed,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def student(make_user) -> User:
    return make_user(RoleName.STUDENT, name="Sam Student")


@pytest.fixture
def other_student(make_user) -> User:
    return make_user(RoleName.STUDENT, name="Olive Other")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(RoleName.ADMIN, name="Ada Admin")


@pytest.fixture
def super_admin(make_user) -> User:
    return make_user(RoleName.SUPER_ADMIN, name="Sid Super")


@pytest.fixture
def mentor(db: Session, make_user) -> User:
    user = make_user(RoleName.MENTOR, name="Maya Mentor")
    db.add(MentorProfile(user_id=user.id, hourly_rate=Decimal("50.00"), currency="USD"))
    db.commit()
    return user


@pytest.fixture
def mentor_profile(db: Session, mentor: User) -> MentorProfile:
    return db.query(MentorProfile).filter_by(user_id=mentor.id).one()


@pytest.fixture
def wednesday_rule(db: Session, mentor: User) -> AvailabilityRule:
    """Mentor is available Wednesdays 09:00-17:00."""
    rule = AvailabilityRule(mentor_id=mentor.id, day_of_week=3, start_time="09:00", end_time="17:00")
    db.add(rule)
    db.commit()
    return rule


@pytest.fixture
def make_session(db: Session, student: User, mentor: User) -> Callable[..., Booking]:
    """Insert a session row directly, bypassing the booking flow."""

    def _make(
        session_time: str = "10:00",
        session_date: date = WEDNESDAY,
        duration: str = "1hour",
        status: str = SessionStatus.PENDING.value,
        student_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
        **extra,
    ) -> Booking:
        booking = Booking(
            student_id=student_id or student.id,
            mentor_id=mentor_id or mentor.id,
            session_date=session_date,
            session_time=session_time,
            duration=duration,
            subject="Python basics",
            status=status,
            amount=Decimal("50.00"),
            currency="USD",
            **extra,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make
