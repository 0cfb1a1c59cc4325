"""
Tests for the session state machine: allowed transitions, idempotent
replays, and the actor guards.
"""

from datetime import date

import pytest
from sqlalchemy import update
from sqlalchemy.orm import Session

from mentorhub.core.exceptions import InvalidStateTransitionException
from mentorhub.models.booking import Booking, PaymentStatus, SessionStatus
from mentorhub.services.session_lifecycle import (
    TRANSITIONS,
    SessionEvent,
    SessionLifecycle,
    is_replay,
)
from tests.helpers import WEDNESDAY, ctx_for

S = SessionStatus


def _write_status_elsewhere(db, session_id, status):
    """Commit a status change through a second session, leaving db's copy stale."""
    other = Session(bind=db.get_bind())
    try:
        other.execute(update(Booking).where(Booking.id == session_id).values(status=status))
        other.commit()
    finally:
        other.close()


@pytest.fixture
def lifecycle(db):
    return SessionLifecycle(db)


class TestTransitionTable:
    def test_events_cover_the_table(self):
        assert set(TRANSITIONS) == set(SessionEvent)

    def test_terminal_states_have_no_outgoing_transitions(self):
        for transition in TRANSITIONS.values():
            assert S.COMPLETED.value not in transition.from_statuses
            assert S.CANCELLED.value not in transition.from_statuses


class TestApply:
    def test_payment_verified_confirms(self, db, lifecycle, make_session):
        booking = make_session()
        assert lifecycle.apply(booking, SessionEvent.PAYMENT_VERIFIED)
        db.commit()
        assert booking.status == S.CONFIRMED.value
        assert booking.payment_status == PaymentStatus.VERIFIED.value
        assert booking.confirmed_at is not None

    def test_payment_failed_keeps_pending(self, db, lifecycle, make_session):
        booking = make_session()
        assert lifecycle.apply(booking, SessionEvent.PAYMENT_FAILED)
        assert booking.status == S.PENDING.value
        assert booking.payment_status == PaymentStatus.REJECTED.value

    @pytest.mark.parametrize("status", [S.PENDING.value, S.CONFIRMED.value])
    def test_cancel(self, lifecycle, make_session, student, status):
        booking = make_session(status=status)
        assert lifecycle.apply(
            booking, SessionEvent.CANCEL, cancelled_by_id=student.id, reason="Sick"
        )
        assert booking.status == S.CANCELLED.value
        assert booking.cancelled_by_id == student.id
        assert booking.cancellation_reason == "Sick"
        assert booking.cancelled_at is not None

    def test_complete_from_confirmed(self, lifecycle, make_session):
        booking = make_session(status=S.CONFIRMED.value)
        assert lifecycle.apply(booking, SessionEvent.COMPLETE)
        assert booking.status == S.COMPLETED.value
        assert booking.completed_at is not None

    def test_complete_from_pending_rejected(self, lifecycle, make_session):
        booking = make_session()
        with pytest.raises(InvalidStateTransitionException) as exc_info:
            lifecycle.apply(booking, SessionEvent.COMPLETE)
        assert exc_info.value.current_status == S.PENDING.value
        assert exc_info.value.event == "complete"

    def test_cancel_from_completed_rejected(self, lifecycle, make_session):
        booking = make_session(status=S.COMPLETED.value)
        with pytest.raises(InvalidStateTransitionException):
            lifecycle.apply(booking, SessionEvent.CANCEL)

    def test_confirm_from_cancelled_rejected(self, lifecycle, make_session):
        booking = make_session(status=S.CANCELLED.value)
        with pytest.raises(InvalidStateTransitionException):
            lifecycle.apply(booking, SessionEvent.PAYMENT_VERIFIED)

    def test_reschedule_returns_to_pending_and_keeps_original(self, lifecycle, make_session):
        booking = make_session(status=S.CONFIRMED.value, session_time="10:00")
        new_date = date(2025, 1, 1)
        assert lifecycle.apply(
            booking,
            SessionEvent.RESCHEDULE,
            session_date=new_date,
            session_time="14:00",
            reason="Conflict at work",
        )
        assert booking.status == S.PENDING.value
        assert (booking.session_date, booking.session_time) == (new_date, "14:00")
        assert (booking.original_date, booking.original_time) == (WEDNESDAY, "10:00")
        assert booking.reschedule_reason == "Conflict at work"

    def test_reschedule_of_paid_session_stays_confirmed(self, lifecycle, make_session):
        booking = make_session(
            status=S.CONFIRMED.value, payment_status=PaymentStatus.VERIFIED.value
        )
        assert lifecycle.apply(
            booking, SessionEvent.RESCHEDULE, session_date=date(2025, 1, 1), session_time="14:00"
        )
        assert booking.status == S.CONFIRMED.value
        assert booking.payment_status == PaymentStatus.VERIFIED.value

    def test_second_reschedule_keeps_first_original(self, lifecycle, make_session):
        booking = make_session(session_time="10:00")
        lifecycle.apply(
            booking, SessionEvent.RESCHEDULE, session_date=date(2025, 1, 1), session_time="14:00"
        )
        lifecycle.apply(
            booking, SessionEvent.RESCHEDULE, session_date=date(2025, 1, 8), session_time="15:00"
        )
        assert (booking.original_date, booking.original_time) == (WEDNESDAY, "10:00")
        assert booking.session_time == "15:00"


class TestReplays:
    def test_cancel_twice_is_noop(self, lifecycle, make_session):
        booking = make_session()
        assert lifecycle.apply(booking, SessionEvent.CANCEL)
        cancelled_at = booking.cancelled_at
        assert lifecycle.apply(booking, SessionEvent.CANCEL) is False
        assert booking.cancelled_at == cancelled_at

    def test_complete_twice_is_noop(self, lifecycle, make_session):
        booking = make_session(status=S.CONFIRMED.value)
        lifecycle.apply(booking, SessionEvent.COMPLETE)
        assert lifecycle.apply(booking, SessionEvent.COMPLETE) is False

    def test_payment_verified_twice_is_noop(self, lifecycle, make_session):
        booking = make_session()
        lifecycle.apply(booking, SessionEvent.PAYMENT_VERIFIED)
        assert lifecycle.apply(booking, SessionEvent.PAYMENT_VERIFIED) is False

    def test_confirmed_without_verified_payment_is_not_a_replay(self, make_session):
        booking = make_session(status=S.CONFIRMED.value)
        assert not is_replay(booking, SessionEvent.PAYMENT_VERIFIED)

    def test_lost_race_to_completion_is_rejected(self, db, lifecycle, make_session):
        booking = make_session(status=S.CONFIRMED.value)
        _write_status_elsewhere(db, booking.id, S.COMPLETED.value)
        with pytest.raises(InvalidStateTransitionException):
            lifecycle.apply(booking, SessionEvent.CANCEL)
        assert booking.status == S.COMPLETED.value

    def test_lost_race_to_same_effect_is_a_replay(self, db, lifecycle, make_session):
        booking = make_session()
        _write_status_elsewhere(db, booking.id, S.CANCELLED.value)
        assert lifecycle.apply(booking, SessionEvent.CANCEL) is False


class TestGuards:
    def test_participants_can_cancel(self, lifecycle, make_session, student, mentor):
        booking = make_session()
        assert lifecycle.can_cancel(ctx_for(student), booking)
        assert lifecycle.can_cancel(ctx_for(mentor), booking)

    def test_outsider_cannot_cancel(self, lifecycle, make_session, other_student):
        assert not lifecycle.can_cancel(ctx_for(other_student), make_session())

    def test_admin_can_cancel_complete_and_reschedule(self, lifecycle, make_session, admin):
        booking = make_session()
        assert lifecycle.can_cancel(ctx_for(admin), booking)
        assert lifecycle.can_complete(ctx_for(admin), booking)
        assert lifecycle.can_reschedule(ctx_for(admin), booking)

    def test_only_mentor_completes(self, lifecycle, make_session, student, mentor):
        booking = make_session()
        assert lifecycle.can_complete(ctx_for(mentor), booking)
        assert not lifecycle.can_complete(ctx_for(student), booking)

    def test_participants_can_reschedule(self, lifecycle, make_session, student, other_student):
        booking = make_session()
        assert lifecycle.can_reschedule(ctx_for(student), booking)
        assert not lifecycle.can_reschedule(ctx_for(other_student), booking)
