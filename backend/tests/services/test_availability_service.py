from datetime import date

import pytest

from mentorhub.core.enums import RoleName
from mentorhub.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from mentorhub.models.availability import AvailabilityException, AvailabilityRule
from mentorhub.services.availability_service import AvailabilityService
from tests.helpers import TODAY, WEDNESDAY, ctx_for


@pytest.fixture
def service(db):
    return AvailabilityService(db, today_provider=lambda: TODAY)


def _rule(day_of_week=3, start="09:00", end="17:00", **extra):
    return {"day_of_week": day_of_week, "start_time": start, "end_time": end, **extra}


class TestWeeklyAvailability:
    def test_creates_rule(self, db, service, mentor):
        rule = service.set_weekly_availability(ctx_for(mentor), _rule(start="9:00"))
        assert (rule.mentor_id, rule.day_of_week) == (mentor.id, 3)
        assert (rule.start_time, rule.end_time) == ("09:00", "17:00")
        assert db.query(AvailabilityRule).count() == 1

    def test_upserts_same_day(self, db, service, mentor):
        first = service.set_weekly_availability(ctx_for(mentor), _rule())
        second = service.set_weekly_availability(ctx_for(mentor), _rule(start="12:00", end="14:00"))
        assert second.id == first.id
        assert (second.start_time, second.end_time) == ("12:00", "14:00")
        assert db.query(AvailabilityRule).count() == 1

    def test_can_deactivate_day(self, service, mentor):
        rule = service.set_weekly_availability(ctx_for(mentor), _rule(is_active=False))
        assert rule.is_active is False

    def test_rejects_inverted_window(self, service, mentor):
        with pytest.raises(ValidationException):
            service.set_weekly_availability(ctx_for(mentor), _rule(start="17:00", end="09:00"))

    def test_rejects_bad_day(self, service, mentor):
        with pytest.raises(ValidationException):
            service.set_weekly_availability(ctx_for(mentor), _rule(day_of_week=7))

    @pytest.mark.parametrize("role", [RoleName.STUDENT, RoleName.ADMIN])
    def test_only_mentors(self, service, make_user, role):
        with pytest.raises(ForbiddenException):
            service.set_weekly_availability(ctx_for(make_user(role)), _rule())


class TestExceptions:
    def test_adds_blackout(self, service, mentor, wednesday_rule):
        exception = service.add_exception(
            ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat(), "reason": "Holiday"}
        )
        assert (exception.date, exception.type, exception.reason) == (WEDNESDAY, "unavailable", "Holiday")

    def test_replaces_exception_on_same_date(self, db, service, mentor, wednesday_rule):
        service.add_exception(ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat()})
        replaced = service.add_exception(
            ctx_for(mentor),
            3,
            {"date": WEDNESDAY.isoformat(), "type": "custom_hours", "start_time": "13:00", "end_time": "15:00"},
        )
        assert replaced.type == "custom_hours"
        assert db.query(AvailabilityException).count() == 1

    def test_date_must_fall_on_rule_day(self, service, mentor, wednesday_rule):
        with pytest.raises(ValidationException) as exc_info:
            service.add_exception(ctx_for(mentor), 3, {"date": "2024-12-26"})
        assert exc_info.value.details["errors"][0]["field"] == "date"

    def test_custom_hours_need_bounds(self, service, mentor, wednesday_rule):
        with pytest.raises(ValidationException):
            service.add_exception(
                ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat(), "type": "custom_hours"}
            )

    def test_needs_rule_for_day(self, service, mentor):
        with pytest.raises(NotFoundException):
            service.add_exception(ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat()})

    def test_removes_exception(self, db, service, mentor, wednesday_rule):
        service.add_exception(ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat()})
        service.remove_exception(ctx_for(mentor), 3, WEDNESDAY)
        assert db.query(AvailabilityException).count() == 0

    def test_remove_missing_exception(self, service, mentor, wednesday_rule):
        with pytest.raises(NotFoundException):
            service.remove_exception(ctx_for(mentor), 3, WEDNESDAY)

    def test_cannot_touch_another_mentors_rule(self, service, make_user, wednesday_rule):
        other = make_user(RoleName.MENTOR)
        with pytest.raises(NotFoundException):
            service.add_exception(ctx_for(other), 3, {"date": WEDNESDAY.isoformat()})


class TestReads:
    def test_mentor_availability_with_exceptions(self, service, mentor, wednesday_rule):
        service.add_exception(ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat()})
        [rule] = service.get_mentor_availability(mentor.id)
        assert rule.day_of_week == 3
        assert [e.date for e in rule.exceptions] == [WEDNESDAY]

    def test_unknown_mentor(self, service, student):
        with pytest.raises(NotFoundException):
            service.get_mentor_availability(student.id)

    def test_slots_skip_booked_time(self, service, mentor, wednesday_rule, make_session):
        make_session(session_time="10:00")
        slots = service.get_available_slots(mentor.id, WEDNESDAY)
        assert slots == ["09:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]

    def test_slots_respect_duration(self, service, mentor, wednesday_rule):
        slots = service.get_available_slots(mentor.id, WEDNESDAY, "2hours")
        assert slots[-1] == "15:00"

    def test_no_slots_on_blackout(self, service, mentor, wednesday_rule):
        service.add_exception(ctx_for(mentor), 3, {"date": WEDNESDAY.isoformat()})
        assert service.get_available_slots(mentor.id, WEDNESDAY) == []

    def test_no_slots_without_rule(self, service, mentor):
        assert service.get_available_slots(mentor.id, date(2024, 12, 26)) == []

    def test_past_date_rejected(self, service, mentor, wednesday_rule):
        with pytest.raises(ValidationException):
            service.get_available_slots(mentor.id, date(2024, 12, 18))

    def test_unknown_duration_rejected(self, service, mentor, wednesday_rule):
        with pytest.raises(ValidationException):
            service.get_available_slots(mentor.id, WEDNESDAY, "45min")
