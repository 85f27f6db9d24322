"""Tests for slot evaluation and next-date search."""

from datetime import date

import pytest

from conftest import SATURDAY, SUNDAY, TODAY, TUESDAY, local, make_booking
from salon.domain.catalog.repository import CatalogRepository
from salon.domain.catalog.schemas import Service
from salon.domain.scheduling.availability_service import (
    REASON_AFTER_CLOSING,
    REASON_ALREADY_BOOKED,
    REASON_BEFORE_OPENING,
    REASON_TIME_PASSED,
    AvailabilityEngine,
)
from salon.domain.scheduling.settings import DEFAULT_WORKING_HOURS, BusinessSettings, WorkingHours


def make_service(duration: int, start_times: tuple[str, ...], service_id: str = "test-service") -> Service:
    return Service(
        id=service_id,
        name="Test Service",
        price=100,
        deposit_amount=40,
        duration_minutes=duration,
        allowed_start_times=start_times,
    )


def with_tuesday_hours(open_time: str, close_time: str, **overrides) -> BusinessSettings:
    hours = tuple(
        WorkingHours(day_of_week=2, is_open=True, open_time=open_time, close_time=close_time)
        if wh.day_of_week == 2
        else wh
        for wh in DEFAULT_WORKING_HOURS
    )
    return BusinessSettings(timezone="America/Toronto", working_hours=hours, **overrides)


class TestWorkingHoursRules:
    def test_long_service_fits_full_day(self, engine):
        service = make_service(480, ("09:00",))
        slots = engine.get_available_time_slots(service, TUESDAY, [])

        assert len(slots) == 1
        assert slots[0].time == "09:00"
        assert slots[0].isAvailable is True
        assert slots[0].reason is None

    def test_service_ending_after_close_is_unavailable(self, clock):
        engine = AvailabilityEngine(with_tuesday_hours("09:00", "16:00"), clock)
        slots = engine.get_available_time_slots(make_service(480, ("09:00",)), TUESDAY, [])

        assert slots[0].isAvailable is False
        assert slots[0].reason == REASON_AFTER_CLOSING

    def test_ending_exactly_at_close_is_allowed(self, clock):
        engine = AvailabilityEngine(with_tuesday_hours("09:00", "17:00"), clock)
        slots = engine.get_available_time_slots(make_service(480, ("09:00",)), TUESDAY, [])
        assert slots[0].isAvailable is True

    def test_start_before_opening(self, clock):
        engine = AvailabilityEngine(with_tuesday_hours("10:00", "19:00"), clock)
        slots = engine.get_available_time_slots(make_service(60, ("09:00", "10:00")), TUESDAY, [])

        assert slots[0].reason == REASON_BEFORE_OPENING
        assert slots[1].isAvailable is True

    def test_before_opening_wins_over_later_checks(self, clock):
        engine = AvailabilityEngine(with_tuesday_hours("10:00", "11:00"), clock)
        slots = engine.get_available_time_slots(make_service(480, ("09:00",)), TUESDAY, [])
        assert slots[0].reason == REASON_BEFORE_OPENING

    def test_closed_weekday_returns_no_slots(self, engine):
        assert engine.get_available_time_slots(make_service(60, ("09:00", "11:00")), SUNDAY, []) == []

    def test_off_day_returns_no_slots(self, clock):
        settings = BusinessSettings(timezone="America/Toronto", off_days=frozenset({TUESDAY}))
        engine = AvailabilityEngine(settings, clock)
        assert engine.get_available_time_slots(make_service(60, ("09:00",)), TUESDAY, []) == []

    def test_slots_follow_allowed_start_time_order(self, engine):
        start_times = ("15:00", "09:00", "13:00", "11:00")
        slots = engine.get_available_time_slots(make_service(60, start_times), TUESDAY, [])
        assert [s.time for s in slots] == list(start_times)


class TestSameDayNotice:
    def test_slots_inside_notice_window_have_passed(self, engine):
        # Now is 08:00 local; the earliest bookable start is 10:00
        service = make_service(60, ("09:00", "10:00", "11:00"))
        slots = engine.get_available_time_slots(service, TODAY, [])

        assert slots[0].reason == REASON_TIME_PASSED
        assert slots[1].isAvailable is True
        assert slots[2].isAvailable is True

    def test_past_dates_return_no_slots(self, engine):
        # Friday before the fixed clock's Monday, an ordinary open day
        service = make_service(90, ("09:00", "16:00"))
        assert engine.get_available_time_slots(service, date(2026, 2, 27), []) == []
        assert engine.has_available_slots(service, date(2026, 2, 27), []) is False

    def test_notice_does_not_apply_to_future_dates(self, engine):
        slots = engine.get_available_time_slots(make_service(60, ("09:00",)), TUESDAY, [])
        assert slots[0].isAvailable is True


class TestBookingConflicts:
    @pytest.fixture
    def existing(self):
        # 09:00-11:00 plus 30 minute buffer occupies until 11:30
        return [make_booking(local(TUESDAY, "09:00"), 120)]

    def test_overlap_with_buffer_is_booked(self, engine, existing):
        slots = engine.get_available_time_slots(make_service(60, ("11:00",)), TUESDAY, existing)

        assert slots[0].isAvailable is False
        assert slots[0].reason == REASON_ALREADY_BOOKED

    def test_start_at_end_of_buffer_is_free(self, engine, existing):
        slots = engine.get_available_time_slots(make_service(60, ("11:30",)), TUESDAY, existing)
        assert slots[0].isAvailable is True

    def test_candidate_buffer_reaching_existing_start_conflicts(self, engine):
        existing = [make_booking(local(TUESDAY, "13:00"), 60)]
        # 11:30 + 60 + 30 buffer = 13:00, touching but not overlapping
        slots = engine.get_available_time_slots(
            make_service(60, ("11:30", "11:45")), TUESDAY, existing
        )
        assert slots[0].isAvailable is True
        assert slots[1].reason == REASON_ALREADY_BOOKED

    def test_pending_bookings_block(self, engine):
        existing = [make_booking(local(TUESDAY, "09:00"), 120, status="pending")]
        slots = engine.get_available_time_slots(make_service(60, ("10:00",)), TUESDAY, existing)
        assert slots[0].reason == REASON_ALREADY_BOOKED

    @pytest.mark.parametrize("status", ["cancelled", "completed", "no-show"])
    def test_released_bookings_do_not_block(self, engine, status):
        existing = [make_booking(local(TUESDAY, "09:00"), 120, status=status)]
        slots = engine.get_available_time_slots(make_service(60, ("10:00",)), TUESDAY, existing)
        assert slots[0].isAvailable is True

    def test_bookings_on_other_days_are_ignored(self, engine):
        existing = [make_booking(local(date(2026, 3, 4), "09:00"), 120)]
        slots = engine.get_available_time_slots(make_service(60, ("09:00",)), TUESDAY, existing)
        assert slots[0].isAvailable is True

    def test_zero_buffer(self, clock):
        engine = AvailabilityEngine(BusinessSettings(timezone="America/Toronto", buffer_minutes=0), clock)
        existing = [make_booking(local(TUESDAY, "09:00"), 120)]
        slots = engine.get_available_time_slots(make_service(60, ("11:00",)), TUESDAY, existing)
        assert slots[0].isAvailable is True


class TestNextAvailableDate:
    def test_skips_closed_sunday(self, engine):
        service = CatalogRepository.get_service_by_id("wash-style")
        assert engine.get_next_available_date(service, [], SATURDAY) == date(2026, 3, 9)

    def test_starts_the_day_after(self, engine):
        service = CatalogRepository.get_service_by_id("wash-style")
        assert engine.get_next_available_date(service, [], TODAY) == TUESDAY

    def test_skips_fully_booked_day(self, engine):
        service = make_service(480, ("09:00",))
        existing = [make_booking(local(TUESDAY, "09:00"), 480)]
        assert engine.get_next_available_date(service, existing, TODAY) == date(2026, 3, 4)

    def test_none_when_never_open(self, clock):
        closed = tuple(
            WorkingHours(day_of_week=d, is_open=False, open_time="09:00", close_time="17:00")
            for d in range(7)
        )
        engine = AvailabilityEngine(BusinessSettings(working_hours=closed), clock)
        assert engine.get_next_available_date(make_service(60, ("09:00",)), [], TODAY) is None

    def test_has_available_slots(self, engine):
        service = make_service(60, ("09:00",))
        assert engine.has_available_slots(service, TUESDAY, []) is True
        assert engine.has_available_slots(service, SUNDAY, []) is False


class TestCatalogFitsWorkingHours:
    @pytest.mark.parametrize("service", CatalogRepository.get_active_services(), ids=lambda s: s.id)
    def test_every_start_time_finishes_on_weekdays(self, engine, service):
        slots = engine.get_available_time_slots(service, TUESDAY, [])
        assert all(s.isAvailable for s in slots)
