"""Availability service - slot evaluation against hours, notice and bookings"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Protocol

from ..catalog.schemas import Service
from . import time_calculator
from .schemas import TimeSlot
from .settings import BusinessSettings

logger = logging.getLogger(__name__)

REASON_BEFORE_OPENING = "Before opening time"
REASON_AFTER_CLOSING = "Service would end after closing"
REASON_TIME_PASSED = "Time has passed"
REASON_ALREADY_BOOKED = "Already booked"

# Statuses that hold a slot; cancelled, completed and no-show bookings free it
BLOCKING_STATUSES = ("pending", "confirmed")

NEXT_DATE_SEARCH_DAYS = 90


class BookingLike(Protocol):
    start_time: datetime
    end_time: datetime
    booking_status: str


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


class AvailabilityEngine:
    """
    Computes bookable slots for a service on a given local date.

    ``clock`` returns the current aware datetime and is injected so the
    same-day notice rule can be tested at a fixed instant.
    """

    def __init__(
        self,
        settings: BusinessSettings,
        clock: Callable[[], datetime] = system_clock,
    ):
        self.settings = settings
        self.clock = clock
        self.tz = settings.tz

    def today(self) -> date:
        return self.clock().astimezone(self.tz).date()

    def day_bounds(self, first_day: date, last_day: Optional[date] = None) -> tuple[datetime, datetime]:
        """UTC [start, end) covering the local dates first_day..last_day inclusive"""
        last_day = last_day or first_day
        start = time_calculator.combine_date_time(first_day, "00:00", self.tz)
        end = time_calculator.combine_date_time(last_day + timedelta(days=1), "00:00", self.tz)
        return start.astimezone(timezone.utc), end.astimezone(timezone.utc)

    # ========================================================================
    # SLOT EVALUATION
    # ========================================================================

    def get_available_time_slots(
        self,
        service: Service,
        day: date,
        existing_bookings: Iterable[BookingLike] = (),
    ) -> list[TimeSlot]:
        """
        One TimeSlot per allowed start time of ``service``, in the same order.

        Returns an empty list when the business is closed that weekday, the
        date is an off day or the date has already passed.
        """
        hours = self.settings.hours_for(day)
        if not hours or not hours.is_open:
            return []
        if day in self.settings.off_days:
            return []
        today = self.today()
        if day < today:
            return []

        open_minutes = time_calculator.time_to_minutes(hours.open_time)
        close_minutes = time_calculator.time_to_minutes(hours.close_time)
        occupied = self._occupied_intervals(day, existing_bookings)
        is_today = day == today
        earliest_start = self.clock() + timedelta(hours=self.settings.min_notice_hours)

        slots = []
        for start_time in service.allowed_start_times:
            start_minutes = time_calculator.time_to_minutes(start_time)
            reason = None

            if start_minutes < open_minutes:
                reason = REASON_BEFORE_OPENING
            elif start_minutes + service.duration_minutes > close_minutes:
                reason = REASON_AFTER_CLOSING
            elif (
                is_today
                and time_calculator.combine_date_time(day, start_time, self.tz) < earliest_start
            ):
                reason = REASON_TIME_PASSED
            elif self._conflicts(start_minutes, service.duration_minutes, occupied):
                reason = REASON_ALREADY_BOOKED

            slots.append(TimeSlot(time=start_time, isAvailable=reason is None, reason=reason))

        return slots

    def _occupied_intervals(
        self, day: date, existing_bookings: Iterable[BookingLike]
    ) -> list[tuple[int, int]]:
        """[start, end + buffer) in minutes for blocking bookings on ``day``"""
        intervals = []
        for booking in existing_bookings:
            if booking.booking_status not in BLOCKING_STATUSES:
                continue
            if booking.start_time.astimezone(self.tz).date() != day:
                continue
            start = time_calculator.minutes_of_day(booking.start_time, self.tz)
            # Derived from duration so an end at midnight is not read as minute 0
            end = start + int((booking.end_time - booking.start_time).total_seconds() // 60)
            intervals.append((start, end + self.settings.buffer_minutes))
        return intervals

    def _conflicts(
        self, start_minutes: int, duration_minutes: int, occupied: list[tuple[int, int]]
    ) -> bool:
        end_minutes = start_minutes + duration_minutes + self.settings.buffer_minutes
        return any(start_minutes < busy_end and end_minutes > busy_start for busy_start, busy_end in occupied)

    # ========================================================================
    # DERIVED QUERIES
    # ========================================================================

    def has_available_slots(
        self, service: Service, day: date, existing_bookings: Iterable[BookingLike] = ()
    ) -> bool:
        return any(s.isAvailable for s in self.get_available_time_slots(service, day, existing_bookings))

    def get_slot(
        self,
        service: Service,
        day: date,
        start_time: str,
        existing_bookings: Iterable[BookingLike] = (),
    ) -> Optional[TimeSlot]:
        """The evaluated slot for ``start_time``, or None if the service never offers it"""
        for slot in self.get_available_time_slots(service, day, existing_bookings):
            if slot.time == start_time:
                return slot
        return None

    def get_next_available_date(
        self,
        service: Service,
        existing_bookings: Iterable[BookingLike] = (),
        from_day: Optional[date] = None,
    ) -> Optional[date]:
        """First date after ``from_day`` (default today) with an open slot"""
        bookings = list(existing_bookings)
        check = (from_day or self.today()) + timedelta(days=1)
        for _ in range(NEXT_DATE_SEARCH_DAYS):
            if self.has_available_slots(service, check, bookings):
                return check
            check += timedelta(days=1)

        logger.info(f"📅 No availability for {service.id} within {NEXT_DATE_SEARCH_DAYS} days")
        return None

    @staticmethod
    def calculate_end_time(start_time: str, duration_minutes: int) -> str:
        return time_calculator.calculate_end_time(start_time, duration_minutes)
