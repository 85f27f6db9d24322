"""Business settings used by the availability engine"""

from datetime import date
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ... import config
from .time_calculator import time_to_minutes

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class WorkingHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    day_of_week: int  # 0 = Sunday
    is_open: bool
    open_time: str = "09:00"
    close_time: str = "18:00"

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v: int) -> int:
        if not 0 <= v <= 6:
            raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @model_validator(mode="after")
    def validate_times(self):
        if time_to_minutes(self.open_time) >= time_to_minutes(self.close_time):
            raise ValueError("open_time must be before close_time")
        return self

    def display(self) -> str:
        if not self.is_open:
            return "Closed"
        return f"{self.open_time} - {self.close_time}"


DEFAULT_WORKING_HOURS: tuple[WorkingHours, ...] = (
    WorkingHours(day_of_week=0, is_open=False, open_time="09:00", close_time="18:00"),
    WorkingHours(day_of_week=1, is_open=True, open_time="09:00", close_time="19:00"),
    WorkingHours(day_of_week=2, is_open=True, open_time="09:00", close_time="19:00"),
    WorkingHours(day_of_week=3, is_open=True, open_time="09:00", close_time="19:00"),
    WorkingHours(day_of_week=4, is_open=True, open_time="09:00", close_time="19:00"),
    WorkingHours(day_of_week=5, is_open=True, open_time="09:00", close_time="19:00"),
    WorkingHours(day_of_week=6, is_open=True, open_time="09:00", close_time="17:00"),
)


class BusinessSettings(BaseModel):
    """
    Process-wide business configuration.

    Loaded once from the environment and treated as read-only afterwards;
    tests build their own instances with the hours they need.
    """

    model_config = ConfigDict(frozen=True)

    business_name: str = "Bellezavari"
    timezone: str = "America/Toronto"
    working_hours: tuple[WorkingHours, ...] = DEFAULT_WORKING_HOURS
    off_days: frozenset[date] = frozenset()
    buffer_minutes: int = 30
    min_notice_hours: int = 2
    booking_window_days: int = 90
    currency: str = "CAD"
    currency_symbol: str = "$"
    home_service_fee: float = 75
    contact_email: str = ""
    contact_phone: str = ""

    @field_validator("buffer_minutes", "min_notice_hours")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be zero or greater")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        ZoneInfo(v)
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def hours_for(self, day: date) -> Optional[WorkingHours]:
        # date.weekday() is Monday=0; working hours use Sunday=0
        day_of_week = (day.weekday() + 1) % 7
        return next((wh for wh in self.working_hours if wh.day_of_week == day_of_week), None)

    def is_open_on(self, day: date) -> bool:
        hours = self.hours_for(day)
        return bool(hours and hours.is_open) and day not in self.off_days


@lru_cache
def get_business_settings() -> BusinessSettings:
    """Settings built from environment configuration"""
    return BusinessSettings(
        business_name=config.BUSINESS_NAME,
        timezone=config.BUSINESS_TIMEZONE,
        off_days=frozenset(date.fromisoformat(d) for d in config.OFF_DAYS),
        buffer_minutes=config.BUFFER_MINUTES,
        min_notice_hours=config.MIN_BOOKING_NOTICE_HOURS,
        booking_window_days=config.BOOKING_WINDOW_DAYS,
        currency=config.PAYMENT_CURRENCY,
        currency_symbol=config.CURRENCY_SYMBOL,
        home_service_fee=config.HOME_SERVICE_FEE,
        contact_email=config.CONTACT_EMAIL,
        contact_phone=config.CONTACT_PHONE,
    )
