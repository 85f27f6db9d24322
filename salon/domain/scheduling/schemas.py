"""Scheduling domain schemas"""

from typing import Optional

from pydantic import BaseModel


class TimeSlot(BaseModel):
    time: str
    isAvailable: bool
    reason: Optional[str] = None


class AvailabilityResponse(BaseModel):
    date: str
    serviceId: str
    isOpen: bool
    slots: list[TimeSlot]


class NextAvailableResponse(BaseModel):
    serviceId: str
    nextAvailableDate: Optional[str] = None


class WorkingHoursResponse(BaseModel):
    day: str
    isOpen: bool
    openTime: str
    closeTime: str
    display: str
