"""Catalog domain schemas - Pydantic models for services and extras"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..scheduling.time_calculator import time_to_minutes

ServiceCategory = Literal["braids", "locs", "weaves", "natural", "other"]


class ServiceExtra(BaseModel):
    """Add-on a client can select during booking"""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    description: Optional[str] = None


class Service(BaseModel):
    """
    Immutable catalog entry.

    ``allowed_start_times`` is the complete set of start times ever offered
    for the service; long services only list early starts so they finish
    inside working hours.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: float
    deposit_amount: float
    duration_minutes: int
    allowed_start_times: tuple[str, ...]
    extras: tuple[ServiceExtra, ...] = ()
    category: ServiceCategory = "other"
    is_active: bool = True

    @field_validator("allowed_start_times")
    @classmethod
    def validate_start_times(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for value in v:
            time_to_minutes(value)
        if len(set(v)) != len(v):
            raise ValueError("allowed_start_times must not repeat")
        return v

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("duration_minutes must be positive")
        return v


class ServiceExtraResponse(BaseModel):
    id: str
    name: str
    price: float
    description: Optional[str] = None


class ServiceResponse(BaseModel):
    """Schema for catalog entries returned to the booking UI"""

    id: str
    name: str
    description: str
    price: float
    depositAmount: float
    durationMinutes: int
    allowedStartTimes: list[str]
    extras: list[ServiceExtraResponse]
    category: str
    isActive: bool
