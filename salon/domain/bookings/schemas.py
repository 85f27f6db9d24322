"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_client_email, validate_na_phone, validate_person_name
from ..scheduling.time_calculator import parse_iso_date, time_to_minutes

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled", "no-show"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class ClientDetails(BaseModel):
    firstName: str
    lastName: str
    email: str
    phone: str
    notes: Optional[str] = None

    @field_validator("firstName", "lastName")
    @classmethod
    def validate_name(cls, v):
        return validate_person_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        if not v:
            raise ValueError("Email is required")
        return validate_client_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if not v:
            raise ValueError("Phone is required")
        return validate_na_phone(v)


class BookingCreate(BaseModel):
    """Schema for creating a pending booking before checkout"""

    serviceId: str
    date: str  # YYYY-MM-DD, business timezone
    startTime: str  # HH:MM
    client: ClientDetails
    extraIds: list[str] = []
    policyAcknowledged: bool = False

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        parse_iso_date(v)
        return v

    @field_validator("startTime")
    @classmethod
    def validate_start_time(cls, v):
        time_to_minutes(v)
        return v


class BookingExtraResponse(BaseModel):
    extraId: str
    name: str
    price: float


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: str
    serviceId: str
    serviceName: str
    startTime: datetime
    endTime: datetime
    client: ClientDetails
    extras: list[BookingExtraResponse]
    subtotal: float
    extrasTotal: float
    depositAmount: float
    totalPaid: float
    balanceDue: float
    paymentReference: Optional[str] = None
    paymentStatus: PaymentStatus
    bookingStatus: BookingStatus
    policyAcknowledged: bool
    createdAt: datetime
    updatedAt: datetime
