import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, Float, Index, Integer, String, Text

from .database import Base, UTCDateTime


def generate_booking_id():
    """Opaque booking identifier"""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=generate_booking_id)

    # Service snapshot at booking time
    service_id = Column(String(100), nullable=False, index=True)
    service_name = Column(String(255), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False)

    # Client details
    client_first_name = Column(String(100), nullable=False)
    client_last_name = Column(String(100), nullable=False)
    client_email = Column(String(255), nullable=False)
    client_phone = Column(String(30), nullable=False)
    client_notes = Column(Text, nullable=True)

    # [{"extraId": ..., "name": ..., "price": ...}]
    extras = Column(JSON, default=list, nullable=False)

    # Money, in major currency units
    subtotal = Column(Float, nullable=False, default=0.0)
    extras_total = Column(Float, nullable=False, default=0.0)
    deposit_amount = Column(Float, nullable=False, default=0.0)
    total_paid = Column(Float, nullable=False, default=0.0)
    balance_due = Column(Float, nullable=False, default=0.0)

    # Payment intent; reference is written once, when checkout is initialized
    payment_reference = Column(String(255), unique=True, nullable=True)
    payment_authorization_url = Column(String(500), nullable=True)
    payment_access_code = Column(String(255), nullable=True)
    payment_status = Column(String(20), default="pending", nullable=False)  # pending, paid, failed, refunded
    booking_status = Column(
        String(20), default="pending", nullable=False
    )  # pending, confirmed, completed, cancelled, no-show

    policy_acknowledged = Column(Boolean, default=False, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (Index("ix_bookings_status_start", "booking_status", "start_time"),)

    def __repr__(self):
        return f"<Booking(id={self.id}, service={self.service_id}, status={self.booking_status})>"


class ProcessedPayment(Base):
    """Idempotency record: one row per consumed payment reference, never updated"""

    __tablename__ = "processed_payments"

    reference = Column(String(255), primary_key=True)
    booking_id = Column(String(32), nullable=False)
    processed_at = Column(UTCDateTime, default=utcnow, nullable=False)
