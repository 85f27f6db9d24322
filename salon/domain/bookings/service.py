"""Booking service - Business logic for the booking lifecycle"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking
from ...shared.errors import InvalidTransition, NotFoundError, ValidationError
from ..catalog.repository import CatalogRepository
from ..scheduling.availability_service import BLOCKING_STATUSES, AvailabilityEngine
from ..scheduling.time_calculator import combine_date_time, parse_iso_date
from .repository import BookingRepository
from .schemas import BookingCreate, BookingExtraResponse, BookingResponse, ClientDetails

logger = logging.getLogger(__name__)

# Allowed booking status changes; anything absent is terminal
TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled", "no-show"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
    "no-show": frozenset(),
}


def can_transition(current: str, new_status: str) -> bool:
    return new_status in TRANSITIONS.get(current, frozenset())


def booking_to_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        serviceId=booking.service_id,
        serviceName=booking.service_name,
        startTime=booking.start_time,
        endTime=booking.end_time,
        client=ClientDetails.model_construct(
            firstName=booking.client_first_name,
            lastName=booking.client_last_name,
            email=booking.client_email,
            phone=booking.client_phone,
            notes=booking.client_notes,
        ),
        extras=[BookingExtraResponse(**extra) for extra in booking.extras or []],
        subtotal=booking.subtotal,
        extrasTotal=booking.extras_total,
        depositAmount=booking.deposit_amount,
        totalPaid=booking.total_paid,
        balanceDue=booking.balance_due,
        paymentReference=booking.payment_reference,
        paymentStatus=booking.payment_status,
        bookingStatus=booking.booking_status,
        policyAcknowledged=booking.policy_acknowledged,
        createdAt=booking.created_at,
        updatedAt=booking.updated_at,
    )


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, engine: AvailabilityEngine):
        self.db = db
        self.engine = engine
        self.repo = BookingRepository()
        self.catalog = CatalogRepository()

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def list_bookings(
        self,
        start: date,
        end: date,
        status: Optional[str] = None,
    ) -> list[Booking]:
        """Bookings on local dates start..end inclusive, for the admin schedule"""
        if end < start:
            raise ValidationError("end must not be before start")
        range_start, range_end = self.engine.day_bounds(start, end)
        return self.repo.query_by_date_range(
            self.db, range_start, range_end, [status] if status else None
        )

    def bookings_for_days(self, first_day: date, last_day: Optional[date] = None) -> list[Booking]:
        """Slot-holding bookings for availability checks"""
        range_start, range_end = self.engine.day_bounds(first_day, last_day)
        return self.repo.query_by_date_range(self.db, range_start, range_end, BLOCKING_STATUSES)

    # ========================================================================
    # CREATION
    # ========================================================================

    def create_booking(self, data: BookingCreate) -> Booking:
        """
        Create a pending booking for a free slot.

        The money breakdown always comes from the catalog, never from the
        caller. Raises ValidationError for unknown services or extras, a
        missing policy acknowledgement, a date outside the booking window or
        a slot that is not available.
        """
        logger.info(f"📥 Creating booking for service {data.serviceId} on {data.date} {data.startTime}")

        if not data.policyAcknowledged:
            raise ValidationError("The deposit and cancellation policy must be acknowledged")

        service = self.catalog.get_service_by_id(data.serviceId)
        if not service or not service.is_active:
            raise ValidationError(f"Unknown service: {data.serviceId}")

        extras = []
        for extra_id in dict.fromkeys(data.extraIds):
            extra = self.catalog.get_extra_by_id(service, extra_id)
            if not extra:
                raise ValidationError(f"Unknown extra: {extra_id}")
            extras.append({"extraId": extra.id, "name": extra.name, "price": extra.price})

        day = parse_iso_date(data.date)
        today = self.engine.today()
        if day < today or day > today + timedelta(days=self.engine.settings.booking_window_days):
            raise ValidationError("Date is outside the booking window")

        slot = self.engine.get_slot(service, day, data.startTime, self.bookings_for_days(day))
        if slot is None:
            raise ValidationError(f"{data.startTime} is not offered for {service.name}")
        if not slot.isAvailable:
            logger.warning(f"⚠️ Slot {data.date} {data.startTime} unavailable: {slot.reason}")
            raise ValidationError(f"Selected time is not available: {slot.reason}")

        start_time = combine_date_time(day, data.startTime, self.engine.tz)
        end_time = start_time + timedelta(minutes=service.duration_minutes)

        subtotal = float(service.price)
        extras_total = float(sum(e["price"] for e in extras))
        # Extras are paid upfront with the deposit
        total_paid = float(service.deposit_amount) + extras_total

        booking_id = self.repo.create(
            self.db,
            service_id=service.id,
            service_name=service.name,
            duration_minutes=service.duration_minutes,
            start_time=start_time,
            end_time=end_time,
            client_first_name=data.client.firstName,
            client_last_name=data.client.lastName,
            client_email=data.client.email,
            client_phone=data.client.phone,
            client_notes=data.client.notes,
            extras=extras,
            subtotal=subtotal,
            extras_total=extras_total,
            deposit_amount=float(service.deposit_amount),
            total_paid=total_paid,
            balance_due=subtotal + extras_total - total_paid,
            policy_acknowledged=True,
        )
        logger.info(f"✅ Pending booking {booking_id} created")
        return self.get_booking(booking_id)

    # ========================================================================
    # STATUS TRANSITIONS
    # ========================================================================

    def transition(
        self,
        booking_id: str,
        new_status: str,
        payment_reference: Optional[str] = None,
    ) -> Booking:
        """Move a booking to ``new_status`` if the lifecycle allows it"""
        booking = self.get_booking(booking_id)
        if not can_transition(booking.booking_status, new_status):
            raise InvalidTransition(
                f"Cannot change booking from {booking.booking_status} to {new_status}"
            )

        current = booking.booking_status
        if not self.repo.update_status(
            self.db, booking_id, new_status, payment_reference, expected_status=current
        ):
            raise InvalidTransition(f"Booking {booking_id} changed while updating; retry")
        self.db.refresh(booking)
        logger.info(f"🔄 Booking {booking_id}: -> {new_status}")
        return booking

    def confirm_payment(self, booking_id: str, reference: str) -> Booking:
        return self.transition(booking_id, "confirmed", payment_reference=reference)

    def cancel_booking(self, booking_id: str) -> Booking:
        return self.transition(booking_id, "cancelled")

    def complete_booking(self, booking_id: str) -> Booking:
        return self.transition(booking_id, "completed")

    def mark_no_show(self, booking_id: str) -> Booking:
        """Client did not arrive; the deposit is forfeited"""
        return self.transition(booking_id, "no-show")

    def expire_stale_pending(self, now: datetime, ttl_minutes: int) -> list[str]:
        """Cancel unpaid pending bookings older than ``ttl_minutes`` and return their IDs"""
        expired = []
        for booking in self.repo.list_stale_pending(self.db, now - timedelta(minutes=ttl_minutes)):
            if self.repo.update_status(self.db, booking.id, "cancelled", expected_status="pending"):
                expired.append(booking.id)
        if expired:
            logger.info(f"🧹 Released {len(expired)} stale pending bookings")
        return expired
