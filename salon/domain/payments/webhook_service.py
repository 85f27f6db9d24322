"""
Paystack webhook processing.

The router verifies the signature first; this service parses the verified
body and applies the confirmation protocol:

1. ``charge.success`` for a reference already in processed_payments is
   acknowledged with "Already processed" and changes nothing.
2. A successful charge must carry a reference and name its booking in
   metadata, otherwise it is rejected permanently.
3. The reference is inserted into processed_payments and the booking moves
   to confirmed in the same transaction; a lost insert race is reported as
   "Already processed".
4. A charge below the amount due is recorded as paid but the booking stays
   pending for manual review.
5. Follow-on work is queued, never done inline.
6. Every other event is acknowledged so Paystack stops retrying.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ... import jobs
from ...shared.errors import AlreadyProcessed, InternalError, InvalidTransition, ValidationError
from ..bookings.repository import BookingRepository
from ..bookings.service import BookingService
from ..scheduling.availability_service import AvailabilityEngine
from .schemas import ChargeData, WebhookAck, WebhookEvent
from .service import to_minor_units

logger = logging.getLogger(__name__)

ALREADY_PROCESSED = "Already processed"
EVENT_RECEIVED = "Event received"
PAYMENT_PROCESSED = "Payment processed successfully"
PAYMENT_HELD = "Payment recorded for review"


def parse_event(raw_body: bytes) -> WebhookEvent:
    try:
        return WebhookEvent.model_validate_json(raw_body)
    except PydanticValidationError as e:
        logger.error(f"❌ Unparseable Paystack webhook body: {e.errors()[:1]}")
        raise InternalError("Malformed webhook payload") from e


class PaystackWebhookService:
    """Applies verified Paystack events to bookings"""

    def __init__(self, db: Session, engine: AvailabilityEngine, job_pool: Optional[Any] = None):
        self.db = db
        self.repo = BookingRepository()
        self.bookings = BookingService(db, engine)
        self.job_pool = job_pool

    async def process(self, raw_body: bytes) -> WebhookAck:
        event = parse_event(raw_body)
        data = event.data
        logger.info(f"📥 Paystack event {event.event}: reference={data.reference}, status={data.status}")

        if event.event == "charge.success":
            if not data.reference:
                logger.error("❌ charge.success without a reference")
                raise ValidationError("Missing payment reference")
            try:
                if self.repo.is_payment_processed(self.db, data.reference):
                    raise AlreadyProcessed(data.reference)
                if data.status == "success":
                    return await self._confirm_charge(data)
            except AlreadyProcessed:
                logger.info(f"🔁 Reference {data.reference} already processed, skipping")
                return WebhookAck(message=ALREADY_PROCESSED, reference=data.reference)

        if event.event == "charge.failed":
            logger.warning(f"⚠️ Payment failed: {data.reference} ({data.gateway_response})")

        return WebhookAck(message=EVENT_RECEIVED)

    async def _confirm_charge(self, data: ChargeData) -> WebhookAck:
        booking_id = data.metadata.bookingId
        if not booking_id:
            logger.error(f"❌ Successful charge {data.reference} has no bookingId in metadata")
            raise ValidationError("Missing bookingId in payment metadata")

        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking:
            logger.error(f"❌ Successful charge {data.reference} names unknown booking {booking_id}")
            raise ValidationError(f"Unknown booking {booking_id}")

        if booking.payment_reference and booking.payment_reference != data.reference:
            logger.warning(
                f"⚠️ Booking {booking_id} holds reference {booking.payment_reference}, "
                f"paid with {data.reference}"
            )

        # Flushed, not committed: the mark and the status change commit together
        if not self.repo.mark_payment_processed(self.db, data.reference, booking_id, commit=False):
            raise AlreadyProcessed(data.reference)

        amount_due = to_minor_units(booking.total_paid)
        if data.amount is None or data.amount < amount_due:
            # Recorded so the slot is held and the money is visible, but not confirmed
            self.repo.set_payment_status(self.db, booking_id, "paid")
            logger.error(
                f"❌ Payment {data.reference} of {data.amount} is below the {amount_due} due for "
                f"booking {booking_id}; needs manual review"
            )
            return WebhookAck(message=PAYMENT_HELD, reference=data.reference)
        if data.amount > amount_due:
            logger.warning(f"⚠️ Booking {booking_id} overpaid: {data.amount} for {amount_due} due")

        try:
            self.bookings.confirm_payment(booking_id, data.reference)
        except InvalidTransition:
            # Paid after the booking left pending (e.g. expired); keep the money visible
            self.repo.set_payment_status(self.db, booking_id, "paid")
            logger.error(
                f"❌ Payment {data.reference} received for booking {booking_id} in status "
                f"{booking.booking_status}; needs manual review"
            )
            return WebhookAck(message=PAYMENT_PROCESSED, reference=data.reference)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Booking {booking_id} confirmed by payment {data.reference}")
        await jobs.enqueue_booking_confirmed(self.job_pool, booking_id, data.reference)
        return WebhookAck(message=PAYMENT_PROCESSED, reference=data.reference)
