"""Payment service - deposit checkout initialization"""

import logging
import time
from typing import Any

from sqlalchemy.orm import Session

from ... import config
from ...models import Booking
from ...shared.errors import ValidationError
from ..bookings.repository import BookingRepository
from .paystack_client import PaystackClient
from .schemas import CreatePaymentRequest, CreatePaymentResponse

logger = logging.getLogger(__name__)


def build_reference(booking_id: str, prefix: str = config.PAYMENT_REFERENCE_PREFIX) -> str:
    """``<prefix>_<bookingId>_<epochMillis>``"""
    return f"{prefix}_{booking_id}_{int(time.time() * 1000)}"


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def build_metadata(request: CreatePaymentRequest) -> dict[str, Any]:
    return {
        "bookingId": request.bookingId,
        "serviceId": request.serviceId,
        "serviceName": request.serviceName,
        "clientName": request.clientName,
        "extras": [extra.model_dump() for extra in request.extras],
        # Shown on the Paystack dashboard
        "custom_fields": [
            {"display_name": "Service", "variable_name": "service", "value": request.serviceName},
            {"display_name": "Client", "variable_name": "client", "value": request.clientName},
        ],
    }


def _stored_intent(booking: Booking) -> CreatePaymentResponse:
    return CreatePaymentResponse(
        authorizationUrl=booking.payment_authorization_url or "",
        accessCode=booking.payment_access_code or "",
        reference=booking.payment_reference,
    )


class PaymentService:
    """Service layer for payment initialization"""

    def __init__(self, db: Session, client: PaystackClient):
        self.db = db
        self.client = client
        self.repo = BookingRepository()

    async def create_payment(self, payload: Any) -> CreatePaymentResponse:
        """
        Start a deposit checkout for a pending booking.

        A booking that already holds a payment intent gets the stored intent
        back without a second processor call, so a double-submitted form
        never creates two transactions.
        """
        request = CreatePaymentRequest.from_payload(payload)

        booking = self.repo.get_by_id(self.db, request.bookingId)
        if not booking:
            raise ValidationError("Booking not found")
        if booking.service_id != request.serviceId:
            raise ValidationError("serviceId does not match the booking")
        if booking.booking_status != "pending":
            raise ValidationError(f"Booking is {booking.booking_status}, not awaiting payment")

        # The deposit plus extras is fixed at booking time; the client cannot choose it
        if to_minor_units(request.amount) != to_minor_units(booking.total_paid):
            logger.warning(
                f"⚠️ Checkout amount {request.amount} differs from booking {booking.id} "
                f"amount due {booking.total_paid}"
            )
            raise ValidationError(f"Amount must be {booking.total_paid:.2f}")

        if booking.payment_reference:
            logger.info(f"🔁 Reusing payment intent {booking.payment_reference} for booking {booking.id}")
            return _stored_intent(booking)

        reference = build_reference(booking.id)
        amount_minor = to_minor_units(request.amount)
        logger.info(f"💳 Initializing checkout {reference} ({amount_minor} minor units, {request.email})")

        intent = await self.client.initialize_transaction(
            email=request.email,
            amount=amount_minor,
            currency=config.PAYMENT_CURRENCY,
            reference=reference,
            callback_url=f"{config.SITE_URL.rstrip('/')}/book/success",
            metadata=build_metadata(request),
        )

        if not self.repo.attach_payment_intent(
            self.db, booking.id, intent.reference, intent.authorization_url, intent.access_code
        ):
            # A concurrent request attached first; its intent wins
            self.db.refresh(booking)
            logger.warning(f"⚠️ Booking {booking.id} already had an intent; returning {booking.payment_reference}")
            return _stored_intent(booking)

        logger.info(f"✅ Checkout ready for booking {booking.id}: {intent.reference}")
        return CreatePaymentResponse(
            authorizationUrl=intent.authorization_url,
            accessCode=intent.access_code,
            reference=intent.reference,
        )

    async def verify_payment(self, reference: str) -> dict[str, Any]:
        """Processor view of a transaction plus our booking status, for the success page"""
        data = await self.client.verify_transaction(reference)
        booking = self.repo.get_by_payment_reference(self.db, reference)
        return {
            "reference": reference,
            "status": data.get("status"),
            "amount": (data.get("amount") or 0) / 100,
            "currency": data.get("currency"),
            "paidAt": data.get("paid_at"),
            "bookingId": booking.id if booking else None,
            "bookingStatus": booking.booking_status if booking else None,
        }
