"""Payment router - checkout initialization, verification and Paystack webhooks"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.errors import BookingError, ValidationError
from ...webhook_security import verify_paystack_webhook
from ..scheduling.availability_service import AvailabilityEngine
from ..scheduling.router import get_availability_engine
from .paystack_client import PaystackClient
from .schemas import CreatePaymentResponse, WebhookAck
from .service import PaymentService
from .webhook_service import PaystackWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])
webhooks_router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

# Checkout is started from the public booking site; any origin may call it.
# Served by the public_cors middleware in main.py, ahead of the allow-list.
PUBLIC_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
PUBLIC_CORS_PATHS = ("/create-payment",)


def get_paystack_client(request: Request) -> PaystackClient:
    """Dependency injection for the app-wide PaystackClient"""
    return request.app.state.paystack


def get_payment_service(
    db: Session = Depends(get_db),
    client: PaystackClient = Depends(get_paystack_client),
) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db, client)


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post("/create-payment", response_model=CreatePaymentResponse)
async def create_payment(request: Request, service: PaymentService = Depends(get_payment_service)):
    """
    Initialize a Paystack checkout for a pending booking's deposit.

    The body is read as raw JSON so missing fields are reported as 400 with
    the processor never contacted.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be valid JSON") from e

    return await service.create_payment(payload)


@router.get("/payments/verify/{reference}")
async def verify_payment(reference: str, service: PaymentService = Depends(get_payment_service)):
    """Transaction state for the post-checkout success page"""
    return await service.verify_payment(reference)


# ============================================================================
# WEBHOOKS
# ============================================================================


@webhooks_router.post("/paystack", response_model=WebhookAck)
async def paystack_webhook(
    request: Request,
    db: Session = Depends(get_db),
    engine: AvailabilityEngine = Depends(get_availability_engine),
    client: PaystackClient = Depends(get_paystack_client),
):
    """
    Handle Paystack webhook events.

    The signature is verified against the raw body before anything is
    parsed. Responses are 200 for every handled or ignored event so
    Paystack stops retrying; 401 for bad signatures; 500 when processing
    fails and a retry may succeed.
    """
    raw_body = await verify_paystack_webhook(request, client.secret_key)

    service = PaystackWebhookService(db, engine, getattr(request.app.state, "job_pool", None))
    try:
        return await service.process(raw_body)
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"❌ Paystack webhook processing error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
