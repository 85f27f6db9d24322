"""
Webhook Security Module

Signature verification for payment processor webhooks:
- HMAC over the exact raw request body, checked before any parsing
- Constant-time signature comparison
- Logging of every rejection for auditing
"""

import hashlib
import hmac
import logging

from fastapi import Request

from .shared.errors import SignatureInvalid

logger = logging.getLogger(__name__)

PAYSTACK_SIGNATURE_HEADER = "x-paystack-signature"


def constant_time_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.

    Empty values never match.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha512(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA512 signature of payload as lowercase hex"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).hexdigest()


def create_webhook_signature(secret: str, payload: bytes) -> str:
    """Signature a processor would send for ``payload``; used by tests and local replays"""
    return compute_hmac_sha512(secret, payload)


def verify_signature(payload: bytes, signature: str, secret: str) -> bool:
    if not secret:
        logger.error("❌ Webhook secret is not configured; rejecting delivery")
        return False
    expected = compute_hmac_sha512(secret, payload)
    return constant_time_compare(expected, signature.strip().lower())


async def verify_paystack_webhook(request: Request, secret: str) -> bytes:
    """
    Verify a Paystack webhook signature.

    Paystack signs the raw body with HMAC-SHA512 keyed by the account secret
    key and sends the hex digest in ``x-paystack-signature``.

    Args:
        request: FastAPI request object
        secret: Paystack secret key

    Returns:
        The verified raw body

    Raises:
        SignatureInvalid: If the header is missing or does not match
    """
    # Raw body BEFORE any parsing; re-serialized JSON would not match
    raw_body = await request.body()
    signature = request.headers.get(PAYSTACK_SIGNATURE_HEADER, "")

    if not signature:
        logger.warning("🚫 Paystack webhook without signature header")
        raise SignatureInvalid("Missing signature")

    if not verify_signature(raw_body, signature, secret):
        logger.warning(f"🚫 Invalid Paystack webhook signature ({len(raw_body)} bytes)")
        raise SignatureInvalid("Invalid signature")

    logger.info("✅ Paystack webhook signature verified")
    return raw_body
