"""Paystack API client"""

import logging
from typing import Any, Optional

import httpx

from ...shared.errors import TransientError, UpstreamRejected
from .schemas import PaystackInitData

logger = logging.getLogger(__name__)


class PaystackClient:
    """
    Thin async wrapper over the Paystack transaction API.

    Every call is bounded by ``timeout`` and never retried here; callers see
    UpstreamRejected when Paystack answers ``status: false`` and
    TransientError for network, timeout or unreadable responses.
    """

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Tests inject httpx.MockTransport here
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as http_client:
                response = await http_client.request(
                    method, f"{self.base_url}{path}", headers=self._headers(), json=json
                )
        except httpx.TimeoutException as e:
            logger.error(f"⏰ Paystack {path} timed out after {self.timeout}s")
            raise TransientError("Payment processor timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Paystack {path} request failed: {e}")
            raise TransientError("Could not reach payment processor") from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"❌ Paystack {path} returned non-JSON ({response.status_code})")
            raise TransientError("Unreadable response from payment processor") from e

        if not isinstance(body, dict):
            raise TransientError("Unreadable response from payment processor")

        if not body.get("status"):
            message = body.get("message") or "Payment initialization failed"
            if response.status_code >= 500:
                logger.error(f"❌ Paystack {path} server error {response.status_code}: {message}")
                raise TransientError(message)
            logger.warning(f"⚠️ Paystack rejected {path}: {message}")
            raise UpstreamRejected(message)

        return body

    async def initialize_transaction(
        self,
        *,
        email: str,
        amount: int,
        currency: str,
        reference: str,
        callback_url: str,
        metadata: dict[str, Any],
    ) -> PaystackInitData:
        """Create a checkout; ``amount`` is in minor units"""
        body = await self._request(
            "POST",
            "/transaction/initialize",
            json={
                "email": email,
                "amount": amount,
                "currency": currency,
                "reference": reference,
                "callback_url": callback_url,
                "metadata": metadata,
            },
        )
        try:
            return PaystackInitData.model_validate(body.get("data") or {})
        except ValueError as e:
            raise TransientError("Payment processor response is missing checkout data") from e

    async def verify_transaction(self, reference: str) -> dict[str, Any]:
        """Current state of a transaction as reported by Paystack"""
        body = await self._request("GET", f"/transaction/verify/{reference}")
        return body.get("data") or {}
