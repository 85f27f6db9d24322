"""Payment domain schemas - checkout requests and processor webhook envelopes"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from ...shared.errors import ValidationError

REQUIRED_PAYMENT_FIELDS = ("email", "amount", "bookingId", "serviceId")


class PaymentExtra(BaseModel):
    name: str
    price: float


class CreatePaymentRequest(BaseModel):
    """Schema for initializing a deposit checkout"""

    email: str
    amount: float  # major currency units
    bookingId: str
    serviceId: str
    serviceName: str = ""
    clientName: str = ""
    extras: list[PaymentExtra] = []

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("amount must be positive")
        return v

    @classmethod
    def from_payload(cls, payload: Any) -> "CreatePaymentRequest":
        """
        Build a request from an untrusted JSON body.

        Missing or empty required fields raise ValidationError before any
        other processing.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        missing = [name for name in REQUIRED_PAYMENT_FIELDS if not payload.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid payment request: {e.errors()[0]['msg']}") from e


class CreatePaymentResponse(BaseModel):
    success: bool = True
    authorizationUrl: str
    accessCode: str
    reference: str


class PaystackInitData(BaseModel):
    authorization_url: str
    access_code: str
    reference: str


# ============================================================================
# WEBHOOK ENVELOPE
# ============================================================================


class ChargeMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    bookingId: Optional[str] = None
    serviceId: Optional[str] = None
    serviceName: Optional[str] = None


class ChargeCustomer(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    customer_code: Optional[str] = None


class ChargeData(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    status: str = ""
    # Absent on non-charge events such as subscription.create
    reference: Optional[str] = None
    amount: Optional[int] = None  # minor units
    currency: Optional[str] = None
    gateway_response: Optional[str] = None
    paid_at: Optional[str] = None
    metadata: ChargeMetadata = ChargeMetadata()
    customer: Optional[ChargeCustomer] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, v):
        # Paystack sends "" or null when a transaction has no metadata
        if not isinstance(v, dict):
            return {}
        return v


class WebhookEvent(BaseModel):
    """Paystack event envelope; only the fields the handler reads are typed"""

    model_config = ConfigDict(extra="allow")

    event: str
    data: ChargeData


class WebhookAck(BaseModel):
    message: str
    reference: Optional[str] = None
