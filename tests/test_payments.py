"""Tests for deposit checkout initialization."""

import httpx
import pytest

from conftest import load_booking, seed_booking
from salon.domain.payments.schemas import CreatePaymentRequest
from salon.domain.payments.service import PaymentService, build_reference, to_minor_units
from salon.shared.errors import TransientError, UpstreamRejected, ValidationError


def payment_payload(booking_id: str, **overrides) -> dict:
    data = {
        "email": "ada@example.com",
        "amount": 35,
        "bookingId": booking_id,
        "serviceId": "wash-style",
        "serviceName": "Wash & Style",
        "clientName": "Ada Obi",
        "extras": [],
    }
    data.update(overrides)
    return data


class TestHelpers:
    def test_reference_format(self):
        reference = build_reference("abc123")
        prefix, booking_id, millis = reference.split("_")
        assert prefix == "BEL"
        assert booking_id == "abc123"
        assert millis.isdigit() and len(millis) >= 13

    @pytest.mark.parametrize("amount,expected", [(35, 3500), (145.5, 14550), (19.99, 1999)])
    def test_minor_units(self, amount, expected):
        assert to_minor_units(amount) == expected

    @pytest.mark.parametrize("missing", ["email", "amount", "bookingId", "serviceId"])
    def test_missing_required_field(self, missing):
        payload = payment_payload("b1")
        payload[missing] = ""
        with pytest.raises(ValidationError, match=missing):
            CreatePaymentRequest.from_payload(payload)

    def test_non_object_body(self):
        with pytest.raises(ValidationError):
            CreatePaymentRequest.from_payload(["email"])


class TestPaymentService:
    @pytest.fixture
    def payments(self, database, paystack_client):
        session = database.session()
        yield PaymentService(session, paystack_client)
        session.close()

    @pytest.mark.asyncio
    async def test_validation_failure_makes_no_network_call(self, payments, paystack):
        with pytest.raises(ValidationError):
            await payments.create_payment({"email": "ada@example.com", "amount": 35})
        assert paystack.requests == []

    @pytest.mark.asyncio
    async def test_initializes_checkout(self, database, payments, paystack):
        booking_id = seed_booking(database)
        result = await payments.create_payment(
            payment_payload(booking_id, extras=[{"name": "Edge Control Kit", "price": 20}])
        )

        assert result.success is True
        assert result.reference.startswith(f"BEL_{booking_id}_")
        assert result.authorizationUrl.endswith(result.reference)

        [request] = paystack.requests
        assert request.method == "POST"
        assert request.url.path == "/transaction/initialize"
        assert request.headers["Authorization"].startswith("Bearer sk_test_")

        [body] = paystack.bodies()
        assert body["amount"] == 3500
        assert body["currency"] == "CAD"
        assert body["callback_url"].endswith("/book/success")
        assert body["metadata"]["bookingId"] == booking_id
        assert body["metadata"]["extras"] == [{"name": "Edge Control Kit", "price": 20.0}]
        assert [f["variable_name"] for f in body["metadata"]["custom_fields"]] == ["service", "client"]

        booking = load_booking(database, booking_id)
        assert booking.payment_reference == result.reference
        assert booking.payment_access_code == result.accessCode

    @pytest.mark.asyncio
    async def test_second_request_reuses_intent(self, database, payments, paystack):
        booking_id = seed_booking(database)
        first = await payments.create_payment(payment_payload(booking_id))
        second = await payments.create_payment(payment_payload(booking_id))

        assert second.reference == first.reference
        assert second.authorizationUrl == first.authorizationUrl
        assert len(paystack.requests) == 1

    @pytest.mark.asyncio
    async def test_upstream_rejection(self, database, payments, paystack):
        paystack.responder = lambda request: httpx.Response(
            400, json={"status": False, "message": "Invalid Email Address Passed"}
        )
        booking_id = seed_booking(database)

        with pytest.raises(UpstreamRejected, match="Invalid Email Address Passed"):
            await payments.create_payment(payment_payload(booking_id))
        assert load_booking(database, booking_id).payment_reference is None

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self, database, payments, paystack):
        def timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        paystack.responder = timeout
        booking_id = seed_booking(database)

        with pytest.raises(TransientError):
            await payments.create_payment(payment_payload(booking_id))
        assert load_booking(database, booking_id).payment_reference is None

    @pytest.mark.asyncio
    async def test_unreadable_response_is_transient(self, database, payments, paystack):
        paystack.responder = lambda request: httpx.Response(502, text="<html>Bad Gateway</html>")
        booking_id = seed_booking(database)

        with pytest.raises(TransientError):
            await payments.create_payment(payment_payload(booking_id))

    @pytest.mark.asyncio
    async def test_booking_must_be_pending(self, database, payments, paystack):
        booking_id = seed_booking(database, status="cancelled")
        with pytest.raises(ValidationError, match="not awaiting payment"):
            await payments.create_payment(payment_payload(booking_id))
        assert paystack.requests == []

    @pytest.mark.asyncio
    async def test_service_must_match_booking(self, database, payments):
        booking_id = seed_booking(database)
        with pytest.raises(ValidationError):
            await payments.create_payment(payment_payload(booking_id, serviceId="silk-press"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0.01, 34.99, 80])
    async def test_amount_must_match_booking(self, database, payments, paystack, amount):
        booking_id = seed_booking(database)
        with pytest.raises(ValidationError):
            await payments.create_payment(payment_payload(booking_id, amount=amount))

        assert paystack.requests == []
        assert load_booking(database, booking_id).payment_reference is None


class TestCreatePaymentEndpoint:
    def test_success(self, client, app_db):
        booking_id = seed_booking(app_db)
        response = client.post("/create-payment", json=payment_payload(booking_id))

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        body = response.json()
        assert body["success"] is True
        assert set(body) == {"success", "authorizationUrl", "accessCode", "reference"}

    def test_missing_fields(self, client, paystack):
        response = client.post("/create-payment", json={"email": "ada@example.com"})

        assert response.status_code == 400
        assert "Missing required fields" in response.json()["detail"]
        assert response.headers["access-control-allow-origin"] == "*"
        assert paystack.requests == []

    def test_invalid_json(self, client, paystack):
        response = client.post(
            "/create-payment", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert paystack.requests == []

    def test_underpriced_checkout_is_rejected(self, client, app_db, paystack):
        booking_id = seed_booking(app_db)
        response = client.post("/create-payment", json=payment_payload(booking_id, amount=0.01))

        assert response.status_code == 400
        assert response.json()["detail"] == "Amount must be 35.00"
        assert paystack.requests == []

    def test_unknown_booking(self, client):
        assert client.post("/create-payment", json=payment_payload("missing")).status_code == 400

    def test_upstream_rejected(self, client, app_db, paystack):
        paystack.responder = lambda request: httpx.Response(
            401, json={"status": False, "message": "Invalid key"}
        )
        booking_id = seed_booking(app_db)
        response = client.post("/create-payment", json=payment_payload(booking_id))

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid key"

    def test_transient_failure(self, client, app_db, paystack):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        paystack.responder = refuse
        booking_id = seed_booking(app_db)
        assert client.post("/create-payment", json=payment_payload(booking_id)).status_code == 500

    @pytest.mark.parametrize("origin", ["https://partner.example", "https://bellezavari.com"])
    def test_preflight(self, client, origin):
        response = client.options(
            "/create-payment",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type"

    def test_listed_origin_gets_wildcard(self, client, app_db):
        booking_id = seed_booking(app_db)
        response = client.post(
            "/create-payment",
            json=payment_payload(booking_id),
            headers={"Origin": "https://bellezavari.com"},
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "access-control-allow-credentials" not in response.headers

    def test_error_response_gets_wildcard(self, client):
        response = client.post(
            "/create-payment",
            json=payment_payload("missing"),
            headers={"Origin": "https://partner.example"},
        )

        assert response.status_code == 400
        assert response.headers["access-control-allow-origin"] == "*"

    def test_other_routes_keep_allow_list(self, client):
        response = client.get("/services", headers={"Origin": "https://partner.example"})

        assert "access-control-allow-origin" not in response.headers

    def test_wrong_method(self, client):
        assert client.get("/create-payment").status_code == 405

    def test_verify(self, client, app_db):
        booking_id = seed_booking(app_db, payment_reference="BEL_verify_1")
        response = client.get("/payments/verify/BEL_verify_1")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["amount"] == 145
        assert body["bookingId"] == booking_id
