"""Shared test fixtures and helpers."""

import json
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import httpx
import pytest
from fastapi.testclient import TestClient

from salon.database import Database
from salon.domain.bookings.repository import BookingRepository
from salon.domain.payments.paystack_client import PaystackClient
from salon.domain.scheduling.availability_service import AvailabilityEngine
from salon.domain.scheduling.settings import BusinessSettings
from salon.domain.scheduling.time_calculator import combine_date_time
from salon.main import create_app
from salon.models import Booking

PAYSTACK_SECRET = "sk_test_0123456789abcdef"
TIMEZONE = "America/Toronto"

# Monday 2026-03-02, 08:00 in Toronto (EST, UTC-5)
FIXED_NOW = datetime(2026, 3, 2, 13, 0, tzinfo=timezone.utc)
TODAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
SATURDAY = date(2026, 3, 7)
SUNDAY = date(2026, 3, 8)


@pytest.fixture
def business_settings():
    return BusinessSettings(timezone=TIMEZONE)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine(business_settings, clock):
    return AvailabilityEngine(business_settings, clock)


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


# ============================================================================
# PAYSTACK
# ============================================================================


class PaystackStub:
    """Records outbound Paystack calls and answers them like the real API"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responder:
            return self.responder(request)
        if request.url.path == "/transaction/initialize":
            reference = json.loads(request.content)["reference"]
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Authorization URL created",
                    "data": {
                        "authorization_url": f"https://checkout.paystack.com/{reference}",
                        "access_code": f"ac_{reference[-6:]}",
                        "reference": reference,
                    },
                },
            )
        if request.url.path.startswith("/transaction/verify/"):
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Verification successful",
                    "data": {
                        "status": "success",
                        "reference": request.url.path.rsplit("/", 1)[-1],
                        "amount": 14500,
                        "currency": "CAD",
                        "paid_at": "2026-03-02T13:05:00.000Z",
                    },
                },
            )
        return httpx.Response(404, json={"status": False, "message": "Not found"})

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def paystack():
    return PaystackStub()


@pytest.fixture
def paystack_client(paystack):
    return PaystackClient(
        PAYSTACK_SECRET,
        base_url="https://api.paystack.test",
        timeout=5.0,
        transport=httpx.MockTransport(paystack.handler),
    )


# ============================================================================
# APPLICATION
# ============================================================================


@pytest.fixture
def app(paystack_client, business_settings, clock):
    return create_app(
        database_url="sqlite://",
        paystack_client=paystack_client,
        business_settings=business_settings,
        clock=clock,
        enable_jobs=False,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_db(client) -> Database:
    """The database the running app uses, for seeding and assertions"""
    return client.app.state.db


class FakeJob:
    def __init__(self, job_id: str):
        self.job_id = job_id


class FakeJobPool:
    """Stands in for an arq pool; records enqueued jobs"""

    def __init__(self):
        self.jobs: list[tuple] = []

    async def enqueue_job(self, function: str, *args, _job_id: Optional[str] = None, **kwargs):
        if any(job_id == _job_id for _, _, job_id in self.jobs):
            return None
        self.jobs.append((function, args, _job_id))
        return FakeJob(_job_id or f"job-{len(self.jobs)}")

    async def close(self):
        pass


# ============================================================================
# HELPERS
# ============================================================================


def make_booking(
    start: datetime,
    duration_minutes: int,
    status: str = "confirmed",
    service_id: str = "wash-style",
) -> Booking:
    """Unsaved booking, enough for availability checks"""
    return Booking(
        service_id=service_id,
        service_name=service_id,
        duration_minutes=duration_minutes,
        start_time=start,
        end_time=start + timedelta(minutes=duration_minutes),
        booking_status=status,
    )


def local(day: date, time_of_day: str) -> datetime:
    return combine_date_time(day, time_of_day, ZoneInfo(TIMEZONE))


def seed_booking(
    database: Database,
    day: date = TUESDAY,
    start_time: str = "09:00",
    duration_minutes: int = 90,
    status: str = "pending",
    service_id: str = "wash-style",
    payment_reference: Optional[str] = None,
    total_paid: float = 35.0,
) -> str:
    """Insert a booking directly through the repository and return its ID"""
    start = local(day, start_time)
    with database.session() as session:
        booking_id = BookingRepository.create(
            session,
            service_id=service_id,
            service_name="Wash & Style",
            duration_minutes=duration_minutes,
            start_time=start,
            end_time=start + timedelta(minutes=duration_minutes),
            client_first_name="Ada",
            client_last_name="Obi",
            client_email="ada@example.com",
            client_phone="+14165550199",
            extras=[],
            subtotal=75.0,
            extras_total=0.0,
            deposit_amount=35.0,
            total_paid=total_paid,
            balance_due=75.0 - total_paid,
            policy_acknowledged=True,
        )
        if payment_reference:
            BookingRepository.attach_payment_intent(
                session, booking_id, payment_reference, "https://checkout.paystack.com/x", "ac_x"
            )
        if status != "pending":
            BookingRepository.update_status(session, booking_id, status)
    return booking_id


def load_booking(database: Database, booking_id: str) -> Booking:
    with database.session() as session:
        booking = BookingRepository.get_by_id(session, booking_id)
        session.expunge(booking)
        return booking
