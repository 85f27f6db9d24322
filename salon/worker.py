"""
ARQ Background Worker for Async Jobs
Handles booking follow-ups and releasing abandoned pending bookings
"""

import logging
import os
from datetime import datetime, timezone

from arq.cron import cron

from . import config
from .database import Database
from .domain.bookings.service import BookingService
from .domain.scheduling.availability_service import AvailabilityEngine
from .domain.scheduling.settings import get_business_settings
from .domain.scheduling.time_calculator import format_duration
from .jobs import get_redis_settings

logger = logging.getLogger(__name__)


async def startup(ctx):
    ctx["db"] = Database(config.DATABASE_URL)
    ctx["db"].create_all()
    ctx["availability"] = AvailabilityEngine(get_business_settings())
    logger.info("🚀 ARQ Worker started")


async def shutdown(ctx):
    ctx["db"].dispose()


async def booking_confirmed_task(ctx, booking_id: str, reference: str):
    """
    Follow-up after a deposit confirms a booking.

    Builds the confirmation summary sent to the client.

    Args:
        ctx: ARQ context
        booking_id: Confirmed booking ID
        reference: Payment reference that confirmed it

    Returns:
        dict with the confirmation summary
    """
    logger.info(f"🚀 ARQ Worker: booking follow-up for {booking_id} ({ctx.get('job_id', 'unknown')})")

    engine: AvailabilityEngine = ctx["availability"]
    db = ctx["db"].session()
    try:
        booking = BookingService(db, engine).get_booking(booking_id)
        local_start = booking.start_time.astimezone(engine.tz)
        settings = engine.settings

        summary = {
            "bookingId": booking.id,
            "reference": reference,
            "business": settings.business_name,
            "to": booking.client_email,
            "service": booking.service_name,
            "when": local_start.strftime("%A, %B %d, %Y at %I:%M %p"),
            "duration": format_duration(booking.duration_minutes),
            "depositPaid": f"{settings.currency_symbol}{booking.total_paid:.2f}",
            "balanceDue": f"{settings.currency_symbol}{booking.balance_due:.2f}",
        }
        logger.info(f"✅ Booking confirmation ready for {booking.client_email}: {summary['when']}")
        return summary
    finally:
        db.close()


async def expire_pending_bookings_task(ctx):
    """Cancel pending bookings that never completed checkout, freeing their slots"""
    engine: AvailabilityEngine = ctx["availability"]
    db = ctx["db"].session()
    try:
        expired = BookingService(db, engine).expire_stale_pending(
            datetime.now(timezone.utc), config.PENDING_BOOKING_TTL_MINUTES
        )
        return {"expired": expired}
    finally:
        db.close()


class WorkerSettings:
    """ARQ Worker Settings"""

    functions = [booking_confirmed_task, expire_pending_bookings_task]
    redis_settings = get_redis_settings()
    on_startup = startup
    on_shutdown = shutdown

    max_jobs = int(os.getenv("ARQ_MAX_JOBS", "10"))
    job_timeout = int(os.getenv("ARQ_JOB_TIMEOUT", "120"))
    keep_result = int(os.getenv("ARQ_KEEP_RESULT", "3600"))  # Keep job results for 1 hour

    health_check_interval = 60

    # Retry failed jobs up to 3 times
    max_tries = 3

    cron_jobs = [
        cron(expire_pending_bookings_task, minute={0, 15, 30, 45}),
    ]

    logger.info(f"🔧 ARQ Worker configured: max_jobs={max_jobs}, timeout={job_timeout}s")
