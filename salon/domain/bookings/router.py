"""Booking router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..scheduling.availability_service import AvailabilityEngine
from ..scheduling.router import get_availability_engine
from ..scheduling.time_calculator import parse_iso_date
from .schemas import BookingCreate, BookingResponse, BookingStatus
from .service import BookingService, booking_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(
    db: Session = Depends(get_db),
    engine: AvailabilityEngine = Depends(get_availability_engine),
) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, engine)


# ============================================================================
# CORE OPERATIONS
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Create a pending booking; it is confirmed once the deposit is paid"""
    return booking_to_response(service.create_booking(data))


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    start: str = Query(...),
    end: str = Query(...),
    status: Optional[BookingStatus] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    """Schedule feed for local dates start..end inclusive"""
    bookings = service.list_bookings(parse_iso_date(start), parse_iso_date(end), status)
    return [booking_to_response(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return booking_to_response(service.get_booking(booking_id))


# ============================================================================
# STATUS TRANSITIONS
# ============================================================================


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return booking_to_response(service.cancel_booking(booking_id))


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return booking_to_response(service.complete_booking(booking_id))


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
async def mark_no_show(booking_id: str, service: BookingService = Depends(get_booking_service)):
    """Client did not arrive; deposit is forfeited"""
    return booking_to_response(service.mark_no_show(booking_id))
