"""Scheduling router - public availability endpoints"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.errors import NotFoundError
from ..bookings.repository import BookingRepository
from ..catalog.repository import CatalogRepository
from ..catalog.schemas import Service
from .availability_service import BLOCKING_STATUSES, NEXT_DATE_SEARCH_DAYS, AvailabilityEngine
from .schemas import AvailabilityResponse, NextAvailableResponse, WorkingHoursResponse
from .settings import DAY_NAMES
from .time_calculator import parse_iso_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_engine(request: Request) -> AvailabilityEngine:
    """Dependency injection for the app-wide AvailabilityEngine"""
    return request.app.state.availability


def _get_service(service_id: str) -> Service:
    service = CatalogRepository.get_service_by_id(service_id)
    if not service or not service.is_active:
        raise NotFoundError("Service not found")
    return service


@router.get("", response_model=AvailabilityResponse)
async def get_availability(
    service_id: str = Query(..., alias="serviceId"),
    date: str = Query(...),
    engine: AvailabilityEngine = Depends(get_availability_engine),
    db: Session = Depends(get_db),
):
    """Slots for one service on one local date"""
    service = _get_service(service_id)
    day = parse_iso_date(date)

    start, end = engine.day_bounds(day)
    bookings = BookingRepository.query_by_date_range(db, start, end, BLOCKING_STATUSES)
    slots = engine.get_available_time_slots(service, day, bookings)

    return AvailabilityResponse(
        date=day.isoformat(),
        serviceId=service.id,
        isOpen=engine.settings.is_open_on(day) and day >= engine.today(),
        slots=slots,
    )


@router.get("/next", response_model=NextAvailableResponse)
async def get_next_available(
    service_id: str = Query(..., alias="serviceId"),
    from_date: Optional[str] = Query(None, alias="from"),
    engine: AvailabilityEngine = Depends(get_availability_engine),
    db: Session = Depends(get_db),
):
    """First date after ``from`` (default today) with a free slot"""
    service = _get_service(service_id)
    from_day = parse_iso_date(from_date) if from_date else engine.today()

    start, end = engine.day_bounds(from_day, from_day + timedelta(days=NEXT_DATE_SEARCH_DAYS))
    bookings = BookingRepository.query_by_date_range(db, start, end, BLOCKING_STATUSES)
    next_day = engine.get_next_available_date(service, bookings, from_day)

    return NextAvailableResponse(
        serviceId=service.id,
        nextAvailableDate=next_day.isoformat() if next_day else None,
    )


@router.get("/hours", response_model=list[WorkingHoursResponse])
async def get_working_hours(engine: AvailabilityEngine = Depends(get_availability_engine)):
    """Weekly opening hours, Sunday first"""
    return [
        WorkingHoursResponse(
            day=DAY_NAMES[wh.day_of_week],
            isOpen=wh.is_open,
            openTime=wh.open_time,
            closeTime=wh.close_time,
            display=wh.display(),
        )
        for wh in sorted(engine.settings.working_hours, key=lambda wh: wh.day_of_week)
    ]
