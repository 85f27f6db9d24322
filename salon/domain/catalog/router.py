"""Catalog router - public service menu endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from .data import CATEGORY_NAMES, GLOBAL_EXTRAS
from .repository import CatalogRepository
from .schemas import Service, ServiceCategory, ServiceExtra, ServiceExtraResponse, ServiceResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])


def _extra_response(extra: ServiceExtra) -> ServiceExtraResponse:
    return ServiceExtraResponse(
        id=extra.id,
        name=extra.name,
        price=extra.price,
        description=extra.description,
    )


def service_response(service: Service) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        name=service.name,
        description=service.description,
        price=service.price,
        depositAmount=service.deposit_amount,
        durationMinutes=service.duration_minutes,
        allowedStartTimes=list(service.allowed_start_times),
        extras=[_extra_response(e) for e in service.extras],
        category=service.category,
        isActive=service.is_active,
    )


@router.get("", response_model=list[ServiceResponse])
async def list_services(category: Optional[ServiceCategory] = Query(None)):
    """Active services, optionally filtered by category"""
    if category:
        services = CatalogRepository.get_services_by_category(category)
    else:
        services = CatalogRepository.get_active_services()
    return [service_response(s) for s in services]


# Registered before /{service_id} so these paths are not read as IDs
@router.get("/categories")
async def list_categories():
    """Categories that currently have active services, in menu order"""
    active = {s.category for s in CatalogRepository.get_active_services()}
    return [{"id": key, "name": name} for key, name in CATEGORY_NAMES.items() if key in active]


@router.get("/extras", response_model=list[ServiceExtraResponse])
async def list_global_extras():
    """Add-ons available for every service"""
    return [_extra_response(e) for e in GLOBAL_EXTRAS]


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str):
    service = CatalogRepository.get_service_by_id(service_id)
    if not service or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not found")
    return service_response(service)
