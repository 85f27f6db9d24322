"""Catalog repository - lookups over the in-code service catalog"""

from typing import Optional

from .data import GLOBAL_EXTRAS, SERVICES
from .schemas import Service, ServiceCategory, ServiceExtra


class CatalogRepository:
    """Read-only access to services and extras"""

    @staticmethod
    def get_service_by_id(service_id: str) -> Optional[Service]:
        """Get a service by ID, active or not"""
        return next((s for s in SERVICES if s.id == service_id), None)

    @staticmethod
    def get_active_services() -> list[Service]:
        return [s for s in SERVICES if s.is_active]

    @staticmethod
    def get_services_by_category(category: ServiceCategory) -> list[Service]:
        """Get active services in a category, in catalog order"""
        return [s for s in SERVICES if s.category == category and s.is_active]

    @staticmethod
    def get_extras_for_service(service: Service) -> list[ServiceExtra]:
        """Service-specific extras followed by the global ones"""
        return [*service.extras, *GLOBAL_EXTRAS]

    @staticmethod
    def get_extra_by_id(service: Service, extra_id: str) -> Optional[ServiceExtra]:
        return next(
            (e for e in CatalogRepository.get_extras_for_service(service) if e.id == extra_id),
            None,
        )
