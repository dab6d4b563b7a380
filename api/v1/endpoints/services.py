from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from api.v1.deps import get_catalog
from models.service import ServiceCategory
from schemas.services import ServiceCreate, ServiceMessage, ServiceOut
from services.catalog import ServiceCatalog
from services.security import require_admin


router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=List[ServiceOut])
async def list_services(
    category: Optional[ServiceCategory] = None,
    popular: Optional[bool] = None,
    available: Optional[bool] = None,
    catalog: ServiceCatalog = Depends(get_catalog),
) -> List[ServiceOut]:
    services = await catalog.list(category=category, popular=popular, available=available)
    return [ServiceOut.from_model(s) for s in services]


@router.get("/category/{category}", response_model=List[ServiceOut])
async def services_by_category(category: ServiceCategory, catalog: ServiceCatalog = Depends(get_catalog)) -> List[ServiceOut]:
    return [ServiceOut.from_model(s) for s in await catalog.by_category(category)]


@router.get("/popular/all", response_model=List[ServiceOut])
async def popular_services(catalog: ServiceCatalog = Depends(get_catalog)) -> List[ServiceOut]:
    return [ServiceOut.from_model(s) for s in await catalog.popular()]


@router.get("/categories/all", response_model=List[str])
async def service_categories(catalog: ServiceCatalog = Depends(get_catalog)) -> List[str]:
    return await catalog.categories()


@router.get("/search/{query}", response_model=List[ServiceOut])
async def search_services(query: str, catalog: ServiceCatalog = Depends(get_catalog)) -> List[ServiceOut]:
    return [ServiceOut.from_model(s) for s in await catalog.search(query)]


@router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: str, catalog: ServiceCatalog = Depends(get_catalog)) -> ServiceOut:
    return ServiceOut.from_model(await catalog.resolve(service_id))


# Admin write operations


@router.post(
    "",
    response_model=ServiceMessage,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_service(payload: ServiceCreate, catalog: ServiceCatalog = Depends(get_catalog)) -> ServiceMessage:
    service = await catalog.create(payload)
    return ServiceMessage(message="Service created successfully", service=ServiceOut.from_model(service))


@router.put("/{service_id}", response_model=ServiceMessage, dependencies=[Depends(require_admin)])
async def update_service(
    service_id: str, payload: ServiceCreate, catalog: ServiceCatalog = Depends(get_catalog)
) -> ServiceMessage:
    service = await catalog.update(service_id, payload)
    return ServiceMessage(message="Service updated successfully", service=ServiceOut.from_model(service))


@router.delete("/{service_id}", response_model=ServiceMessage, dependencies=[Depends(require_admin)])
async def delete_service(service_id: str, catalog: ServiceCatalog = Depends(get_catalog)) -> ServiceMessage:
    service = await catalog.delete(service_id)
    return ServiceMessage(message="Service deleted successfully", service=ServiceOut.from_model(service))


@router.patch("/{service_id}/toggle-availability", response_model=ServiceMessage, dependencies=[Depends(require_admin)])
async def toggle_availability(service_id: str, catalog: ServiceCatalog = Depends(get_catalog)) -> ServiceMessage:
    service = await catalog.toggle_available(service_id)
    state = "enabled" if service.available else "disabled"
    return ServiceMessage(message=f"Service {state} successfully", service=ServiceOut.from_model(service))


@router.patch("/{service_id}/toggle-popularity", response_model=ServiceMessage, dependencies=[Depends(require_admin)])
async def toggle_popularity(service_id: str, catalog: ServiceCatalog = Depends(get_catalog)) -> ServiceMessage:
    service = await catalog.toggle_popular(service_id)
    state = "marked as popular" if service.popular else "removed from popular"
    return ServiceMessage(message=f"Service {state} successfully", service=ServiceOut.from_model(service))
