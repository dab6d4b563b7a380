from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from core.errors import ConflictError, NotFoundError
from models.service import Service, ServiceCategory
from repositories.services import SERVICES, ServiceRepository
from schemas.services import ServiceCreate


logger = logging.getLogger(__name__)


class ServiceCatalog:
    """Reference data for the services a client can book."""

    def __init__(self, repo: ServiceRepository) -> None:
        self.repo = repo

    async def resolve(self, service_id: Any) -> Service:
        service = await self.repo.get(service_id)
        if service is None:
            raise NotFoundError("Service", str(service_id))
        return service

    async def list(
        self,
        *,
        category: Optional[ServiceCategory] = None,
        popular: Optional[bool] = None,
        available: Optional[bool] = None,
    ) -> List[Service]:
        query: Dict[str, Any] = {}
        if category is not None:
            query["category"] = ServiceCategory(category).value
        if popular is not None:
            query["popular"] = popular
        if available is not None:
            query["available"] = available
        return await self.repo.list(query, sort=[("category", ASCENDING), ("name", ASCENDING)])

    async def by_category(self, category: ServiceCategory) -> List[Service]:
        return await self.repo.list(
            {"category": ServiceCategory(category).value, "available": True},
            sort=[("popular", DESCENDING), ("name", ASCENDING)],
        )

    async def popular(self) -> List[Service]:
        return await self.repo.list({"popular": True, "available": True}, sort=[("name", ASCENDING)])

    async def categories(self) -> List[str]:
        return sorted(await self.repo.distinct(SERVICES, "category"))

    async def search(self, text: str) -> List[Service]:
        text = text.strip()
        if not text:
            return []
        pattern = {"$regex": re.escape(text), "$options": "i"}
        return await self.repo.list(
            {"$or": [{"name": pattern}, {"description": pattern}]},
            sort=[("popular", DESCENDING), ("name", ASCENDING)],
        )

    async def create(self, payload: ServiceCreate) -> Service:
        try:
            service = await self.repo.insert(payload.to_service())
        except DuplicateKeyError:
            raise ConflictError("Service name already exists", {"name": payload.name})
        logger.info("services.create.success", extra={"service_id": str(service.id), "service_name": service.name})
        return service

    async def update(self, service_id: Any, payload: ServiceCreate) -> Service:
        fields = payload.to_service().model_dump(exclude={"id", "created_at", "updated_at"})
        try:
            service = await self.repo.replace_fields(service_id, fields)
        except DuplicateKeyError:
            raise ConflictError("Service name already exists", {"name": payload.name})
        if service is None:
            raise NotFoundError("Service", str(service_id))
        logger.info("services.update.success", extra={"service_id": str(service.id)})
        return service

    async def delete(self, service_id: Any) -> Service:
        service = await self.repo.delete(service_id)
        if service is None:
            raise NotFoundError("Service", str(service_id))
        # Existing bookings keep their snapshot of this service
        logger.info("services.delete.success", extra={"service_id": str(service.id)})
        return service

    async def toggle_available(self, service_id: Any) -> Service:
        service = await self.resolve(service_id)
        return await self._set_flag(service, "available", not service.available)

    async def toggle_popular(self, service_id: Any) -> Service:
        service = await self.resolve(service_id)
        return await self._set_flag(service, "popular", not service.popular)

    async def _set_flag(self, service: Service, field: str, value: bool) -> Service:
        updated = await self.repo.replace_fields(service.id, {field: value})
        if updated is None:
            raise NotFoundError("Service", str(service.id))
        logger.info("services.flag_toggled", extra={"service_id": str(service.id), "field": field, "value": value})
        return updated
