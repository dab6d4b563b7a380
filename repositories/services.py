from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from models.service import Service

from .base import BaseRepository


SERVICES = "services"


class ServiceRepository(BaseRepository):
    async def get(self, service_id: Any) -> Optional[Service]:
        doc = await self.find_by_id(SERVICES, service_id)
        return Service.from_document(doc) if doc else None

    async def list(self, query: Dict[str, Any], sort: Sequence[tuple[str, int]]) -> List[Service]:
        docs = await self.find_many(SERVICES, query, sort=sort)
        return [Service.from_document(d) for d in docs]

    async def insert(self, service: Service) -> Service:
        inserted_id = await self.insert_one(SERVICES, service.to_document())
        return await self.get(inserted_id)

    async def replace_fields(self, service_id: Any, fields: Dict[str, Any]) -> Optional[Service]:
        oid = self._ensure_object_id(service_id)
        if oid is None:
            return None
        doc = await self.find_one_and_update(SERVICES, {"_id": oid}, {"$set": fields})
        return Service.from_document(doc) if doc else None

    async def delete(self, service_id: Any) -> Optional[Service]:
        service = await self.get(service_id)
        if service is None:
            return None
        await self.delete_one(SERVICES, {"_id": service.id})
        return service
