from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from core.clock import Clock, system_clock
from core.errors import PersistenceError


logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str, collection: str) -> Iterator[None]:
    try:
        yield
    except DuplicateKeyError:
        # Unique indexes carry business meaning; callers translate these
        raise
    except PyMongoError as exc:
        logger.exception("db.operation_failed", extra={"operation": operation, "collection": collection})
        raise PersistenceError(f"Database {operation} on '{collection}' failed") from exc


class BaseRepository:
    def __init__(self, db: AsyncIOMotorDatabase, clock: Optional[Clock] = None) -> None:
        self.db = db
        # Timestamps are naive server-local time, like the booking dates they sit beside
        self.clock = clock or system_clock

    @staticmethod
    def _ensure_object_id(value: Any) -> Optional[ObjectId]:
        if isinstance(value, ObjectId):
            return value
        try:
            return ObjectId(str(value))
        except (InvalidId, TypeError):
            return None

    async def find_many(
        self,
        collection: str,
        query: Dict[str, Any] | None = None,
        *,
        sort: Optional[Sequence[tuple[str, int]]] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        with _store_errors("find", collection):
            cursor = self.db[collection].find(query or {}, projection)
            if sort:
                cursor = cursor.sort(list(sort))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return [doc async for doc in cursor]

    async def count_many(self, collection: str, query: Dict[str, Any] | None = None) -> int:
        with _store_errors("count", collection):
            return await self.db[collection].count_documents(query or {})

    async def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with _store_errors("find_one", collection):
            return await self.db[collection].find_one(query)

    async def find_by_id(self, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        oid = self._ensure_object_id(doc_id)
        if oid is None:
            # A malformed id can never match a stored document
            return None
        return await self.find_one(collection, {"_id": oid})

    async def insert_one(self, collection: str, doc: Dict[str, Any], *, with_timestamps: bool = True) -> ObjectId:
        # Never persist a null _id; MongoDB will auto-generate one
        if doc.get("_id", "__absent__") is None:
            doc = {k: v for k, v in doc.items() if k != "_id"}

        if with_timestamps:
            now = self.clock.now()
            if doc.get("created_at") is None:
                doc["created_at"] = now
            if doc.get("updated_at") is None:
                doc["updated_at"] = now
        with _store_errors("insert", collection):
            result = await self.db[collection].insert_one(doc)
        return result.inserted_id

    async def update_one(
        self,
        collection: str,
        filter_query: Dict[str, Any],
        update: Dict[str, Any],
        *,
        touch_updated_at: bool = True,
    ) -> int:
        if touch_updated_at:
            update = self._touch(update)
        with _store_errors("update", collection):
            result = await self.db[collection].update_one(filter_query, update)
        return result.matched_count

    async def find_one_and_update(
        self,
        collection: str,
        filter_query: Dict[str, Any],
        update: Dict[str, Any],
        *,
        touch_updated_at: bool = True,
    ) -> Optional[Dict[str, Any]]:
        if touch_updated_at:
            update = self._touch(update)
        with _store_errors("find_one_and_update", collection):
            return await self.db[collection].find_one_and_update(
                filter_query, update, return_document=ReturnDocument.AFTER
            )

    async def delete_one(self, collection: str, query: Dict[str, Any]) -> int:
        with _store_errors("delete", collection):
            result = await self.db[collection].delete_one(query)
        return result.deleted_count

    async def aggregate(self, collection: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        with _store_errors("aggregate", collection):
            return [doc async for doc in self.db[collection].aggregate(pipeline)]

    async def distinct(self, collection: str, key: str, query: Dict[str, Any] | None = None) -> List[Any]:
        with _store_errors("distinct", collection):
            return await self.db[collection].distinct(key, query or {})

    def _touch(self, update: Dict[str, Any]) -> Dict[str, Any]:
        update = {**update}
        set_part = update.get("$set", {})
        update["$set"] = {**set_part, "updated_at": self.clock.now()}
        return update
