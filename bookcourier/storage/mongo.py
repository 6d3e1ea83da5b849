"""
MongoDB storage implementation.

Uses pymongo's asyncio client. Document ids are stored as string ``_id``
values and surfaced to callers as ``id``.
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo import AsyncMongoClient

from bookcourier.storage.base import DocumentStore, SortSpec, WriteResult

logger = logging.getLogger(__name__)


def _to_mongo(data: dict[str, Any]) -> dict[str, Any]:
    doc = dict(data)
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_mongo(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoDocumentStore(DocumentStore):
    """Document storage backed by a MongoDB database."""

    def __init__(self, uri: str, database: str, client: AsyncMongoClient | None = None):
        self._client = client or AsyncMongoClient(uri, tz_aware=True)
        self._db = self._client[database]

    async def insert(self, collection: str, data: dict[str, Any]) -> str:
        result = await self._db[collection].insert_one(_to_mongo(data))
        return str(result.inserted_id)

    async def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> list[str]:
        if not documents:
            return []
        result = await self._db[collection].insert_many([_to_mongo(d) for d in documents])
        return [str(i) for i in result.inserted_ids]

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        return _from_mongo(await self._db[collection].find_one({"_id": id}))

    async def find_one(self, collection: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        return _from_mongo(await self._db[collection].find_one(_to_mongo(filters)))

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        cursor = self._db[collection].find(_to_mongo(filters or {}))
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return [_from_mongo(doc) async for doc in cursor]

    async def update(
        self,
        collection: str,
        id: str,
        updates: dict[str, Any],
        filters: dict[str, Any] | None = None,
    ) -> WriteResult:
        match = {**_to_mongo(filters or {}), "_id": id}
        result = await self._db[collection].update_one(match, {"$set": updates})
        return WriteResult(matched=result.matched_count, modified=result.modified_count)

    async def delete(self, collection: str, id: str) -> bool:
        result = await self._db[collection].delete_one({"_id": id})
        return result.deleted_count > 0

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        result = await self._db[collection].delete_many(_to_mongo(filters))
        return result.deleted_count

    async def ping(self) -> bool:
        await self._client.admin.command("ping")
        return True

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB connection closed")
