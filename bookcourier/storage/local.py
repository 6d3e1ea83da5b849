"""
In-memory storage implementation.

Works without any external services; used for local development and tests.
"""

from __future__ import annotations

import copy
from typing import Any

from bookcourier.storage.base import DocumentStore, SortSpec, WriteResult


def _matches(doc: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    for key, expected in filters.items():
        actual = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if actual not in expected["$in"]:
                return False
        elif actual != expected:
            return False
    return True


class InMemoryDocumentStore(DocumentStore):
    """In-memory document storage for development."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(collection, {})

    async def insert(self, collection: str, data: dict[str, Any]) -> str:
        docs = self._collection(collection)
        doc_id = data["id"]
        if doc_id in docs:
            raise ValueError(f"Duplicate id in {collection}: {doc_id}")
        docs[doc_id] = copy.deepcopy(data)
        return doc_id

    async def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> list[str]:
        return [await self.insert(collection, doc) for doc in documents]

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._collection(collection).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find_one(self, collection: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self._collection(collection).values():
            if _matches(doc, filters):
                return copy.deepcopy(doc)
        return None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        results = [doc for doc in self._collection(collection).values() if _matches(doc, filters)]

        # Apply keys last to first so the first key dominates (stable sort)
        for key, direction in reversed(sort or []):
            results.sort(key=lambda doc: doc.get(key), reverse=direction < 0)

        if limit:
            results = results[:limit]
        return [copy.deepcopy(doc) for doc in results]

    async def update(
        self,
        collection: str,
        id: str,
        updates: dict[str, Any],
        filters: dict[str, Any] | None = None,
    ) -> WriteResult:
        doc = self._collection(collection).get(id)
        if doc is None or not _matches(doc, filters):
            return WriteResult()

        changed = any(doc.get(key) != value for key, value in updates.items())
        if changed:
            doc.update(copy.deepcopy(updates))
        return WriteResult(matched=1, modified=int(changed))

    async def delete(self, collection: str, id: str) -> bool:
        return self._collection(collection).pop(id, None) is not None

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        docs = self._collection(collection)
        doomed = [doc_id for doc_id, doc in docs.items() if _matches(doc, filters)]
        for doc_id in doomed:
            del docs[doc_id]
        return len(doomed)
