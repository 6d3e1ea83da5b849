"""
Storage abstractions.

- DocumentStore → MongoDB in production, in-memory for development
"""

from __future__ import annotations

from bookcourier.config import Settings
from bookcourier.storage.base import (
    ASCENDING,
    DESCENDING,
    Collections,
    DocumentStore,
    WriteResult,
)
from bookcourier.storage.local import InMemoryDocumentStore


def create_storage(settings: Settings) -> DocumentStore:
    """Create the document store selected by the settings."""
    if settings.use_mongo:
        if not settings.db_uri:
            raise RuntimeError("STORAGE_BACKEND=mongo requires DB_URI")
        # Imported lazily so the in-memory backend never loads the driver
        from bookcourier.storage.mongo import MongoDocumentStore

        return MongoDocumentStore(settings.db_uri, settings.db_name)
    return InMemoryDocumentStore()


__all__ = [
    "ASCENDING",
    "DESCENDING",
    "Collections",
    "DocumentStore",
    "InMemoryDocumentStore",
    "WriteResult",
    "create_storage",
]
