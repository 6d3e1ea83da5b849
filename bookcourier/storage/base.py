"""
Storage abstraction layer.

All persistence goes through the ``DocumentStore`` interface. This allows
swapping implementations (in-memory for tests and local runs, MongoDB in
production) without changing service code.

Documents are plain dicts keyed by ``"id"``. Filters are equality matches
on top-level fields; a value of the form ``{"$in": [...]}`` matches any of
the listed values.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class WriteResult:
    """Outcome of an update: how many documents matched and changed."""

    matched: int = 0
    modified: int = 0


# Sort spec: list of (field, direction) pairs, direction 1 or -1
SortSpec = list[tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


# =============================================================================
# Storage Interface
# =============================================================================


class DocumentStore(ABC):
    """
    Storage for structured documents grouped into collections.

    Production Implementation: MongoDB
    Local Implementation: in-memory
    """

    @abstractmethod
    async def insert(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a document (which carries its own ``id``), return the id."""
        pass

    @abstractmethod
    async def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> list[str]:
        """Insert several documents."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def find_one(self, collection: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        """Get the first document matching the filters."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query documents with optional filters, ordering and bound."""
        pass

    @abstractmethod
    async def update(
        self,
        collection: str,
        id: str,
        updates: dict[str, Any],
        filters: dict[str, Any] | None = None,
    ) -> WriteResult:
        """
        Partial update of a document.

        ``filters`` further restrict the match (e.g. to an owner).
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete all matching documents, return how many were removed."""
        pass

    async def ping(self) -> bool:
        """Check the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release connections."""
        pass


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Standard collection names."""

    USERS = "users"
    BOOKS = "books"
    ORDERS = "orders"
    WISHLIST = "wishlist"
