"""
Shared utility functions for the BookCourier backend.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """
    Generate a unique document ID.

    Returns:
        24 lowercase hex characters, the same shape as a Mongo ObjectId
    """
    return uuid.uuid4().hex[:24]


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def split_csv(value: str) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]
