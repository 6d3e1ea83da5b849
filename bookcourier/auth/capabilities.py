"""
Capabilities and roles.

This defines WHAT users can do, not HOW we check it.
The actual checking happens in policies.py.
"""

from __future__ import annotations

from enum import Enum

from bookcourier.core.models import Role


class Capability(str, Enum):
    """
    Fine-grained capabilities.

    A user's capabilities are derived from their role.
    """

    # Catalog
    BOOK_CREATE = "book.create"
    BOOK_EDIT_OWN = "book.edit_own"
    BOOK_MODERATE = "book.moderate"
    BOOK_DELETE = "book.delete"

    # Orders
    ORDER_FULFIL = "order.fulfil"

    # Admin
    ADMIN_USERS = "admin.users"


# What capabilities each role grants
ROLE_CAPABILITIES: dict[Role, set[Capability]] = {
    Role.USER: set(),
    Role.LIBRARIAN: {
        Capability.BOOK_CREATE,
        Capability.BOOK_EDIT_OWN,
        Capability.ORDER_FULFIL,
    },
    Role.ADMIN: {
        Capability.BOOK_CREATE,
        Capability.BOOK_MODERATE,
        Capability.BOOK_DELETE,
        Capability.ADMIN_USERS,
    },
}


def get_capabilities(role: Role | str | None) -> set[Capability]:
    """All capabilities for a role (none for an unprovisioned identity)."""
    if role is None:
        return set()
    return set(ROLE_CAPABILITIES.get(Role(role), set()))


def has_capability(capability: Capability | str, role: Role | str | None) -> bool:
    """Check if a role has a specific capability."""
    if isinstance(capability, str):
        capability = Capability(capability)
    return capability in get_capabilities(role)
