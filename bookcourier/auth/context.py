"""
Auth context - the "who can do what" for each request.

This is the lightweight object passed to route handlers.
It contains everything needed to make authorization decisions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bookcourier.auth.capabilities import Capability, get_capabilities
from bookcourier.auth.identity import Principal
from bookcourier.core.errors import Forbidden
from bookcourier.core.models import Role
from bookcourier.storage import Collections, DocumentStore


@dataclass
class AuthContext:
    """
    Authorization context for a request.

    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(require_role(Role.ADMIN))):
            print(f"{ctx.email} is an admin")
    """

    principal: Principal

    # Role of the stored account; None until the identity has logged in once
    role: Role | None = None

    _capabilities: set[Capability] = field(default_factory=set, repr=False)

    def __post_init__(self):
        if self.role is not None:
            self.role = Role(self.role)
        self._capabilities = get_capabilities(self.role)

    @property
    def email(self) -> str:
        return self.principal.email

    @property
    def capabilities(self) -> set[Capability]:
        return self._capabilities

    def has_role(self, role: Role) -> bool:
        return self.role == role

    def can(self, capability: Capability | str) -> bool:
        """
        Check if user has a capability.

        Usage:
            if ctx.can(Capability.BOOK_CREATE):
                # do something
        """
        if isinstance(capability, str):
            try:
                capability = Capability(capability)
            except ValueError:
                return False
        return capability in self._capabilities

    def require(self, capability: Capability | str) -> None:
        """Raise Forbidden if the user doesn't have the capability."""
        if not self.can(capability):
            name = capability.value if isinstance(capability, Capability) else capability
            raise Forbidden(f"Permission denied: {name}")


# =============================================================================
# Context Resolution
# =============================================================================


async def resolve_role(store: DocumentStore, email: str) -> Role | None:
    """Role of the stored account for this email, None if never provisioned."""
    doc = await store.find_one(Collections.USERS, {"email": email})
    return Role(doc["role"]) if doc else None


async def get_auth_context(principal: Principal, store: DocumentStore) -> AuthContext:
    """Attach the stored role (if any) to a verified principal."""
    return AuthContext(principal=principal, role=await resolve_role(store, principal.email))
