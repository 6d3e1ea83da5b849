"""
Policies - the clean interface for route authorization.

Just use: `ctx: AuthContext = Depends(require_role(Role.LIBRARIAN))`

Design:
- every helper returns a FastAPI dependency that resolves to AuthContext
- it verifies the bearer token, loads the stored account, checks the policy
- no token or a rejected token -> Unauthorized (401)
- verified but not allowed -> Forbidden (403)
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookcourier.auth.capabilities import Capability
from bookcourier.auth.context import AuthContext, get_auth_context
from bookcourier.auth.identity import IdentityVerifier, Principal
from bookcourier.core.errors import Forbidden
from bookcourier.core.models import Role


# =============================================================================
# Token Handling
# =============================================================================


# Optional bearer (a missing header is reported as 401 by the verifier)
optional_bearer = HTTPBearer(auto_error=False)


async def get_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> Principal:
    """Verify the bearer token with the app's identity verifier."""
    verifier: IdentityVerifier = request.app.state.verifier
    return await verifier.verify(credentials.credentials if credentials else None)


# =============================================================================
# Policy - the core authorization type
# =============================================================================


class Policy:
    """
    A policy that can be checked.

        Policy()                                  # any verified identity
        Policy(role=Role.ADMIN)                   # exactly this role
        Policy(capabilities=[Capability.BOOK_CREATE])
    """

    def __init__(
        self,
        capabilities: list[Capability | str] | None = None,
        role: Role | None = None,
    ):
        self.capabilities = capabilities or []
        self.role = role

    def check(self, ctx: AuthContext) -> tuple[bool, str | None]:
        """
        Check if context satisfies this policy.

        Returns: (allowed, error_message)
        """
        if self.role is not None:
            if ctx.role is None:
                return False, "Forbidden: account not found"
            if not ctx.has_role(self.role):
                return False, f"Forbidden: requires {self.role.value} role"

        missing = [c for c in self.capabilities if not ctx.can(c)]
        if missing:
            return False, f"Missing permissions: {[str(getattr(c, 'value', c)) for c in missing]}"

        return True, None


# =============================================================================
# Main Interface
# =============================================================================


def require(*capabilities: Capability | str) -> Callable:
    """
    Require capabilities to access a route.

    Usage:
        @router.post("/books")
        async def create_book(ctx: AuthContext = Depends(require(Capability.BOOK_CREATE))):
            ...
    """
    return _create_dependency(Policy(capabilities=list(capabilities)))


def require_auth() -> Callable:
    """Just require a verified identity, no specific role."""
    return _create_dependency(Policy())


def require_role(role: Role) -> Callable:
    """Require the stored account to have exactly this role."""
    return _create_dependency(Policy(role=role))


# =============================================================================
# Internal: Create the FastAPI Dependency
# =============================================================================


def _create_dependency(policy: Policy) -> Callable:
    """Create a FastAPI Depends from a policy."""

    async def dependency(
        request: Request,
        principal: Principal = Depends(get_principal),
    ) -> AuthContext:
        ctx = await get_auth_context(principal, request.app.state.store)

        allowed, error = policy.check(ctx)
        if not allowed:
            raise Forbidden(error)

        return ctx

    return dependency
