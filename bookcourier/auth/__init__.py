"""
Authorization system.

1. Identity comes from a verified bearer token (Firebase ID token)
2. Role comes from the stored account
3. Ownership is one predicate over books, orders and wishlist items
4. Route handlers declare what they need with a single dependency
"""

from bookcourier.auth.capabilities import Capability, get_capabilities, has_capability
from bookcourier.auth.context import AuthContext, get_auth_context, resolve_role
from bookcourier.auth.identity import (
    DevTokenVerifier,
    FirebaseTokenVerifier,
    IdentityVerifier,
    Principal,
    create_verifier,
)
from bookcourier.auth.ownership import Relation, ensure_related, is_related
from bookcourier.auth.policies import (
    Policy,
    get_principal,
    require,
    require_auth,
    require_role,
)

__all__ = [
    # Main interface
    "require",
    "require_auth",
    "require_role",
    "get_principal",
    "AuthContext",
    "get_auth_context",
    "resolve_role",
    # Types
    "Policy",
    "Capability",
    "Principal",
    "Relation",
    "get_capabilities",
    "has_capability",
    "is_related",
    "ensure_related",
    # Verifiers
    "IdentityVerifier",
    "FirebaseTokenVerifier",
    "DevTokenVerifier",
    "create_verifier",
]
