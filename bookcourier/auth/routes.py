# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/firebase-login - Exchange a verified Firebase identity for the
#                               stored account, creating it on first login
#
# The token itself is issued by Firebase on the client; this backend only
# verifies it (see bookcourier/auth/identity.py).
#
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bookcourier.api.dependencies import get_user_service
from bookcourier.auth.identity import Principal
from bookcourier.auth.policies import get_principal
from bookcourier.services import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# Request Models
# =============================================================================


class ProfileData(BaseModel):
    name: str | None = None
    picture: str | None = None


class FirebaseLoginRequest(BaseModel):
    user: ProfileData | None = None


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/firebase-login")
async def firebase_login(
    data: FirebaseLoginRequest | None = None,
    principal: Principal = Depends(get_principal),
    users: UserService = Depends(get_user_service),
):
    """
    Log in with a Firebase ID token.

    The first login for an email creates the account; the role comes from
    the configured admin/librarian allow-lists. Later logins return the
    stored account unchanged.
    """
    profile = (data.user if data else None) or ProfileData()
    user = await users.login_or_create(
        principal,
        name=profile.name or principal.name,
        picture=profile.picture or principal.picture,
    )
    return {"success": True, "user": user.to_public()}
