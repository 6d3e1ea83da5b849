"""
User accounts: first-login provisioning and admin role management.
"""

from __future__ import annotations

import logging

from bookcourier.auth.identity import Principal
from bookcourier.config_loader import RoleDirectory
from bookcourier.core.errors import UpdateOutcome
from bookcourier.core.models import Role, User
from bookcourier.storage import Collections, DocumentStore

logger = logging.getLogger(__name__)


class UserService:
    """Owns the users collection."""

    def __init__(self, store: DocumentStore, roles: RoleDirectory):
        self.store = store
        self.roles = roles

    async def get_by_email(self, email: str) -> User | None:
        doc = await self.store.find_one(Collections.USERS, {"email": email})
        return User.model_validate(doc) if doc else None

    async def login_or_create(
        self,
        principal: Principal,
        name: str | None = None,
        picture: str | None = None,
    ) -> User:
        """
        Return the account for this identity, creating it on first login.

        Existing accounts are returned unchanged: profile changes at the
        identity provider are not synced.
        """
        existing = await self.get_by_email(principal.email)
        if existing:
            return existing

        user = User(
            uid=principal.subject_id,
            email=principal.email,
            name=name or "Anonymous",
            profile_image=picture or "",
            role=self.roles.role_for(principal.email),
        )
        await self.store.insert(Collections.USERS, user.to_document())
        logger.info("Provisioned %s account for %s", user.role, user.email)
        return user

    async def list_users(self) -> list[User]:
        docs = await self.store.query(Collections.USERS)
        return [User.model_validate(d) for d in docs]

    async def update_role(self, user_id: str, role: Role) -> UpdateOutcome:
        result = await self.store.update(Collections.USERS, user_id, {"role": Role(role).value})
        if not result.matched:
            return UpdateOutcome.NOT_FOUND
        if not result.modified:
            return UpdateOutcome.NOOP
        logger.info("User %s role changed to %s", user_id, Role(role).value)
        return UpdateOutcome.UPDATED
