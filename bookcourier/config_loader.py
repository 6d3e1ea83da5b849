"""
Role directory loader.

Builds the email -> role mapping used when a user logs in for the first
time. Sources are a YAML file and the comma-separated allow-lists from
the environment:

    # roles.yaml
    admins:
      - admin@example.com
    librarians:
      - librarian@example.com
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import yaml

from bookcourier.config import Settings
from bookcourier.core.models import Role

logger = logging.getLogger(__name__)


def _normalize(email: str) -> str:
    return email.strip().lower()


class RoleDirectory:
    """
    Email -> role mapping with admin > librarian > user precedence.

    The directory is reloadable: ``reload()`` re-reads the YAML file and
    keeps the explicitly supplied lists.
    """

    def __init__(
        self,
        admins: Iterable[str] = (),
        librarians: Iterable[str] = (),
        roles_file: Path | str | None = None,
    ):
        self._static_admins = {_normalize(e) for e in admins if e.strip()}
        self._static_librarians = {_normalize(e) for e in librarians if e.strip()}
        self.roles_file = Path(roles_file) if roles_file else None
        self._admins: set[str] = set()
        self._librarians: set[str] = set()
        self.reload()

    @classmethod
    def from_settings(cls, settings: Settings) -> RoleDirectory:
        return cls(
            admins=settings.admin_emails_list,
            librarians=settings.librarian_emails_list,
            roles_file=settings.roles_file or None,
        )

    def reload(self) -> None:
        """Rebuild the mapping from the static lists and the roles file."""
        admins = set(self._static_admins)
        librarians = set(self._static_librarians)

        if self.roles_file is not None:
            data = self._read_file(self.roles_file)
            admins.update(_normalize(e) for e in data.get("admins") or [])
            librarians.update(_normalize(e) for e in data.get("librarians") or [])

        self._admins = admins
        self._librarians = librarians
        logger.info(
            "Role directory loaded: %d admin(s), %d librarian(s)",
            len(admins),
            len(librarians),
        )

    @staticmethod
    def _read_file(path: Path) -> dict:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Roles file {path} must contain a mapping")
        return data

    def role_for(self, email: str) -> Role:
        """Role a new account with this email receives."""
        key = _normalize(email)
        if key in self._admins:
            return Role.ADMIN
        if key in self._librarians:
            return Role.LIBRARIAN
        return Role.USER

    def as_mapping(self) -> dict[str, Role]:
        mapping = {email: Role.LIBRARIAN for email in self._librarians}
        mapping.update({email: Role.ADMIN for email in self._admins})
        return mapping
