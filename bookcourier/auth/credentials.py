"""
Firebase service-account credential loading.

The credential is either a path to the JSON key file (``FB_SERVICE_KEY``)
or the file's content base64-encoded (``FB_SERVICE_KEY_B64``), which is
easier to pass through hosting dashboards.
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any

from bookcourier.config import Settings


class CredentialError(Exception):
    """Service-account credential is missing or unreadable."""
    pass


def load_service_account(settings: Settings) -> dict[str, Any] | None:
    """
    Read the service-account JSON.

    Returns None when neither source is configured.
    """
    if settings.fb_service_key_b64:
        try:
            raw = base64.b64decode(settings.fb_service_key_b64, validate=True)
            return json.loads(raw)
        except (binascii.Error, ValueError) as e:
            raise CredentialError(f"FB_SERVICE_KEY_B64 is not base64-encoded JSON: {e}") from e

    if settings.fb_service_key:
        path = Path(settings.fb_service_key)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CredentialError(f"Cannot read service account {path}: {e}") from e

    return None


def resolve_project_id(settings: Settings) -> str:
    """Firebase project id: explicit setting first, then the service account."""
    if settings.firebase_project_id:
        return settings.firebase_project_id

    account = load_service_account(settings)
    project_id = (account or {}).get("project_id")
    if not project_id:
        raise CredentialError("No Firebase project id configured")
    return project_id
