# =============================================================================
# Identity Verification
# =============================================================================
#
# Bearer tokens are Firebase ID tokens: RS256 JWTs signed with one of
# Google's rotating keys. Verification checks signature, expiry, audience
# (the Firebase project id) and issuer, then extracts the principal.
#
# Setup:
#   1. Firebase console -> Project settings -> Service accounts
#   2. Generate a private key (JSON)
#   3. Set FB_SERVICE_KEY=/path/to/key.json
#      or FB_SERVICE_KEY_B64=$(base64 -w0 key.json)
#
# =============================================================================

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
import jwt
from cryptography.x509 import load_pem_x509_certificate
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from bookcourier.auth.credentials import resolve_project_id
from bookcourier.config import Settings
from bookcourier.core.errors import Unauthorized

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class Principal(BaseModel):
    """Verified identity attached to a request."""
    email: str
    subject_id: str
    name: str | None = None
    picture: str | None = None


# =============================================================================
# Verifier Interface
# =============================================================================


class IdentityVerifier(ABC):
    """Turns a bearer credential into a Principal or raises Unauthorized."""

    @abstractmethod
    async def verify(self, credential: str | None) -> Principal:
        pass

    async def close(self) -> None:
        pass


# =============================================================================
# Firebase
# =============================================================================


_MAX_AGE = re.compile(r"max-age=(\d+)")

# Firebase uids are at most 128 characters
MAX_SUBJECT_LENGTH = 128


def _max_age(cache_control: str) -> int:
    match = _MAX_AGE.search(cache_control)
    return int(match.group(1)) if match else 0


class FirebaseTokenVerifier(IdentityVerifier):
    """Verifies Firebase ID tokens against Google's published certificates."""

    CERTS_URL = (
        "https://www.googleapis.com/robot/v1/metadata/x509/"
        "securetoken@system.gserviceaccount.com"
    )
    ISSUER_PREFIX = "https://securetoken.google.com/"

    def __init__(
        self,
        project_id: str,
        http_client: httpx.AsyncClient | None = None,
        leeway: int = 5,
        refresh_cooldown: float = 60.0,
    ):
        self.project_id = project_id
        self.leeway = leeway
        self._http = http_client or httpx.AsyncClient(timeout=10.0)
        self._keys: dict[str, Any] = {}
        self._keys_expire_at = 0.0
        # Unknown key ids trigger at most one refetch per cooldown window
        self.refresh_cooldown = refresh_cooldown
        self._last_refresh = float("-inf")

    @property
    def issuer(self) -> str:
        return f"{self.ISSUER_PREFIX}{self.project_id}"

    async def verify(self, credential: str | None) -> Principal:
        if not credential:
            raise Unauthorized("Missing credential")

        try:
            header = jwt.get_unverified_header(credential)
        except jwt.DecodeError as e:
            raise Unauthorized("Malformed token") from e

        if header.get("alg") != "RS256":
            raise Unauthorized("Unexpected token algorithm")

        key = await self._signing_key(header.get("kid"))

        try:
            claims = jwt.decode(
                credential,
                key,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "iat", "aud", "iss", "sub", "auth_time"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Unauthorized("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise Unauthorized(f"Invalid token: {e}") from e

        subject = claims["sub"]
        if not isinstance(subject, str) or not subject or len(subject) > MAX_SUBJECT_LENGTH:
            raise Unauthorized("Invalid token subject")

        auth_time = claims["auth_time"]
        if not isinstance(auth_time, (int, float)) or auth_time > time.time() + self.leeway:
            raise Unauthorized("Invalid authentication time")

        email = claims.get("email")
        if not email:
            raise Unauthorized("Token carries no email")

        return Principal(
            email=email,
            subject_id=subject,
            name=claims.get("name"),
            picture=claims.get("picture"),
        )

    async def _signing_key(self, kid: str | None) -> Any:
        if kid is None:
            raise Unauthorized("Token has no key id")

        now = time.monotonic()
        expired = now >= self._keys_expire_at
        rotated = kid not in self._keys and now - self._last_refresh >= self.refresh_cooldown
        if expired or rotated:
            await self._refresh_keys()

        key = self._keys.get(kid)
        if key is None:
            raise Unauthorized("Unknown signing key")
        return key

    async def _refresh_keys(self) -> None:
        self._last_refresh = time.monotonic()
        try:
            certificates, max_age = await self._fetch_certificates()
        except httpx.HTTPError as e:
            logger.error("Fetching Firebase signing certificates failed: %s", e)
            raise Unauthorized("Identity provider unavailable") from e

        self._keys = {
            kid: load_pem_x509_certificate(pem.encode()).public_key()
            for kid, pem in certificates.items()
        }
        self._keys_expire_at = time.monotonic() + max_age
        logger.debug("Loaded %d Firebase signing keys (max-age %ds)", len(self._keys), max_age)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch_certificates(self) -> tuple[dict[str, str], int]:
        """Fetch the kid -> PEM certificate map, with its cache lifetime."""
        response = await self._http.get(self.CERTS_URL)
        response.raise_for_status()
        return response.json(), _max_age(response.headers.get("cache-control", ""))

    async def close(self) -> None:
        await self._http.aclose()


# =============================================================================
# Development
# =============================================================================


class DevTokenVerifier(IdentityVerifier):
    """
    Accepts tokens of the form ``dev:<email>``.

    Only installed outside production when no Firebase credential is set.
    """

    PREFIX = "dev:"

    async def verify(self, credential: str | None) -> Principal:
        if not credential or not credential.startswith(self.PREFIX):
            raise Unauthorized("Invalid token")

        email = credential[len(self.PREFIX):].strip()
        if "@" not in email:
            raise Unauthorized("Invalid token")

        return Principal(email=email, subject_id=f"dev-{email}")


# =============================================================================
# Factory
# =============================================================================


def create_verifier(settings: Settings) -> IdentityVerifier:
    """Firebase verifier when a credential is configured, dev tokens otherwise."""
    if settings.has_firebase_credential:
        return FirebaseTokenVerifier(resolve_project_id(settings))

    if settings.is_production:
        raise RuntimeError("Production requires FB_SERVICE_KEY or FB_SERVICE_KEY_B64")

    logger.warning("No Firebase credential - accepting dev:<email> tokens")
    return DevTokenVerifier()
