"""
Tests for Firebase ID token verification.

Google's certificate endpoint is replaced by an httpx mock transport that
serves a self-signed certificate for a locally generated key.
"""

import time
from datetime import datetime, timedelta, timezone

import httpx
import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from bookcourier.auth import FirebaseTokenVerifier
from bookcourier.core.errors import Unauthorized

PROJECT_ID = "bookcourier-test"
KID = "key-1"


def _make_key_and_cert():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.system.gserviceaccount.com")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return key_pem, cert.public_bytes(serialization.Encoding.PEM).decode()


KEY_PEM, CERT_PEM = _make_key_and_cert()


def make_token(kid: str = KID, key: bytes = KEY_PEM, **overrides) -> str:
    now = int(time.time())
    claims = {
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "aud": PROJECT_ID,
        "sub": "firebase-uid-1",
        "iat": now,
        "exp": now + 3600,
        "auth_time": now - 60,
        "email": "reader@example.com",
        "name": "Ada",
        "picture": "https://img/ada.png",
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, key, algorithm="RS256", headers={"kid": kid})


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def cert_requests():
    return []


@pytest.fixture
def verifier(cert_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        cert_requests.append(request)
        return httpx.Response(
            200,
            json={KID: CERT_PEM},
            headers={"Cache-Control": "public, max-age=3600"},
        )

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirebaseTokenVerifier(PROJECT_ID, http_client=client)


# =============================================================================
# Tests
# =============================================================================


class TestFirebaseTokenVerifier:
    @pytest.mark.asyncio
    async def test_valid_token(self, verifier):
        principal = await verifier.verify(make_token())

        assert principal.email == "reader@example.com"
        assert principal.subject_id == "firebase-uid-1"
        assert principal.name == "Ada"
        assert principal.picture == "https://img/ada.png"

    @pytest.mark.asyncio
    async def test_certificates_are_cached(self, verifier, cert_requests):
        await verifier.verify(make_token())
        await verifier.verify(make_token())

        assert len(cert_requests) == 1

    @pytest.mark.asyncio
    async def test_unknown_kid_does_not_refetch_within_cooldown(self, verifier, cert_requests):
        await verifier.verify(make_token())

        for _ in range(5):
            with pytest.raises(Unauthorized):
                await verifier.verify(make_token(kid="made-up"))

        assert len(cert_requests) == 1

    @pytest.mark.asyncio
    async def test_unknown_kid_refetches_after_cooldown(self, verifier, cert_requests):
        verifier.refresh_cooldown = 0
        await verifier.verify(make_token())

        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(kid="rotated-in"))

        assert len(cert_requests) == 2

    @pytest.mark.asyncio
    async def test_expired_token(self, verifier):
        past = int(time.time()) - 7200
        with pytest.raises(Unauthorized, match="expired"):
            await verifier.verify(make_token(iat=past, exp=past + 60))

    @pytest.mark.asyncio
    async def test_wrong_audience(self, verifier):
        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(aud="another-project"))

    @pytest.mark.asyncio
    async def test_wrong_issuer(self, verifier):
        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(iss="https://evil.example.com"))

    @pytest.mark.asyncio
    async def test_unknown_kid(self, verifier):
        with pytest.raises(Unauthorized, match="Unknown signing key"):
            await verifier.verify(make_token(kid="rotated-away"))

    @pytest.mark.asyncio
    async def test_wrong_signing_key(self, verifier):
        other_key, _ = _make_key_and_cert()
        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(key=other_key))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sub", ["", "x" * 129])
    async def test_invalid_subject(self, verifier, sub):
        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(sub=sub))

    @pytest.mark.asyncio
    async def test_missing_auth_time(self, verifier):
        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(auth_time=None))

    @pytest.mark.asyncio
    async def test_auth_time_in_future(self, verifier):
        with pytest.raises(Unauthorized, match="authentication time"):
            await verifier.verify(make_token(auth_time=int(time.time()) + 3600))

    @pytest.mark.asyncio
    async def test_missing_email(self, verifier):
        with pytest.raises(Unauthorized):
            await verifier.verify(make_token(email=None))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("credential", [None, "", "not.a.jwt"])
    async def test_malformed(self, verifier, credential):
        with pytest.raises(Unauthorized):
            await verifier.verify(credential)

    @pytest.mark.asyncio
    async def test_provider_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        verifier = FirebaseTokenVerifier(PROJECT_ID, http_client=client)

        with pytest.raises(Unauthorized, match="unavailable"):
            await verifier.verify(make_token())
