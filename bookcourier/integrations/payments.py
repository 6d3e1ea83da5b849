# =============================================================================
# Payment Intents (Stripe)
# =============================================================================
#
# The checkout page asks the backend for a PaymentIntent client secret and
# completes the card payment in the browser with Stripe.js. Once it succeeds
# the client marks the order paid (PUT /users/pay/{id}).
#
# Setup:
#   1. https://dashboard.stripe.com/apikeys
#   2. Set STRIPE_SECRET=sk_live_... (or sk_test_...)
#
# =============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal

import httpx
from pydantic import BaseModel

from bookcourier.config import Settings

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class PaymentIntent(BaseModel):
    id: str
    client_secret: str
    amount: int  # smallest currency unit
    currency: str


class PaymentError(Exception):
    """Payment provider rejected the request or is unreachable."""
    pass


def to_minor_units(price: float | Decimal) -> int:
    """Convert a price to cents, rounding half up."""
    return int((Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# Gateway Interface
# =============================================================================


class PaymentGateway(ABC):
    @abstractmethod
    async def create_intent(self, amount: int, currency: str) -> PaymentIntent:
        """Create a payment intent for ``amount`` minor units."""
        pass

    async def close(self) -> None:
        pass


def _error_message(response: httpx.Response) -> str:
    """Stripe's error message, or the raw body when it is not Stripe JSON."""
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text or f"HTTP {response.status_code}"


class StripePaymentGateway(PaymentGateway):
    """Stripe REST API (form-encoded, secret key as basic-auth user)."""

    API_URL = "https://api.stripe.com/v1/payment_intents"

    def __init__(self, secret_key: str, http_client: httpx.AsyncClient | None = None):
        self.secret_key = secret_key
        self._http = http_client or httpx.AsyncClient(timeout=15.0)

    async def create_intent(self, amount: int, currency: str) -> PaymentIntent:
        try:
            response = await self._http.post(
                self.API_URL,
                auth=(self.secret_key, ""),
                data={
                    "amount": str(amount),
                    "currency": currency.lower(),
                    "payment_method_types[]": "card",
                },
            )
        except httpx.HTTPError as e:
            raise PaymentError(f"Stripe unreachable: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning("Stripe rejected payment intent (%d): %s", response.status_code, message)
            raise PaymentError(message)

        try:
            data = response.json()
        except ValueError as e:
            raise PaymentError("Stripe returned an unreadable response") from e

        return PaymentIntent(
            id=data["id"],
            client_secret=data["client_secret"],
            amount=data["amount"],
            currency=data["currency"],
        )

    async def close(self) -> None:
        await self._http.aclose()


def create_payment_gateway(settings: Settings) -> PaymentGateway | None:
    """Stripe gateway when a secret is configured, otherwise None."""
    if not settings.stripe_secret:
        logger.info("STRIPE_SECRET not set - payment intents disabled")
        return None
    return StripePaymentGateway(settings.stripe_secret)
