"""
Payment intent creation for the checkout page.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from bookcourier.api.dependencies import get_app_settings, get_payment_gateway
from bookcourier.auth import AuthContext, require_auth
from bookcourier.config import Settings
from bookcourier.integrations.payments import PaymentError, PaymentGateway, to_minor_units

router = APIRouter(tags=["payments"])


class PaymentIntentRequest(BaseModel):
    price: float = Field(gt=0)


@router.post("/create-payment-intent")
async def create_payment_intent(
    data: PaymentIntentRequest,
    ctx: AuthContext = Depends(require_auth()),
    settings: Settings = Depends(get_app_settings),
    gateway: PaymentGateway | None = Depends(get_payment_gateway),
):
    if gateway is None:
        raise HTTPException(status_code=503, detail="Payments are not configured")

    try:
        intent = await gateway.create_intent(to_minor_units(data.price), settings.payment_currency)
    except PaymentError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"clientSecret": intent.client_secret}
