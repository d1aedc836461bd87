"""Live phone feedback and USSD preview routes.

The checkout form calls ``/api/phone/validate`` on every keystroke to show
the detected operator before the customer submits.
"""
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from coursehub.core.settings import Settings, get_settings
from coursehub.payments.checkout import merchant_phones
from coursehub.payments.methods import PaymentMethod, display_name
from coursehub.payments.phone import carrier_label, detect_carrier, is_valid_phone, normalize_phone
from coursehub.payments.ussd import generate_ussd, ussd_dial_uri

router = APIRouter(prefix="/api", tags=["phone"])


class PhoneBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone: str = ""
    payment_method: str | None = Field(default=None, alias="paymentMethod")


@router.post("/phone/validate", summary="Normalize a phone and detect its carrier")
def validate_phone(body: PhoneBody, settings: Settings = Depends(get_settings)):
    strict = settings.phone_strict_carrier_codes
    info = detect_carrier(body.phone, body.payment_method, strict=strict)
    return {
        "normalized": normalize_phone(body.phone, body.payment_method),
        "valid": info is not None,
        "carrier": carrier_label(body.phone, body.payment_method, strict=strict),
        "carrier_code": info.carrier_code if info else None,
        "country": info.country if info else None,
    }


@router.get("/ussd", summary="Preview the USSD string for a payment")
def preview_ussd(
    method: PaymentMethod,
    amount: Decimal = Query(gt=0),
    phone: str | None = None,
    settings: Settings = Depends(get_settings),
):
    if not method.is_mobile_money:
        raise HTTPException(status_code=400, detail=f"{display_name(method)} payments have no USSD code")

    if phone:
        if not is_valid_phone(phone, method, strict=settings.phone_strict_carrier_codes):
            raise HTTPException(status_code=400, detail="Invalid Somalia phone number")
        recipient = normalize_phone(phone, method)
    else:
        recipient = merchant_phones(settings).get(method)
    if not recipient:
        raise HTTPException(status_code=400, detail="No recipient phone for this payment method")

    code = generate_ussd(method, recipient, amount)
    return {"method": method.value, "code": code, "dial_uri": ussd_dial_uri(code)}
