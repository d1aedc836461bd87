"""USSD payment strings for the mobile-money providers.

A customer completes a purchase by dialling ``*<service>*<phone>*<amount>#``
on their handset.  The checkout page shows the string and links it through a
``tel:`` URI.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from urllib.parse import quote

from coursehub.payments.methods import PaymentMethod, ussd_service_code


def format_amount(amount: Decimal | float | int | str) -> str:
    """Render *amount* with at least one decimal place.

    Trailing zeros beyond the first decimal are dropped, so ``29.99`` stays
    ``"29.99"`` while ``Decimal("0.50")`` becomes ``"0.5"`` and ``1`` becomes
    ``"1.0"``.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")

    value = value.normalize()
    if value.as_tuple().exponent >= 0:
        return f"{value:.1f}"
    return format(value, "f")


def generate_ussd(
    method: PaymentMethod | str,
    recipient_phone: str,
    amount: Decimal | float | int | str,
) -> str:
    """Build the dialable USSD string for a payment.

    Raises ``ValueError`` for a method string outside :class:`PaymentMethod`.
    Methods without a service code (card) produce ``*<phone>*<amount>#``.
    """
    method = PaymentMethod(method)
    rendered = format_amount(amount)
    service = ussd_service_code(method)
    if service is None:
        return f"*{recipient_phone}*{rendered}#"
    return f"*{service}*{recipient_phone}*{rendered}#"


def ussd_dial_uri(code: str) -> str:
    """Return a ``tel:`` URI for *code*; ``#`` must be sent as ``%23``."""
    return "tel:" + quote(code, safe="*")
