"""Payment method tags and their per-provider constants.

``PaymentMethod`` is a closed set.  Every lookup below dispatches with
``match`` and ends in :func:`typing.assert_never`, so adding a member
without handling it is caught by the type checker rather than by a
silent fallback at runtime.
"""
from __future__ import annotations

from enum import StrEnum
from typing import assert_never

SOMALIA_PREFIX = "25261"
SOMALILAND_PREFIX = "25263"
LEGACY_PREFIX = "252"


class PaymentMethod(StrEnum):
    EVC = "evc"
    ZAAD = "zaad"
    EDAHAB = "edahab"
    CARD = "card"

    @property
    def is_mobile_money(self) -> bool:
        return self is not PaymentMethod.CARD


MOBILE_MONEY_METHODS: frozenset[PaymentMethod] = frozenset(
    m for m in PaymentMethod if m.is_mobile_money
)


def home_prefix(method: PaymentMethod) -> str | None:
    """Return the 5-digit country prefix a provider's wallets live under."""
    match method:
        case PaymentMethod.ZAAD:
            return SOMALILAND_PREFIX
        case PaymentMethod.EVC | PaymentMethod.EDAHAB:
            return SOMALIA_PREFIX
        case PaymentMethod.CARD:
            return None
        case _:
            assert_never(method)


def ussd_service_code(method: PaymentMethod) -> str | None:
    match method:
        case PaymentMethod.EVC:
            return "770"
        case PaymentMethod.ZAAD:
            return "880"
        case PaymentMethod.EDAHAB:
            return "384"
        case PaymentMethod.CARD:
            return None
        case _:
            assert_never(method)


def display_name(method: PaymentMethod) -> str:
    match method:
        case PaymentMethod.EVC:
            return "EVC Plus"
        case PaymentMethod.ZAAD:
            return "ZAAD"
        case PaymentMethod.EDAHAB:
            return "eDahab"
        case PaymentMethod.CARD:
            return "Card"
        case _:
            assert_never(method)


def coerce_method(value: PaymentMethod | str | None) -> PaymentMethod | None:
    """Turn a user-supplied hint into a ``PaymentMethod``.

    Unknown strings return ``None`` so phone helpers can fall back to
    their method-agnostic heuristic without raising.
    """
    if value is None or isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value.strip().lower())
    except ValueError:
        return None
