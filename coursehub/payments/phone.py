"""Somali mobile-money phone normalizer.

Turns whatever the customer typed into the checkout form (spaces, dashes,
``+252``, a leading trunk ``0``) into a digits-only canonical number,
validates it against the known operator prefixes and names the operator.

Canonical shapes
----------------
=============  ===========================  ==============
Shape          Layout                       Total digits
=============  ===========================  ==============
Somalia        ``25261`` + 9 digits         14
Somaliland     ``25263`` + 9 digits         14
Legacy         ``252`` + 8 digits           11
=============  ===========================  ==============

The two digits after the country prefix are the carrier code.

None of these functions raise on bad input.  Invalid numbers come back
as a string that fails :func:`is_valid_phone`, and as ``"Unknown"`` from
:func:`carrier_label`.

Safety rule: raw phone values are never logged.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from coursehub.payments.methods import (
    LEGACY_PREFIX,
    SOMALIA_PREFIX,
    SOMALILAND_PREFIX,
    PaymentMethod,
    coerce_method,
    home_prefix,
)

logger = logging.getLogger(__name__)

KNOWN_CARRIER_CODES: frozenset[str] = frozenset(
    {"90", "91", "92", "60", "61", "62", "63", "65", "66", "67"}
)
_KNOWN_LEADING_DIGITS: frozenset[str] = frozenset(code[0] for code in KNOWN_CARRIER_CODES)

UNKNOWN_CARRIER = "Unknown"

_NON_DIGITS = re.compile(r"\D")

_SOMALIA_RE = re.compile(r"^25261\d{9}$")
_SOMALILAND_RE = re.compile(r"^25263\d{9}$")
_LEGACY_RE = re.compile(r"^252\d{8}$")

_CANONICAL_LENGTHS = frozenset({11, 14})

# Leading digit of a local number -> country prefix it defaults to
_LOCAL_LEAD_PREFIX: dict[str, str] = {
    "6": SOMALILAND_PREFIX,
    "9": SOMALIA_PREFIX,
}


@dataclass(frozen=True, slots=True)
class CarrierInfo:
    carrier: str
    country: str | None
    carrier_code: str
    country_prefix: str

    @property
    def label(self) -> str:
        if self.country:
            return f"{self.carrier} - {self.country}"
        return self.carrier


def strip_non_digits(raw: str | None) -> str:
    if not raw:
        return ""
    return _NON_DIGITS.sub("", raw)


def _prefix_local(digits: str, prefix: str, lead: str) -> str | None:
    """Prepend *prefix* when *digits* starts with *lead* or ``0`` + *lead*."""
    if digits.startswith(lead):
        return prefix + digits
    if digits.startswith("0" + lead):
        return prefix + digits[1:]
    return None


def normalize_phone(raw: str | None, method: PaymentMethod | str | None = None) -> str:
    """Return *raw* as a canonical digits-only Somali number.

    Parameters
    ----------
    raw:
        Phone string as typed by the customer.
    method:
        Optional payment method hint.  ZAAD numbers default to the
        Somaliland prefix, EVC Plus and eDahab numbers to Somalia.

    Returns
    -------
    str
        The canonical number, or the stripped digits unchanged when no
        rule applies (``""`` for empty input).  Never raises.
    """
    digits = strip_non_digits(raw)
    if not digits:
        return ""

    # 25261 / 25263 are both covered by the shorter legacy prefix
    if digits.startswith(LEGACY_PREFIX):
        return digits

    result = None
    hint = coerce_method(method)
    if hint is not None:
        prefix = home_prefix(hint)
        if prefix is not None:
            lead = "6" if prefix == SOMALILAND_PREFIX else "9"
            result = _prefix_local(digits, prefix, lead)

    if result is None:
        for lead, prefix in _LOCAL_LEAD_PREFIX.items():
            result = _prefix_local(digits, prefix, lead)
            if result is not None:
                break

    if result is None:
        return digits

    if len(result) not in _CANONICAL_LENGTHS:
        # SAFETY: do not log raw value
        logger.debug("phone_normalizer: unexpected canonical length=%d", len(result))
    return result


def _split_canonical(phone: str) -> tuple[str, str] | None:
    """Return ``(country_prefix, carrier_code)`` for a well-shaped number."""
    if _SOMALIA_RE.match(phone):
        return SOMALIA_PREFIX, phone[5:7]
    if _SOMALILAND_RE.match(phone):
        return SOMALILAND_PREFIX, phone[5:7]
    if _LEGACY_RE.match(phone):
        return LEGACY_PREFIX, phone[3:5]
    return None


def is_known_carrier_code(code: str, *, strict: bool = False) -> bool:
    """Check a 2-digit carrier code.

    The default rule also accepts any code sharing its first digit with a
    known code (``"69"`` passes on the strength of ``"60"``).  Numbers
    already stored by the storefront were accepted under that rule, so it
    stays the default; ``strict=True`` demands exact membership.
    """
    if code in KNOWN_CARRIER_CODES:
        return True
    if strict:
        return False
    return code[:1] in _KNOWN_LEADING_DIGITS


def is_valid_phone(
    raw: str | None,
    method: PaymentMethod | str | None = None,
    *,
    strict: bool = False,
) -> bool:
    parts = _split_canonical(normalize_phone(raw, method))
    if parts is None:
        return False
    return is_known_carrier_code(parts[1], strict=strict)


def _carrier_name(code: str) -> str:
    if code.startswith("9"):
        return "Hormuud (EVC Plus)"
    if code.startswith("6"):
        return "Telesom/Somtel (ZAAD)"
    return "Mobile Carrier"


_COUNTRY_BY_PREFIX: dict[str, str] = {
    SOMALIA_PREFIX: "Somalia",
    SOMALILAND_PREFIX: "Somaliland",
    LEGACY_PREFIX: "Somalia/Somaliland",
}


def detect_carrier(
    raw: str | None,
    method: PaymentMethod | str | None = None,
    *,
    strict: bool = False,
) -> CarrierInfo | None:
    """Classify the operator behind *raw*, or ``None`` if it is invalid."""
    parts = _split_canonical(normalize_phone(raw, method))
    if parts is None:
        return None
    prefix, code = parts
    if not is_known_carrier_code(code, strict=strict):
        return None
    return CarrierInfo(
        carrier=_carrier_name(code),
        country=_COUNTRY_BY_PREFIX.get(prefix),
        carrier_code=code,
        country_prefix=prefix,
    )


def carrier_label(
    raw: str | None,
    method: PaymentMethod | str | None = None,
    *,
    strict: bool = False,
) -> str:
    """Human-readable carrier, e.g. ``"Hormuud (EVC Plus) - Somalia"``."""
    info = detect_carrier(raw, method, strict=strict)
    if info is None:
        return UNKNOWN_CARRIER
    return info.label
