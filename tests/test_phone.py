"""Tests for coursehub.payments.phone and coursehub.payments.methods."""
from __future__ import annotations

import logging

import pytest

from coursehub.payments.methods import (
    MOBILE_MONEY_METHODS,
    PaymentMethod,
    coerce_method,
    display_name,
    home_prefix,
    ussd_service_code,
)
from coursehub.payments.phone import (
    UNKNOWN_CARRIER,
    CarrierInfo,
    carrier_label,
    detect_carrier,
    is_known_carrier_code,
    is_valid_phone,
    normalize_phone,
    strip_non_digits,
)


# ---------------------------------------------------------------------------
# normalize_phone
# ---------------------------------------------------------------------------


class TestNormalizeWithMethod:
    @pytest.mark.parametrize("local", ["634567890", "612345678", "6"])
    def test_zaad_prefixes_somaliland(self, local: str) -> None:
        assert normalize_phone(local, "zaad") == "25263" + local

    @pytest.mark.parametrize("local", ["901234567", "915555555", "9"])
    def test_evc_prefixes_somalia(self, local: str) -> None:
        assert normalize_phone(local, "evc") == "25261" + local

    def test_edahab_prefixes_somalia(self) -> None:
        assert normalize_phone("921234567", PaymentMethod.EDAHAB) == "25261921234567"

    def test_zaad_drops_trunk_zero(self) -> None:
        assert normalize_phone("0634567890", "zaad") == "25263634567890"

    def test_evc_drops_trunk_zero(self) -> None:
        assert normalize_phone("0901234567", "evc") == "25261901234567"

    def test_formatting_characters_stripped(self) -> None:
        assert normalize_phone("063-456 7890", "zaad") == "25263634567890"

    def test_method_string_is_case_insensitive(self) -> None:
        assert normalize_phone("634567890", " ZAAD ") == "25263634567890"


class TestNormalizeFallback:
    def test_zaad_with_somalia_number_falls_back(self) -> None:
        assert normalize_phone("912345678", "zaad") == "25261912345678"

    def test_evc_with_somaliland_number_falls_back(self) -> None:
        assert normalize_phone("0634567890", "evc") == "25263634567890"

    def test_no_method_six_defaults_to_somaliland(self) -> None:
        assert normalize_phone("634567890") == "25263634567890"

    def test_no_method_nine_defaults_to_somalia(self) -> None:
        assert normalize_phone("0901234567") == "25261901234567"

    def test_card_method_uses_heuristic(self) -> None:
        assert normalize_phone("634567890", PaymentMethod.CARD) == "25263634567890"

    def test_unknown_method_string_uses_heuristic(self) -> None:
        assert normalize_phone("901234567", "mpesa") == "25261901234567"

    def test_unmatched_digits_returned_unchanged(self) -> None:
        assert normalize_phone("1234-5678") == "12345678"


class TestNormalizeAlreadyCanonical:
    @pytest.mark.parametrize(
        "phone",
        ["25261901234567", "25263634567890", "25261234567", "252"],
    )
    def test_prefixed_numbers_unchanged(self, phone: str) -> None:
        assert normalize_phone(phone, "zaad") == phone

    def test_plus_prefix_removed(self) -> None:
        assert normalize_phone("+252 63 456 7890 12") == "25263456789012"


class TestNormalizeIdempotent:
    _SAMPLES = [
        "",
        "0",
        "06",
        "634567890",
        "0634567890",
        "901234567",
        "0906151234 56",
        "+252 61 234 5678",
        "925261634844506",
        "abc",
        "1234",
    ]

    @pytest.mark.parametrize("raw", _SAMPLES)
    @pytest.mark.parametrize("method", [None, "evc", "zaad", "edahab", "card"])
    def test_normalize_twice_equals_once(self, raw: str, method: str | None) -> None:
        once = normalize_phone(raw, method)
        assert normalize_phone(once, method) == once


class TestNormalizeEdgeCases:
    def test_empty_string(self) -> None:
        assert normalize_phone("") == ""

    def test_none(self) -> None:
        assert normalize_phone(None) == ""

    def test_letters_only(self) -> None:
        assert normalize_phone("not-a-phone") == ""

    def test_overlong_trunk_number_not_truncated(self) -> None:
        # Only one leading zero is dropped; extra digits are carried through.
        assert normalize_phone("0906151234 56", "evc") == "2526190615123456"

    def test_overlong_result_logs_length_only(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="coursehub.payments.phone"):
            normalize_phone("0906151234 56", "evc")
        assert "length=16" in caplog.text
        assert "2526190615123456" not in caplog.text

    def test_strip_non_digits(self) -> None:
        assert strip_non_digits("+252 (63) 45-67") == "252634567"


# ---------------------------------------------------------------------------
# is_valid_phone
# ---------------------------------------------------------------------------


class TestIsValid:
    def test_zaad_local_number(self) -> None:
        assert is_valid_phone("634567890", "zaad") is True

    def test_zaad_with_trunk_zero(self) -> None:
        assert is_valid_phone("0634567890", "zaad") is True

    def test_evc_canonical(self) -> None:
        assert is_valid_phone("25261901234567") is True

    def test_legacy_prefix(self) -> None:
        assert is_valid_phone("252 61 234567") is True

    def test_too_long(self) -> None:
        assert is_valid_phone("925261634844506") is False

    def test_overlong_trunk_number(self) -> None:
        assert is_valid_phone("0906151234 56", "evc") is False

    def test_too_short(self) -> None:
        assert is_valid_phone("63456") is False

    def test_twelve_digit_international_form_rejected(self) -> None:
        assert is_valid_phone("+252 63 4567890") is False

    def test_empty(self) -> None:
        assert is_valid_phone("") is False

    def test_unknown_carrier_code(self) -> None:
        assert is_valid_phone("25263591234567") is False


class TestCarrierCodeRule:
    @pytest.mark.parametrize("code", ["90", "91", "92", "60", "61", "62", "63", "65", "66", "67"])
    def test_known_codes_pass_strict(self, code: str) -> None:
        assert is_known_carrier_code(code, strict=True) is True

    def test_first_digit_match_passes_by_default(self) -> None:
        assert is_known_carrier_code("69") is True
        assert is_valid_phone("25263691234567") is True

    def test_first_digit_match_rejected_when_strict(self) -> None:
        assert is_known_carrier_code("69", strict=True) is False
        assert is_valid_phone("25263691234567", strict=True) is False

    def test_unrelated_code_rejected(self) -> None:
        assert is_known_carrier_code("45") is False


# ---------------------------------------------------------------------------
# Carrier detection
# ---------------------------------------------------------------------------


class TestCarrierLabel:
    def test_hormuud_somalia(self) -> None:
        label = carrier_label("25261901234567")
        assert "Hormuud" in label
        assert "Somalia" in label
        assert label == "Hormuud (EVC Plus) - Somalia"

    def test_telesom_somaliland(self) -> None:
        label = carrier_label("25263601234567")
        assert "ZAAD" in label and "Telesom" in label
        assert label == "Telesom/Somtel (ZAAD) - Somaliland"

    def test_legacy_country_is_ambiguous(self) -> None:
        assert carrier_label("25261234567") == "Telesom/Somtel (ZAAD) - Somalia/Somaliland"

    def test_carrier_follows_code_not_prefix(self) -> None:
        assert carrier_label("25261634844506") == "Telesom/Somtel (ZAAD) - Somalia"

    def test_local_number_with_method(self) -> None:
        assert carrier_label("0901234567", "evc") == "Hormuud (EVC Plus) - Somalia"

    def test_invalid_is_unknown(self) -> None:
        assert carrier_label("12345") == UNKNOWN_CARRIER

    def test_empty_is_unknown(self) -> None:
        assert carrier_label("") == "Unknown"

    def test_strict_rejects_loose_code(self) -> None:
        assert carrier_label("25263691234567", strict=True) == "Unknown"


class TestDetectCarrier:
    def test_returns_carrier_info(self) -> None:
        info = detect_carrier("634567890", "zaad")
        assert info == CarrierInfo(
            carrier="Telesom/Somtel (ZAAD)",
            country="Somaliland",
            carrier_code="63",
            country_prefix="25263",
        )

    def test_invalid_returns_none(self) -> None:
        assert detect_carrier("not a phone") is None

    def test_label_without_country(self) -> None:
        info = CarrierInfo(carrier="Mobile Carrier", country=None, carrier_code="00", country_prefix="252")
        assert info.label == "Mobile Carrier"


# ---------------------------------------------------------------------------
# PaymentMethod
# ---------------------------------------------------------------------------


class TestPaymentMethod:
    def test_values(self) -> None:
        assert {m.value for m in PaymentMethod} == {"evc", "zaad", "edahab", "card"}

    def test_mobile_money_excludes_card(self) -> None:
        assert PaymentMethod.CARD not in MOBILE_MONEY_METHODS
        assert len(MOBILE_MONEY_METHODS) == 3

    def test_home_prefixes(self) -> None:
        assert home_prefix(PaymentMethod.ZAAD) == "25263"
        assert home_prefix(PaymentMethod.EVC) == "25261"
        assert home_prefix(PaymentMethod.EDAHAB) == "25261"
        assert home_prefix(PaymentMethod.CARD) is None

    def test_service_codes(self) -> None:
        assert ussd_service_code(PaymentMethod.EVC) == "770"
        assert ussd_service_code(PaymentMethod.ZAAD) == "880"
        assert ussd_service_code(PaymentMethod.EDAHAB) == "384"
        assert ussd_service_code(PaymentMethod.CARD) is None

    def test_display_names(self) -> None:
        assert display_name(PaymentMethod.EVC) == "EVC Plus"
        assert display_name(PaymentMethod.EDAHAB) == "eDahab"

    def test_coerce(self) -> None:
        assert coerce_method("EVC") is PaymentMethod.EVC
        assert coerce_method(PaymentMethod.ZAAD) is PaymentMethod.ZAAD
        assert coerce_method("bitcoin") is None
        assert coerce_method(None) is None
