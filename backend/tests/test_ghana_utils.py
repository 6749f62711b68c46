"""
Tests for Ghana reference helpers and commission arithmetic.
"""
from decimal import Decimal

import pytest

from ghbuys.utils.commission import compute_commission, split_amount
from ghbuys.utils.ghana import (
    calculate_total_tax,
    delivery_fee_for,
    format_currency,
    is_valid_gps_code,
    is_valid_phone_number,
    mobile_money_provider,
    normalize_phone,
    to_money,
)


class TestPhoneNumbers:
    @pytest.mark.parametrize("phone", ["0241234567", "+233241234567", "0551234567", "0201234567", "0271234567"])
    def test_accepts_local_and_international(self, phone: str) -> None:
        assert is_valid_phone_number(phone)

    @pytest.mark.parametrize("phone", ["", None, "0211234567", "024123456", "02412345678", "+234241234567", "phone"])
    def test_rejects_unknown_prefix_or_length(self, phone) -> None:
        assert not is_valid_phone_number(phone)

    def test_normalize_to_international(self) -> None:
        assert normalize_phone("0241234567") == "+233241234567"
        assert normalize_phone("233241234567") == "+233241234567"
        assert normalize_phone("+233241234567") == "+233241234567"
        assert normalize_phone("024 123 4567") == "+233241234567"


def test_gps_code_format() -> None:
    assert is_valid_gps_code("GA-1234-5678")
    assert not is_valid_gps_code("GA-123-5678")
    assert not is_valid_gps_code("ga-1234-5678")


def test_format_currency_uses_cedi_symbol() -> None:
    assert format_currency(12.5) == "₵12.50"
    assert format_currency("1000") == "₵1000.00"


def test_total_tax_is_vat_nhil_getfund() -> None:
    assert calculate_total_tax(100, vat=0.125, nhil=0.025, getfund=0.025) == Decimal("17.50")
    assert calculate_total_tax("250.00", vat=0.125, nhil=0.025, getfund=0.025) == Decimal("43.75")


def test_delivery_fee_by_region_code_or_name() -> None:
    assert delivery_fee_for("ashanti") == Decimal("10.00")
    assert delivery_fee_for("Upper East") == Decimal("20.00")
    assert delivery_fee_for("atlantis") == Decimal("5.00")
    assert delivery_fee_for(None) == Decimal("5.00")


def test_provider_aliases() -> None:
    assert mobile_money_provider("mtn").short_code == "*170#"
    assert mobile_money_provider("vod").code == "vodafone"
    assert mobile_money_provider("TGO").code == "airtel_tigo"
    assert mobile_money_provider("glo") is None


class TestCommission:
    def test_five_percent_of_round_amount(self) -> None:
        assert split_amount(100) == (Decimal("95.00"), Decimal("5.00"))

    def test_rounds_half_up_and_keeps_the_total(self) -> None:
        net, commission = split_amount("33.33")
        assert commission == Decimal("1.67")
        assert net == Decimal("31.66")
        assert net + commission == to_money("33.33")

    def test_negative_inputs_clamp_to_zero(self) -> None:
        assert compute_commission(-5) == Decimal("0.00")
        assert compute_commission(100, rate=-0.1) == Decimal("0.00")

    def test_custom_rate(self) -> None:
        assert split_amount(200, rate=Decimal("0.10")) == (Decimal("180.00"), Decimal("20.00"))
