"""
Tests for Ghana mobile money validation and the charge endpoint.
"""
from decimal import Decimal

import pytest

from ghbuys.models import Payment
from ghbuys.utils import mobile_money
from ghbuys.utils.mobile_money import MobileMoneyError


class TestValidateRequest:
    def test_normalizes_phone_and_provider(self) -> None:
        assert mobile_money.validate_request("0241234567", "mtn", 50) == ("+233241234567", "mtn")
        assert mobile_money.validate_request("+233201234567", "vod") == ("+233201234567", "vodafone")
        assert mobile_money.validate_request("0271234567", "tgo", "10.00") == ("+233271234567", "airtel_tigo")

    def test_bad_phone(self) -> None:
        with pytest.raises(MobileMoneyError) as exc:
            mobile_money.validate_request("0211234567", "mtn", 50)
        assert exc.value.field == "phone"
        assert exc.value.message == "Invalid phone number format for Ghana"

    def test_unsupported_provider(self) -> None:
        with pytest.raises(MobileMoneyError) as exc:
            mobile_money.validate_request("0241234567", "glo", 50)
        assert exc.value.field == "provider"
        assert "glo" in exc.value.message

    @pytest.mark.parametrize("amount", ["0.50", 1500, "1000.01"])
    def test_amount_outside_limits(self, amount) -> None:
        with pytest.raises(MobileMoneyError) as exc:
            mobile_money.validate_request("0241234567", "mtn", amount)
        assert exc.value.field == "amount"
        assert exc.value.message == "Amount must be between ₵1.00 and ₵1000.00 for MTN Mobile Money"

    def test_limits_are_inclusive(self) -> None:
        mobile_money.validate_request("0241234567", "mtn", 1)
        mobile_money.validate_request("0241234567", "mtn", 1000)


def test_paystack_provider_codes() -> None:
    assert mobile_money.paystack_provider_code("mtn") == "mtn"
    assert mobile_money.paystack_provider_code("vodafone") == "vod"
    assert mobile_money.paystack_provider_code("airtel_tigo") == "tgo"


def test_instructions_name_the_short_code() -> None:
    assert "*170#" in mobile_money.instructions("mtn")
    assert "*110#" in mobile_money.instructions("vodafone")
    assert "*100#" in mobile_money.instructions("airtel_tigo")
    assert mobile_money.instructions("glo") == mobile_money.FALLBACK_INSTRUCTIONS


def test_display_text() -> None:
    assert mobile_money.display_text("vod", 25) == "Please complete your Vodafone Cash payment of ₵25.00"


def test_fee_is_percentage_with_cap() -> None:
    assert mobile_money.calculate_fee("mtn", 100) == Decimal("1.00")
    assert mobile_money.calculate_fee("mtn", 500) == Decimal("2.00")
    assert mobile_money.calculate_fee("vodafone", 100) == Decimal("0.95")
    assert mobile_money.calculate_fee("vodafone", 1000) == Decimal("1.95")


def test_provider_info_includes_limits_and_fees() -> None:
    info = mobile_money.provider_info("airtel_tigo")
    assert info["name"] == "AirtelTigo Money"
    assert info["limits"] == {"min": 1.0, "max": 1000.0, "daily_limit": 10000.0}
    assert info["fees"] == {"percentage": 0.01, "cap": 2.0}

    with pytest.raises(MobileMoneyError):
        mobile_money.provider_info("glo")


@pytest.mark.parametrize(
    "gateway, expected",
    [("success", "success"), ("failed", "failed"), ("abandoned", "abandoned"), ("send_otp", "pending"), ("pay_offline", "pending"), (None, "pending")],
)
def test_status_from_gateway(gateway, expected) -> None:
    assert mobile_money.status_from_gateway(gateway) == expected


class TestMobileMoneyEndpoint:
    def test_charges_and_records_a_pending_payment(self, client, paystack) -> None:
        paystack.reply("POST", "/charge", {"status": "pay_offline", "display_text": "Please complete authorization process on your mobile phone"})

        res = client.post("/api/payments/mobile-money", json={
            "email": "ama@example.com",
            "amount": 100,
            "phone": "0201234567",
            "provider": "vod",
            "customer_name": "Ama Owusu",
        })

        assert res.status_code == 200
        body = res.get_json()
        assert body["status"] == "pending"
        assert body["provider"] == "vodafone"
        assert body["provider_name"] == "Vodafone Cash"
        assert body["amount"] == "₵100.00"
        assert body["fee"] == 0.95
        assert body["display_text"] == "Please complete your Vodafone Cash payment of ₵100.00"
        assert "*110#" in body["instructions"]
        assert body["reference"].startswith("ghbuys_momo_")
        assert body["reference"].endswith("_vodafone")

        (call,) = paystack.calls_to("/charge")
        assert call["json"]["amount"] == 10000
        assert call["json"]["mobile_money"] == {"phone": "+233201234567", "provider": "vod"}
        assert call["json"]["metadata"]["payment_type"] == "mobile_money"

        payment = Payment.query.filter_by(reference=body["reference"]).one()
        assert payment.status == "pending"
        assert payment.payment_method == "mobile_money"
        assert payment.provider == "vodafone"
        assert payment.phone == "+233201234567"

    def test_invalid_phone_never_reaches_the_gateway(self, client, paystack) -> None:
        res = client.post("/api/payments/mobile-money", json={
            "email": "ama@example.com", "amount": 20, "phone": "12345", "provider": "mtn",
        })

        assert res.status_code == 400
        assert res.get_json()["details"] == [{"field": "phone", "message": "Invalid phone number format for Ghana"}]
        assert paystack.calls == []
        assert Payment.query.count() == 0

    def test_gateway_error_is_reported(self, client, paystack) -> None:
        paystack.reply("POST", "/charge", status=False, message="Charge attempted", http_status=400)

        res = client.post("/api/payments/mobile-money", json={
            "email": "ama@example.com", "amount": 20, "phone": "0241234567", "provider": "mtn",
        })

        assert res.status_code == 500
        assert res.get_json()["error"] == "Charge attempted"
        assert Payment.query.count() == 0

    def test_providers_listing(self, client) -> None:
        res = client.get("/api/payments/mobile-money/providers")
        assert res.status_code == 200
        codes = [p["code"] for p in res.get_json()["providers"]]
        assert codes == ["mtn", "vodafone", "airtel_tigo"]

    def test_charges_in_the_same_millisecond_get_distinct_references(self, client, paystack, monkeypatch) -> None:
        paystack.reply("POST", "/charge", {"status": "send_otp"})
        monkeypatch.setattr("ghbuys.segments.segment_payments.time.time", lambda: 1760870400.5)
        body = {"email": "ama@example.com", "amount": 20, "phone": "0241234567", "provider": "mtn"}

        first = client.post("/api/payments/mobile-money", json=body)
        second = client.post("/api/payments/mobile-money", json=body)

        assert first.status_code == second.status_code == 200
        refs = {first.get_json()["reference"], second.get_json()["reference"]}
        assert len(refs) == 2
        assert all(r.startswith("ghbuys_momo_1760870400500_") and r.endswith("_mtn") for r in refs)
        assert Payment.query.count() == 2

    def test_order_charge_must_equal_the_order_total(self, client, paystack, make_vendor, make_order) -> None:
        order = make_order([(make_vendor(), "250.00", 1)])

        res = client.post("/api/payments/mobile-money", json={
            "email": "ama@example.com", "amount": 5, "phone": "0241234567", "provider": "mtn", "order_id": order.id,
        })

        assert res.status_code == 400
        assert res.get_json()["details"][0]["field"] == "amount"
        assert paystack.calls == []
