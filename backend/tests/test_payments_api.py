"""
Tests for payment initialization, verification, history and refunds.
"""
from datetime import datetime
from decimal import Decimal

from ghbuys.extensions import db
from ghbuys.models import AuditLog, IdempotencyKey, Payment

INIT_PATH = "/transaction/initialize"


def _init_reply(paystack) -> None:
    paystack.reply("POST", INIT_PATH, {
        "authorization_url": "https://checkout.paystack.com/0peioxfhpn",
        "access_code": "0peioxfhpn",
        "reference": "ignored",
    })


class TestInitialize:
    def test_returns_checkout_details_and_stores_pending_payment(self, client, paystack) -> None:
        _init_reply(paystack)

        res = client.post("/api/payments/initialize", json={
            "email": "ama@example.com",
            "amount": "150.50",
            "payment_method": "mobile_money",
            "customer_name": "Ama Owusu",
        })

        assert res.status_code == 200
        body = res.get_json()
        assert body["authorization_url"] == "https://checkout.paystack.com/0peioxfhpn"
        assert body["access_code"] == "0peioxfhpn"
        assert body["amount"] == 150.5
        assert body["currency"] == "GHS"
        assert body["channels"] == ["mobile_money"]
        assert body["public_key"] == "pk_test_fake_key_for_testing"
        assert body["reference"].startswith("ghbuys_")

        (call,) = paystack.calls_to(INIT_PATH)
        assert call["json"]["amount"] == 15050
        assert call["json"]["reference"] == body["reference"]
        assert call["headers"]["Authorization"] == "Bearer sk_test_fake_key_for_testing"

        payment = Payment.query.filter_by(reference=body["reference"]).one()
        assert payment.status == "pending"
        assert Decimal(payment.amount) == Decimal("150.50")

    def test_default_channels(self, client, paystack) -> None:
        _init_reply(paystack)
        res = client.post("/api/payments/initialize", json={"email": "ama@example.com", "amount": 10})
        assert res.get_json()["channels"] == ["card", "bank", "ussd", "qr", "mobile_money"]

    def test_idempotency_key_replays_the_first_response(self, client, paystack) -> None:
        _init_reply(paystack)
        payload = {"email": "ama@example.com", "amount": 75}
        headers = {"Idempotency-Key": "checkout-7f3a"}

        first = client.post("/api/payments/initialize", json=payload, headers=headers)
        second = client.post("/api/payments/initialize", json=payload, headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.get_json() == first.get_json()
        assert len(paystack.calls_to(INIT_PATH)) == 1
        assert Payment.query.count() == 1

        other = client.post("/api/payments/initialize", json={"email": "ama@example.com", "amount": 80}, headers=headers)
        assert other.status_code == 409

    def test_gateway_failure_releases_the_idempotency_key(self, client, paystack) -> None:
        paystack.reply("POST", INIT_PATH, status=False, message="Invalid key", http_status=401)

        res = client.post(
            "/api/payments/initialize",
            json={"email": "ama@example.com", "amount": 75},
            headers={"Idempotency-Key": "checkout-retry"},
        )

        assert res.status_code == 500
        assert res.get_json()["error"] == "Invalid key"
        assert IdempotencyKey.query.count() == 0
        assert Payment.query.count() == 0

    def test_validation_errors_name_the_field(self, client, paystack) -> None:
        res = client.post("/api/payments/initialize", json={"email": "not-an-email", "amount": -5})

        assert res.status_code == 400
        fields = {d["field"] for d in res.get_json()["details"]}
        assert fields == {"email", "amount"}
        assert paystack.calls == []

    def test_unknown_order_is_rejected(self, client, paystack) -> None:
        _init_reply(paystack)
        res = client.post("/api/payments/initialize", json={"email": "ama@example.com", "amount": 10, "order_id": 404})
        assert res.status_code == 400
        assert res.get_json()["details"] == [{"field": "order_id", "message": "Order not found"}]
        assert paystack.calls == []

    def test_order_charge_must_equal_the_order_total(self, client, paystack, make_vendor, make_order) -> None:
        _init_reply(paystack)
        order = make_order([(make_vendor(), "1000.00", 1)])

        res = client.post("/api/payments/initialize", json={"email": "ama@example.com", "amount": 1, "order_id": order.id})
        assert res.status_code == 400
        assert res.get_json()["details"][0]["field"] == "amount"
        assert paystack.calls == []

        res = client.post("/api/payments/initialize", json={"email": "ama@example.com", "amount": "1000.00", "order_id": order.id})
        assert res.status_code == 200
        assert paystack.calls_to(INIT_PATH)[0]["json"]["amount"] == 100000

    def test_paid_order_cannot_be_charged_again(self, client, paystack, make_vendor, make_order) -> None:
        _init_reply(paystack)
        order = make_order([(make_vendor(), "20.00", 1)])
        order.payment_status = "paid"
        db.session.commit()

        res = client.post("/api/payments/initialize", json={"email": "ama@example.com", "amount": 20, "order_id": order.id})

        assert res.status_code == 409
        assert paystack.calls == []


class TestVerify:
    def test_success_updates_the_local_payment(self, client, paystack, make_payment) -> None:
        payment = make_payment("ghbuys_verify_1")
        paystack.reply("GET", "/transaction/verify/ghbuys_verify_1", {
            "id": 4099260516,
            "status": "success",
            "reference": "ghbuys_verify_1",
            "amount": 10000,
            "currency": "GHS",
            "channel": "mobile_money",
            "paid_at": "2026-10-01T10:15:00.000Z",
            "customer": {"email": "ama@example.com"},
        })

        res = client.get("/api/payments/verify/ghbuys_verify_1")

        assert res.status_code == 200
        body = res.get_json()
        assert body["status"] == "success"
        assert body["amount"] == 100.0
        assert body["local_status"] == "successful"
        payment = db.session.get(Payment, payment.id)
        assert payment.status == "successful"
        assert payment.channel == "mobile_money"

    def test_later_failed_poll_does_not_downgrade(self, client, paystack, make_payment) -> None:
        make_payment("ghbuys_verify_2", status="successful")
        paystack.reply("GET", "/transaction/verify/ghbuys_verify_2", {"status": "failed", "reference": "ghbuys_verify_2", "amount": 10000})

        res = client.get("/api/payments/verify/ghbuys_verify_2")

        assert res.status_code == 200
        assert res.get_json()["local_status"] == "successful"

    def test_unknown_transaction(self, client, paystack) -> None:
        paystack.reply("GET", "/transaction/verify/nope", status=False, message="Transaction reference not found", http_status=400)

        res = client.get("/api/payments/verify/nope")

        assert res.status_code == 400
        assert res.get_json() == {"error": "Transaction verification failed"}


class TestHistory:
    def test_requires_admin(self, client, customer_headers) -> None:
        assert client.get("/api/payments/history").status_code == 401
        assert client.get("/api/payments/history", headers=customer_headers).status_code == 403

    def test_lists_and_filters(self, client, admin_headers, make_payment, make_order) -> None:
        order = make_order([(None, "20.00", 1)])
        make_payment("ghbuys_h1", order=order, status="successful", created_at=datetime(2026, 1, 1))
        make_payment("ghbuys_h2", created_at=datetime(2026, 1, 2))

        res = client.get("/api/payments/history", headers=admin_headers)
        body = res.get_json()
        assert body["total"] == 2
        assert [i["reference"] for i in body["items"]] == ["ghbuys_h2", "ghbuys_h1"]
        assert body["items"][1]["order_number"] == order.order_number

        res = client.get("/api/payments/history?status=successful", headers=admin_headers)
        assert [i["reference"] for i in res.get_json()["items"]] == ["ghbuys_h1"]


class TestRefund:
    def test_refunds_a_successful_payment(self, client, paystack, admin_headers, make_payment) -> None:
        payment = make_payment("ghbuys_r1", status="successful", amount="80.00")
        paystack.reply("POST", "/refund", {"status": "pending", "amount": 3000})

        res = client.post("/api/payments/ghbuys_r1/refund", json={"amount": 30, "reason": "Damaged on delivery"}, headers=admin_headers)

        assert res.status_code == 200
        assert res.get_json()["reference"] == "ghbuys_r1"
        (call,) = paystack.calls_to("/refund")
        assert call["json"] == {"transaction": "ghbuys_r1", "currency": "GHS", "amount": 3000, "merchant_note": "Damaged on delivery"}

        audit = AuditLog.query.filter_by(action="payment_refund").one()
        assert audit.target_id == payment.id

    def test_rejects_pending_and_missing_payments(self, client, paystack, admin_headers, make_payment) -> None:
        make_payment("ghbuys_r2")

        assert client.post("/api/payments/ghbuys_r2/refund", json={}, headers=admin_headers).status_code == 409
        assert client.post("/api/payments/ghbuys_missing/refund", json={}, headers=admin_headers).status_code == 404
        assert paystack.calls == []

    def test_rejects_more_than_was_paid(self, client, paystack, admin_headers, make_payment) -> None:
        make_payment("ghbuys_r3", status="successful", amount="10.00")

        res = client.post("/api/payments/ghbuys_r3/refund", json={"amount": 11}, headers=admin_headers)

        assert res.status_code == 400
        assert paystack.calls == []

    def test_only_the_remainder_is_refundable_after_a_partial_refund(self, client, paystack, admin_headers, make_payment) -> None:
        make_payment("ghbuys_r4", status="successful", amount="80.00", refund_processed=True, refunded_amount=Decimal("30.00"))
        paystack.reply("POST", "/refund", {"status": "pending", "amount": 5000})

        too_much = client.post("/api/payments/ghbuys_r4/refund", json={"amount": 60}, headers=admin_headers)
        assert too_much.status_code == 400
        assert paystack.calls == []

        res = client.post("/api/payments/ghbuys_r4/refund", json={}, headers=admin_headers)
        assert res.status_code == 200
        (call,) = paystack.calls_to("/refund")
        assert call["json"]["amount"] == 5000

    def test_fully_refunded_payment_conflicts(self, client, paystack, admin_headers, make_payment) -> None:
        make_payment("ghbuys_r5", status="successful", amount="80.00", refund_processed=True, refunded_amount=Decimal("80.00"))

        res = client.post("/api/payments/ghbuys_r5/refund", json={}, headers=admin_headers)

        assert res.status_code == 409
        assert paystack.calls == []
