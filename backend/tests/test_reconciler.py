"""
Tests for the pending payment reconciler and the management commands.
"""
from datetime import datetime, timedelta

from ghbuys.extensions import db
from ghbuys.jobs.payment_reconciler import reconcile_pending_payments
from ghbuys.jobs.seed import seed_admin, seed_demo_catalog
from ghbuys.models import AuditLog, Order, Payment, Product, User, VendorPayout, WebhookDeadLetter, WebhookEvent


def _stale(minutes: int = 90) -> datetime:
    return datetime.utcnow() - timedelta(minutes=minutes)


def test_settles_stale_payments_through_the_webhook_path(app, webhook, paystack, make_vendor, make_order, make_payment) -> None:
    v = make_vendor()
    order = make_order([(v, "60.00", 1)])
    payment = make_payment("ghbuys_stale_ok", order=order, amount="60.00", created_at=_stale())
    make_payment("ghbuys_fresh", created_at=datetime.utcnow())
    paystack.reply("GET", "/transaction/verify/ghbuys_stale_ok", {
        "id": 55, "status": "success", "reference": "ghbuys_stale_ok", "amount": 6000,
        "channel": "card", "metadata": {"order_id": order.id},
    })

    out = reconcile_pending_payments(older_than_minutes=30)

    assert out["checked"] == 1
    assert out["settled"] == 1
    assert out["issues"] == []
    assert db.session.get(Payment, payment.id).status == "successful"
    assert db.session.get(Order, order.id).payment_status == "paid"
    assert VendorPayout.query.count() == 1
    assert [c["path"] for c in paystack.calls] == ["/transaction/verify/ghbuys_stale_ok"]

    audit = AuditLog.query.filter_by(action="reconcile_payments").one()
    assert audit.meta["settled"] == 1

    # the late webhook for the same charge changes nothing
    res = webhook({"event": "charge.success", "data": {"reference": "ghbuys_stale_ok", "status": "success", "metadata": {"order_id": order.id}}})
    assert res.get_json() == {"received": True, "duplicate": True}
    assert VendorPayout.query.count() == 1


def test_failed_and_unreachable_payments(app, paystack, make_payment) -> None:
    failed = make_payment("ghbuys_stale_failed", created_at=_stale())
    still_pending = make_payment("ghbuys_stale_pending", created_at=_stale())
    make_payment("ghbuys_stale_unknown", created_at=_stale())
    paystack.reply("GET", "/transaction/verify/ghbuys_stale_failed", {"status": "abandoned", "reference": "ghbuys_stale_failed", "gateway_response": "Abandoned"})
    paystack.reply("GET", "/transaction/verify/ghbuys_stale_pending", {"status": "ongoing", "reference": "ghbuys_stale_pending"})

    out = reconcile_pending_payments(older_than_minutes=30)

    assert out["checked"] == 3
    assert out["settled"] == 1
    assert [i["reference"] for i in out["issues"]] == ["ghbuys_stale_unknown"]
    assert db.session.get(Payment, failed.id).status == "failed"
    assert db.session.get(Payment, still_pending.id).status == "pending"


def test_recovers_a_charge_whose_webhook_beat_its_payment(app, webhook, paystack, make_vendor, make_order, make_payment) -> None:
    v = make_vendor()
    order = make_order([(v, "40.00", 1)])
    charge = {"reference": "ghbuys_early", "status": "success", "amount": 4000, "metadata": {"order_id": order.id}}

    assert webhook({"event": "charge.success", "data": charge}).status_code == 200
    assert WebhookDeadLetter.query.one().reason == "payment_not_found"
    assert WebhookEvent.query.count() == 0

    payment = make_payment("ghbuys_early", order=order, amount="40.00", created_at=_stale())
    paystack.reply("GET", "/transaction/verify/ghbuys_early", dict(charge, id=77, channel="card"))

    out = reconcile_pending_payments(older_than_minutes=30)

    assert out["settled"] == 1
    assert out["open_dead_letters"] == 0
    assert db.session.get(Payment, payment.id).status == "successful"
    assert db.session.get(Order, order.id).payment_status == "paid"
    assert VendorPayout.query.count() == 1
    assert WebhookDeadLetter.query.one().resolved_at is not None


def test_already_applied_delivery_is_an_issue_not_a_settlement(app, paystack, make_payment) -> None:
    payment = make_payment("ghbuys_stuck", created_at=_stale())
    db.session.add(WebhookEvent(provider="paystack", event="charge.success", reference="ghbuys_stuck"))
    db.session.commit()
    paystack.reply("GET", "/transaction/verify/ghbuys_stuck", {"status": "success", "reference": "ghbuys_stuck", "amount": 10000})

    out = reconcile_pending_payments(older_than_minutes=30)

    assert out["settled"] == 0
    assert out["issues"] == [{"reference": "ghbuys_stuck", "error": "charge.success already applied"}]
    assert db.session.get(Payment, payment.id).status == "pending"


def test_cli_reconcile(app, paystack) -> None:
    result = app.test_cli_runner().invoke(args=["reconcile-payments", "--older-than", "5"])

    assert result.exit_code == 0
    assert "checked=0 settled=0 open_dead_letters=0 issues=0" in result.output


def test_seed_is_idempotent(app) -> None:
    user, created = seed_admin("Root@Example.com", "admin-password-1")
    assert created is True
    assert user.role == "admin"
    assert seed_admin("root@example.com", "other")[1] is False
    assert seed_admin(None, "x") == (None, False)

    first = seed_demo_catalog()
    second = seed_demo_catalog()
    assert first["created"] is True
    assert second["created"] is False
    assert second["products"] == 3
    assert Product.query.filter_by(status="published").count() == 3


def test_cli_seed(app, monkeypatch) -> None:
    monkeypatch.setenv("ADMIN_EMAIL", "ops@example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "ops-password-1")

    result = app.test_cli_runner().invoke(args=["seed", "--no-demo"])

    assert result.exit_code == 0
    assert "Admin created: ops@example.com" in result.output
    assert User.query.filter_by(email="ops@example.com", role="admin").count() == 1
