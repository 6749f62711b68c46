"""Paystack webhook reconciliation.

A verified delivery is claimed in the dedupe table, dispatched by event type
and applied to the local Payment, Order and VendorPayout rows. Everything a
delivery changes is committed in one transaction together with its claim.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict

from ghbuys.models import Order, Payment, WebhookDeadLetter
from ghbuys.services.payouts import (
    queue_vendor_payouts,
    split_vendor_payouts,
    update_vendor_payout_status,
)
from ghbuys.utils.commission import PLATFORM_COMMISSION_RATE
from ghbuys.utils.ghana import to_money
from ghbuys.utils.idempotency import claim_webhook_event, release_webhook_claim
from ghbuys.utils.paystack_client import from_minor_units

PROVIDER = "paystack"


def _parse_ts(value) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


def _int_or_none(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def event_reference(data: Dict[str, Any]) -> str:
    """The gateway reference a delivery is about; refunds carry it on the transaction."""
    ref = data.get("reference") or data.get("transaction_reference")
    if not ref and isinstance(data.get("transaction"), dict):
        ref = data["transaction"].get("reference")
    return str(ref or "").strip()


def dedupe_key(event: str, reference: str, data: Dict[str, Any]) -> str:
    """Refunds share their transaction's reference, so each one is keyed on its own id."""
    if event == "refund.processed":
        refund_id = data.get("id") or data.get("refund_reference")
        if refund_id:
            return f"refund:{refund_id}"
    return reference


class PaystackWebhookProcessor:
    def __init__(
        self,
        session,
        *,
        commission_rate=PLATFORM_COMMISSION_RATE,
        currency: str = "GHS",
        logger: logging.Logger | None = None,
    ):
        self.session = session
        self._unmatched = False
        self.commission_rate = Decimal(str(commission_rate))
        self.currency = currency
        self.log = logger or logging.getLogger(__name__)
        self.handlers: Dict[str, Callable[[str, Dict[str, Any]], None]] = {
            "charge.success": self.charge_success,
            "charge.failed": self.charge_failed,
            "transfer.success": self.transfer_success,
            "transfer.failed": self.transfer_failed,
            "refund.processed": self.refund_processed,
        }

    def process(self, envelope: Dict[str, Any]) -> dict:
        event = str(envelope.get("event") or "")
        data = envelope.get("data") if isinstance(envelope.get("data"), dict) else {}
        reference = event_reference(data)

        self.log.info("Paystack webhook %s reference=%s", event, reference or "-")

        handler = self.handlers.get(event)
        if handler is None:
            self.log.warning("Unhandled Paystack event: %s", event)
            return {"received": True}

        if not reference:
            self.log.warning("Paystack %s without a reference", event)
            self._dead_letter(event, "", "missing_reference", data)
            self.session.commit()
            return {"received": True}

        key = dedupe_key(event, reference, data)
        if not claim_webhook_event(self.session, event=event, reference=key, provider=PROVIDER):
            self.log.info("Duplicate Paystack delivery %s reference=%s", event, key)
            return {"received": True, "duplicate": True}

        self._unmatched = False
        handler(reference, data)
        if self._unmatched:
            # no local payment yet; a redelivery or reconciler replay must still apply
            release_webhook_claim(self.session, event=event, reference=key, provider=PROVIDER)
        self.session.commit()
        return {"received": True}

    def _dead_letter(self, event: str, reference: str, reason: str, data: Dict[str, Any]) -> WebhookDeadLetter:
        row = WebhookDeadLetter(provider=PROVIDER, event=event, reference=reference or None, reason=reason, payload=data)
        self.session.add(row)
        return row

    def _payment(self, event: str, reference: str, data: Dict[str, Any]) -> Payment | None:
        payment = self.session.query(Payment).filter_by(reference=reference).first()
        if payment is None:
            self.log.warning("Payment not found for %s reference=%s", event, reference)
            self._dead_letter(event, reference, "payment_not_found", data)
            self._unmatched = True
            return None

        self.session.query(WebhookDeadLetter).filter(
            WebhookDeadLetter.provider == PROVIDER,
            WebhookDeadLetter.event == event,
            WebhookDeadLetter.reference == reference,
            WebhookDeadLetter.reason == "payment_not_found",
            WebhookDeadLetter.resolved_at.is_(None),
        ).update({"resolved_at": datetime.utcnow()}, synchronize_session=False)
        return payment

    def _order_for(self, payment: Payment, metadata: Dict[str, Any]) -> Order | None:
        order_id = _int_or_none(metadata.get("order_id")) or payment.order_id
        if order_id is None:
            return None
        return self.session.get(Order, order_id)

    def charge_success(self, reference: str, data: Dict[str, Any]) -> None:
        payment = self._payment("charge.success", reference, data)
        if payment is None:
            return

        auth = data.get("authorization") if isinstance(data.get("authorization"), dict) else {}
        payment.status = "successful"
        payment.gateway_id = str(data.get("id")) if data.get("id") is not None else payment.gateway_id
        payment.channel = data.get("channel") or payment.channel
        payment.gateway_response = (data.get("gateway_response") or "")[:255] or None
        payment.authorization_code = auth.get("authorization_code") or payment.authorization_code
        payment.card_type = auth.get("card_type") or payment.card_type
        payment.card_last4 = auth.get("last4") or payment.card_last4
        payment.bank = auth.get("bank") or payment.bank
        if data.get("fees") is not None:
            payment.fees = from_minor_units(data.get("fees"))
        payment.paid_at = _parse_ts(data.get("paid_at") or data.get("paidAt")) or datetime.utcnow()
        payment.raw_response = data

        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        if payment.channel == "mobile_money":
            self.log.info(
                "Mobile money charge %s provider=%s phone=%s",
                reference,
                metadata.get("provider") or payment.provider,
                metadata.get("phone") or payment.phone,
            )

        order = self._order_for(payment, metadata)
        if order is None:
            if metadata.get("order_id") is not None:
                self.log.warning("Order %s not found for payment %s", metadata.get("order_id"), reference)
                self._dead_letter("charge.success", reference, "order_not_found", data)
            return

        payment.order_id = order.id
        settled = from_minor_units(data.get("amount")) if data.get("amount") is not None else to_money(payment.amount)
        if settled < to_money(order.total):
            self.log.warning(
                "Payment %s settled %s against order %s total %s; order left unpaid",
                reference, settled, order.order_number, order.total,
            )
            self._dead_letter("charge.success", reference, "amount_mismatch", data)
            return

        order.payment_status = "paid"
        if order.status == "pending":
            order.status = "confirmed"

        intents = split_vendor_payouts(
            order.items,
            reference,
            rate=self.commission_rate,
            currency=order.currency or self.currency,
            order_id=order.id,
        )
        queue_vendor_payouts(self.session, intents, payment_reference=reference)
        self.log.info("Queued %d vendor payouts for order %s", len(intents), order.order_number)

    def charge_failed(self, reference: str, data: Dict[str, Any]) -> None:
        payment = self._payment("charge.failed", reference, data)
        if payment is None:
            return

        payment.status = "failed"
        payment.gateway_id = str(data.get("id")) if data.get("id") is not None else payment.gateway_id
        payment.channel = data.get("channel") or payment.channel
        payment.gateway_response = (data.get("gateway_response") or "")[:255] or None
        payment.failure_reason = (data.get("message") or data.get("gateway_response") or "Payment failed")[:255]
        payment.failed_at = datetime.utcnow()
        payment.raw_response = data

        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        order = self._order_for(payment, metadata)
        if order is not None:
            order.payment_status = "failed"

    def refund_processed(self, reference: str, data: Dict[str, Any]) -> None:
        payment = self._payment("refund.processed", reference, data)
        if payment is None:
            return

        paid = to_money(payment.amount)
        if data.get("amount") is None:
            payment.refunded_amount = paid
        else:
            payment.refunded_amount = to_money(payment.refunded_amount) + from_minor_units(data.get("amount"))
        payment.refund_processed = True
        payment.refunded_at = datetime.utcnow()

        order = self._order_for(payment, {})
        if order is None:
            return
        if payment.refunded_amount < paid:
            order.payment_status = "partially_refunded"
        else:
            order.payment_status = "refunded"
            order.status = "refunded"

    def _transfer(self, event: str, reference: str, data: Dict[str, Any], status: str) -> None:
        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        vendor_id = _int_or_none(metadata.get("vendor_id"))
        if vendor_id is None:
            self.log.info("%s %s carries no vendor_id; nothing to update", event, reference)
            return
        reason = "" if status == "completed" else (data.get("reason") or data.get("message") or "Transfer failed")
        row = update_vendor_payout_status(self.session, vendor_id=vendor_id, reference=reference, status=status, reason=reason)
        if row is None:
            self.log.warning("No payout for vendor %s matching %s", vendor_id, reference)
            self._dead_letter(event, reference, "payout_not_found", data)

    def transfer_success(self, reference: str, data: Dict[str, Any]) -> None:
        self._transfer("transfer.success", reference, data, "completed")

    def transfer_failed(self, reference: str, data: Dict[str, Any]) -> None:
        self._transfer("transfer.failed", reference, data, "failed")
