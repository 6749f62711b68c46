from __future__ import annotations

import time
import uuid

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from ghbuys.auth import admin_required
from ghbuys.errors import ApiError, Conflict, NotFound, UpstreamError, ValidationFailed
from ghbuys.extensions import db
from ghbuys.models import AuditLog, Order, Payment
from ghbuys.reference_data import MOBILE_MONEY_PROVIDERS
from ghbuys.schemas import MobileMoneyPaymentRequest, PaymentInitializeRequest, RefundRequest, parse_or_400
from ghbuys.utils import mobile_money
from ghbuys.utils.ghana import format_currency, to_money
from ghbuys.utils.idempotency import lookup_response, release_key, store_response
from ghbuys.utils.paystack_client import (
    PaystackError,
    channels_for,
    charge_mobile_money,
    from_minor_units,
    initialize_transaction,
    refund_transaction,
    verify_transaction,
)

payments_bp = Blueprint("payments_bp", __name__, url_prefix="/api/payments")


def _new_reference(prefix: str = "ghbuys") -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _linked_order_id(order_id: int | None, amount) -> int | None:
    """Check a charge against the order it pays for; the amount must be the order total."""
    if order_id is None:
        return None
    order = db.session.get(Order, order_id)
    if order is None:
        raise ValidationFailed([{"field": "order_id", "message": "Order not found"}])
    if order.payment_status == "paid":
        raise Conflict("Order has already been paid")
    if to_money(amount) != to_money(order.total):
        raise ValidationFailed([{"field": "amount", "message": f"Amount must equal the order total of {format_currency(order.total)}"}])
    return order_id


@payments_bp.post("/initialize")
def initialize_payment():
    payload = request.get_json(silent=True) or {}
    data = parse_or_400(PaymentInitializeRequest, payload)

    idem = lookup_response("/api/payments/initialize", payload)
    if idem and idem[0] in ("hit", "conflict"):
        return jsonify(idem[1]), idem[2]
    idem_row = idem[1] if idem and idem[0] == "miss" else None

    try:
        order_id = _linked_order_id(data.order_id, data.amount)
        reference = _new_reference()
        channels = channels_for(data.payment_method)
        init = initialize_transaction(
            email=str(data.email),
            amount=data.amount,
            reference=reference,
            currency=data.currency,
            channels=channels,
            metadata={
                "order_id": order_id,
                "customer_name": data.customer_name,
                "phone": data.phone,
                "marketplace": "ghbuys",
                "country": "Ghana",
            },
        )
    except PaystackError as e:
        if idem_row is not None:
            release_key(idem_row)
        raise UpstreamError(e.message or "Payment initialization failed") from e
    except ApiError:
        if idem_row is not None:
            release_key(idem_row)
        raise

    db.session.add(Payment(
        reference=reference,
        order_id=order_id,
        email=str(data.email),
        amount=to_money(data.amount),
        currency=data.currency,
        payment_method=data.payment_method or "card",
        phone=data.phone,
        status="pending",
        raw_response=init,
    ))
    db.session.commit()
    current_app.logger.info("Payment %s initialized amount=%s", reference, data.amount)

    resp = {
        "reference": reference,
        "authorization_url": init.get("authorization_url", ""),
        "access_code": init.get("access_code", ""),
        "amount": float(to_money(data.amount)),
        "currency": data.currency,
        "channels": channels,
        "public_key": current_app.config.get("PAYSTACK_PUBLIC_KEY", ""),
    }
    if idem_row is not None:
        store_response(idem_row, resp, 200)
    return jsonify(resp), 200


@payments_bp.post("/mobile-money")
def mobile_money_payment():
    data = parse_or_400(MobileMoneyPaymentRequest, request.get_json(silent=True))
    try:
        phone, provider = mobile_money.validate_request(data.phone, data.provider, data.amount)
    except mobile_money.MobileMoneyError as e:
        raise ValidationFailed([{"field": e.field, "message": e.message}], message=e.message) from e

    order_id = _linked_order_id(data.order_id, data.amount)
    reference = f"{_new_reference('ghbuys_momo')}_{provider}"
    try:
        charge = charge_mobile_money(
            email=str(data.email),
            amount=data.amount,
            reference=reference,
            phone=phone,
            provider=mobile_money.paystack_provider_code(provider),
            currency=data.currency,
            metadata={
                "order_id": order_id,
                "customer_name": data.customer_name,
                "payment_type": "mobile_money",
                "provider": provider,
                "phone": phone,
                "marketplace": "ghbuys",
            },
        )
    except PaystackError as e:
        raise UpstreamError(e.message or "Mobile Money payment failed") from e

    db.session.add(Payment(
        reference=reference,
        order_id=order_id,
        email=str(data.email),
        amount=to_money(data.amount),
        currency=data.currency,
        payment_method="mobile_money",
        provider=provider,
        phone=phone,
        status="pending",
        raw_response=charge,
    ))
    db.session.commit()
    current_app.logger.info("Mobile money charge %s provider=%s", reference, provider)

    return jsonify({
        "reference": reference,
        "status": mobile_money.status_from_gateway(charge.get("status")),
        "display_text": mobile_money.display_text(provider, data.amount),
        "instructions": mobile_money.instructions(provider),
        "provider": provider,
        "provider_name": mobile_money.provider_info(provider)["name"],
        "amount": format_currency(data.amount),
        "fee": float(mobile_money.calculate_fee(provider, data.amount)),
    }), 200


@payments_bp.get("/mobile-money/providers")
def mobile_money_providers():
    return jsonify({"providers": [mobile_money.provider_info(p.code) for p in MOBILE_MONEY_PROVIDERS]})


@payments_bp.get("/verify/<reference>")
def verify_payment(reference: str):
    try:
        tx = verify_transaction(reference)
    except PaystackError as e:
        if isinstance(e.payload, dict) and e.payload.get("status") is False:
            return jsonify({"error": "Transaction verification failed"}), 400
        raise UpstreamError(e.message or "Payment verification failed") from e

    payment = Payment.query.filter_by(reference=reference).first()
    if payment is not None:
        succeeded = tx.get("status") == "success"
        # successful is terminal; a later poll never downgrades it
        if payment.status != "successful":
            payment.status = "successful" if succeeded else "failed"
            if not succeeded:
                payment.failure_reason = (tx.get("gateway_response") or tx.get("status") or "")[:255] or None
        payment.gateway_id = str(tx.get("id")) if tx.get("id") is not None else payment.gateway_id
        payment.channel = tx.get("channel") or payment.channel
        payment.raw_response = tx
        db.session.commit()

    return jsonify({
        "reference": tx.get("reference") or reference,
        "status": tx.get("status"),
        "amount": float(from_minor_units(tx.get("amount"))),
        "currency": tx.get("currency"),
        "paid_at": tx.get("paid_at"),
        "channel": tx.get("channel"),
        "customer": tx.get("customer"),
        "local_status": payment.status if payment is not None else None,
    })


@payments_bp.get("/history")
@admin_required
def payment_history():
    status = (request.args.get("status") or "").strip()
    limit = max(1, min(request.args.get("limit", 50, type=int), 200))
    offset = max(0, request.args.get("offset", 0, type=int))

    q = Payment.query
    if status:
        q = q.filter(Payment.status == status)
    total = q.count()
    rows = q.order_by(Payment.created_at.desc(), Payment.id.desc()).offset(offset).limit(limit).all()

    items = []
    for p in rows:
        d = p.to_dict()
        d["order_number"] = p.order.order_number if p.order else None
        d["customer_name"] = p.order.customer_name if p.order else None
        items.append(d)
    return jsonify({"items": items, "total": total, "limit": limit, "offset": offset})


@payments_bp.post("/<reference>/refund")
@admin_required
def refund_payment(reference: str):
    data = parse_or_400(RefundRequest, request.get_json(silent=True))
    payment = Payment.query.filter_by(reference=reference).first()
    if payment is None:
        raise NotFound("Payment not found")
    if payment.status != "successful":
        raise Conflict("Only successful payments can be refunded")
    remaining = to_money(payment.amount) - to_money(payment.refunded_amount)
    if remaining <= 0:
        raise Conflict("Payment has already been refunded")
    if data.amount is not None and to_money(data.amount) > remaining:
        raise ValidationFailed([{"field": "amount", "message": "Refund exceeds the amount remaining"}])

    amount = data.amount
    if amount is None and remaining < to_money(payment.amount):
        # after a partial refund only the remainder is still refundable
        amount = remaining

    try:
        refund = refund_transaction(reference, amount, currency=payment.currency, note=data.reason or "")
    except PaystackError as e:
        raise UpstreamError(e.message or "Refund failed") from e

    db.session.add(AuditLog(
        actor_user_id=current_user.id,
        action="payment_refund",
        target_type="payment",
        target_id=payment.id,
        meta={"reference": reference, "amount": float(amount) if amount is not None else None, "reason": data.reason},
    ))
    db.session.commit()
    return jsonify({"reference": reference, "refund": refund}), 200
