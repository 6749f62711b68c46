from __future__ import annotations

import json

from flask import Blueprint, current_app, jsonify, request

from ghbuys.extensions import db
from ghbuys.services.webhooks import PaystackWebhookProcessor
from ghbuys.utils.paystack_client import verify_signature

webhooks_bp = Blueprint("webhooks_bp", __name__, url_prefix="/api/webhooks")


@webhooks_bp.post("/paystack")
def paystack_webhook():
    # Signature covers the exact bytes Paystack sent, so never re-serialize the body
    raw = request.get_data(cache=True) or b""
    sig = request.headers.get("X-Paystack-Signature")
    secret = current_app.config.get("PAYSTACK_WEBHOOK_SECRET") or ""

    if not verify_signature(raw, sig, secret):
        current_app.logger.warning("Invalid Paystack webhook signature")
        return jsonify({"error": "Invalid signature"}), 400

    try:
        payload = json.loads(raw.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError):
        current_app.logger.warning("Paystack webhook body is not valid JSON")
        return jsonify({"error": "Invalid payload"}), 400
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid payload"}), 400

    processor = PaystackWebhookProcessor(
        db.session,
        commission_rate=current_app.config.get("PLATFORM_COMMISSION_RATE", 0.05),
        currency=current_app.config.get("STORE_CURRENCY", "GHS"),
        logger=current_app.logger,
    )
    try:
        result = processor.process(payload)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error processing Paystack webhook %s", payload.get("event"))
        return jsonify({"error": "Webhook processing failed"}), 500

    return jsonify(result), 200
