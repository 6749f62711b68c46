"""Thin wrapper around the Paystack REST API.

Amounts are passed in cedis and converted to pesewas (minor units) here;
responses are returned as the gateway's ``data`` object.
"""

from __future__ import annotations

import hashlib
import hmac
from decimal import Decimal
from typing import Any

import requests
from flask import current_app

from ghbuys.utils.ghana import to_money

DEFAULT_CHANNELS = ["card", "bank", "ussd", "qr", "mobile_money"]


class PaystackError(Exception):
    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


def verify_signature(raw_body: bytes, signature_header: str | None, secret: str | None) -> bool:
    """HMAC-SHA512 of the exact request bytes, hex encoded, compared in constant time."""
    if not secret or not signature_header:
        return False
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(digest, signature_header.strip())


def to_minor_units(amount) -> int:
    return int(to_money(amount) * 100)


def from_minor_units(value) -> Decimal:
    return to_money(Decimal(str(value or 0)) / 100)


def channels_for(payment_method: str | None) -> list[str]:
    pm = (payment_method or "").strip().lower()
    if pm in ("mobile_money", "mobile_money_only"):
        return ["mobile_money"]
    if pm in ("card", "card_only"):
        return ["card"]
    if pm == "bank_only":
        return ["bank", "ussd"]
    if pm == "no_mobile_money":
        return ["card", "bank", "ussd", "qr"]
    return list(DEFAULT_CHANNELS)


def _request(method: str, path: str, payload: dict | None = None) -> dict:
    cfg = current_app.config
    secret = cfg.get("PAYSTACK_SECRET_KEY") or ""
    if not secret:
        raise PaystackError("PAYSTACK_SECRET_KEY not set")

    url = f"{cfg.get('PAYSTACK_BASE_URL', 'https://api.paystack.co')}{path}"
    headers = {"Authorization": f"Bearer {secret}", "Content-Type": "application/json"}
    try:
        r = requests.request(method, url, headers=headers, json=payload, timeout=cfg.get("PAYSTACK_TIMEOUT", 20))
    except requests.RequestException as e:
        raise PaystackError(f"Paystack request failed: {e}") from e

    try:
        j = r.json() if r.content else {}
    except ValueError:
        j = {}

    if 200 <= r.status_code < 300 and j.get("status") is True:
        return j.get("data") or {}

    message = j.get("message") or f"HTTP {r.status_code}"
    current_app.logger.warning("Paystack %s %s failed: %s", method, path, message)
    raise PaystackError(message, status_code=r.status_code, payload=j)


def initialize_transaction(
    *,
    email: str,
    amount,
    reference: str,
    currency: str = "GHS",
    channels: list[str] | None = None,
    metadata: dict | None = None,
    callback_url: str = "",
) -> dict:
    payload = {
        "email": email,
        "amount": to_minor_units(amount),
        "currency": currency,
        "reference": reference,
        "channels": channels or list(DEFAULT_CHANNELS),
        "metadata": metadata or {},
    }
    if callback_url:
        payload["callback_url"] = callback_url
    return _request("POST", "/transaction/initialize", payload)


def charge_mobile_money(
    *,
    email: str,
    amount,
    reference: str,
    phone: str,
    provider: str,
    currency: str = "GHS",
    metadata: dict | None = None,
) -> dict:
    payload = {
        "email": email,
        "amount": to_minor_units(amount),
        "currency": currency,
        "reference": reference,
        "mobile_money": {"phone": phone, "provider": provider},
        "metadata": metadata or {},
    }
    return _request("POST", "/charge", payload)


def verify_transaction(reference: str) -> dict:
    return _request("GET", f"/transaction/verify/{reference}")


def refund_transaction(reference: str, amount=None, *, currency: str = "GHS", note: str = "") -> dict:
    payload: dict[str, Any] = {"transaction": reference, "currency": currency}
    if amount is not None:
        payload["amount"] = to_minor_units(amount)
    if note:
        payload["merchant_note"] = note
    return _request("POST", "/refund", payload)
