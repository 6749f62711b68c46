from __future__ import annotations

import hashlib
import json
from typing import Any

from flask import request
from sqlalchemy.exc import IntegrityError

from ghbuys.extensions import db
from ghbuys.models import IdempotencyKey, WebhookEvent


def _hash_request(payload: Any) -> str:
    raw = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def get_idempotency_key() -> str | None:
    k = request.headers.get("Idempotency-Key") or request.headers.get("X-Idempotency-Key")
    if not k:
        return None
    return k.strip()[:128] or None


def lookup_response(route: str, payload: Any):
    """Return ("hit", body, status), ("conflict", body, 409), ("miss", row, 0) or None without a key."""
    k = get_idempotency_key()
    if not k:
        return None

    rh = _hash_request(payload)
    row = IdempotencyKey.query.filter_by(key=k).first()
    if row:
        if row.request_hash and row.request_hash != rh:
            return ("conflict", {"error": "Idempotency key reuse with different payload"}, 409)
        if row.response_json:
            return ("hit", json.loads(row.response_json), int(row.status_code or 200))
        return ("conflict", {"error": "Request with this idempotency key is still in progress"}, 409)

    row = IdempotencyKey(key=k, route=route, request_hash=rh)
    db.session.add(row)
    db.session.commit()
    return ("miss", row, 0)


def store_response(row: IdempotencyKey, response_json: Any, status_code: int) -> None:
    row.response_json = json.dumps(response_json, default=str)
    row.status_code = int(status_code)
    db.session.add(row)
    db.session.commit()


def release_key(row: IdempotencyKey) -> None:
    """Drop a claimed key after a failed request so the client can retry with it."""
    db.session.delete(row)
    db.session.commit()


def claim_webhook_event(session, *, event: str, reference: str, provider: str = "paystack") -> bool:
    """Insert-or-ignore on (provider, event, reference).

    Must be the first write of the caller's transaction: the claim is only
    flushed, so it commits or rolls back together with the handler's writes,
    and a conflict rolls back nothing but the claim itself. Returns False when
    the delivery has already been processed.
    """
    session.add(WebhookEvent(provider=provider, event=event, reference=reference))
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        return False
    return True


def release_webhook_claim(session, *, event: str, reference: str, provider: str = "paystack") -> None:
    """Drop a claim inside the caller's transaction so a later replay of the delivery is applied."""
    row = session.query(WebhookEvent).filter_by(provider=provider, event=event, reference=reference).first()
    if row is not None:
        session.delete(row)
