from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ghbuys.extensions import db
from ghbuys.models import AuditLog, Payment, WebhookDeadLetter
from ghbuys.services.webhooks import PaystackWebhookProcessor
from ghbuys.utils.paystack_client import PaystackError, verify_transaction

log = logging.getLogger(__name__)

_GATEWAY_EVENTS = {
    "success": "charge.success",
    "failed": "charge.failed",
    "abandoned": "charge.failed",
    "reversed": "charge.failed",
}


def reconcile_pending_payments(*, older_than_minutes: int = 30, limit: int = 200, commission_rate=0.05, currency: str = "GHS") -> dict:
    """Re-verify stale pending payments with Paystack.

    Settled transactions are replayed through the webhook processor, so a
    webhook that arrives later is treated as a duplicate, and a delivery that
    was dead-lettered before its payment existed is applied and resolved.
    Open dead letters are counted, and the run is written to the audit log.
    """
    cutoff = datetime.utcnow() - timedelta(minutes=int(older_than_minutes))
    pending = (
        Payment.query.filter(Payment.status == "pending", Payment.created_at <= cutoff)
        .order_by(Payment.created_at.asc())
        .limit(int(limit))
        .all()
    )
    references = [p.reference for p in pending]

    processor = PaystackWebhookProcessor(db.session, commission_rate=commission_rate, currency=currency, logger=log)
    checked = 0
    settled = 0
    issues = []

    for reference in references:
        checked += 1
        try:
            tx = verify_transaction(reference)
        except PaystackError as e:
            log.warning("Could not verify %s: %s", reference, e.message)
            issues.append({"reference": reference, "error": e.message})
            continue

        event = _GATEWAY_EVENTS.get((tx.get("status") or "").lower())
        if event is None:
            continue
        tx.setdefault("reference", reference)
        try:
            result = processor.process({"event": event, "data": tx})
        except Exception as e:
            db.session.rollback()
            log.exception("Reconciliation of %s failed", reference)
            issues.append({"reference": reference, "error": f"{type(e).__name__}: {e}"})
            continue
        if result.get("duplicate"):
            # a claimed delivery should never leave its payment pending
            log.warning("%s %s was already applied but the payment is still pending", event, reference)
            issues.append({"reference": reference, "error": f"{event} already applied"})
            continue
        settled += 1

    open_dead_letters = WebhookDeadLetter.query.filter(WebhookDeadLetter.resolved_at.is_(None)).count()

    db.session.add(AuditLog(
        actor_user_id=None,
        action="reconcile_payments",
        target_type="system",
        target_id=None,
        meta={
            "checked": checked,
            "settled": settled,
            "open_dead_letters": open_dead_letters,
            "issues": issues[:25],
            "ts": datetime.utcnow().isoformat(),
        },
    ))
    db.session.commit()

    return {"checked": checked, "settled": settled, "open_dead_letters": open_dead_letters, "issues": issues}
