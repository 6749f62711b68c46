from datetime import datetime

from ghbuys.extensions import db


class WebhookEvent(db.Model):
    """Processed gateway deliveries; the unique key makes redelivery a no-op."""

    __tablename__ = "webhook_events"

    id = db.Column(db.Integer, primary_key=True)
    provider = db.Column(db.String(32), nullable=False, default="paystack")
    event = db.Column(db.String(64), nullable=False)
    reference = db.Column(db.String(128), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("provider", "event", "reference", name="uq_webhook_events_provider_event_reference"),
    )

    def to_dict(self):
        return {
            "id": int(self.id),
            "provider": self.provider,
            "event": self.event,
            "reference": self.reference,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class WebhookDeadLetter(db.Model):
    """Verified deliveries that matched no local record, kept for manual reconciliation."""

    __tablename__ = "webhook_dead_letters"

    id = db.Column(db.Integer, primary_key=True)
    provider = db.Column(db.String(32), nullable=False, default="paystack")
    event = db.Column(db.String(64), nullable=False)
    reference = db.Column(db.String(128), nullable=True, index=True)
    reason = db.Column(db.String(64), nullable=False)  # payment_not_found | order_not_found
    payload = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    resolved_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            "id": int(self.id),
            "provider": self.provider,
            "event": self.event,
            "reference": self.reference or "",
            "reason": self.reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
        }
