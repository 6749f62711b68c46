from datetime import datetime

from ghbuys.extensions import db


class Payment(db.Model):
    """One row per gateway transaction attempt, keyed by the Paystack reference."""

    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    reference = db.Column(db.String(128), nullable=False, unique=True, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)

    email = db.Column(db.String(255), nullable=False, default="")
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(8), nullable=False, default="GHS")

    payment_method = db.Column(db.String(24), nullable=False, default="card")  # card | mobile_money | bank
    provider = db.Column(db.String(16), nullable=True)  # mobile money provider
    phone = db.Column(db.String(32), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    # pending | successful | failed | cancelled

    # Gateway fields (from webhook or verify poll)
    gateway_id = db.Column(db.String(64), nullable=True)
    channel = db.Column(db.String(32), nullable=True)
    gateway_response = db.Column(db.String(255), nullable=True)
    authorization_code = db.Column(db.String(64), nullable=True)
    card_type = db.Column(db.String(32), nullable=True)
    card_last4 = db.Column(db.String(4), nullable=True)
    bank = db.Column(db.String(120), nullable=True)
    fees = db.Column(db.Numeric(12, 2), nullable=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    failure_reason = db.Column(db.String(255), nullable=True)
    failed_at = db.Column(db.DateTime, nullable=True)

    refund_processed = db.Column(db.Boolean, nullable=False, default=False)
    refunded_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    refunded_at = db.Column(db.DateTime, nullable=True)

    raw_response = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = db.relationship("Order")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reference": self.reference,
            "order_id": self.order_id,
            "email": self.email,
            "amount": float(self.amount or 0),
            "currency": self.currency,
            "payment_method": self.payment_method,
            "provider": self.provider or "",
            "status": self.status,
            "channel": self.channel or "",
            "gateway_response": self.gateway_response or "",
            "fees": float(self.fees) if self.fees is not None else None,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "failure_reason": self.failure_reason or "",
            "refund_processed": bool(self.refund_processed),
            "refunded_amount": float(self.refunded_amount or 0),
            "refunded_at": self.refunded_at.isoformat() if self.refunded_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
