from datetime import datetime

from ghbuys.extensions import db


class VendorPayout(db.Model):
    __tablename__ = "vendor_payouts"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    payment_reference = db.Column(db.String(128), nullable=False, index=True)
    # payout_<payment reference>_<vendor id>
    reference = db.Column(db.String(200), nullable=False, unique=True, index=True)

    gross_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    commission_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)  # net to vendor
    currency = db.Column(db.String(8), nullable=False, default="GHS")

    item_ids = db.Column(db.JSON, nullable=False, default=list)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)  # pending | completed | failed
    transfer_reference = db.Column(db.String(128), nullable=True)
    failure_reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "order_id": self.order_id,
            "payment_reference": self.payment_reference,
            "reference": self.reference,
            "gross_amount": float(self.gross_amount or 0),
            "commission_amount": float(self.commission_amount or 0),
            "amount": float(self.amount or 0),
            "currency": self.currency,
            "item_ids": list(self.item_ids or []),
            "status": self.status,
            "transfer_reference": self.transfer_reference or "",
            "failure_reason": self.failure_reason or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
