from datetime import datetime

from ghbuys.extensions import db


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    customer_email = db.Column(db.String(255), nullable=False)
    customer_phone = db.Column(db.String(32), nullable=True)
    customer_name = db.Column(db.String(160), nullable=True)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    delivery_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(8), nullable=False, default="GHS")

    delivery_region = db.Column(db.String(64), nullable=True)
    delivery_address = db.Column(db.JSON, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    # pending -> confirmed -> processing -> shipped -> delivered; cancelled | refunded
    payment_status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    # pending -> paid | failed | refunded | partially_refunded

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship("OrderItem", back_populates="order", order_by="OrderItem.id", lazy="selectin")

    def to_dict(self, *, with_items: bool = True) -> dict:
        d = {
            "id": self.id,
            "order_number": self.order_number,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone or "",
            "customer_name": self.customer_name or "",
            "subtotal": float(self.subtotal or 0),
            "tax_amount": float(self.tax_amount or 0),
            "delivery_fee": float(self.delivery_fee or 0),
            "total": float(self.total or 0),
            "currency": self.currency,
            "delivery_region": self.delivery_region or "",
            "delivery_address": self.delivery_address,
            "status": self.status,
            "payment_status": self.payment_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if with_items:
            d["items"] = [i.to_dict() for i in self.items]
        return d


class OrderItem(db.Model):
    """Line item; price and quantity are captured at purchase time and never edited."""

    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=True, index=True)

    product_name = db.Column(db.String(200), nullable=False, default="")
    unit_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    total_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    order = db.relationship("Order", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "vendor_id": self.vendor_id,
            "product_name": self.product_name,
            "unit_price": float(self.unit_price or 0),
            "quantity": int(self.quantity or 0),
            "total_price": float(self.total_price or 0),
        }


class OrderFulfillment(db.Model):
    """One vendor's share of an order moving through fulfilled -> shipped -> delivered."""

    __tablename__ = "order_fulfillments"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)

    status = db.Column(db.String(16), nullable=False, default="fulfilled")  # fulfilled | shipped | delivered
    tracking_number = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    fulfilled_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    fulfilled_at = db.Column(db.DateTime, nullable=True)
    shipped_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    shipped_at = db.Column(db.DateTime, nullable=True)
    delivered_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("order_id", "vendor_id", name="uq_order_fulfillments_order_vendor"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "vendor_id": self.vendor_id,
            "status": self.status,
            "tracking_number": self.tracking_number or "",
            "notes": self.notes or "",
            "fulfilled_at": self.fulfilled_at.isoformat() if self.fulfilled_at else None,
            "shipped_at": self.shipped_at.isoformat() if self.shipped_at else None,
            "delivered_at": self.delivered_at.isoformat() if self.delivered_at else None,
        }
