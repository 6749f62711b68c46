from datetime import datetime

from ghbuys.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(32), nullable=False, index=True)
    subcategory = db.Column(db.String(64), nullable=True)

    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(8), nullable=False, default="GHS")
    stock = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="draft", index=True)  # draft | published | archived

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = db.relationship("Vendor")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "name": self.name,
            "description": self.description or "",
            "category": self.category,
            "subcategory": self.subcategory or "",
            "price": float(self.price or 0),
            "currency": self.currency,
            "stock": int(self.stock or 0),
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
