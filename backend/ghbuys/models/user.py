from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ghbuys.extensions import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    first_name = db.Column(db.String(80), nullable=False, default="")
    last_name = db.Column(db.String(80), nullable=False, default="")
    phone = db.Column(db.String(32), nullable=True)

    role = db.Column(db.String(32), nullable=False, default="customer")  # customer | admin | vendor_admin

    # Vendor admins are bound to exactly one vendor
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=True, index=True)
    permissions = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def set_password(self, raw_password: str) -> None:
        self.password_hash = generate_password_hash(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password_hash(self.password_hash, raw_password)

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() == "admin"

    @property
    def is_vendor_admin(self) -> bool:
        return (self.role or "").strip().lower() == "vendor_admin" and self.vendor_id is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name or "",
            "last_name": self.last_name or "",
            "phone": self.phone,
            "role": self.role or "customer",
            "vendor_id": self.vendor_id,
            "permissions": list(self.permissions or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
