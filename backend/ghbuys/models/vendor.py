from datetime import datetime

from ghbuys.extensions import db


def _money(v) -> float:
    return float(v or 0)


class Vendor(db.Model):
    __tablename__ = "vendors"

    id = db.Column(db.Integer, primary_key=True)
    handle = db.Column(db.String(80), nullable=False, unique=True, index=True)
    name = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=True)
    logo_url = db.Column(db.String(255), nullable=True)

    business_email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    business_phone = db.Column(db.String(32), nullable=False)

    # Ghana business registration
    ghana_business_registration = db.Column(db.String(64), nullable=False)
    tin_number = db.Column(db.String(32), nullable=True)
    vat_number = db.Column(db.String(32), nullable=True)

    # Location
    region = db.Column(db.String(64), nullable=False, default="Greater Accra", index=True)
    city = db.Column(db.String(64), nullable=False, default="Accra")
    address = db.Column(db.String(255), nullable=False)
    gps_coordinates = db.Column(db.String(32), nullable=True)

    primary_category = db.Column(db.String(32), nullable=False, index=True)
    secondary_categories = db.Column(db.JSON, nullable=True)

    # Payout destination: bank account and/or mobile money wallet
    bank_name = db.Column(db.String(120), nullable=True)
    account_number = db.Column(db.String(32), nullable=True)
    account_name = db.Column(db.String(160), nullable=True)
    mobile_money_number = db.Column(db.String(32), nullable=True)
    mobile_money_provider = db.Column(db.String(16), nullable=True)  # mtn | vodafone | airtel_tigo

    # Contact person captured at registration
    contact_first_name = db.Column(db.String(80), nullable=False, default="")
    contact_last_name = db.Column(db.String(80), nullable=False, default="")
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    contact_role = db.Column(db.String(64), nullable=False, default="Owner")

    # Verification
    verification_status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    # pending | approved | rejected | suspended
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    verified_at = db.Column(db.DateTime, nullable=True)
    verified_by = db.Column(db.Integer, nullable=True)
    verification_notes = db.Column(db.Text, nullable=True)
    verification_requirements = db.Column(db.JSON, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=False)

    # Metrics
    rating = db.Column(db.Float, nullable=False, default=0.0)
    total_sales = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_orders = db.Column(db.Integer, nullable=False, default=0)

    registration_source = db.Column(db.String(32), nullable=False, default="web")
    terms_accepted_at = db.Column(db.DateTime, nullable=True)
    privacy_accepted_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    settings = db.relationship("VendorSettings", uselist=False, back_populates="vendor")

    @property
    def has_mobile_money_payout(self) -> bool:
        return bool(self.mobile_money_number and self.mobile_money_provider)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "handle": self.handle,
            "name": self.name,
            "verification_status": self.verification_status,
            "is_verified": bool(self.is_verified),
            "is_active": bool(self.is_active),
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "region": self.region,
            "city": self.city,
            "primary_category": self.primary_category,
        }

    def to_dict(self) -> dict:
        d = self.summary()
        d.update({
            "description": self.description or "",
            "logo_url": self.logo_url or "",
            "business_email": self.business_email,
            "business_phone": self.business_phone,
            "address": self.address,
            "gps_coordinates": self.gps_coordinates or "",
            "secondary_categories": list(self.secondary_categories or []),
            "rating": float(self.rating or 0.0),
            "total_sales": _money(self.total_sales),
            "total_orders": int(self.total_orders or 0),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        })
        return d


class VendorAdmin(db.Model):
    __tablename__ = "vendor_admins"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    role = db.Column(db.String(16), nullable=False, default="staff")  # owner | manager | staff

    manage_products = db.Column(db.Boolean, nullable=False, default=False)
    manage_orders = db.Column(db.Boolean, nullable=False, default=False)
    view_analytics = db.Column(db.Boolean, nullable=False, default=False)
    manage_settings = db.Column(db.Boolean, nullable=False, default=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint("vendor_id", "user_id", name="uq_vendor_admin_vendor_user"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "user_id": self.user_id,
            "role": self.role,
            "permissions": {
                "manage_products": bool(self.manage_products),
                "manage_orders": bool(self.manage_orders),
                "view_analytics": bool(self.view_analytics),
                "manage_settings": bool(self.manage_settings),
            },
            "is_active": bool(self.is_active),
        }


class VendorSettings(db.Model):
    __tablename__ = "vendor_settings"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, unique=True)

    store_name = db.Column(db.String(160), nullable=False)
    store_description = db.Column(db.Text, nullable=True)
    store_banner_url = db.Column(db.String(255), nullable=True)
    store_theme_color = db.Column(db.String(16), nullable=False, default="#1a202c")

    # {"monday": {"open": "08:00", "close": "18:00", "closed": false}, ...}
    business_hours = db.Column(db.JSON, nullable=False)

    offers_delivery = db.Column(db.Boolean, nullable=False, default=True)
    delivery_zones = db.Column(db.JSON, nullable=False)
    delivery_fee = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    free_delivery_threshold = db.Column(db.Numeric(10, 2), nullable=True)

    accepted_payment_methods = db.Column(db.JSON, nullable=False)

    email_notifications = db.Column(db.Boolean, nullable=False, default=True)
    sms_notifications = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = db.relationship("Vendor", back_populates="settings")

    def to_dict(self) -> dict:
        return {
            "vendor_id": self.vendor_id,
            "store_name": self.store_name,
            "store_description": self.store_description or "",
            "store_theme_color": self.store_theme_color,
            "business_hours": dict(self.business_hours or {}),
            "offers_delivery": bool(self.offers_delivery),
            "delivery_zones": list(self.delivery_zones or []),
            "delivery_fee": _money(self.delivery_fee),
            "free_delivery_threshold": _money(self.free_delivery_threshold) if self.free_delivery_threshold is not None else None,
            "accepted_payment_methods": list(self.accepted_payment_methods or []),
            "email_notifications": bool(self.email_notifications),
            "sms_notifications": bool(self.sms_notifications),
        }
