from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ghbuys.extensions import db
from ghbuys.models import Product, User, Vendor, VendorSettings
from ghbuys.reference_data import DEFAULT_BUSINESS_HOURS

DEMO_VENDOR = {
    "handle": "accra-fresh-market",
    "name": "Accra Fresh Market",
    "description": "Fresh groceries delivered across Greater Accra",
    "business_email": "hello@accrafresh.example",
    "business_phone": "0241234567",
    "ghana_business_registration": "CS123456789",
    "region": "Greater Accra",
    "city": "Accra",
    "address": "12 Oxford Street, Osu",
    "primary_category": "groceries",
    "bank_name": "GCB Bank",
    "account_number": "1234567890123",
    "account_name": "Accra Fresh Market Ltd",
    "mobile_money_number": "0241234567",
    "mobile_money_provider": "mtn",
    "contact_first_name": "Ama",
    "contact_last_name": "Mensah",
}

DEMO_PRODUCTS = [
    ("Local Rice 5kg", "groceries", "Rice & Grains", Decimal("85.00"), 40),
    ("Fresh Plantain (bunch)", "groceries", "Fresh Produce", Decimal("25.00"), 60),
    ("Palm Oil 1L", "groceries", "Cooking Oils", Decimal("32.50"), 25),
]


def seed_admin(email: str | None, password: str | None) -> tuple[User | None, bool]:
    """Create the admin account once. Returns (user, created)."""
    if not email or not password:
        return None, False
    user = User.query.filter_by(email=email.lower()).first()
    if user:
        return user, False
    user = User(email=email.lower(), role="admin", first_name="Admin")
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user, True


def seed_demo_catalog() -> dict:
    vendor = Vendor.query.filter_by(handle=DEMO_VENDOR["handle"]).first()
    created = vendor is None
    if created:
        now = datetime.utcnow()
        vendor = Vendor(
            **DEMO_VENDOR,
            verification_status="approved",
            is_verified=True,
            verified_at=now,
            is_active=True,
            terms_accepted_at=now,
            privacy_accepted_at=now,
        )
        db.session.add(vendor)
        db.session.flush()
        db.session.add(VendorSettings(
            vendor_id=vendor.id,
            store_name=vendor.name,
            business_hours=dict(DEFAULT_BUSINESS_HOURS),
            offers_delivery=True,
            delivery_zones=["Accra", "Tema"],
            delivery_fee=Decimal("5.00"),
            accepted_payment_methods=["card", "mobile_money", "bank_transfer"],
        ))
        for name, category, sub, price, stock in DEMO_PRODUCTS:
            db.session.add(Product(
                vendor_id=vendor.id,
                name=name,
                category=category,
                subcategory=sub,
                price=price,
                stock=stock,
                status="published",
            ))
        db.session.commit()
    return {"vendor_id": vendor.id, "created": created, "products": Product.query.filter_by(vendor_id=vendor.id).count()}
