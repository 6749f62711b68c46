from __future__ import annotations

import re
import secrets
import string
import time
from datetime import datetime

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ghbuys.errors import Conflict, NotFound
from ghbuys.extensions import db
from ghbuys.models import AuditLog, Order, Payment, Product, User, Vendor, VendorAdmin, VendorSettings
from ghbuys.reference_data import DEFAULT_BUSINESS_HOURS
from ghbuys.schemas import VendorRegistration, VendorVerification
from ghbuys.utils.ghana import region_by_code, to_money
from ghbuys.utils.notify import queue_email

PASSWORD_CHARSET = string.ascii_letters + string.digits + "!@#$%^&*"

VENDOR_ADMIN_PERMISSIONS = [
    "products:read",
    "products:write",
    "orders:read",
    "analytics:read",
    "store:manage",
]

NEXT_STEPS = [
    "Check your email for welcome message and verification instructions",
    "Our team will review your application within 2-3 business days",
    "You will receive an email notification once your account is approved",
    "After approval, you can access your vendor dashboard to start adding products",
]


def _base36(n: int) -> str:
    digits = string.digits + string.ascii_lowercase
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(digits[r])
    return "".join(reversed(out))


def generate_vendor_handle(name: str, now_ms: int | None = None) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", (name or "").lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip()[:50]
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{slug}-{_base36(ms)}"


def generate_secure_password(length: int = 12) -> str:
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def _email_context(**extra) -> dict:
    cfg = current_app.config
    ctx = {
        "business_name": cfg.get("BUSINESS_NAME", "GH Buys Marketplace"),
        "support_email": cfg.get("SUPPORT_EMAIL", "support@ghbuys.com"),
        "backend_url": cfg.get("BACKEND_URL", ""),
    }
    ctx.update(extra)
    return ctx


def _queue_safely(**kwargs) -> None:
    try:
        queue_email(**kwargs)
    except Exception:
        # Notification problems never undo the vendor operation itself
        current_app.logger.exception("Failed to queue %s email", kwargs.get("template"))


def _ensure_unique(handle: str, business_email: str) -> None:
    if Vendor.query.filter_by(handle=handle).first():
        raise Conflict("A vendor with similar name already exists")
    if Vendor.query.filter(func.lower(Vendor.business_email) == business_email).first():
        raise Conflict("A vendor with this email already exists")


def register_vendor(data: VendorRegistration) -> Vendor:
    handle = generate_vendor_handle(data.name)
    _ensure_unique(handle, str(data.business_email).lower())

    now = datetime.utcnow()
    contact = data.contact_person
    vendor = Vendor(
        handle=handle,
        name=data.name.strip(),
        description=data.description,
        business_email=str(data.business_email).lower(),
        business_phone=data.business_phone,
        region=data.region,
        city=data.city,
        address=data.address,
        gps_coordinates=data.gps_coordinates,
        ghana_business_registration=data.ghana_business_registration,
        tin_number=data.tin_number,
        vat_number=data.vat_number,
        primary_category=data.primary_category,
        secondary_categories=list(data.secondary_categories or []),
        bank_name=data.bank_name,
        account_number=data.account_number,
        account_name=data.account_name,
        mobile_money_number=data.mobile_money_number,
        mobile_money_provider=data.mobile_money_provider,
        contact_first_name=contact.first_name,
        contact_last_name=contact.last_name,
        contact_email=str(contact.email),
        contact_phone=contact.phone,
        contact_role=contact.role or "Owner",
        verification_status="pending",
        is_verified=False,
        is_active=False,
        registration_source="web",
        terms_accepted_at=now,
        privacy_accepted_at=now,
    )
    db.session.add(vendor)
    try:
        db.session.flush()
    except IntegrityError as e:
        # a concurrent registration took the handle or email after the check above
        db.session.rollback()
        raise Conflict("A vendor with this name or email already exists") from e

    db.session.add(VendorSettings(
        vendor_id=vendor.id,
        store_name=data.store_name,
        store_description=data.store_description,
        business_hours=dict(DEFAULT_BUSINESS_HOURS),
        offers_delivery=bool(data.offers_delivery),
        delivery_zones=list(data.delivery_zones),
        delivery_fee=to_money(data.delivery_fee),
        accepted_payment_methods=["card", "mobile_money", "bank_transfer"],
        email_notifications=True,
        sms_notifications=False,
    ))

    cc = vendor.business_email if vendor.business_email != str(contact.email).lower() else None
    _queue_safely(
        to=str(contact.email),
        cc=cc,
        subject=f"Welcome to {current_app.config.get('BUSINESS_NAME', 'GH Buys Marketplace')} - Application Received",
        template="vendor_welcome",
        context=_email_context(vendor=vendor),
        reference=f"vendor:{vendor.id}:welcome",
    )
    _queue_safely(
        to=current_app.config.get("ADMIN_EMAIL", "admin@ghbuys.com"),
        subject=f"New Vendor Registration: {vendor.name}",
        template="admin_new_vendor",
        context=_email_context(vendor=vendor),
        reference=f"vendor:{vendor.id}:admin",
    )

    db.session.commit()
    current_app.logger.info("New vendor registered: %s (%s)", vendor.name, vendor.handle)
    return vendor


def list_verified_vendors(*, region: str | None = None, category: str | None = None, limit: int = 20, offset: int = 0) -> list[Vendor]:
    q = Vendor.query.filter(Vendor.is_verified.is_(True), Vendor.is_active.is_(True))
    if region:
        r = region_by_code(region)
        q = q.filter(Vendor.region == (r.name if r else region))
    if category:
        q = q.filter(Vendor.primary_category == category)
    q = q.order_by(Vendor.rating.desc(), Vendor.created_at.desc(), Vendor.id.desc())
    return q.offset(max(0, offset)).limit(max(1, min(limit, 100))).all()


def get_verified_vendor(vendor_id: int) -> tuple[Vendor, int]:
    vendor = db.session.get(Vendor, vendor_id)
    if vendor is None or not vendor.is_verified:
        raise NotFound("Vendor not found")
    product_count = Product.query.filter_by(vendor_id=vendor.id, status="published").count()
    return vendor, product_count


def pending_vendors() -> list[Vendor]:
    return Vendor.query.filter_by(verification_status="pending").order_by(Vendor.created_at.asc(), Vendor.id.asc()).all()


def marketplace_stats() -> dict:
    revenue = db.session.query(func.coalesce(func.sum(Payment.amount), 0)).filter(Payment.status == "successful").scalar()
    return {
        "total_vendors": Vendor.query.filter(Vendor.is_verified.is_(True)).count(),
        "pending_vendors": Vendor.query.filter_by(verification_status="pending").count(),
        "total_products": Product.query.filter_by(status="published").count(),
        "total_orders": Order.query.count(),
        "total_revenue": float(revenue or 0),
    }


def _vendor_login(vendor: Vendor) -> User | None:
    """The vendor's existing owner account, or None when one has to be created.

    Any other account on the business email is a conflict; approval never
    takes over a customer or admin login.
    """
    user = User.query.filter(func.lower(User.email) == vendor.business_email.lower()).first()
    if user is None:
        return None
    if user.role != "vendor_admin" or user.vendor_id != vendor.id:
        raise Conflict("A user account with this business email already exists")
    return user


def _approve(vendor: Vendor, user: User | None) -> dict:
    password = generate_secure_password()
    if user is None:
        user = User(email=vendor.business_email)
        db.session.add(user)
    user.first_name = vendor.contact_first_name or ""
    user.last_name = vendor.contact_last_name or ""
    user.phone = vendor.business_phone
    user.role = "vendor_admin"
    user.vendor_id = vendor.id
    user.permissions = list(VENDOR_ADMIN_PERMISSIONS)
    user.set_password(password)
    db.session.flush()

    link = VendorAdmin.query.filter_by(vendor_id=vendor.id, user_id=user.id).first()
    if link is None:
        link = VendorAdmin(vendor_id=vendor.id, user_id=user.id)
        db.session.add(link)
    link.role = "owner"
    link.manage_products = True
    link.manage_orders = True
    link.view_analytics = True
    link.manage_settings = True
    link.is_active = True

    vendor.is_active = True

    credentials = {
        "email": vendor.business_email,
        "password": password,
        "dashboard_url": f"{current_app.config.get('BACKEND_URL', '')}/vendor-dashboard",
    }
    _queue_safely(
        to=vendor.business_email,
        subject=f"Approved! Welcome to {current_app.config.get('BUSINESS_NAME', 'GH Buys Marketplace')}",
        template="vendor_approved",
        context=_email_context(vendor=vendor, credentials=credentials),
        reference=f"vendor:{vendor.id}:approved",
    )
    return {"vendor_admin_user_id": user.id}


def _reject(vendor: Vendor, notes: str, requirements: list[str]) -> None:
    _queue_safely(
        to=vendor.business_email,
        cc=vendor.contact_email if vendor.contact_email and vendor.contact_email != vendor.business_email else None,
        subject="GH Buys Application - Additional Information Required",
        template="vendor_rejected",
        context=_email_context(vendor=vendor, notes=notes, requirements=requirements, header_background="#ef4444"),
        reference=f"vendor:{vendor.id}:rejected",
    )


def _suspend(vendor: Vendor, notes: str) -> None:
    vendor.is_active = False
    _queue_safely(
        to=vendor.business_email,
        subject="GH Buys Account Suspended - Action Required",
        template="vendor_suspended",
        context=_email_context(vendor=vendor, notes=notes, header_background="#f59e0b"),
        reference=f"vendor:{vendor.id}:suspended",
    )


def verify_vendor(vendor_id: int, verification: VendorVerification, *, actor_id: int | None = None) -> tuple[Vendor, dict]:
    vendor = db.session.get(Vendor, vendor_id)
    if vendor is None:
        raise NotFound("Vendor not found")

    status = verification.status
    owner = _vendor_login(vendor) if status == "approved" else None

    vendor.verification_status = status
    vendor.is_verified = status == "approved"
    vendor.verified_at = datetime.utcnow()
    vendor.verified_by = actor_id
    vendor.verification_notes = verification.notes
    vendor.verification_requirements = list(verification.requirements or [])

    extra: dict = {}
    if status == "approved":
        extra = _approve(vendor, owner)
    elif status == "rejected":
        _reject(vendor, verification.notes, list(verification.requirements or []))
    elif status == "suspended":
        _suspend(vendor, verification.notes)

    db.session.add(AuditLog(
        actor_user_id=actor_id,
        action=f"vendor_{status}",
        target_type="vendor",
        target_id=vendor.id,
        meta={"notes": verification.notes, "requirements": list(verification.requirements or [])},
    ))
    db.session.commit()
    current_app.logger.info("Vendor %s verification status updated to: %s", vendor.name, status)
    return vendor, extra
