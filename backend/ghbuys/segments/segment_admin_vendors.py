from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user

from ghbuys.auth import admin_required
from ghbuys.models import WebhookDeadLetter
from ghbuys.schemas import VendorVerification, parse_or_400
from ghbuys.services.marketplace import marketplace_stats, pending_vendors, verify_vendor

admin_bp = Blueprint("admin_bp", __name__, url_prefix="/api/admin")


@admin_bp.get("/stats")
@admin_required
def stats():
    return jsonify(marketplace_stats())


@admin_bp.get("/vendors/pending")
@admin_required
def list_pending():
    rows = pending_vendors()
    items = []
    for v in rows:
        d = v.to_dict()
        d["contact"] = {
            "first_name": v.contact_first_name,
            "last_name": v.contact_last_name,
            "email": v.contact_email or "",
            "phone": v.contact_phone or "",
        }
        d["ghana_business_registration"] = v.ghana_business_registration
        items.append(d)
    return jsonify({"items": items, "count": len(items)})


@admin_bp.post("/vendors/<int:vendor_id>/verify")
@admin_required
def verify(vendor_id: int):
    data = parse_or_400(VendorVerification, request.get_json(silent=True))
    vendor, extra = verify_vendor(vendor_id, data, actor_id=current_user.id)
    body = {
        "message": f"Vendor {data.status} successfully",
        "vendor": vendor.summary(),
    }
    body.update(extra)
    return jsonify(body)


@admin_bp.get("/webhooks/dead-letters")
@admin_required
def dead_letters():
    only_open = (request.args.get("open") or "1").strip() != "0"
    q = WebhookDeadLetter.query
    if only_open:
        q = q.filter(WebhookDeadLetter.resolved_at.is_(None))
    rows = q.order_by(WebhookDeadLetter.created_at.desc()).limit(200).all()
    return jsonify({"items": [r.to_dict() for r in rows]})
