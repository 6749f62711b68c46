from __future__ import annotations

from flask import Blueprint, jsonify, request

from ghbuys.schemas import VendorRegistration, parse_or_400
from ghbuys.services.marketplace import (
    NEXT_STEPS,
    get_verified_vendor,
    list_verified_vendors,
    register_vendor,
)

vendors_bp = Blueprint("vendors_bp", __name__, url_prefix="/api/vendors")


@vendors_bp.post("/register")
def register():
    data = parse_or_400(VendorRegistration, request.get_json(silent=True))
    vendor = register_vendor(data)
    summary = vendor.summary()
    return jsonify({
        "message": "Vendor registration submitted successfully",
        "vendor": summary,
        "next_steps": list(NEXT_STEPS),
    }), 201


@vendors_bp.get("")
def list_vendors():
    vendors = list_verified_vendors(
        region=(request.args.get("region") or "").strip() or None,
        category=(request.args.get("category") or "").strip() or None,
        limit=request.args.get("limit", 20, type=int),
        offset=request.args.get("offset", 0, type=int),
    )
    return jsonify({"items": [v.to_dict() for v in vendors], "count": len(vendors)})


@vendors_bp.get("/<int:vendor_id>")
def vendor_detail(vendor_id: int):
    vendor, product_count = get_verified_vendor(vendor_id)
    d = vendor.to_dict()
    d["product_count"] = product_count
    return jsonify({"vendor": d})
