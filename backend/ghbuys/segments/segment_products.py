from __future__ import annotations

from flask import Blueprint, jsonify, request

from ghbuys.errors import NotFound
from ghbuys.models import Product, Vendor
from ghbuys.reference_data import CATEGORIES, REGIONS

products_bp = Blueprint("products_bp", __name__, url_prefix="/api")


def _public_products():
    return (
        Product.query.join(Vendor, Vendor.id == Product.vendor_id)
        .filter(Product.status == "published")
        .filter(Vendor.is_verified.is_(True), Vendor.is_active.is_(True))
    )


@products_bp.get("/products")
def list_products():
    q = _public_products()

    category = (request.args.get("category") or "").strip()
    if category:
        q = q.filter(Product.category == category)
    vendor_id = request.args.get("vendor_id", type=int)
    if vendor_id:
        q = q.filter(Product.vendor_id == vendor_id)
    search = (request.args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter((Product.name.ilike(like)) | (Product.description.ilike(like)))

    limit = max(1, min(request.args.get("limit", 20, type=int), 100))
    offset = max(0, request.args.get("offset", 0, type=int))
    total = q.count()
    rows = q.order_by(Product.created_at.desc(), Product.id.desc()).offset(offset).limit(limit).all()

    items = []
    for p in rows:
        d = p.to_dict()
        d["vendor"] = {"id": p.vendor.id, "name": p.vendor.name, "handle": p.vendor.handle}
        items.append(d)
    return jsonify({"items": items, "total": total, "limit": limit, "offset": offset})


@products_bp.get("/products/<int:product_id>")
def product_detail(product_id: int):
    p = _public_products().filter(Product.id == product_id).first()
    if p is None:
        raise NotFound("Product not found")
    d = p.to_dict()
    d["vendor"] = p.vendor.summary()
    return jsonify({"product": d})


@products_bp.get("/categories")
def list_categories():
    return jsonify({"items": [
        {"id": c.id, "name": c.name, "description": c.description, "subcategories": list(c.subcategories)}
        for c in CATEGORIES
    ]})


@products_bp.get("/regions")
def list_regions():
    return jsonify({"items": [r.to_dict() for r in REGIONS]})
