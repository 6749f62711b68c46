from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from ghbuys.auth import vendor_required
from ghbuys.extensions import db
from ghbuys.models import Product
from ghbuys.schemas import OrderFulfillmentRequest, ProductCreate, parse_or_400
from ghbuys.services.orders import update_fulfillment, vendor_dashboard, vendor_orders
from ghbuys.utils.ghana import to_money

vendor_bp = Blueprint("vendor_bp", __name__, url_prefix="/api/vendor")


@vendor_bp.get("/dashboard")
@vendor_required
def dashboard(vendor):
    return jsonify(vendor_dashboard(vendor))


@vendor_bp.get("/orders")
@vendor_required
def orders(vendor):
    return jsonify(vendor_orders(
        vendor.id,
        status=(request.args.get("status") or "").strip() or None,
        payment_status=(request.args.get("payment_status") or "").strip() or None,
        page=request.args.get("page", 1, type=int),
        limit=request.args.get("limit", 20, type=int),
    ))


@vendor_bp.patch("/orders")
@vendor_required
def update_order(vendor):
    data = parse_or_400(OrderFulfillmentRequest, request.get_json(silent=True))
    return jsonify({"order": update_fulfillment(vendor, data, user_id=current_user.id)})


@vendor_bp.get("/products")
@vendor_required
def list_products(vendor):
    q = Product.query.filter_by(vendor_id=vendor.id)
    status = (request.args.get("status") or "").strip()
    if status:
        q = q.filter(Product.status == status)
    rows = q.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return jsonify({"items": [p.to_dict() for p in rows]})


@vendor_bp.post("/products")
@vendor_required
def create_product(vendor):
    data = parse_or_400(ProductCreate, request.get_json(silent=True))
    p = Product(
        vendor_id=vendor.id,
        name=data.name.strip(),
        description=data.description,
        category=data.category,
        subcategory=data.subcategory,
        price=to_money(data.price),
        currency=current_app.config.get("STORE_CURRENCY", "GHS"),
        stock=data.stock,
        status=data.status,
    )
    db.session.add(p)
    db.session.commit()
    current_app.logger.info("Vendor %s added product %s", vendor.handle, p.id)
    return jsonify({"product": p.to_dict()}), 201
