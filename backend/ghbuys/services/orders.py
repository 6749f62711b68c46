from __future__ import annotations

import time
from datetime import datetime, timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from ghbuys.errors import Conflict, Forbidden, NotFound, ValidationFailed
from ghbuys.extensions import db
from ghbuys.models import Order, OrderFulfillment, OrderItem, Product, Vendor, VendorPayout
from ghbuys.schemas import OrderCreateRequest, OrderFulfillmentRequest
from ghbuys.utils.ghana import calculate_total_tax, delivery_fee_for, to_money


def _order_number() -> str:
    ms = int(time.time() * 1000)
    while Order.query.filter_by(order_number=f"GHB{ms}").first() is not None:
        ms += 1
    return f"GHB{ms}"


def create_order(data: OrderCreateRequest) -> Order:
    """Price an order from the catalog and persist it with its line items."""
    cfg = current_app.config

    lines = []
    errors = []
    for idx, item in enumerate(data.items):
        product = db.session.get(Product, item.product_id)
        if product is None or product.status != "published":
            errors.append({"field": f"items.{idx}.product_id", "message": "Product not available"})
            continue
        lines.append((product, item.quantity))
    if errors:
        raise ValidationFailed(errors)

    subtotal = Decimal("0.00")
    for product, qty in lines:
        subtotal += to_money(product.price) * qty

    delivery_fee = delivery_fee_for(data.delivery_region)
    tax_amount = calculate_total_tax(
        subtotal,
        vat=cfg.get("VAT_RATE", 0.125),
        nhil=cfg.get("NHIL_RATE", 0.025),
        getfund=cfg.get("GETFUND_RATE", 0.025),
    )

    order = Order(
        order_number=_order_number(),
        customer_email=str(data.customer_email).lower(),
        customer_phone=data.customer_phone,
        customer_name=data.customer_name,
        subtotal=subtotal,
        tax_amount=tax_amount,
        delivery_fee=delivery_fee,
        total=subtotal + delivery_fee + tax_amount,
        currency=cfg.get("STORE_CURRENCY", "GHS"),
        delivery_region=data.delivery_region,
        delivery_address=data.delivery_address,
        status="pending",
        payment_status="pending",
    )
    db.session.add(order)
    db.session.flush()

    for product, qty in lines:
        unit = to_money(product.price)
        db.session.add(OrderItem(
            order_id=order.id,
            product_id=product.id,
            vendor_id=product.vendor_id,
            product_name=product.name,
            unit_price=unit,
            quantity=qty,
            total_price=unit * qty,
        ))

    db.session.commit()
    current_app.logger.info("Order %s created total=%s", order.order_number, order.total)
    return order


def get_order_by_number(order_number: str) -> Order:
    order = Order.query.filter_by(order_number=order_number).first()
    if order is None:
        raise NotFound("Order not found")
    return order


def can_view_order(order: Order, user, email: str | None = None) -> bool:
    """Admins, vendors with items in the order and the customer may read it."""
    if user is not None and user.is_authenticated:
        if user.is_admin:
            return True
        if user.is_vendor_admin and any(i.vendor_id == user.vendor_id for i in order.items):
            return True
        if (user.email or "").lower() == (order.customer_email or "").lower():
            return True
    return bool(email) and email.strip().lower() == (order.customer_email or "").lower()


def _vendor_view(order: Order, vendor_id: int) -> dict:
    items = [i for i in order.items if i.vendor_id == vendor_id]
    d = order.to_dict(with_items=False)
    d["items"] = [i.to_dict() for i in items]
    d["vendor_subtotal"] = float(sum((to_money(i.total_price) for i in items), Decimal("0.00")))
    fulfillment = OrderFulfillment.query.filter_by(order_id=order.id, vendor_id=vendor_id).first()
    d["fulfillment"] = fulfillment.to_dict() if fulfillment else None
    return d


FULFILLMENT_ACTIONS = ("fulfill", "ship", "deliver")
FULFILLABLE_PAYMENT_STATUSES = ("paid", "partially_refunded")


def _roll_up_status(order: Order) -> None:
    """The order is shipped or delivered once every vendor in it has reached that stage."""
    vendor_ids = {i.vendor_id for i in order.items if i.vendor_id is not None}
    stages = {f.vendor_id: f.status for f in OrderFulfillment.query.filter_by(order_id=order.id)}
    if all(stages.get(v) == "delivered" for v in vendor_ids):
        order.status = "delivered"
    elif all(stages.get(v) in ("shipped", "delivered") for v in vendor_ids):
        order.status = "shipped"
    else:
        order.status = "processing"


def update_fulfillment(vendor: Vendor, data: OrderFulfillmentRequest, *, user_id: int | None = None) -> dict:
    action = data.action.strip().lower()
    if action not in FULFILLMENT_ACTIONS:
        message = f"Unknown action: {data.action}"
        raise ValidationFailed([{"field": "action", "message": message}], message=message)

    order = db.session.get(Order, data.order_id)
    if order is None:
        raise NotFound("Order not found")
    if not any(i.vendor_id == vendor.id for i in order.items):
        raise Forbidden("No items from your store in this order")
    if order.payment_status not in FULFILLABLE_PAYMENT_STATUSES:
        raise Conflict("Only paid orders can be fulfilled")

    row = OrderFulfillment.query.filter_by(order_id=order.id, vendor_id=vendor.id).first()
    now = datetime.utcnow()

    if action == "fulfill":
        if row is not None:
            raise Conflict("Items from your store are already fulfilled")
        row = OrderFulfillment(
            order_id=order.id,
            vendor_id=vendor.id,
            status="fulfilled",
            tracking_number=(data.tracking_number or "").strip() or None,
            notes=data.notes,
            fulfilled_by=user_id,
            fulfilled_at=now,
        )
        db.session.add(row)
    elif action == "ship":
        tracking = (data.tracking_number or "").strip()
        if not tracking:
            message = "tracking_number is required for shipping"
            raise ValidationFailed([{"field": "tracking_number", "message": message}], message=message)
        if row is None or row.status != "fulfilled":
            raise Conflict("Only fulfilled items can be shipped")
        row.status = "shipped"
        row.tracking_number = tracking
        row.shipped_by = user_id
        row.shipped_at = now
        if data.notes:
            row.notes = data.notes
    else:
        if row is None or row.status != "shipped":
            raise Conflict("Only shipped items can be marked delivered")
        row.status = "delivered"
        row.delivered_at = now

    db.session.flush()
    _roll_up_status(order)
    db.session.commit()
    current_app.logger.info("Vendor %s %s order %s; order is %s", vendor.handle, action, order.order_number, order.status)
    return _vendor_view(order, vendor.id)


def vendor_orders(vendor_id: int, *, status: str | None = None, payment_status: str | None = None, page: int = 1, limit: int = 20) -> dict:
    q = (
        Order.query.join(OrderItem, OrderItem.order_id == Order.id)
        .filter(OrderItem.vendor_id == vendor_id)
        .distinct()
    )
    if status:
        q = q.filter(Order.status == status)
    if payment_status:
        q = q.filter(Order.payment_status == payment_status)

    total = q.count()
    page = max(1, page)
    limit = max(1, min(limit, 100))
    rows = q.order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "orders": [_vendor_view(o, vendor_id) for o in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def _revenue_since(vendor_id: int, since: datetime | None) -> tuple[float, int]:
    q = (
        db.session.query(func.coalesce(func.sum(OrderItem.total_price), 0), func.count(func.distinct(Order.id)))
        .select_from(OrderItem)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(OrderItem.vendor_id == vendor_id, Order.payment_status == "paid")
    )
    if since is not None:
        q = q.filter(Order.created_at >= since)
    revenue, count = q.one()
    return float(revenue or 0), int(count or 0)


def vendor_dashboard(vendor: Vendor) -> dict:
    now = datetime.utcnow()
    all_rev, all_cnt = _revenue_since(vendor.id, None)
    d30_rev, d30_cnt = _revenue_since(vendor.id, now - timedelta(days=30))
    d7_rev, d7_cnt = _revenue_since(vendor.id, now - timedelta(days=7))

    pending_orders = (
        Order.query.join(OrderItem, OrderItem.order_id == Order.id)
        .filter(OrderItem.vendor_id == vendor.id, Order.status == "pending")
        .distinct()
        .count()
    )

    products = Product.query.filter_by(vendor_id=vendor.id)
    product_stats = {
        "total": products.count(),
        "published": products.filter(Product.status == "published").count(),
        "draft": products.filter(Product.status == "draft").count(),
        "out_of_stock": products.filter(Product.stock <= 0).count(),
    }

    top = (
        db.session.query(OrderItem.product_id, OrderItem.product_name, func.sum(OrderItem.quantity).label("units"))
        .select_from(OrderItem)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(OrderItem.vendor_id == vendor.id, Order.payment_status == "paid")
        .group_by(OrderItem.product_id, OrderItem.product_name)
        .order_by(func.sum(OrderItem.quantity).desc())
        .limit(5)
        .all()
    )

    payouts = VendorPayout.query.filter_by(vendor_id=vendor.id)
    pending_payout = db.session.query(func.coalesce(func.sum(VendorPayout.amount), 0)).filter(
        VendorPayout.vendor_id == vendor.id, VendorPayout.status == "pending"
    ).scalar()
    paid_out = db.session.query(func.coalesce(func.sum(VendorPayout.amount), 0)).filter(
        VendorPayout.vendor_id == vendor.id, VendorPayout.status == "completed"
    ).scalar()

    recent = (
        Order.query.join(OrderItem, OrderItem.order_id == Order.id)
        .filter(OrderItem.vendor_id == vendor.id)
        .distinct()
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(10)
        .all()
    )

    return {
        "vendor": vendor.to_dict(),
        "settings": vendor.settings.to_dict() if vendor.settings else None,
        "analytics": {
            "revenue": {"all_time": all_rev, "thirty_days": d30_rev, "seven_days": d7_rev, "currency": "GHS"},
            "orders": {"all_time": all_cnt, "thirty_days": d30_cnt, "seven_days": d7_cnt, "pending": pending_orders},
            "average_order_value": round(d30_rev / d30_cnt, 2) if d30_cnt else 0,
            "top_selling_products": [
                {"product_id": pid, "name": name, "units_sold": int(units or 0)} for pid, name, units in top
            ],
        },
        "recent_orders": [_vendor_view(o, vendor.id) for o in recent],
        "product_stats": product_stats,
        "payout_info": {
            "pending_amount": float(pending_payout or 0),
            "paid_out": float(paid_out or 0),
            "recent_payouts": [p.to_dict() for p in payouts.order_by(VendorPayout.created_at.desc()).limit(10).all()],
            "bank_name": vendor.bank_name or "",
            "account_name": vendor.account_name or "",
            "mobile_money": vendor.has_mobile_money_payout,
        },
    }
