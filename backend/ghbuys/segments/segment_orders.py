from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user

from ghbuys.errors import NotFound
from ghbuys.schemas import OrderCreateRequest, parse_or_400
from ghbuys.services.orders import can_view_order, create_order, get_order_by_number

orders_bp = Blueprint("orders_bp", __name__, url_prefix="/api/orders")


@orders_bp.post("")
def create():
    data = parse_or_400(OrderCreateRequest, request.get_json(silent=True))
    order = create_order(data)
    return jsonify({"order": order.to_dict()}), 201


@orders_bp.get("/<order_number>")
def detail(order_number: str):
    order = get_order_by_number(order_number)
    # order numbers are guessable; without a matching email or login the order does not exist
    if not can_view_order(order, current_user, request.args.get("email")):
        raise NotFound("Order not found")
    return jsonify({"order": order.to_dict()})
