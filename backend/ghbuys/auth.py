from __future__ import annotations

from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import func

from ghbuys.errors import Conflict, Forbidden, Unauthorized
from ghbuys.extensions import db, login_manager
from ghbuys.models import User, Vendor
from ghbuys.schemas import LoginRequest, RegisterRequest, parse_or_400
from ghbuys.utils.jwt_utils import create_access_token, decode_token, get_bearer_token

api_auth = Blueprint("api_auth", __name__, url_prefix="/api/auth")


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve `Authorization: Bearer <jwt>` to a user for @login_required."""
    token = get_bearer_token(req.headers.get("Authorization", ""))
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify({"error": "Authentication required"}), 401


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized("Authentication required")
        if not current_user.is_admin:
            raise Forbidden("Admin access required")
        return fn(*args, **kwargs)

    return wrapper


def vendor_required(fn):
    """Pass the caller's active vendor to the view as `vendor`."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized("Authentication required")
        if not current_user.is_vendor_admin:
            raise Forbidden("Only vendor admins can access this endpoint")
        vendor = db.session.get(Vendor, current_user.vendor_id)
        if vendor is None or not vendor.is_active:
            raise Forbidden("Vendor account is not active")
        return fn(*args, vendor=vendor, **kwargs)

    return wrapper


@api_auth.post("/register")
def api_register():
    data = parse_or_400(RegisterRequest, request.get_json(silent=True))
    email = str(data.email).lower()
    if User.query.filter(func.lower(User.email) == email).first():
        raise Conflict("An account with this email already exists")

    user = User(
        email=email,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role="customer",
    )
    user.set_password(data.password)
    db.session.add(user)
    db.session.commit()

    token = create_access_token(user.id, role=user.role)
    return jsonify({"token": token, "user": user.to_dict()}), 201


@api_auth.post("/login")
def api_login():
    data = parse_or_400(LoginRequest, request.get_json(silent=True))
    user = User.query.filter(func.lower(User.email) == str(data.email).lower()).first()
    if not user or not user.password_hash or not user.check_password(data.password):
        current_app.logger.info("Failed login for %s", data.email)
        raise Unauthorized("Invalid credentials")

    token = create_access_token(user.id, role=user.role)
    return jsonify({"token": token, "user": user.to_dict()})


@api_auth.get("/me")
@login_required
def api_me():
    return jsonify({"user": current_user.to_dict()})
