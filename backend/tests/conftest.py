"""
Pytest configuration and fixtures.
"""
import hashlib
import hmac
import json
from decimal import Decimal
from typing import Any

import pytest
from flask import g
from flask.testing import FlaskClient

from ghbuys import create_app
from ghbuys.extensions import db
from ghbuys.models import Order, OrderItem, Payment, Product, User, Vendor
from ghbuys.utils import paystack_client
from ghbuys.utils.jwt_utils import create_access_token

WEBHOOK_SECRET = "whsec_test_fake_secret"
PAYSTACK_BASE_URL = "https://api.paystack.co"


@pytest.fixture
def app():
    """Fresh application on an in-memory database for every test."""
    app = create_app({
        "TESTING": True,
        "ENV": "test",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SECRET_KEY": "test-secret-key-0123456789",
        "PAYSTACK_SECRET_KEY": "sk_test_fake_key_for_testing",
        "PAYSTACK_PUBLIC_KEY": "pk_test_fake_key_for_testing",
        "PAYSTACK_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "PAYSTACK_BASE_URL": PAYSTACK_BASE_URL,
        "ADMIN_EMAIL": "admin@example.com",
        "BACKEND_URL": "http://testserver",
        "PLATFORM_COMMISSION_RATE": 0.05,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


class ApiClient(FlaskClient):
    def open(self, *args, **kwargs):
        # Requests share the fixture's app context, so drop the user cached by the previous one
        g.pop("_login_user", None)
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    app.test_client_class = ApiClient
    return app.test_client()


class FakeResponse:
    def __init__(self, status_code: int, body: dict):
        self.status_code = status_code
        self._body = body
        self.content = json.dumps(body).encode("utf-8")

    def json(self):
        return self._body


class FakePaystack:
    """Stands in for `requests.request`; replies are registered per (method, path)."""

    def __init__(self):
        self.calls: list[dict] = []
        self.routes: dict[tuple[str, str], tuple[int, dict]] = {}

    def reply(self, method: str, path: str, data: Any = None, *, status: bool = True, message: str = "ok", http_status: int = 200):
        self.routes[(method.upper(), path)] = (http_status, {"status": status, "message": message, "data": data or {}})

    def __call__(self, method, url, headers=None, json=None, timeout=None):
        path = url[len(PAYSTACK_BASE_URL):] if url.startswith(PAYSTACK_BASE_URL) else url
        self.calls.append({"method": method.upper(), "path": path, "json": json, "headers": headers, "timeout": timeout})
        http_status, body = self.routes.get(
            (method.upper(), path),
            (404, {"status": False, "message": "Not stubbed"}),
        )
        return FakeResponse(http_status, body)

    def calls_to(self, path: str) -> list[dict]:
        return [c for c in self.calls if c["path"] == path]


@pytest.fixture
def paystack(monkeypatch) -> FakePaystack:
    fake = FakePaystack()
    monkeypatch.setattr(paystack_client.requests, "request", fake)
    return fake


def sign(raw: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), raw, hashlib.sha512).hexdigest()


def post_webhook(client, payload: dict, *, signature: str | None = None):
    raw = json.dumps(payload).encode("utf-8")
    headers = {"Content-Type": "application/json", "X-Paystack-Signature": signature if signature is not None else sign(raw)}
    return client.post("/api/webhooks/paystack", data=raw, headers=headers)


@pytest.fixture
def webhook(client):
    def _post(payload: dict, **kwargs):
        return post_webhook(client, payload, **kwargs)

    return _post


def _auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, role=user.role)}"}


@pytest.fixture
def auth_for(app):
    """Bearer headers for an arbitrary user."""
    return _auth


@pytest.fixture
def vendor_admin_for(app):
    def _make(vendor: Vendor) -> dict:
        u = User(email=f"owner-{vendor.id}@example.com", role="vendor_admin", vendor_id=vendor.id)
        u.set_password("vendor-password-1")
        db.session.add(u)
        db.session.commit()
        return _auth(u)

    return _make


@pytest.fixture
def admin_user(app) -> User:
    u = User(email="admin@example.com", role="admin", first_name="Admin")
    u.set_password("admin-password-1")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return _auth(admin_user)


@pytest.fixture
def customer_headers(app) -> dict:
    u = User(email="kofi@example.com", role="customer", first_name="Kofi")
    u.set_password("customer-password-1")
    db.session.add(u)
    db.session.commit()
    return _auth(u)


@pytest.fixture
def make_vendor(app):
    counter = {"n": 0}

    def _make(**kw) -> Vendor:
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            handle=f"vendor-{n}",
            name=f"Vendor {n}",
            business_email=f"vendor{n}@example.com",
            business_phone="0241234567",
            ghana_business_registration=f"CS00000{n}",
            region="Greater Accra",
            city="Accra",
            address="1 Independence Avenue",
            primary_category="electronics",
            verification_status="approved",
            is_verified=True,
            is_active=True,
        )
        fields.update(kw)
        v = Vendor(**fields)
        db.session.add(v)
        db.session.commit()
        return v

    return _make


@pytest.fixture
def make_product(app):
    def _make(vendor: Vendor, price="100.00", **kw) -> Product:
        fields = dict(
            vendor_id=vendor.id,
            name=kw.pop("name", f"Product of {vendor.name}"),
            category="electronics",
            price=Decimal(str(price)),
            stock=10,
            status="published",
        )
        fields.update(kw)
        p = Product(**fields)
        db.session.add(p)
        db.session.commit()
        return p

    return _make


@pytest.fixture
def make_order(app):
    """Order with raw line items: each item is (vendor or None, unit_price, quantity)."""

    def _make(lines, *, order_number: str = "GHB1700000000000") -> Order:
        subtotal = sum((Decimal(str(price)) * qty for _v, price, qty in lines), Decimal("0.00"))
        o = Order(
            order_number=order_number,
            customer_email="ama@example.com",
            subtotal=subtotal,
            total=subtotal,
            currency="GHS",
        )
        db.session.add(o)
        db.session.flush()
        for vendor, price, qty in lines:
            db.session.add(OrderItem(
                order_id=o.id,
                vendor_id=vendor.id if vendor is not None else None,
                product_name="Item",
                unit_price=Decimal(str(price)),
                quantity=qty,
                total_price=Decimal(str(price)) * qty,
            ))
        db.session.commit()
        return o

    return _make


@pytest.fixture
def make_payment(app):
    def _make(reference: str = "ghbuys_ref_1", *, order: Order | None = None, amount="100.00", **kw) -> Payment:
        fields = dict(
            reference=reference,
            order_id=order.id if order is not None else None,
            email="ama@example.com",
            amount=Decimal(str(amount)),
            currency="GHS",
            status="pending",
        )
        fields.update(kw)
        p = Payment(**fields)
        db.session.add(p)
        db.session.commit()
        return p

    return _make
