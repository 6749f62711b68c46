"""
Tests for configuration checks and the app factory.
"""
import pytest

from ghbuys import create_app
from ghbuys.config import _normalize_database_url, validate_config


def test_production_requires_gateway_keys() -> None:
    problems = validate_config({"ENV": "production", "SECRET_KEY": "dev-secret"})

    assert "PAYSTACK_SECRET_KEY is required in production" in problems
    assert "PAYSTACK_PUBLIC_KEY is required in production" in problems
    assert "SECRET_KEY must be changed in production" in problems
    assert "PAYSTACK_WEBHOOK_SECRET is not set; all webhooks will be rejected" in problems


def test_complete_config_has_no_problems() -> None:
    assert validate_config({
        "ENV": "prod",
        "SECRET_KEY": "a-long-random-production-secret",
        "PAYSTACK_SECRET_KEY": "sk_live_x",
        "PAYSTACK_PUBLIC_KEY": "pk_live_x",
        "PAYSTACK_WEBHOOK_SECRET": "sk_live_x",
    }) == []
    assert validate_config({"ENV": "dev", "PAYSTACK_WEBHOOK_SECRET": "whsec"}) == []


def test_postgres_scheme_is_normalized() -> None:
    assert _normalize_database_url("postgres://u:p@db/ghbuys") == "postgresql://u:p@db/ghbuys"
    assert _normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_production_refuses_a_weak_secret() -> None:
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app({"ENV": "production", "SECRET_KEY": "short", "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"})


def test_production_requires_a_database_url(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SQLALCHEMY_DATABASE_URI", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        create_app({"ENV": "production", "SECRET_KEY": "a-long-random-production-secret"})


def test_health(client) -> None:
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True, "service": "ghbuys-backend", "env": "test", "db": "ok"}


def test_unknown_routes_are_json(client) -> None:
    res = client.get("/api/nowhere")
    assert res.status_code == 404
    assert res.get_json() == {"error": "Not found"}

    res = client.delete("/api/health")
    assert res.status_code == 405
    assert res.get_json() == {"error": "Method not allowed"}


def test_reference_endpoints(client) -> None:
    regions = client.get("/api/regions").get_json()["items"]
    assert len(regions) == 10
    assert regions[0]["name"] == "Greater Accra"
    categories = client.get("/api/categories").get_json()["items"]
    assert [c["id"] for c in categories] == ["groceries", "electronics", "consumables", "fashion", "home_garden"]
