"""
Tests for account registration, login and bearer token resolution.
"""
from ghbuys.models import User


def test_register_then_login(client) -> None:
    res = client.post("/api/auth/register", json={
        "email": "Yaw@Example.com",
        "password": "s3cure-password",
        "first_name": "Yaw",
        "phone": "0241234567",
    })
    assert res.status_code == 201
    body = res.get_json()
    assert body["user"]["email"] == "yaw@example.com"
    assert body["user"]["role"] == "customer"
    assert body["token"]

    login = client.post("/api/auth/login", json={"email": "yaw@example.com", "password": "s3cure-password"})
    assert login.status_code == 200

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login.get_json()['token']}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["first_name"] == "Yaw"


def test_duplicate_registration(client) -> None:
    payload = {"email": "yaw@example.com", "password": "s3cure-password"}
    assert client.post("/api/auth/register", json=payload).status_code == 201
    assert client.post("/api/auth/register", json=payload).status_code == 409
    assert User.query.count() == 1


def test_short_password(client) -> None:
    res = client.post("/api/auth/register", json={"email": "yaw@example.com", "password": "short"})
    assert res.status_code == 400
    assert res.get_json()["details"][0]["field"] == "password"


def test_wrong_password(client, admin_user) -> None:
    res = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope-nope"})
    assert res.status_code == 401
    assert res.get_json() == {"error": "Invalid credentials"}


def test_me_requires_a_valid_token(client) -> None:
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"}).status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Token abc"}).status_code == 401
