"""Tests for registration, login, bearer auth and password changes."""

import inspect
from datetime import timedelta

from app.api import auth
from app.core.security import create_access_token, decode_access_token, hash_password, verify_password

API = "/api"


def _register(client, email="priya@example.com", user_type="customer", password="password123"):
    return client.post(f"{API}/auth/register", json={
        "email": email,
        "password": password,
        "name": "Priya Patel",
        "userType": user_type,
        "phone": "+91-9876543211",
        "pincode": "400002",
    })


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_password_hashing_roundtrip():
    hashed = hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_expired_token_is_rejected():
    token = create_access_token("user-1", "customer", expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None
    assert decode_access_token("not-a-jwt") is None


def test_register_customer_creates_empty_profile(client):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"]["userType"] == "customer"
    assert "passwordHash" not in body["user"]

    profile = client.get(f"{API}/customers/{body['user']['id']}/profile").json()
    assert profile["bCoinBalance"] in ("0.00", "0")
    assert profile["preferredPincode"] == "400002"


def test_register_business_has_no_customer_profile(client):
    body = _register(client, email="shop@example.com", user_type="business").json()

    response = client.get(f"{API}/customers/{body['user']['id']}/profile")
    assert response.status_code == 404


def test_duplicate_email_is_409_case_insensitive(client):
    _register(client, email="priya@example.com")
    response = _register(client, email="Priya@Example.com")

    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_TAKEN"


def test_register_validation(client):
    assert _register(client, email="not-an-email").status_code == 400
    assert _register(client, password="123").status_code == 400
    response = client.post(f"{API}/auth/register", json={
        "email": "x@example.com", "password": "password123", "name": "X", "userType": "admin",
    })
    assert response.status_code == 400


def test_login(client):
    _register(client)

    ok = client.post(f"{API}/auth/login", json={"email": "PRIYA@example.com", "password": "password123"})
    bad = client.post(f"{API}/auth/login", json={"email": "priya@example.com", "password": "nope"})
    unknown = client.post(f"{API}/auth/login", json={"email": "ghost@example.com", "password": "x"})

    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "priya@example.com"
    assert bad.status_code == 401
    assert bad.json()["code"] == "UNAUTHORIZED"
    assert unknown.status_code == 401


def test_me_requires_valid_bearer(client):
    body = _register(client).json()

    me = client.get(f"{API}/users/me", headers=_auth(body["token"]))
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]

    assert client.get(f"{API}/users/me").status_code == 401
    assert client.get(f"{API}/users/me", headers=_auth("garbage")).status_code == 401


def test_get_user_by_id(client):
    body = _register(client).json()

    assert client.get(f"{API}/users/{body['user']['id']}").json()["name"] == "Priya Patel"
    assert client.get(f"{API}/users/unknown").status_code == 404


def test_change_password(client):
    token = _register(client).json()["token"]

    wrong = client.post(
        f"{API}/auth/change-password",
        json={"currentPassword": "nope", "newPassword": "newpass456"},
        headers=_auth(token),
    )
    assert wrong.status_code == 401

    changed = client.post(
        f"{API}/auth/change-password",
        json={"currentPassword": "password123", "newPassword": "newpass456"},
        headers=_auth(token),
    )
    assert changed.status_code == 200

    old = client.post(f"{API}/auth/login", json={"email": "priya@example.com", "password": "password123"})
    new = client.post(f"{API}/auth/login", json={"email": "priya@example.com", "password": "newpass456"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_change_password_requires_auth(client):
    response = client.post(
        f"{API}/auth/change-password",
        json={"currentPassword": "a", "newPassword": "bbbbbbbb"},
    )
    assert response.status_code == 401


def test_password_routes_run_in_threadpool():
    # bcrypt is blocking; sync handlers keep it off the event loop.
    for handler in (auth.register, auth.login, auth.change_password):
        assert not inspect.iscoroutinefunction(handler)
