from datetime import datetime, timedelta, timezone

import jwt

import config
import token_service


def test_login_returns_signed_token(client, customer):
    response = client.post("/api/auth/login", json={"email": customer.email, "password": "Secret123!"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] == config.JWT_EXPIRATION_MINUTES * 60
    assert body["refresh_token"]
    assert body["user"]["email"] == customer.email

    claims = token_service.decode_token(body["access_token"])
    assert claims["uid"] == customer.id
    assert claims["sub"] == str(customer.id)
    assert claims["role"] == "Customer"
    assert claims["iss"] == config.JWT_ISSUER
    assert claims["aud"] == config.JWT_AUDIENCE


def test_admin_token_carries_admin_role(client, admin):
    response = client.post("/api/auth/login", json={"email": admin.email, "password": "Secret123!"})
    assert token_service.decode_token(response.json()["access_token"])["role"] == "Admin"


def test_login_missing_fields(client):
    response = client.post("/api/auth/login", json={"email": "", "password": ""})
    assert response.status_code == 400


def test_login_wrong_password(client, customer):
    response = client.post("/api/auth/login", json={"email": customer.email, "password": "nope-nope"})
    assert response.status_code == 401


def test_login_unknown_or_inactive_user(client, make_user):
    make_user("inactive@example.com", is_active=False)
    assert client.post(
        "/api/auth/login", json={"email": "inactive@example.com", "password": "Secret123!"}
    ).status_code == 401
    assert client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "Secret123!"}
    ).status_code == 401


def test_refresh_tokens_are_random():
    assert token_service.generate_refresh_token() != token_service.generate_refresh_token()


def make_token(customer, **overrides):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(customer.id),
        "uid": customer.id,
        "role": "Customer",
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(minutes=5),
    }
    payload.update(overrides)
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm="HS256")


def test_expired_token_rejected(client, customer):
    token = make_token(customer, exp=datetime.now(timezone.utc) - timedelta(minutes=1))
    response = client.get(f"/api/users/{customer.id}", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_wrong_audience_rejected(client, customer):
    token = make_token(customer, aud="SomeoneElse")
    response = client.get(f"/api/users/{customer.id}", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_forged_admin_role_needs_valid_signature(client, customer):
    token = jwt.encode(
        {"uid": customer.id, "role": "Admin", "iss": config.JWT_ISSUER, "aud": config.JWT_AUDIENCE},
        "x" * 40,
        algorithm="HS256",
    )
    response = client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_jwt_settings_valid(monkeypatch):
    assert config.jwt_settings_valid()
    monkeypatch.setattr(config, "JWT_SECRET_KEY", "too-short")
    assert not config.jwt_settings_valid()
