from datetime import timedelta

import pytest

from service_manager.security import create_access_token, decode_access_token, get_password_hash, verify_password


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_garbage_hash():
    assert not verify_password("secret123", "not-a-hash")
    assert not verify_password("secret123", "")


def test_access_token_claims():
    token = create_access_token("user-1", "a@example.com")
    claims = decode_access_token(token)
    assert claims["sub"] == "user-1"
    assert claims["email"] == "a@example.com"


def test_expired_token_is_rejected():
    token = create_access_token("user-1", "a@example.com", expires_delta=timedelta(seconds=-10))
    with pytest.raises(ValueError):
        decode_access_token(token)


@pytest.mark.asyncio
async def test_register_and_login(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "Alice@Example.com", "password": "secret123", "name": "Alice"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "alice@example.com"
    assert body["token"]
    assert "password_hash" not in body["user"]

    response = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["id"] == body["user"]["id"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client, register):
    await register()
    response = await client.post(
        "/api/auth/register",
        json={"email": "alice@example.com", "password": "secret123", "name": "Other"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}


@pytest.mark.asyncio
async def test_register_short_password_is_validation_error(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "c@example.com", "password": "123", "name": "C"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, register):
    await register()
    response = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "nope-nope"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_missing_token_is_401(client):
    response = await client.get("/api/services")
    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


@pytest.mark.asyncio
async def test_bad_token_is_403(client):
    response = await client.get("/api/services", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 403
    assert response.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_me_hides_password_hash(client, auth_headers):
    response = await client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "alice@example.com"
    assert "password_hash" not in body
