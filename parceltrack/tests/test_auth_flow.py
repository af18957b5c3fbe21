"""
Integration tests for Authentication Flow.

Verifies Register -> Login -> Me -> Logout and the short ID login alias.
"""

import pytest

from conftest import auth, register


@pytest.mark.asyncio
async def test_register_assigns_short_id(client):
    token, user = await register(client, "Sam Sender", "Sam@Parcels.io")
    
    assert token
    assert user["email"] == "sam@parcels.io"
    assert user["role"] == "sender"
    assert user["is_blocked"] is False
    assert len(user["short_id"]) == 8
    assert "hashed_password" not in user


@pytest.mark.asyncio
async def test_register_defaults_to_sender(client):
    response = await client.post("/v1/auth/register", json={
        "name": "No Role",
        "email": "norole@parcels.io",
        "password": "password123",
    })
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "sender"


@pytest.mark.asyncio
async def test_admin_cannot_self_register(client):
    response = await client.post("/v1/auth/register", json={
        "name": "Mallory",
        "email": "mallory@parcels.io",
        "password": "password123",
        "role": "admin",
    })
    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_PERM_001"


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client):
    await register(client, "Sam", "sam@parcels.io")
    
    response = await client.post("/v1/auth/register", json={
        "name": "Other Sam",
        "email": "SAM@parcels.io",
        "password": "password123",
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Email already in use"


@pytest.mark.asyncio
async def test_register_validation(client):
    response = await client.post("/v1/auth/register", json={
        "name": "Shorty",
        "email": "shorty@parcels.io",
        "password": "123",
    })
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_register_without_short_id_when_exhausted(client, mocker):
    mocker.patch(
        "parceltrack.app.repositories.user_repository.UserRepository.short_id_exists",
        new=mocker.AsyncMock(return_value=True),
    )
    
    token, user = await register(client, "Unlucky", "unlucky@parcels.io")
    
    assert token
    assert user["short_id"] is None


@pytest.mark.asyncio
async def test_login_by_email_and_short_id(client):
    _, user = await register(client, "Rita", "rita@parcels.io", "receiver")
    
    # TEST 1: email is case-insensitive
    response = await client.post("/v1/auth/login", json={"email": "RITA@parcels.io", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == user["id"]
    
    # TEST 2: short ID works as a login alias
    response = await client.post("/v1/auth/login", json={"email": user["short_id"], "password": "password123"})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_wrong_credentials(client):
    await register(client, "Rita", "rita@parcels.io", "receiver")
    
    response = await client.post("/v1/auth/login", json={"email": "rita@parcels.io", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"
    
    response = await client.post("/v1/auth/login", json={"email": "ghost@parcels.io", "password": "password123"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_and_logout(client):
    token, user = await register(client, "Sam", "sam@parcels.io")
    
    response = await client.get("/v1/auth/me", headers=auth(token))
    assert response.status_code == 200
    assert response.json()["id"] == user["id"]
    
    response = await client.post("/v1/auth/logout", headers=auth(token))
    assert response.status_code == 200
    
    # Revoked token is rejected from now on
    response = await client.get("/v1/auth/me", headers=auth(token))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_protected_route_requires_token(client):
    response = await client.get("/v1/auth/me")
    assert response.status_code in (401, 403)
    
    response = await client.get("/v1/auth/me", headers=auth("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_UNAUTHORIZED"


@pytest.mark.asyncio
async def test_health(client, mocker):
    mocker.patch("parceltrack.app.main.ping_redis", new=mocker.AsyncMock(return_value=True))
    
    response = await client.get("/health")
    
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "up"
    assert "X-Correlation-ID" in response.headers


@pytest.mark.asyncio
async def test_register_rejects_password_over_72_bytes(client):
    # 40 characters, 80 bytes
    response = await client.post("/v1/auth/register", json={
        "name": "Zoé",
        "email": "zoe@parcels.io",
        "password": "é" * 40,
    })
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"
    
    # 36 two-byte characters fit exactly
    response = await client.post("/v1/auth/register", json={
        "name": "Zoé",
        "email": "zoe@parcels.io",
        "password": "é" * 36,
    })
    assert response.status_code == 201
    
    response = await client.post("/v1/auth/login", json={"email": "zoe@parcels.io", "password": "é" * 36})
    assert response.status_code == 200


def test_hashing_refuses_over_long_password():
    from parceltrack.app.core.exceptions import ValidationError
    from parceltrack.app.core.security import get_password_hash
    
    with pytest.raises(ValidationError):
        get_password_hash("é" * 37, rounds=4)


@pytest.mark.asyncio
async def test_health_pings_configured_redis(client, mock_redis):
    response = await client.get("/health")
    assert response.json()["redis"] == "up"
    
    await mock_redis.aclose()
    
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["redis"] == "down"
