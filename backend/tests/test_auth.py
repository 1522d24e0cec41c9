"""
Tests for authentication endpoints: registration, login, roles.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_defaults_to_participant(client: AsyncClient):
    """Registration without a role creates a participant; hash never exposed."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "student@campus.example.com",
        "username": "student",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "student@campus.example.com"
    assert data["role"] == "participant"
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_organizer(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "email": "club@campus.example.com",
        "username": "chessclub",
        "password": "securepassword123",
        "role": "organizer",
    })
    assert response.status_code == 201
    assert response.json()["role"] == "organizer"


@pytest.mark.asyncio
async def test_register_admin_rejected(client: AsyncClient):
    """Admin accounts cannot be self-registered."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "sneaky@campus.example.com",
        "username": "sneaky",
        "password": "securepassword123",
        "role": "admin",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, organizer):
    response = await client.post("/api/v1/auth/register", json={
        "email": "organizer@campus.example.com",
        "username": "different",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient, organizer):
    response = await client.post("/api/v1/auth/register", json={
        "email": "different@campus.example.com",
        "username": "organizer",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars returns 422."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "weak@campus.example.com",
        "username": "weakuser",
        "password": "short",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_then_me(client: AsyncClient, organizer):
    """A token from login identifies the user on /me."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "organizer@campus.example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"

    me = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["id"] == organizer.id
    assert me.json()["role"] == "organizer"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, organizer):
    response = await client.post("/api/v1/auth/login", json={
        "email": "organizer@campus.example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@campus.example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
