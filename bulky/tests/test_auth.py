"""
Tests for the authentication endpoints and AuthService.

Tests cover:
- Admin and buyer login (success, wrong password, inactive account)
- Buyer registration (duplicate username/email, weak password)
- Refresh token flow and logout revocation
- /me, profile update and password change
- Bearer token rejection (missing, malformed, refresh token used as access token)
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from bulky.app.models.auth import ActivityLog, Admin, Buyer, RefreshToken
from bulky.tests.conftest import TEST_PASSWORD, buyer_headers, make_buyer


async def _login(client: AsyncClient, path: str, email: str, password: str = TEST_PASSWORD):
    return await client.post(path, json={"email": email, "password": password})


# ============================================
# LOGIN
# ============================================

@pytest.mark.asyncio
async def test_admin_login_returns_tokens_and_permissions(client: AsyncClient, staff_admin: Admin):
    response = await _login(client, "/auth/admin/login", "STAFF@bulky.id")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["token_type"] == "Bearer"
    assert data["access_token"] and data["refresh_token"]
    assert data["user"]["email"] == "staff@bulky.id"
    assert data["user"]["role"]["kode"] == "STAFF"
    assert "pesanan:update" in data["user"]["permissions"]
    assert "admin:read" not in data["user"]["permissions"]


@pytest.mark.asyncio
async def test_admin_login_wrong_password_is_logged(
    client: AsyncClient, staff_admin: Admin, test_session
):
    response = await _login(client, "/auth/admin/login", "staff@bulky.id", "Salah12345")
    assert response.status_code == 401
    assert response.json()["detail"] == "email atau password salah"

    result = await test_session.execute(select(ActivityLog).where(ActivityLog.action == "LOGIN_FAILED"))
    assert result.scalars().first() is not None


@pytest.mark.asyncio
async def test_unknown_email_gets_same_message(client: AsyncClient, test_session):
    response = await _login(client, "/auth/buyer/login", "nobody@example.com")
    assert response.status_code == 401
    assert response.json()["detail"] == "email atau password salah"


@pytest.mark.asyncio
async def test_inactive_buyer_cannot_login(client: AsyncClient, test_session):
    await make_buyer(test_session, username="nonaktif", email="off@example.com", is_active=False)
    response = await _login(client, "/auth/buyer/login", "off@example.com")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_buyer_cannot_use_admin_login(client: AsyncClient, test_buyer: Buyer):
    response = await _login(client, "/auth/admin/login", test_buyer.email)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_rate_limited(client: AsyncClient, test_session):
    for _ in range(5):
        await _login(client, "/auth/buyer/login", "nobody@example.com")
    response = await _login(client, "/auth/buyer/login", "nobody@example.com")
    assert response.status_code == 429


# ============================================
# REGISTRATION
# ============================================

@pytest.mark.asyncio
async def test_register_buyer(client: AsyncClient, test_session):
    response = await client.post("/auth/buyer/register", json={
        "nama": "Siti Aminah",
        "username": "siti_a",
        "email": "Siti@Example.com",
        "password": "Rahasia123",
    })
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "siti@example.com"
    assert data["is_verified"] is False
    assert "password" not in data

    login = await _login(client, "/auth/buyer/login", "siti@example.com", "Rahasia123")
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient, test_buyer: Buyer):
    response = await client.post("/auth/buyer/register", json={
        "nama": "Budi Lain",
        "username": test_buyer.username.upper(),
        "email": "lain@example.com",
        "password": "Rahasia123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_buyer: Buyer):
    response = await client.post("/auth/buyer/register", json={
        "nama": "Budi Lain",
        "username": "budi_lain",
        "email": test_buyer.email,
        "password": "Rahasia123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient, test_session):
    response = await client.post("/auth/buyer/register", json={
        "nama": "Lemah",
        "username": "lemah",
        "email": "lemah@example.com",
        "password": "abc",
    })
    assert response.status_code == 400
    assert "minimal 8 karakter" in response.json()["detail"]


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient, test_session):
    response = await client.post("/auth/buyer/register", json={
        "nama": "Salah Email",
        "username": "salahemail",
        "email": "bukan-email",
        "password": "Rahasia123",
    })
    assert response.status_code == 422


# ============================================
# REFRESH AND LOGOUT
# ============================================

@pytest.mark.asyncio
async def test_refresh_returns_new_access_token(client: AsyncClient, test_buyer: Buyer):
    tokens = (await _login(client, "/auth/buyer/login", test_buyer.email)).json()["data"]

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["refresh_token"] == tokens["refresh_token"]
    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, test_buyer: Buyer):
    tokens = (await _login(client, "/auth/buyer/login", test_buyer.email)).json()["data"]
    response = await client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token_cannot_be_used_as_bearer(client: AsyncClient, test_buyer: Buyer):
    tokens = (await _login(client, "/auth/buyer/login", test_buyer.email)).json()["data"]
    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(client: AsyncClient, test_buyer: Buyer, test_session):
    tokens = (await _login(client, "/auth/buyer/login", test_buyer.email)).json()["data"]
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers)
    assert response.status_code == 200

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401

    result = await test_session.execute(select(RefreshToken.is_revoked))
    assert result.scalars().all() == [True]


# ============================================
# BEARER TOKEN
# ============================================

@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_with_malformed_header(client: AsyncClient):
    response = await client.get("/auth/me", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_admin_flags_super_admin(client: AsyncClient, super_admin: Admin, super_headers: dict):
    response = await client.get("/auth/me", headers=super_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["is_super_admin"] is True
    assert data["role"]["kode"] == "SUPER_ADMIN"


# ============================================
# PROFILE AND PASSWORD
# ============================================

@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, test_buyer: Buyer, buyer_auth: dict):
    response = await client.put("/auth/profile", json={"nama": "Budi Baru", "telepon": "0899"}, headers=buyer_auth)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["nama"] == "Budi Baru"
    assert data["telepon"] == "0899"


@pytest.mark.asyncio
async def test_change_password_revokes_sessions(client: AsyncClient, test_buyer: Buyer):
    tokens = (await _login(client, "/auth/buyer/login", test_buyer.email)).json()["data"]
    headers = buyer_headers(test_buyer)

    response = await client.put("/auth/change-password", json={
        "current_password": TEST_PASSWORD,
        "new_password": "PasswordBaru9",
    }, headers=headers)
    assert response.status_code == 200

    refreshed = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 401

    old = await _login(client, "/auth/buyer/login", test_buyer.email)
    assert old.status_code == 401
    new = await _login(client, "/auth/buyer/login", test_buyer.email, "PasswordBaru9")
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient, test_buyer: Buyer, buyer_auth: dict):
    response = await client.put("/auth/change-password", json={
        "current_password": "Salah12345",
        "new_password": "PasswordBaru9",
    }, headers=buyer_auth)
    assert response.status_code == 400
    assert response.json()["detail"] == "password lama salah"
