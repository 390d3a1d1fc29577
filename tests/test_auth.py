"""
Tests for authentication endpoints (signup, login, me).

These tests verify:
  - Successful signup creates a lead and returns a JWT
  - Duplicate email signup is rejected (409 Conflict)
  - Successful login returns a valid JWT
  - Wrong password and unknown email get the same 401 (anti-enumeration)
  - Short passwords and missing fields are rejected (422)
  - Requests without a valid token are rejected (401)
"""

import pytest


SIGNUP = {
    "email": "newuser@example.com",
    "password": "StrongPass99!",
    "name": "Jane Doe",
}


# ---------------------------------------------------------------------------
# Signup Tests
# ---------------------------------------------------------------------------

class TestSignup:
    """Tests for POST /auth/signup."""

    async def test_signup_success(self, client):
        """A valid signup should return 201 with user_id, roles, and token."""
        response = await client.post("/auth/signup", json=SIGNUP)
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "newuser@example.com"
        assert data["roles"] == ["lead"]
        assert "token" in data
        assert "user_id" in data

    async def test_signup_duplicate_email(self, client):
        """Signing up with an already-registered email should return 409."""
        await client.post("/auth/signup", json=SIGNUP)
        response = await client.post("/auth/signup", json=SIGNUP)
        assert response.status_code == 409
        assert response.json()["error_type"] == "duplicate_email"

    async def test_signup_short_password(self, client):
        response = await client.post("/auth/signup", json={**SIGNUP, "password": "short"})
        assert response.status_code == 422

    async def test_signup_invalid_email(self, client):
        response = await client.post("/auth/signup", json={**SIGNUP, "email": "not-an-email"})
        assert response.status_code == 422

    async def test_signup_missing_name(self, client):
        payload = {k: v for k, v in SIGNUP.items() if k != "name"}
        response = await client.post("/auth/signup", json=payload)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Login Tests
# ---------------------------------------------------------------------------

class TestLogin:
    """Tests for POST /auth/login."""

    async def test_login_success(self, client):
        await client.post("/auth/signup", json=SIGNUP)
        response = await client.post(
            "/auth/login",
            json={"email": SIGNUP["email"], "password": SIGNUP["password"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["token"]

    async def test_login_wrong_password(self, client):
        await client.post("/auth/signup", json=SIGNUP)
        response = await client.post(
            "/auth/login",
            json={"email": SIGNUP["email"], "password": "WrongPass99!"},
        )
        assert response.status_code == 401
        assert response.json()["error_type"] == "invalid_credentials"

    async def test_login_unknown_email_same_error(self, client):
        """An unknown email must be indistinguishable from a wrong password."""
        await client.post("/auth/signup", json=SIGNUP)
        wrong_password = await client.post(
            "/auth/login",
            json={"email": SIGNUP["email"], "password": "WrongPass99!"},
        )
        unknown = await client.post(
            "/auth/login",
            json={"email": "nobody@example.com", "password": "WrongPass99!"},
        )
        assert unknown.status_code == wrong_password.status_code == 401
        assert unknown.json() == wrong_password.json()


# ---------------------------------------------------------------------------
# Token Tests
# ---------------------------------------------------------------------------

class TestCurrentUser:
    """Tests for GET /auth/me and token validation."""

    async def test_me_returns_profile_and_roles(self, authenticated_client):
        response = await authenticated_client.get("/auth/me")
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "testuser@example.com"
        assert data["roles"] == ["lead"]
        assert "hashed_password" not in data

    async def test_me_without_token(self, client):
        response = await client.get("/auth/me")
        assert response.status_code == 401

    async def test_me_with_garbage_token(self, client):
        client.headers["Authorization"] = "Bearer not-a-jwt"
        response = await client.get("/auth/me")
        assert response.status_code == 401

    @pytest.mark.parametrize("path", ["/offers", "/subscriptions", "/user-wallets", "/transactions", "/dashboard"])
    async def test_protected_endpoints_require_token(self, client, path):
        response = await client.get(path)
        assert response.status_code == 401


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
