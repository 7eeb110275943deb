"""Auth endpoints: register, login, me, profile, admin routes."""

from httpx import AsyncClient

from auth import repository


async def test_register_returns_user_and_token(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "  Grace  ", "email": "Grace@Example.com", "password": "abcdef"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["name"] == "Grace"
    assert user["email"] == "grace@example.com"
    assert user["role"] == "user"
    assert "passwordHash" not in user
    assert body["data"]["token"]


async def test_register_duplicate_email_is_rejected(client: AsyncClient, user):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "Again", "email": user["user"]["email"].upper(), "password": "abcdef"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "User already exists with this email"}


async def test_register_losing_a_race_is_rejected(client: AsyncClient, user, monkeypatch):
    # Both requests pass the lookup; the unique index on email decides.
    async def no_existing_user(email, *, role=None):
        return None

    monkeypatch.setattr(repository, "get_user_by_email", no_existing_user)

    resp = await client.post(
        "/api/auth/register",
        json={"name": "Again", "email": user["user"]["email"], "password": "abcdef"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "User already exists with this email"}


async def test_register_validation_error(client: AsyncClient):
    resp = await client.post("/api/auth/register", json={"name": "X", "email": "not-an-email", "password": "123"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    fields = {error["field"] for error in body["errors"]}
    assert {"name", "email", "password"} <= fields


async def test_login_and_me(client: AsyncClient, user):
    resp = await client.post(
        "/api/auth/login",
        json={"email": user["user"]["email"], "password": "secret-pass-123"},
    )
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["id"] == user["user"]["id"]
    assert me.json()["data"]["user"]["lastLogin"] is not None


async def test_login_wrong_password(client: AsyncClient, user):
    resp = await client.post("/api/auth/login", json={"email": user["user"]["email"], "password": "nope-nope"})

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


async def test_login_unknown_email(client: AsyncClient):
    resp = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert resp.status_code == 401


async def test_deactivated_account_cannot_log_in(client: AsyncClient, user):
    from auth import repository

    await repository.users().update(user["user"]["id"], {"isActive": False})

    resp = await client.post("/api/auth/login", json={"email": user["user"]["email"], "password": "secret-pass-123"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Account is deactivated"

    me = await client.get("/api/auth/me", headers=user["headers"])
    assert me.status_code == 401


async def test_me_requires_token(client: AsyncClient):
    resp = await client.get("/api/auth/me")

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Not authorized, no token"}


async def test_me_rejects_bad_token(client: AsyncClient):
    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid access token."


async def test_update_profile(client: AsyncClient, user):
    resp = await client.put("/api/auth/profile", json={"name": "Alice Cooper"}, headers=user["headers"])

    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["name"] == "Alice Cooper"


async def test_logout(client: AsyncClient, auth_headers):
    resp = await client.post("/api/auth/logout", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logout successful"


async def test_admin_login_and_verify(client: AsyncClient, admin):
    resp = await client.post(
        "/api/auth/admin/login",
        json={"email": admin["user"]["email"], "password": "secret-pass-123"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["role"] == "admin"

    verify = await client.get("/api/auth/admin/verify", headers=admin["headers"])
    assert verify.status_code == 200


async def test_admin_login_rejects_regular_user(client: AsyncClient, user):
    resp = await client.post(
        "/api/auth/admin/login",
        json={"email": user["user"]["email"], "password": "secret-pass-123"},
    )

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid admin credentials"


async def test_admin_verify_forbidden_for_regular_user(client: AsyncClient, auth_headers):
    resp = await client.get("/api/auth/admin/verify", headers=auth_headers)

    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Admin role required."
