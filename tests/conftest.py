"""Pytest configuration and fixtures for the portfolio API.

HTTP tests run against main:app through httpx's ASGITransport. Every test gets
a fresh in-memory document store and its own upload directory, so no Postgres
is needed.
"""

import os
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DOCUMENT_STORE", "memory")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-the-portfolio-api-suite")

from core import store  # noqa: E402
from main import app  # noqa: E402

_TEST_PASSWORD = "secret-pass-123"


@pytest.fixture(autouse=True)
async def memory_store():
    """Fresh in-memory store per test; ASGITransport does not run the lifespan."""
    await store.init_store("memory")
    yield
    await store.close_store()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Point UPLOAD_PATH at a per-test temporary directory."""
    root = tmp_path / "uploads"
    monkeypatch.setenv("UPLOAD_PATH", str(root))
    return root


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register(client: AsyncClient, path: str, name: str) -> dict:
    email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
    resp = await client.post(path, json={"name": name, "email": email, "password": _TEST_PASSWORD})
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return {
        "user": data["user"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


@pytest.fixture
async def user(client: AsyncClient) -> dict:
    """A registered regular user: {"user": {...}, "headers": {...}}."""
    return await _register(client, "/api/auth/register", "Alice")


@pytest.fixture
async def other_user(client: AsyncClient) -> dict:
    return await _register(client, "/api/auth/register", "Bob")


@pytest.fixture
async def admin(client: AsyncClient) -> dict:
    return await _register(client, "/api/auth/admin/register", "Admin")


@pytest.fixture
def auth_headers(user: dict) -> dict[str, str]:
    return user["headers"]


@pytest.fixture
def admin_headers(admin: dict) -> dict[str, str]:
    return admin["headers"]
