"""Achievement endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from achievements.service import time_ago


async def _create(client: AsyncClient, headers: dict, **fields) -> dict:
    body = {"title": "Award", "date": "2023-05-01T00:00:00Z", **fields}
    resp = await client.post("/api/achievements", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_create_achievement(client: AsyncClient, auth_headers):
    achievement = await _create(
        client,
        auth_headers,
        title="Hackathon winner",
        organization="ACM",
        category="Competition",
        evidenceImage="image-1700000000000-123.png",
        tags=["Team"],
    )

    assert achievement["tags"] == ["team"]
    assert achievement["evidenceImage"] == "image-1700000000000-123.png"
    assert achievement["timeAgo"].endswith("ago")


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "No date"},
        {"title": "Future", "date": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat()},
        {"title": "Bad image", "date": "2023-01-01T00:00:00Z", "evidenceImage": "https://x.io/a.png"},
        {"title": "Bad image", "date": "2023-01-01T00:00:00Z", "evidenceImage": "../secret.png"},
    ],
)
async def test_create_validation(client: AsyncClient, auth_headers, payload):
    resp = await client.post("/api/achievements", json=payload, headers=auth_headers)
    assert resp.status_code == 400


async def test_default_sort_is_most_recent_date(client: AsyncClient, auth_headers):
    await _create(client, auth_headers, title="old", date="2020-01-01T00:00:00Z")
    await _create(client, auth_headers, title="new", date="2024-01-01T00:00:00Z")
    await _create(client, auth_headers, title="mid", date="2022-01-01T00:00:00Z")

    resp = await client.get("/api/achievements")

    assert [a["title"] for a in resp.json()["data"]] == ["new", "mid", "old"]


async def test_filter_by_category_and_organization(client: AsyncClient, auth_headers):
    await _create(client, auth_headers, title="a", category="Competition", organization="ACM")
    await _create(client, auth_headers, title="b", category="Certification", organization="AWS")
    await _create(client, auth_headers, title="c", category="Competition", organization="IEEE")

    by_category = (await client.get("/api/achievements", params={"category": "compet"})).json()
    assert sorted(a["title"] for a in by_category["data"]) == ["a", "c"]

    both = (await client.get("/api/achievements", params={"category": "competition", "organization": "ieee"})).json()
    assert [a["title"] for a in both["data"]] == ["c"]

    route = (await client.get("/api/achievements/category/Certification")).json()
    assert [a["title"] for a in route["data"]] == ["b"]
    assert route["meta"]["total"] == 1


async def test_status_query_is_ignored(client: AsyncClient, auth_headers):
    await _create(client, auth_headers)

    resp = await client.get("/api/achievements", params={"status": "completed"})

    assert resp.json()["meta"]["total"] == 1


async def test_stats(client: AsyncClient, auth_headers):
    this_year = datetime(datetime.now(timezone.utc).year, 1, 1, tzinfo=timezone.utc).isoformat()
    await _create(client, auth_headers, category="Competition", organization="ACM", date=this_year)
    await _create(client, auth_headers, category="Competition", organization="IEEE")
    await _create(client, auth_headers, category="Certification", organization="ACM")

    stats = (await client.get("/api/achievements/stats/overview")).json()["data"]

    assert stats["total"] == 3
    assert sorted(stats["categories"]) == ["Certification", "Competition"]
    assert sorted(stats["organizations"]) == ["ACM", "IEEE"]
    assert stats["thisYear"] == 1
    assert stats["categoryBreakdown"][0] == {"category": "Competition", "count": 2}


async def test_delete_by_non_owner_is_forbidden(client: AsyncClient, user, other_user):
    created = await _create(client, user["headers"])

    resp = await client.delete(f"/api/achievements/{created['id']}", headers=other_user["headers"])

    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to delete this achievement"


def test_time_ago():
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert time_ago(now - timedelta(days=3), now) == "3 days ago"
    assert time_ago(now - timedelta(days=65), now) == "2 months ago"
    assert time_ago(now - timedelta(days=40), now) == "1 month ago"
    assert time_ago(now - timedelta(days=800), now) == "2 years ago"


@pytest.mark.parametrize("field", ["title", "date", "tags"])
async def test_patch_cannot_null_out_fields(client: AsyncClient, auth_headers, field):
    created = await _create(client, auth_headers)
    url = f"/api/achievements/{created['id']}"

    resp = await client.patch(url, json={field: None}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"
    assert (await client.get(url)).json()["data"][field] == created[field]
