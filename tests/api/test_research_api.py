"""Research endpoints."""

import pytest
from httpx import AsyncClient

from research.service import citation


async def _create(client: AsyncClient, headers: dict, **fields) -> dict:
    body = {"title": "Paper", "authors": ["A. Author"], **fields}
    resp = await client.post("/api/research", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_create_research_adds_citation(client: AsyncClient, auth_headers):
    paper = await _create(
        client,
        auth_headers,
        title="Attention Everywhere",
        authors=["Ada Lovelace", " Alan Turing "],
        publishedDate="2021-06-01T00:00:00Z",
        venue="NeurIPS",
        doi="10.1234/abc.567",
        pdfUrl="/uploads/pdfs/pdf-1-2.pdf",
    )

    assert paper["status"] == "draft"
    assert paper["authors"] == ["Ada Lovelace", "Alan Turing"]
    assert paper["publicationYear"] == 2021
    assert paper["citation"] == (
        "Ada Lovelace, Alan Turing (2021). Attention Everywhere. NeurIPS. https://doi.org/10.1234/abc.567"
    )


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "No authors", "authors": []},
        {"title": "Blank author", "authors": ["   "]},
        {"title": "Bad doi", "authors": ["x"], "doi": "doi:10.1/x"},
        {"title": "Bad pdf", "authors": ["x"], "pdfUrl": "/etc/passwd"},
        {"title": "Bad status", "authors": ["x"], "status": "retracted"},
        {"title": "Future", "authors": ["x"], "publishedDate": "2999-01-01T00:00:00Z"},
    ],
)
async def test_create_validation(client: AsyncClient, auth_headers, payload):
    resp = await client.post("/api/research", json=payload, headers=auth_headers)
    assert resp.status_code == 400


async def test_default_sort_is_latest_publication(client: AsyncClient, auth_headers):
    await _create(client, auth_headers, title="2019", publishedDate="2019-01-01T00:00:00Z")
    await _create(client, auth_headers, title="unpublished")
    await _create(client, auth_headers, title="2022", publishedDate="2022-01-01T00:00:00Z")

    resp = await client.get("/api/research")

    assert [r["title"] for r in resp.json()["data"]] == ["2022", "2019", "unpublished"]


async def test_filter_by_year_venue_and_author(client: AsyncClient, auth_headers):
    await _create(
        client, auth_headers, title="a", venue="ICML 2023", authors=["Grace Hopper"],
        publishedDate="2023-12-31T23:59:59Z",
    )
    await _create(
        client, auth_headers, title="b", venue="NeurIPS", authors=["Alan Turing"],
        publishedDate="2024-01-01T00:00:00Z",
    )

    by_year = (await client.get("/api/research", params={"year": 2023})).json()
    assert [r["title"] for r in by_year["data"]] == ["a"]

    by_venue = (await client.get("/api/research", params={"venue": "icml"})).json()
    assert [r["title"] for r in by_venue["data"]] == ["a"]

    by_author = (await client.get("/api/research", params={"author": "turing"})).json()
    assert [r["title"] for r in by_author["data"]] == ["b"]

    author_route = (await client.get("/api/research/author/hopper")).json()
    assert [r["title"] for r in author_route["data"]] == ["a"]


async def test_year_out_of_range_is_rejected(client: AsyncClient):
    resp = await client.get("/api/research", params={"year": 1800})
    assert resp.status_code == 400


async def test_list_by_status(client: AsyncClient, auth_headers):
    await _create(client, auth_headers, title="draft")
    await _create(client, auth_headers, title="out", status="published")

    resp = await client.get("/api/research/status/published")
    assert [r["title"] for r in resp.json()["data"]] == ["out"]

    bad = await client.get("/api/research/status/retracted")
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid status. Must be draft, submitted, or published"


async def test_stats(client: AsyncClient, auth_headers):
    await _create(client, auth_headers, status="published", venue="ICML", publishedDate="2020-03-01T00:00:00Z")
    await _create(client, auth_headers, status="submitted", venue="ICML", publishedDate="2021-03-01T00:00:00Z")
    await _create(client, auth_headers, publishedDate="2021-05-01T00:00:00Z")

    stats = (await client.get("/api/research/stats/overview")).json()["data"]

    assert stats["total"] == 3
    assert stats["published"] == 1
    assert stats["submitted"] == 1
    assert stats["drafts"] == 1
    assert stats["venues"] == ["ICML"]
    assert stats["yearlyBreakdown"] == [{"year": 2021, "count": 2}, {"year": 2020, "count": 1}]


async def test_research_messages(client: AsyncClient, auth_headers):
    missing = await client.get("/api/research/" + "b" * 24)
    assert missing.json()["message"] == "Research not found"

    invalid = await client.get("/api/research/123")
    assert invalid.json()["message"] == "Invalid research ID"


def test_citation_without_date_or_venue():
    assert citation({"title": "T", "authors": ["X"]}) == "X (n.d.). T"


@pytest.mark.parametrize("field", ["title", "authors", "status"])
async def test_patch_cannot_null_out_fields(client: AsyncClient, auth_headers, field):
    paper = await _create(client, auth_headers)
    url = f"/api/research/{paper['id']}"

    resp = await client.patch(url, json={field: None}, headers=auth_headers)

    assert resp.status_code == 400
    assert (await client.get(url)).json()["data"][field] == paper[field]
