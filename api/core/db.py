"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool and the `documents` table that backs
every collection. The store initializes it on startup and closes it on
shutdown (see `core/store.py` and `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

_pool: asyncpg.Pool | None = None

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    collection text NOT NULL,
    id char(24) NOT NULL,
    body jsonb NOT NULL,
    PRIMARY KEY (collection, id)
);

CREATE INDEX IF NOT EXISTS documents_tags_idx
    ON documents USING gin ((body -> 'tags'));

CREATE INDEX IF NOT EXISTS documents_created_at_idx
    ON documents (collection, (body ->> 'createdAt') DESC);

CREATE UNIQUE INDEX IF NOT EXISTS documents_user_email_idx
    ON documents (lower(body ->> 'email'))
    WHERE collection = 'users';
"""


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=1,
        max_size=10,
        command_timeout=30,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


async def ensure_schema() -> None:
    """
    Idempotent; safe to run on every startup.
    """
    await pool().execute(SCHEMA_SQL)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    rows = await pool().fetch(sql, *args)
    return [dict(r) for r in rows]


async def fetch_value(sql: str, *args: Any) -> Any:
    return await pool().fetchval(sql, *args)


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the command status,
    e.g. "DELETE 1".
    """
    return await pool().execute(sql, *args)
