"""
Process-wide document store.

`init_store()` runs once per process (FastAPI lifespan) and picks the
backend from `DOCUMENT_STORE`:
- `postgres` (default): asyncpg pool + `documents` table
- `memory`: in-process dicts, nothing persisted
"""

from __future__ import annotations

import logging
import os

from . import db
from .collection import Collection
from .memory import MemoryStore
from .postgres import PostgresCollection

logger = logging.getLogger(__name__)

USERS = "users"
PROJECTS = "projects"
ACHIEVEMENTS = "achievements"
RESEARCH = "research"

# Fields scanned by full-text search, per collection.
TEXT_INDEXES: dict[str, tuple[str, ...]] = {
    USERS: ("name", "email"),
    PROJECTS: ("title", "description"),
    ACHIEVEMENTS: ("title", "description"),
    RESEARCH: ("title", "abstract"),
}

# Mirrors the unique indexes in core/db.py::SCHEMA_SQL.
UNIQUE_INDEXES: dict[str, tuple[str, ...]] = {
    USERS: ("email",),
}

_backend: str | None = None
_memory: MemoryStore | None = None


def store_backend() -> str:
    return os.environ.get("DOCUMENT_STORE", "postgres").strip().lower() or "postgres"


async def init_store(backend: str | None = None) -> None:
    global _backend, _memory
    if _backend is not None:
        return None

    backend = (backend or store_backend()).lower()
    if backend == "postgres":
        await db.init_pool()
        await db.ensure_schema()
    elif backend == "memory":
        _memory = MemoryStore()
    else:
        raise RuntimeError(f"Unknown DOCUMENT_STORE '{backend}'. Use 'postgres' or 'memory'.")

    _backend = backend
    logger.info("document_store_ready backend=%s", backend)


async def close_store() -> None:
    global _backend, _memory
    if _backend == "postgres":
        await db.close_pool()
    _backend = None
    _memory = None


def collection(name: str) -> Collection:
    if _backend is None:
        raise RuntimeError("Document store is not initialized. Call init_store() on startup.")
    text_fields = TEXT_INDEXES.get(name, ())
    if _backend == "memory":
        assert _memory is not None
        return _memory.collection(name, text_fields, UNIQUE_INDEXES.get(name, ()))
    return PostgresCollection(name, text_fields)
