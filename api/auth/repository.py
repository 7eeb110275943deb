"""
User persistence on top of the `users` collection.
"""

from __future__ import annotations

from typing import Any

from core import store
from core.collection import Collection, Equals, utc_now


def users() -> Collection:
    return store.collection(store.USERS)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(*, name: str, email: str, password_hash: str, role: str = "user") -> dict[str, Any]:
    return await users().insert(
        {
            "name": name.strip(),
            "email": normalize_email(email),
            "passwordHash": password_hash,
            "role": role,
            "isActive": True,
            "lastLogin": None,
        }
    )


async def get_user_by_email(email: str, *, role: str | None = None) -> dict[str, Any] | None:
    predicate = {"email": Equals(normalize_email(email))}
    if role is not None:
        predicate["role"] = Equals(role)
    rows = await users().find(predicate)
    return rows[0] if rows else None


async def get_user_by_id(user_id: str) -> dict[str, Any] | None:
    return await users().get(user_id)


async def touch_last_login(user_id: str) -> dict[str, Any] | None:
    return await users().update(user_id, {"lastLogin": utc_now()})


async def update_profile(user_id: str, *, name: str) -> dict[str, Any] | None:
    return await users().update(user_id, {"name": name.strip()})
