"""
Auth business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from core.collection import DuplicateKeyError

from . import repository, schemas, security

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def public_user(user_row: dict[str, Any]) -> dict[str, Any]:
    """
    The user document without credentials.
    """
    return {
        "id": str(user_row["id"]),
        "name": user_row.get("name"),
        "email": user_row.get("email"),
        "role": user_row.get("role", ROLE_USER),
        "isActive": bool(user_row.get("isActive", False)),
        "lastLogin": user_row.get("lastLogin"),
        "createdAt": user_row.get("createdAt"),
        "updatedAt": user_row.get("updatedAt"),
    }


def _issue_token(user_row: dict[str, Any]) -> str:
    return security.build_access_token(
        user_id=str(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row.get("role") or ROLE_USER),
    )


async def register(payload: schemas.RegisterRequest, *, role: str = ROLE_USER) -> dict[str, Any]:
    label = "Admin" if role == ROLE_ADMIN else "User"
    duplicate = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"{label} already exists with this email",
    )
    if await repository.get_user_by_email(payload.email) is not None:
        raise duplicate

    password_hash = security.hash_password(payload.password)
    try:
        user_row = await repository.create_user(
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
            role=role,
        )
    except DuplicateKeyError as exc:
        # Lost a race with a concurrent registration for the same email.
        raise duplicate from exc
    user_row = await repository.touch_last_login(str(user_row["id"])) or user_row

    logger.info("user_registered email=%s role=%s", user_row["email"], role)
    return {"user": public_user(user_row), "token": _issue_token(user_row)}


async def login(payload: schemas.LoginRequest, *, admin_only: bool = False) -> dict[str, Any]:
    prefix = "admin " if admin_only else ""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"Invalid {prefix}credentials",
    )

    user_row = await repository.get_user_by_email(payload.email, role=ROLE_ADMIN if admin_only else None)
    if user_row is None:
        raise invalid

    if not bool(user_row.get("isActive", False)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{'Admin account' if admin_only else 'Account'} is deactivated",
        )

    if not security.verify_password(payload.password, str(user_row.get("passwordHash") or "")):
        raise invalid

    user_row = await repository.touch_last_login(str(user_row["id"])) or user_row
    logger.info("user_logged_in email=%s admin=%s", user_row["email"], admin_only)
    return {"user": public_user(user_row), "token": _issue_token(user_row)}


async def get_user_from_access_token(access_token: str) -> dict[str, Any]:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    subject = str(payload.get("sub") or "").strip()
    user_row = await repository.get_user_by_id(subject) if subject else None
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
        )
    if not bool(user_row.get("isActive", False)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )
    return user_row


async def update_profile(user_row: dict[str, Any], payload: schemas.ProfileUpdateRequest) -> dict[str, Any]:
    updated = await repository.update_profile(str(user_row["id"]), name=payload.name)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    logger.info("user_profile_updated email=%s", updated["email"])
    return public_user(updated)
