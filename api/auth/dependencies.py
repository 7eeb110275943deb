"""
FastAPI dependencies guarding write routes and admin routes.

- `get_current_user`: any active account with a valid bearer token
- `require_admin`: same, plus role == "admin"
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from . import service


def unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def bearer_token(authorization: str | None) -> str:
    """
    "Bearer <jwt>" -> "<jwt>". The scheme is case-insensitive.
    """
    scheme, _, token = (authorization or "").strip().partition(" ")
    if not scheme:
        raise unauthorized("Not authorized, no token")
    if scheme.lower() != "bearer" or not token.strip():
        raise unauthorized("Authorization must be: Bearer <token>.")
    return token.strip()


async def get_current_user(authorization: str | None = Header(default=None)) -> dict:
    return await service.get_user_from_access_token(bearer_token(authorization))


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != service.ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin role required.",
        )
    return current_user
