"""
Password hashing and access tokens.
"""

from __future__ import annotations

import os
import time
from typing import Any

import bcrypt
import jwt

DEFAULT_JWT_SECRET = "dev-only-change-this-jwt-secret-before-deploying"


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Set JWT_SECRET in production; the default only suits local runs.
    return os.environ.get("JWT_SECRET", DEFAULT_JWT_SECRET).strip() or DEFAULT_JWT_SECRET


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    # Portfolio admins stay signed in for a week by default.
    return _env_int("ACCESS_TOKEN_EXPIRE_MIN", 7 * 24 * 60)


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(*, user_id: str, email: str, role: str) -> str:
    issued_at = int(time.time())
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + access_token_expire_minutes() * 60,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    if str(payload.get("type") or "").strip().lower() != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload
