"""
Auth security helpers: bcrypt password hashes and JWT access tokens.

Token settings come from the Flask config (`JWT_SECRET`, `JWT_ALG`,
`ACCESS_TOKEN_EXPIRE_MIN`) when an app context is active.
"""

from __future__ import annotations

from typing import Any

import bcrypt
import jwt
from flask import current_app, has_app_context

from utils.time_utils import now_epoch_s

_DEFAULT_SECRET = "dev-change-this-secret"
_DEFAULT_ALG = "HS256"
_DEFAULT_EXPIRE_MIN = 60


class AuthSecurityError(RuntimeError):
    pass


def _setting(name: str, default: Any) -> Any:
    if not has_app_context():
        return default
    value = current_app.config.get(name)
    return default if value in (None, "") else value


def jwt_secret() -> str:
    return str(_setting("JWT_SECRET", _DEFAULT_SECRET))


def jwt_algorithm() -> str:
    return str(_setting("JWT_ALG", _DEFAULT_ALG))


def access_token_expire_minutes() -> int:
    return int(_setting("ACCESS_TOKEN_EXPIRE_MIN", _DEFAULT_EXPIRE_MIN))


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


def build_access_token(*, user_id: int, role: str) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (access_token_expire_minutes() * 60)

    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload
