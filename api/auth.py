"""Bearer-token guard for Flask routes."""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional

from flask import g, request

import db
from api.errors import Forbidden, Unauthorized
from models.users import User
from utils.security import AuthSecurityError, decode_access_token


@dataclass(frozen=True)
class CurrentUser:
    """Detached snapshot of the authenticated user."""

    id: int
    email: str
    role: str
    party_key: Optional[str]
    badge_number: Optional[str]


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise Unauthorized("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise Unauthorized("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise Unauthorized("Authorization must be: Bearer <token>.")
    return token


def load_current_user() -> CurrentUser:
    token = _extract_bearer_token(request.headers.get("Authorization"))
    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub") or 0)
    except (AuthSecurityError, ValueError) as exc:
        raise Unauthorized(str(exc)) from exc

    with db.session_scope() as session:
        user = session.get(User, user_id)
        if user is None or not user.is_active:
            raise Unauthorized("User not found or inactive.")
        return CurrentUser(
            id=user.id,
            email=user.email,
            role=user.role,
            party_key=user.party_key,
            badge_number=user.badge_number,
        )


def enforce_roles(*roles: str) -> CurrentUser:
    user = load_current_user()
    if roles and user.role not in roles:
        raise Forbidden("Insufficient role for this resource.")
    g.current_user = user
    return user


def require_roles(*roles: str) -> Callable:
    """Route decorator: authenticate, then check the role.

    The user is available as `flask.g.current_user` inside the view.
    """

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            enforce_roles(*roles)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def protect_blueprint(bp, *roles: str) -> None:
    """Apply the role check to every route of `bp`."""

    @bp.before_request
    def _require_role():
        enforce_roles(*roles)


def current_user() -> CurrentUser:
    return g.current_user
