"""Auth middleware -- FastAPI dependencies for resolving the caller.

Identity comes from an ``Authorization: Bearer <token>`` header carrying a
session token issued at login/registration.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from devhub.auth.models import Role, User
from devhub.auth.permissions import require_role
from devhub.errors import Unauthorized
from devhub.services import Services


def get_services(request: Request) -> Services:
    """Return the service container the app was built with."""
    return request.app.state.services


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """The raw session token; raises ``Unauthorized`` if absent."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthorized("Access token required")
    return token


async def get_current_user(
    authorization: Optional[str] = Header(None),
    services: Services = Depends(get_services),
) -> User:
    """FastAPI dependency that extracts and validates the current user.

    Raises ``Unauthorized`` if no token is supplied, or if it is invalid,
    expired, revoked, or belongs to a deactivated account.
    """
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthorized("Access token required")
    user = services.users.validate_session(token)
    if user is None:
        raise Unauthorized("Invalid or expired token")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Authenticated caller with the admin role, else ``Forbidden``."""
    require_role(user, Role.admin)
    return user
