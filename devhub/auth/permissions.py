"""Role-based access control (RBAC) logic.

Role hierarchy: admin > member
"""

from __future__ import annotations

from devhub.auth.models import Role, User
from devhub.errors import Forbidden


def has_permission(user: User, required_role: Role) -> bool:
    """Check if a user's role meets or exceeds the required role level."""
    user_role = user.role if isinstance(user.role, Role) else Role(user.role)
    return user_role.level >= required_role.level


def require_role(user: User, role: Role) -> None:
    """Raise ``Forbidden`` if the user lacks the given role."""
    if not has_permission(user, role):
        raise Forbidden(f"Requires role '{role.value}' or higher")
