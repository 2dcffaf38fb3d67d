"""RBAC utilities for FastAPI dependencies.

Provides `require_admin`, a dependency ensuring the authenticated principal
(from `get_current_user`) carries the admin flag.
"""

from fastapi import Depends
from .auth import get_current_user, Principal
from .errors import Forbidden


def require_admin(user: Principal = Depends(get_current_user)) -> Principal:
    """Return the current principal, or raise `Forbidden` (403) if it is not an admin."""
    if not user.is_admin:
        raise Forbidden()
    return user
