"""
Security guards for role-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List

from fastapi import Depends

from backoffice.app.core.dependencies import get_current_user
from backoffice.app.core.exceptions import InsufficientPermissionsError
from backoffice.app.models.enums import UserRole
from backoffice.app.models.user import User


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/users")
        async def list_users(current_user: User = Depends(require_role([UserRole.ADMIN]))):
            ...

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency function that validates user role

    Raises:
        InsufficientPermissionsError 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise InsufficientPermissionsError(
                message=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}",
            )
        return current_user

    return role_checker


require_admin = require_role([UserRole.ADMIN])
require_staff = require_role([UserRole.ADMIN, UserRole.MANAGER])
