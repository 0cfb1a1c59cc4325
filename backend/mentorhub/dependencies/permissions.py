# backend/mentorhub/dependencies/permissions.py
"""
Permission dependencies for FastAPI endpoints.

Services enforce permissions themselves; these dependencies reject a
request early, before the body is read.
"""

from typing import Callable, Union

from fastapi import Depends

from ..core.enums import PermissionName
from ..core.exceptions import ForbiddenException
from ..core.rbac import AccessContext
from ..services.permission_service import permission_checker
from .auth import get_access_context


def require_permission(
    permission_name: Union[str, PermissionName],
) -> Callable[..., AccessContext]:
    """
    Create a dependency that requires a specific permission.

    Example:
        @router.delete("/{id}", dependencies=[Depends(require_permission("manage_sessions"))])
    """
    permission = PermissionName(permission_name)

    def checker(ctx: AccessContext = Depends(get_access_context)) -> AccessContext:
        if not permission_checker.has_permission(ctx, permission):
            raise ForbiddenException(
                f"User does not have required permission: {permission.value}"
            ).to_http_exception()
        return ctx

    return checker
