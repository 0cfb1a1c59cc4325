# backend/mentorhub/core/rbac.py
"""
Static role/permission catalog.

The catalog and the role hierarchy are immutable, process-wide constants
built once at import time. Nothing in the application mutates them; the
permission checker only reads them.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from .enums import PermissionName, RoleName

P = PermissionName

_STUDENT_PERMISSIONS: FrozenSet[PermissionName] = frozenset(
    {
        P.VIEW_PROFILE,
        P.EDIT_PROFILE,
        P.BOOK_SESSION,
        P.VIEW_OWN_SESSIONS,
        P.CANCEL_SESSION,
        P.RESCHEDULE_SESSION,
        P.WRITE_REVIEWS,
        P.EDIT_OWN_REVIEWS,
        P.DELETE_OWN_REVIEWS,
        P.VIEW_REVIEWS,
        P.VIEW_MENTOR_PROFILES,
        P.MAKE_PAYMENTS,
        P.VIEW_OWN_PAYMENTS,
    }
)

_MENTOR_PERMISSIONS: FrozenSet[PermissionName] = frozenset(
    {
        P.VIEW_PROFILE,
        P.EDIT_PROFILE,
        P.VIEW_OWN_SESSIONS,
        P.MANAGE_STUDENT_SESSIONS,
        P.SET_AVAILABILITY,
        P.CANCEL_SESSION,
        P.RESCHEDULE_SESSION,
        P.RESPOND_TO_REVIEWS,
        P.VIEW_REVIEWS,
        P.VIEW_MENTOR_ANALYTICS,
        P.VIEW_OWN_PAYMENTS,
    }
)

_ADMIN_PERMISSIONS: FrozenSet[PermissionName] = frozenset(
    {
        P.VIEW_ALL_USERS,
        P.MANAGE_USERS,
        P.VIEW_PROFILE,
        P.EDIT_PROFILE,
        P.VIEW_ALL_SESSIONS,
        P.MANAGE_SESSIONS,
        P.VIEW_REVIEWS,
        P.MODERATE_REVIEWS,
        P.DELETE_ANY_REVIEW,
        P.VIEW_ALL_PAYMENTS,
        P.MANAGE_PAYMENTS,
        P.VIEW_ANALYTICS,
        P.MODERATE_CONTENT,
        P.MANAGE_DISPUTES,
        P.MANAGE_PLATFORM,
    }
)

SUPER_ADMIN_ONLY_PERMISSIONS: FrozenSet[PermissionName] = frozenset(
    {
        P.MANAGE_ADMINS,
        P.SYSTEM_SETTINGS,
        P.DATABASE_ACCESS,
        P.DELETE_PROFILE,
    }
)

ROLE_PERMISSIONS: Mapping[RoleName, FrozenSet[PermissionName]] = MappingProxyType(
    {
        RoleName.STUDENT: _STUDENT_PERMISSIONS,
        RoleName.MENTOR: _MENTOR_PERMISSIONS,
        RoleName.ADMIN: _ADMIN_PERMISSIONS,
        RoleName.SUPER_ADMIN: _ADMIN_PERMISSIONS | SUPER_ADMIN_ONLY_PERMISSIONS,
    }
)

# Flat inclusion table. Mentor and student are incomparable, yet admin
# includes both; this is not a subtyping relationship.
ROLE_HIERARCHY: Mapping[RoleName, FrozenSet[RoleName]] = MappingProxyType(
    {
        RoleName.STUDENT: frozenset({RoleName.STUDENT}),
        RoleName.MENTOR: frozenset({RoleName.MENTOR}),
        RoleName.ADMIN: frozenset({RoleName.ADMIN, RoleName.MENTOR, RoleName.STUDENT}),
        RoleName.SUPER_ADMIN: frozenset(
            {RoleName.SUPER_ADMIN, RoleName.ADMIN, RoleName.MENTOR, RoleName.STUDENT}
        ),
    }
)

ADMIN_ROLES: FrozenSet[RoleName] = frozenset({RoleName.ADMIN, RoleName.SUPER_ADMIN})


def permissions_for(role: RoleName) -> FrozenSet[PermissionName]:
    """Return the permission set for a role (empty for unknown roles)."""
    return ROLE_PERMISSIONS.get(role, frozenset())


def role_inherits_from(user_role: RoleName, required_role: RoleName) -> bool:
    """Does ``user_role`` encompass ``required_role``?"""
    return required_role in ROLE_HIERARCHY.get(user_role, frozenset())


@dataclass(frozen=True)
class AccessContext:
    """
    Identity and target resource for a single request.

    Built once from the authenticated identity and never mutated; use
    ``for_resource`` to derive a context scoped to another resource.
    """

    user_id: str
    role: RoleName
    resource_id: Optional[str] = None
    resource_owner_id: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def for_resource(
        self,
        resource_id: Optional[str] = None,
        resource_owner_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> "AccessContext":
        return AccessContext(
            user_id=self.user_id,
            role=self.role,
            resource_id=resource_id,
            resource_owner_id=resource_owner_id,
            session_id=session_id,
        )
