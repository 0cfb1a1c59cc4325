# backend/mentorhub/services/permission_service.py
"""
Permission checking for role-based access control.

The checker is a pure function of (access context, catalog): it holds only
a reference to the immutable catalog, performs no I/O and never raises.
Converting a negative answer into ``ForbiddenException`` is the caller's job.
"""

from typing import Callable, Dict, FrozenSet, Mapping, Optional

from ..core.enums import ActionType, PermissionName, ResourceType, RoleName
from ..core.rbac import ROLE_PERMISSIONS, AccessContext

P = PermissionName
A = ActionType

RuleFn = Callable[["PermissionChecker", AccessContext, ActionType, Optional[str]], bool]


class PermissionChecker:
    """Evaluates permissions and resource/action rules for an access context."""

    def __init__(
        self, catalog: Mapping[RoleName, FrozenSet[PermissionName]] = ROLE_PERMISSIONS
    ) -> None:
        self._catalog = catalog

    def has_permission(self, ctx: AccessContext, permission: PermissionName) -> bool:
        return permission in self._catalog.get(ctx.role, frozenset())

    def has_any_permission(self, ctx: AccessContext, *permissions: PermissionName) -> bool:
        granted = self._catalog.get(ctx.role, frozenset())
        return any(permission in granted for permission in permissions)

    def can_access_own_resource(self, ctx: AccessContext, owner_id: str) -> bool:
        """Exact id equality; an empty owner only matches an empty user id."""
        return ctx.user_id == owner_id

    def can_perform(
        self,
        ctx: AccessContext,
        action: ActionType,
        resource: ResourceType,
        resource_id: Optional[str] = None,
    ) -> bool:
        if ctx.role == RoleName.SUPER_ADMIN:
            return True

        rule = _RESOURCE_RULES.get(resource)
        if rule is None:
            return False
        return rule(self, ctx, action, resource_id)

    # Resource rules

    def _owns(self, ctx: AccessContext, resource_id: Optional[str]) -> bool:
        owner_id = resource_id if resource_id is not None else ctx.resource_owner_id
        return owner_id is not None and self.can_access_own_resource(ctx, owner_id)

    def _user_rule(
        self, ctx: AccessContext, action: ActionType, resource_id: Optional[str]
    ) -> bool:
        if action == A.READ:
            return self.has_any_permission(ctx, P.VIEW_PROFILE, P.VIEW_ALL_USERS) or self._owns(
                ctx, resource_id
            )
        if action == A.UPDATE:
            return self.has_permission(ctx, P.MANAGE_USERS) or (
                self._owns(ctx, resource_id) and self.has_permission(ctx, P.EDIT_PROFILE)
            )
        if action == A.DELETE:
            return self.has_any_permission(ctx, P.DELETE_PROFILE, P.MANAGE_USERS)
        if action == A.MANAGE:
            return self.has_permission(ctx, P.MANAGE_USERS)
        return False

    def _session_rule(
        self, ctx: AccessContext, action: ActionType, resource_id: Optional[str]
    ) -> bool:
        if action == A.CREATE:
            return self.has_permission(ctx, P.BOOK_SESSION)
        if action == A.READ:
            return self.has_any_permission(ctx, P.VIEW_OWN_SESSIONS, P.VIEW_ALL_SESSIONS)
        if action == A.UPDATE:
            return self.has_any_permission(
                ctx, P.MANAGE_SESSIONS, P.MANAGE_STUDENT_SESSIONS, P.RESCHEDULE_SESSION
            )
        if action == A.DELETE:
            return self.has_any_permission(ctx, P.CANCEL_SESSION, P.MANAGE_SESSIONS)
        return False

    def _review_rule(
        self, ctx: AccessContext, action: ActionType, resource_id: Optional[str]
    ) -> bool:
        if action == A.CREATE:
            return self.has_permission(ctx, P.WRITE_REVIEWS)
        if action == A.READ:
            return self.has_permission(ctx, P.VIEW_REVIEWS)
        if action == A.UPDATE:
            return self.has_any_permission(
                ctx, P.EDIT_OWN_REVIEWS, P.RESPOND_TO_REVIEWS, P.MODERATE_REVIEWS
            )
        if action == A.DELETE:
            return self.has_any_permission(ctx, P.DELETE_OWN_REVIEWS, P.DELETE_ANY_REVIEW)
        return False

    def _payment_rule(
        self, ctx: AccessContext, action: ActionType, resource_id: Optional[str]
    ) -> bool:
        if action == A.CREATE:
            return self.has_permission(ctx, P.MAKE_PAYMENTS)
        if action == A.READ:
            return self.has_any_permission(ctx, P.VIEW_OWN_PAYMENTS, P.VIEW_ALL_PAYMENTS)
        if action in (A.UPDATE, A.MANAGE):
            return self.has_permission(ctx, P.MANAGE_PAYMENTS)
        return False

    def _analytics_rule(
        self, ctx: AccessContext, action: ActionType, resource_id: Optional[str]
    ) -> bool:
        if action == A.READ:
            return self.has_any_permission(ctx, P.VIEW_ANALYTICS, P.VIEW_MENTOR_ANALYTICS)
        return False

    def _platform_rule(
        self, ctx: AccessContext, action: ActionType, resource_id: Optional[str]
    ) -> bool:
        if action in (A.READ, A.UPDATE, A.MANAGE):
            return self.has_permission(ctx, P.MANAGE_PLATFORM)
        return False


_RESOURCE_RULES: Dict[ResourceType, RuleFn] = {
    ResourceType.USER: PermissionChecker._user_rule,
    ResourceType.SESSION: PermissionChecker._session_rule,
    ResourceType.REVIEW: PermissionChecker._review_rule,
    ResourceType.PAYMENT: PermissionChecker._payment_rule,
    ResourceType.ANALYTICS: PermissionChecker._analytics_rule,
    ResourceType.PLATFORM: PermissionChecker._platform_rule,
}

# Global instance; holds no mutable state
permission_checker = PermissionChecker()
