"""
Tests for the static role/permission catalog and role inclusion table.
"""

import pytest

from mentorhub.core.enums import PermissionName, RoleName
from mentorhub.core.rbac import (
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    SUPER_ADMIN_ONLY_PERMISSIONS,
    AccessContext,
    permissions_for,
    role_inherits_from,
)


class TestCatalog:
    def test_every_role_has_an_entry(self):
        assert set(ROLE_PERMISSIONS) == set(RoleName)

    def test_super_admin_is_superset_of_admin(self):
        assert ROLE_PERMISSIONS[RoleName.SUPER_ADMIN] >= ROLE_PERMISSIONS[RoleName.ADMIN]
        assert (
            ROLE_PERMISSIONS[RoleName.SUPER_ADMIN] - ROLE_PERMISSIONS[RoleName.ADMIN]
            == SUPER_ADMIN_ONLY_PERMISSIONS
        )

    def test_student_can_book_but_mentor_cannot(self):
        assert PermissionName.BOOK_SESSION in permissions_for(RoleName.STUDENT)
        assert PermissionName.BOOK_SESSION not in permissions_for(RoleName.MENTOR)

    def test_mentor_sets_availability(self):
        assert PermissionName.SET_AVAILABILITY in permissions_for(RoleName.MENTOR)
        assert PermissionName.SET_AVAILABILITY not in permissions_for(RoleName.STUDENT)

    def test_admin_does_not_book_sessions(self):
        assert PermissionName.BOOK_SESSION not in permissions_for(RoleName.ADMIN)
        assert PermissionName.MANAGE_SESSIONS in permissions_for(RoleName.ADMIN)

    def test_delete_profile_is_super_admin_only(self):
        for role in (RoleName.STUDENT, RoleName.MENTOR, RoleName.ADMIN):
            assert PermissionName.DELETE_PROFILE not in permissions_for(role)
        assert PermissionName.DELETE_PROFILE in permissions_for(RoleName.SUPER_ADMIN)

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS[RoleName.STUDENT] = frozenset()  # type: ignore[index]
        with pytest.raises(AttributeError):
            ROLE_PERMISSIONS[RoleName.STUDENT].add(PermissionName.MANAGE_USERS)  # type: ignore[attr-defined]

    def test_every_permission_is_granted_to_someone(self):
        granted = frozenset().union(*ROLE_PERMISSIONS.values())
        assert granted == set(PermissionName)


class TestHierarchy:
    @pytest.mark.parametrize("role", list(RoleName))
    def test_role_includes_itself(self, role):
        assert role_inherits_from(role, role)

    def test_admin_includes_mentor_and_student(self):
        assert role_inherits_from(RoleName.ADMIN, RoleName.MENTOR)
        assert role_inherits_from(RoleName.ADMIN, RoleName.STUDENT)
        assert not role_inherits_from(RoleName.ADMIN, RoleName.SUPER_ADMIN)

    def test_mentor_and_student_are_incomparable(self):
        assert not role_inherits_from(RoleName.MENTOR, RoleName.STUDENT)
        assert not role_inherits_from(RoleName.STUDENT, RoleName.MENTOR)

    def test_super_admin_includes_everyone(self):
        assert ROLE_HIERARCHY[RoleName.SUPER_ADMIN] == frozenset(RoleName)


class TestAccessContext:
    def test_is_admin(self):
        assert AccessContext("u1", RoleName.ADMIN).is_admin
        assert AccessContext("u1", RoleName.SUPER_ADMIN).is_admin
        assert not AccessContext("u1", RoleName.MENTOR).is_admin

    def test_for_resource_keeps_identity(self):
        ctx = AccessContext("u1", RoleName.STUDENT)
        scoped = ctx.for_resource(resource_id="r1", resource_owner_id="u2", session_id="s1")
        assert (scoped.user_id, scoped.role) == ("u1", RoleName.STUDENT)
        assert scoped.resource_owner_id == "u2"
        assert ctx.resource_id is None

    def test_is_frozen(self):
        ctx = AccessContext("u1", RoleName.STUDENT)
        with pytest.raises(Exception):
            ctx.user_id = "u2"  # type: ignore[misc]
