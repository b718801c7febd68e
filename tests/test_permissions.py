"""
Test the static role/permission tables.
"""

import pytest

from database.models import AdminRole, UserRole
from services import permissions
from services.permissions import (
    ADMIN_PERMISSIONS, USER_PERMISSIONS, admin_role_info, get_admin_permissions,
    get_user_permissions, has_admin_permission, has_minimum_admin_role,
    has_minimum_user_role, has_user_permission, user_role_info,
)


class TestUserPermissions:
    def test_guest_can_only_view(self):
        assert get_user_permissions(UserRole.GUEST) == ("view_campaigns",)

    def test_user_adds_donation_and_profile(self):
        assert set(get_user_permissions("user")) == {
            "view_campaigns", "create_donation", "view_profile", "update_profile",
        }

    def test_community_member_is_superset_of_user(self):
        member = set(get_user_permissions(UserRole.COMMUNITY_MEMBER))
        assert set(get_user_permissions(UserRole.USER)) < member
        assert {"create_campaign", "manage_own_campaigns"} <= member

    def test_has_user_permission(self):
        assert has_user_permission("community_member", "create_campaign")
        assert not has_user_permission("user", "create_campaign")

    def test_unknown_role_raises(self):
        with pytest.raises(ValueError):
            get_user_permissions("superuser")


class TestAdminPermissions:
    def test_admin_capabilities(self):
        assert set(get_admin_permissions(AdminRole.ADMIN)) == {
            "view_dashboard", "manage_campaigns", "manage_community_requests",
            "manage_users", "view_donations",
        }

    def test_only_super_admin_manages_admins(self):
        assert has_admin_permission("super_admin", "manage_admins")
        assert has_admin_permission("super_admin", "system_settings")
        assert not has_admin_permission("admin", "manage_admins")


class TestHierarchy:
    @pytest.mark.parametrize("role,minimum,expected", [
        ("guest", "user", False),
        ("user", "user", True),
        ("community_member", "user", True),
        ("user", "community_member", False),
    ])
    def test_minimum_user_role(self, role, minimum, expected):
        assert has_minimum_user_role(role, minimum) is expected

    def test_minimum_admin_role(self):
        assert has_minimum_admin_role("super_admin", "admin")
        assert not has_minimum_admin_role("admin", "super_admin")

    def test_role_info(self):
        assert user_role_info("community_member") == {
            "role": "community_member",
            "display_name": "Community Member",
            "description": "Can create campaigns and manage community activities",
            "level": 2,
        }
        assert admin_role_info("super_admin")["display_name"] == "Super Administrator"


class TestImmutability:
    def test_tables_reject_assignment(self):
        with pytest.raises(TypeError):
            USER_PERMISSIONS[UserRole.USER] = ("everything",)
        with pytest.raises(TypeError):
            ADMIN_PERMISSIONS[AdminRole.ADMIN] = ("manage_admins",)

    def test_returned_sets_cannot_be_extended(self):
        perms = get_user_permissions("user")
        with pytest.raises(AttributeError):
            perms.append("create_campaign")
        assert "create_campaign" not in permissions.get_user_permissions("user")
