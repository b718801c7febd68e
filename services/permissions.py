"""
Permission Model

Static role -> capability and role -> level tables for both principal kinds.
The tables are built once at import time and exposed read-only
(MappingProxyType of tuples), so no caller can grant itself a capability.
"""

from types import MappingProxyType
from typing import Dict, Tuple, Union

from database.models import UserRole, AdminRole


# ============================================
# User roles
# ============================================

_GUEST_PERMISSIONS = ("view_campaigns",)
_USER_PERMISSIONS = _GUEST_PERMISSIONS + ("create_donation", "view_profile", "update_profile")
_COMMUNITY_PERMISSIONS = _USER_PERMISSIONS + ("create_campaign", "manage_own_campaigns")

USER_PERMISSIONS = MappingProxyType({
    UserRole.GUEST: _GUEST_PERMISSIONS,
    UserRole.USER: _USER_PERMISSIONS,
    UserRole.COMMUNITY_MEMBER: _COMMUNITY_PERMISSIONS,
})

USER_ROLE_LEVELS = MappingProxyType({
    UserRole.GUEST: 0,
    UserRole.USER: 1,
    UserRole.COMMUNITY_MEMBER: 2,
})

USER_ROLE_NAMES = MappingProxyType({
    UserRole.GUEST: "Guest",
    UserRole.USER: "User",
    UserRole.COMMUNITY_MEMBER: "Community Member",
})

USER_ROLE_DESCRIPTIONS = MappingProxyType({
    UserRole.GUEST: "Can view campaigns only",
    UserRole.USER: "Can donate and manage profile",
    UserRole.COMMUNITY_MEMBER: "Can create campaigns and manage community activities",
})


# ============================================
# Admin roles
# ============================================

_ADMIN_PERMISSIONS = (
    "view_dashboard",
    "manage_campaigns",
    "manage_community_requests",
    "manage_users",
    "view_donations",
)
_SUPER_ADMIN_PERMISSIONS = _ADMIN_PERMISSIONS + ("manage_admins", "system_settings")

ADMIN_PERMISSIONS = MappingProxyType({
    AdminRole.ADMIN: _ADMIN_PERMISSIONS,
    AdminRole.SUPER_ADMIN: _SUPER_ADMIN_PERMISSIONS,
})

ADMIN_ROLE_LEVELS = MappingProxyType({
    AdminRole.ADMIN: 1,
    AdminRole.SUPER_ADMIN: 2,
})

ADMIN_ROLE_NAMES = MappingProxyType({
    AdminRole.ADMIN: "Administrator",
    AdminRole.SUPER_ADMIN: "Super Administrator",
})

ADMIN_ROLE_DESCRIPTIONS = MappingProxyType({
    AdminRole.ADMIN: "Can manage campaigns, users, and community requests",
    AdminRole.SUPER_ADMIN: "Full system access including admin management",
})


def get_user_permissions(role: Union[UserRole, str]) -> Tuple[str, ...]:
    return USER_PERMISSIONS[UserRole(role)]


def get_admin_permissions(role: Union[AdminRole, str]) -> Tuple[str, ...]:
    return ADMIN_PERMISSIONS[AdminRole(role)]


def has_user_permission(role: Union[UserRole, str], permission: str) -> bool:
    return permission in get_user_permissions(role)


def has_admin_permission(role: Union[AdminRole, str], permission: str) -> bool:
    return permission in get_admin_permissions(role)


def user_role_level(role: Union[UserRole, str]) -> int:
    return USER_ROLE_LEVELS[UserRole(role)]


def admin_role_level(role: Union[AdminRole, str]) -> int:
    return ADMIN_ROLE_LEVELS[AdminRole(role)]


def has_minimum_user_role(role: Union[UserRole, str], minimum: Union[UserRole, str]) -> bool:
    """True if `role` sits at or above `minimum` in guest < user < community_member."""
    return user_role_level(role) >= user_role_level(minimum)


def has_minimum_admin_role(role: Union[AdminRole, str], minimum: Union[AdminRole, str]) -> bool:
    return admin_role_level(role) >= admin_role_level(minimum)


def user_role_info(role: Union[UserRole, str]) -> Dict[str, object]:
    """Display data for a user role, as returned by the auth endpoints."""
    role = UserRole(role)
    return {
        "role": role.value,
        "display_name": USER_ROLE_NAMES[role],
        "description": USER_ROLE_DESCRIPTIONS[role],
        "level": USER_ROLE_LEVELS[role],
    }


def admin_role_info(role: Union[AdminRole, str]) -> Dict[str, object]:
    role = AdminRole(role)
    return {
        "role": role.value,
        "display_name": ADMIN_ROLE_NAMES[role],
        "description": ADMIN_ROLE_DESCRIPTIONS[role],
        "level": ADMIN_ROLE_LEVELS[role],
    }
