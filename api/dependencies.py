"""
Authentication gate and authorization policies.

Every protected route depends on one of the gate dependencies:
- get_current_user: user tokens only
- get_current_admin: admin tokens only
- get_current_principal: user token, falling back to admin token
- get_optional_principal: anonymous access allowed

Policies stack on top of the gate:
    @router.get("/x", dependencies=[Depends(require_user_roles("community_member"))])

The resolved principal is re-fetched from the database on every request
(a deleted user or deactivated admin is rejected even with a valid token)
and stored on request.state.principal.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database.db import get_db
from database.models import User, AdminUser, UserRole, AdminRole
from services.auth_service import PrincipalKind, TokenError, decode_access_token
from services.errors import AppError, AuthenticationError, AuthorizationError
from services.permissions import get_user_permissions, get_admin_permissions

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must produce our 401 envelope, not FastAPI's 403
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class UserPrincipal:
    id: str
    name: str
    email: str
    role: UserRole
    is_verified: bool
    permissions: Tuple[str, ...]
    kind: PrincipalKind = PrincipalKind.USER

    @classmethod
    def from_model(cls, user: User) -> "UserPrincipal":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_verified=user.is_verified,
            permissions=get_user_permissions(user.role),
        )


@dataclass(frozen=True)
class AdminPrincipal:
    id: str
    username: str
    email: str
    full_name: str
    role: AdminRole
    permissions: Tuple[str, ...]
    kind: PrincipalKind = PrincipalKind.ADMIN

    @classmethod
    def from_model(cls, admin: AdminUser) -> "AdminPrincipal":
        return cls(
            id=admin.id,
            username=admin.username,
            email=admin.email,
            full_name=admin.full_name,
            role=admin.role,
            permissions=get_admin_permissions(admin.role),
        )


Principal = Union[UserPrincipal, AdminPrincipal]


# ============================================================================
# Gate
# ============================================================================

def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    return credentials.credentials


def _claims(kind: PrincipalKind, token: str) -> dict:
    try:
        return decode_access_token(kind, token)
    except TokenError as e:
        logger.warning(f"Rejected {kind.value} token: {e.message}")
        raise AuthorizationError(e.message)


def _load_user(db: Session, claims: dict) -> UserPrincipal:
    user = db.get(User, claims["sub"])
    if not user:
        raise AuthenticationError("User not found or token invalid")
    return UserPrincipal.from_model(user)


def _load_admin(db: Session, claims: dict) -> AdminPrincipal:
    admin = db.get(AdminUser, claims["sub"])
    if not admin or not admin.is_active:
        raise AuthenticationError("Admin not found or token invalid")
    return AdminPrincipal.from_model(admin)


def _attach(request: Request, principal: Principal) -> Principal:
    request.state.principal = principal
    return principal


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> UserPrincipal:
    """Resolve a user token to the live user it names."""
    token = _bearer_token(credentials)
    principal = _load_user(db, _claims(PrincipalKind.USER, token))
    return _attach(request, principal)


def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> AdminPrincipal:
    """Resolve an admin token to an active admin."""
    token = _bearer_token(credentials)
    principal = _load_admin(db, _claims(PrincipalKind.ADMIN, token))
    return _attach(request, principal)


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Accept either kind of token.

    The user audience is tried first; only a token that fails user
    verification is tried as an admin token. If both fail, the user-side
    reason is reported.
    """
    token = _bearer_token(credentials)
    try:
        claims = decode_access_token(PrincipalKind.USER, token)
    except TokenError as user_error:
        try:
            claims = decode_access_token(PrincipalKind.ADMIN, token)
        except TokenError:
            logger.warning(f"Rejected token for either kind: {user_error.message}")
            raise AuthorizationError(user_error.message)
        return _attach(request, _load_admin(db, claims))
    return _attach(request, _load_user(db, claims))


def get_optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """Like get_current_principal, but anonymous or bad tokens yield None."""
    request.state.principal = None
    if credentials is None:
        return None
    try:
        return get_current_principal(request, credentials, db)
    except AppError:
        return None


# ============================================================================
# Policies
# ============================================================================

def require_user_roles(*roles: Union[UserRole, str]):
    """Allow only users whose role is in `roles`."""
    allowed = tuple(UserRole(r) for r in roles)

    def dependency(principal: UserPrincipal = Depends(get_current_user)) -> UserPrincipal:
        if principal.role not in allowed:
            raise AuthorizationError(
                f"Access denied. Required roles: {', '.join(r.value for r in allowed)}",
                data={
                    "current_role": principal.role.value,
                    "required_roles": [r.value for r in allowed],
                },
            )
        return principal

    return dependency


def require_admin_roles(*roles: Union[AdminRole, str]):
    """Allow only admins whose role is in `roles`."""
    allowed = tuple(AdminRole(r) for r in roles)

    def dependency(principal: AdminPrincipal = Depends(get_current_admin)) -> AdminPrincipal:
        if principal.role not in allowed:
            raise AuthorizationError(
                f"Access denied. Required admin roles: {', '.join(r.value for r in allowed)}",
                data={
                    "current_role": principal.role.value,
                    "required_roles": [r.value for r in allowed],
                },
            )
        return principal

    return dependency


async def _resource_owner_id(request: Request, field: str) -> Optional[Any]:
    """Look the field up in path params, then JSON body, then query string."""
    value = request.path_params.get(field)
    if value is None and request.headers.get("content-type", "").startswith("application/json"):
        body = await request.json()  # cached by Starlette, the endpoint can still read it
        if isinstance(body, dict):
            value = body.get(field)
    if value is None:
        value = request.query_params.get(field)
    return value


def require_ownership(field: str = "user_id"):
    """
    The request's `field` must name the current user.

    Requests that don't carry the field pass through.
    """
    async def dependency(
        request: Request,
        principal: UserPrincipal = Depends(get_current_user),
    ) -> UserPrincipal:
        owner_id = await _resource_owner_id(request, field)
        if owner_id is not None and str(owner_id) != principal.id:
            raise AuthorizationError("Access denied. You can only access your own resources")
        return principal

    return dependency


def require_admin_or_owner(field: str = "user_id"):
    """Admins pass; users must own the resource named by `field`."""
    async def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if isinstance(principal, AdminPrincipal):
            return principal
        owner_id = await _resource_owner_id(request, field)
        if owner_id is not None and str(owner_id) != principal.id:
            raise AuthorizationError("Access denied. Admin access or resource ownership required")
        return principal

    return dependency


def require_verified_user(principal: UserPrincipal = Depends(get_current_user)) -> UserPrincipal:
    if not principal.is_verified:
        raise AuthorizationError("Account verification required", data={"is_verified": False})
    return principal


require_community_member = require_user_roles(UserRole.COMMUNITY_MEMBER)
require_any_admin = require_admin_roles(AdminRole.ADMIN, AdminRole.SUPER_ADMIN)
require_super_admin = require_admin_roles(AdminRole.SUPER_ADMIN)
