"""
Authentication Router

Endpoints for both principal kinds. Users and admins log in separately and
receive tokens for different audiences.

POST /api/auth/register     - Create a user account (role is always "user")
POST /api/auth/login        - User login with email + password
POST /api/auth/admin/login  - Admin login with username or email + password
POST /api/auth/refresh      - Exchange a refresh token for a new token pair
POST /api/auth/verify-token - Introspect a token
GET  /api/auth/me           - Current principal (user or admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, model_validator
from sqlalchemy.orm import Session

from api.dependencies import (
    AdminPrincipal, Principal, get_current_principal,
)
from api.responses import envelope, error_response
from api.schemas import AdminResponse, UserResponse, dump
from database.db import get_db
from database.models import AdminRole, AdminUser, User, UserRole
from services.auth_service import (
    PrincipalKind,
    TokenError,
    admin_token_claims,
    authenticate_admin,
    authenticate_user,
    create_access_token,
    inspect_token,
    issue_user_tokens,
    refresh_user_tokens,
    register_user,
)
from services.errors import NotFoundError
from services.permissions import (
    admin_role_info, get_admin_permissions, get_user_permissions, user_role_info,
)
import config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# ============================================================================
# Request Models
# ============================================================================

class RegisterRequest(BaseModel):
    """New account. Any extra fields (including "role") are ignored."""
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=10, max_length=20, pattern=r"^[0-9+\-\s()]+$")
    password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Siti Rahma",
                "email": "siti@example.com",
                "phone": "081234567890",
                "password": "secret123",
                "confirm_password": "secret123"
            }
        }


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AdminLoginRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: str

    @model_validator(mode="after")
    def username_or_email(self):
        if not self.username and not self.email:
            raise ValueError("Username or email is required")
        return self


class RefreshRequest(BaseModel):
    refresh_token: str


class VerifyTokenRequest(BaseModel):
    token: str


# ============================================================================
# Response helpers
# ============================================================================

def _user_capabilities(user) -> dict:
    return {
        "can_create_campaigns": user.role == UserRole.COMMUNITY_MEMBER,
        "can_donate": True,
        "can_manage_profile": True,
        "requires_verification": not user.is_verified,
    }


def _admin_capabilities(admin) -> dict:
    is_super = admin.role == AdminRole.SUPER_ADMIN
    return {
        "can_manage_users": True,
        "can_manage_campaigns": True,
        "can_manage_community_requests": True,
        "can_manage_admins": is_super,
        "can_access_system_settings": is_super,
    }


def _user_session(user: User) -> dict:
    data = issue_user_tokens(user)
    data.update({
        "user": dump(UserResponse, user),
        "permissions": list(get_user_permissions(user.role)),
        "role_info": user_role_info(user.role),
        "capabilities": _user_capabilities(user),
    })
    return data


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create a user account and log it in."""
    user = register_user(
        db,
        name=request.name,
        email=request.email,
        phone=request.phone,
        password=request.password,
    )
    return envelope("User registered successfully", _user_session(user))


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, request.email, request.password)
    logger.info(f"User logged in: {user.id}")
    return envelope("Login successful", _user_session(user))


@router.post("/admin/login")
def admin_login(request: AdminLoginRequest, db: Session = Depends(get_db)):
    """
    Admin login endpoint.

    Returns an admin-audience token; it is rejected by every user-only route.
    """
    admin = authenticate_admin(db, request.password, username=request.username, email=request.email)
    token = create_access_token(PrincipalKind.ADMIN, admin_token_claims(admin))
    return envelope("Admin login successful", {
        "token": token,
        "token_type": "bearer",
        "expires_in": config.JWT_EXPIRE_SECONDS,
        "admin": dump(AdminResponse, admin),
        "permissions": list(get_admin_permissions(admin.role)),
        "role_info": admin_role_info(admin.role),
        "capabilities": _admin_capabilities(admin),
    })


@router.post("/refresh")
def refresh(request: RefreshRequest, db: Session = Depends(get_db)):
    user = refresh_user_tokens(db, request.refresh_token)
    return envelope("Token refreshed successfully", _user_session(user))


@router.post("/verify-token")
def verify_token(request: VerifyTokenRequest):
    """Check a token of either kind without touching the database."""
    try:
        result = inspect_token(request.token)
    except TokenError as e:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Invalid token", error=e.message)

    kind, claims = result["kind"], result["claims"]
    if kind == PrincipalKind.ADMIN:
        role_info = dict(admin_role_info(claims["role"]), permissions=list(get_admin_permissions(claims["role"])))
    else:
        role_info = dict(user_role_info(claims["role"]), permissions=list(get_user_permissions(claims["role"])))

    return envelope("Token is valid", {
        "valid": True,
        "type": kind.value,
        "decoded": claims,
        "role_info": role_info,
    })


@router.get("/me")
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    """Current user or admin, with role info and capabilities."""
    if isinstance(principal, AdminPrincipal):
        admin = db.get(AdminUser, principal.id)
        if not admin:
            raise NotFoundError("Admin not found")
        data = {
            "type": "admin",
            "admin": dump(AdminResponse, admin),
            "permissions": list(principal.permissions),
            "role_info": admin_role_info(admin.role),
            "capabilities": _admin_capabilities(admin),
        }
    else:
        user = db.get(User, principal.id)
        if not user:
            raise NotFoundError("User not found")
        data = {
            "type": "user",
            "user": dump(UserResponse, user),
            "permissions": list(principal.permissions),
            "role_info": user_role_info(user.role),
            "capabilities": _user_capabilities(user),
        }
    return envelope("Current user retrieved successfully", data)
