"""
Authentication Service

Handles password hashing, JWT session tokens, and the login flows for the two
principal kinds:
1. Users (donors and community members) - log in with email + password
2. Admins (platform staff) - log in with username or email + password

Each kind gets tokens bound to its own audience, so a token issued for one
kind never verifies as the other even though both share the signing key.
"""

import enum
import uuid
import jwt
import logging
from datetime import datetime, timedelta
from passlib.context import CryptContext
from typing import Optional, Dict, Any
from sqlalchemy import or_
from sqlalchemy.orm import Session

import config
from database.db import transaction
from database.models import User, AdminUser, UserRole
from services.errors import AuthenticationError, ConflictError, ValidationError

logger = logging.getLogger(__name__)

# Password hashing with bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)

# JWT settings
SECRET_KEY = config.JWT_SECRET_KEY
if not SECRET_KEY:
    logger.critical("❌ JWT_SECRET_KEY (or SECRET_KEY) environment variable is required!")
    raise RuntimeError("JWT_SECRET_KEY environment variable is required. Set JWT_SECRET_KEY or SECRET_KEY.")
ALGORITHM = config.JWT_ALGORITHM
REQUIRED_CLAIMS = ["sub", "role", "iss", "aud", "iat", "exp"]


class PrincipalKind(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


AUDIENCES = {
    PrincipalKind.USER: config.JWT_USER_AUDIENCE,
    PrincipalKind.ADMIN: config.JWT_ADMIN_AUDIENCE,
}


# ============================================================================
# Token errors
# ============================================================================

class TokenError(Exception):
    """Base class for every token verification failure."""

    message = "Invalid token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class TokenSignatureError(TokenError):
    message = "Invalid token signature"


class TokenExpiredError(TokenError):
    message = "Token has expired"


class TokenNotYetValidError(TokenError):
    message = "Token not active yet"


class TokenAudienceError(TokenError):
    """Wrong audience, wrong issuer, or a token that cannot be parsed."""
    message = "Invalid token"


# ============================================================================
# Passwords
# ============================================================================

def hash_password(password: str) -> str:
    """Hash a plain password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================================
# Token codec
# ============================================================================

def _encode(claims: Dict[str, Any], audience: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    to_encode = dict(claims)
    to_encode.update({
        "iss": config.JWT_ISSUER,
        "aud": audience,
        "iat": now,
        "exp": now + expires_delta,
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _decode(token: str, audience: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=audience,
            issuer=config.JWT_ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.ImmatureSignatureError:
        raise TokenNotYetValidError()
    except jwt.InvalidSignatureError:
        raise TokenSignatureError()
    except jwt.InvalidTokenError as e:
        # InvalidAudience, InvalidIssuer, DecodeError, MissingRequiredClaim
        raise TokenAudienceError(f"Invalid token: {e}")


def create_access_token(
    kind: PrincipalKind,
    claims: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token for a user or an admin.

    Args:
        kind: Which principal kind the token is for (selects the audience)
        claims: sub (principal id), role, and email (user) or username (admin)
        expires_delta: Optional custom lifetime; defaults to JWT_EXPIRE

    Returns:
        JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(seconds=config.JWT_EXPIRE_SECONDS)
    return _encode(claims, AUDIENCES[PrincipalKind(kind)], expires_delta)


def decode_access_token(kind: PrincipalKind, token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry, issuer and audience, and return the claims.

    Raises:
        TokenError subclass describing the failure
    """
    return _decode(token, AUDIENCES[PrincipalKind(kind)])


def create_refresh_token(user: User) -> str:
    return _encode(
        {"sub": user.id, "role": user.role.value, "type": "refresh"},
        config.JWT_REFRESH_AUDIENCE,
        timedelta(seconds=config.JWT_REFRESH_EXPIRE_SECONDS),
    )


def decode_refresh_token(token: str) -> Dict[str, Any]:
    claims = _decode(token, config.JWT_REFRESH_AUDIENCE)
    if claims.get("type") != "refresh":
        raise TokenAudienceError("Invalid refresh token")
    return claims


def user_token_claims(user: User) -> Dict[str, Any]:
    return {"sub": user.id, "email": user.email, "role": user.role.value}


def admin_token_claims(admin: AdminUser) -> Dict[str, Any]:
    return {"sub": admin.id, "username": admin.username, "role": admin.role.value}


def issue_user_tokens(user: User) -> Dict[str, Any]:
    """Access + refresh pair returned by register, login and refresh."""
    return {
        "token": create_access_token(PrincipalKind.USER, user_token_claims(user)),
        "refresh_token": create_refresh_token(user),
        "token_type": "bearer",
        "expires_in": config.JWT_EXPIRE_SECONDS,
    }


def inspect_token(token: str) -> Dict[str, Any]:
    """
    Identify which kind a token belongs to.

    Tries the user audience first, then the admin audience. If both fail the
    user-side error is raised.
    """
    try:
        return {"kind": PrincipalKind.USER, "claims": decode_access_token(PrincipalKind.USER, token)}
    except TokenError as user_error:
        try:
            return {"kind": PrincipalKind.ADMIN, "claims": decode_access_token(PrincipalKind.ADMIN, token)}
        except TokenError:
            raise user_error


# ============================================================================
# Login flows
# ============================================================================

def register_user(db: Session, name: str, email: str, phone: str, password: str) -> User:
    """
    Create a new end user.

    The role is always `user`; callers cannot choose it.
    """
    existing = db.query(User).filter(or_(User.email == email, User.phone == phone)).first()
    if existing:
        raise ConflictError("User already exists with this email or phone number")

    user = User(
        id=str(uuid.uuid4()),
        name=name,
        email=email,
        phone=phone,
        password_hash=hash_password(password),
        role=UserRole.USER,
        is_verified=False,
    )
    with transaction(db):
        db.add(user)

    logger.info(f"New user registered: {user.id} ({email})")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed user login for {email}")
        raise AuthenticationError("Invalid email or password")
    return user


def authenticate_admin(
    db: Session,
    password: str,
    username: Optional[str] = None,
    email: Optional[str] = None,
) -> AdminUser:
    """
    Admin login by username or email.

    Inactive admins are treated exactly like unknown ones.
    """
    query = db.query(AdminUser).filter(AdminUser.is_active.is_(True))
    if username:
        query = query.filter(AdminUser.username == username)
    elif email:
        query = query.filter(AdminUser.email == email)
    else:
        raise ValidationError("Username or email is required")

    admin = query.first()
    if not admin or not verify_password(password, admin.password_hash):
        logger.warning(f"Failed admin login for {username or email}")
        raise AuthenticationError("Invalid credentials")

    with transaction(db):
        admin.last_login_at = datetime.utcnow()

    logger.info(f"Admin logged in: {admin.username}")
    return admin


def refresh_user_tokens(db: Session, refresh_token: str) -> User:
    """Resolve a refresh token back to a live user."""
    try:
        claims = decode_refresh_token(refresh_token)
    except TokenError as e:
        raise AuthenticationError(e.message)

    user = db.query(User).filter(User.id == claims["sub"]).first()
    if not user:
        raise AuthenticationError("User not found")
    return user
