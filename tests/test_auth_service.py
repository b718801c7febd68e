"""
Test password hashing, the JWT codec and the login flows.
"""

from datetime import datetime, timedelta

import jwt
import pytest

import config
from database.models import UserRole
from services import auth_service
from services.auth_service import (
    PrincipalKind, TokenAudienceError, TokenError, TokenExpiredError,
    TokenNotYetValidError, TokenSignatureError, authenticate_admin,
    authenticate_user, create_access_token, create_refresh_token,
    decode_access_token, decode_refresh_token, hash_password, inspect_token,
    register_user, verify_password,
)
from services.errors import AuthenticationError, ConflictError, ValidationError
from conftest import PASSWORD


def _raw_token(**overrides):
    now = datetime.utcnow()
    claims = {
        "sub": "abc",
        "role": "user",
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_USER_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(hours=1),
    }
    claims.update(overrides)
    return jwt.encode(claims, auth_service.SECRET_KEY, algorithm="HS256")


class TestPasswords:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("kucing123")
        assert hashed != "kucing123"
        assert verify_password("kucing123", hashed)
        assert not verify_password("anjing123", hashed)


class TestTokenCodec:
    def test_user_token_round_trip(self):
        token = create_access_token(PrincipalKind.USER, {"sub": "u-1", "email": "a@b.co", "role": "user"})
        claims = decode_access_token(PrincipalKind.USER, token)
        assert claims["sub"] == "u-1"
        assert claims["email"] == "a@b.co"
        assert claims["aud"] == "cat-donation-users"
        assert claims["iss"] == "cat-donation-api"
        assert claims["exp"] - claims["iat"] == config.JWT_EXPIRE_SECONDS

    def test_admin_token_has_admin_audience(self):
        token = create_access_token(PrincipalKind.ADMIN, {"sub": "a-1", "username": "root", "role": "admin"})
        assert decode_access_token(PrincipalKind.ADMIN, token)["aud"] == "cat-donation-admins"

    def test_user_token_rejected_as_admin(self):
        token = create_access_token(PrincipalKind.USER, {"sub": "u-1", "email": "a@b.co", "role": "user"})
        with pytest.raises(TokenAudienceError):
            decode_access_token(PrincipalKind.ADMIN, token)

    def test_admin_token_rejected_as_user(self):
        token = create_access_token(PrincipalKind.ADMIN, {"sub": "a-1", "username": "root", "role": "super_admin"})
        with pytest.raises(TokenAudienceError):
            decode_access_token(PrincipalKind.USER, token)

    def test_expired_token(self):
        token = create_access_token(
            PrincipalKind.USER, {"sub": "u-1", "role": "user"}, expires_delta=timedelta(seconds=-5)
        )
        with pytest.raises(TokenExpiredError):
            decode_access_token(PrincipalKind.USER, token)

    def test_not_yet_valid_token(self):
        token = _raw_token(nbf=datetime.utcnow() + timedelta(hours=1))
        with pytest.raises(TokenNotYetValidError):
            decode_access_token(PrincipalKind.USER, token)

    def test_foreign_signature(self):
        token = jwt.encode(
            {"sub": "u-1", "role": "user", "iss": config.JWT_ISSUER, "aud": config.JWT_USER_AUDIENCE,
             "iat": datetime.utcnow(), "exp": datetime.utcnow() + timedelta(hours=1)},
            "another-secret-that-is-also-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(TokenSignatureError):
            decode_access_token(PrincipalKind.USER, token)

    def test_wrong_issuer(self):
        with pytest.raises(TokenAudienceError):
            decode_access_token(PrincipalKind.USER, _raw_token(iss="someone-else"))

    def test_garbage_token(self):
        with pytest.raises(TokenAudienceError):
            decode_access_token(PrincipalKind.USER, "not.a.jwt")

    def test_all_failures_share_a_base_class(self):
        for error_class in (TokenSignatureError, TokenExpiredError, TokenNotYetValidError, TokenAudienceError):
            assert issubclass(error_class, TokenError)

    def test_inspect_token_falls_back_to_admin(self):
        token = create_access_token(PrincipalKind.ADMIN, {"sub": "a-1", "username": "root", "role": "admin"})
        assert inspect_token(token)["kind"] == PrincipalKind.ADMIN


class TestRefreshTokens:
    def test_refresh_token_is_not_an_access_token(self, make_user):
        user = make_user()
        refresh = create_refresh_token(user)
        assert decode_refresh_token(refresh)["sub"] == user.id
        with pytest.raises(TokenAudienceError):
            decode_access_token(PrincipalKind.USER, refresh)

    def test_access_token_is_not_a_refresh_token(self, make_user):
        user = make_user()
        access = create_access_token(PrincipalKind.USER, auth_service.user_token_claims(user))
        with pytest.raises(TokenAudienceError):
            decode_refresh_token(access)


class TestLoginFlows:
    def test_register_always_creates_user_role(self, db):
        user = register_user(db, "Siti Rahma", "siti@example.com", "081234567890", "secret123")
        assert user.role == UserRole.USER
        assert user.is_verified is False
        assert user.password_hash != "secret123"

    def test_register_duplicate_email(self, db, make_user):
        make_user(email="taken@example.com")
        with pytest.raises(ConflictError):
            register_user(db, "Someone", "taken@example.com", "089999999999", "secret123")

    def test_register_duplicate_phone(self, db, make_user):
        make_user(phone="081111111111")
        with pytest.raises(ConflictError):
            register_user(db, "Someone", "new@example.com", "081111111111", "secret123")

    def test_authenticate_user(self, db, make_user):
        user = make_user(email="budi@example.com")
        assert authenticate_user(db, "budi@example.com", PASSWORD).id == user.id
        with pytest.raises(AuthenticationError):
            authenticate_user(db, "budi@example.com", "wrong-password")
        with pytest.raises(AuthenticationError):
            authenticate_user(db, "nobody@example.com", PASSWORD)

    def test_authenticate_admin_by_username_or_email(self, db, make_admin):
        admin = make_admin(username="root")
        assert authenticate_admin(db, PASSWORD, username="root").id == admin.id
        logged_in = authenticate_admin(db, PASSWORD, email=admin.email)
        assert logged_in.last_login_at is not None

    def test_inactive_admin_cannot_log_in(self, db, make_admin):
        make_admin(username="gone", is_active=False)
        with pytest.raises(AuthenticationError):
            authenticate_admin(db, PASSWORD, username="gone")

    def test_admin_login_needs_identifier(self, db):
        with pytest.raises(ValidationError):
            authenticate_admin(db, PASSWORD)


class TestDurations:
    @pytest.mark.parametrize("raw,seconds", [
        ("24h", 86400), ("30m", 1800), ("7d", 604800), ("45s", 45), ("3600", 3600),
    ])
    def test_parse_duration(self, raw, seconds):
        assert config.parse_duration(raw) == seconds

    def test_invalid_duration(self):
        with pytest.raises(ValueError):
            config.parse_duration("soon")
