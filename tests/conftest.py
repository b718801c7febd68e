"""
Shared pytest fixtures for CatDonation tests.

The environment is configured before any application module is imported:
a throwaway SQLite file, a fixed JWT secret, cheap bcrypt rounds and a
temporary upload directory.
"""
import os
import tempfile
from datetime import datetime, timedelta
from decimal import Decimal

_TMP_DIR = tempfile.mkdtemp(prefix="catdonation-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["APP_ENV"] = "test"

import pytest
from fastapi.testclient import TestClient

from database.db import SessionLocal, engine
from database.models import (
    AdminRole, AdminUser, Base, Campaign, CampaignCategory, CampaignStatus,
    User, UserRole,
)
from services.auth_service import (
    PrincipalKind, admin_token_claims, create_access_token, hash_password,
    user_token_claims,
)

PASSWORD = "secret123"

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082"
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    from main import app
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def factory(role=UserRole.USER, is_verified=False, name=None, email=None, phone=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"Test User {n}",
            email=email or f"user{n}@example.com",
            phone=phone or f"08120000{n:04d}",
            password_hash=hash_password(PASSWORD),
            role=role,
            is_verified=is_verified,
        )
        db.add(user)
        db.commit()
        return user

    return factory


@pytest.fixture
def make_admin(db):
    counter = {"n": 0}

    def factory(role=AdminRole.ADMIN, is_active=True, username=None):
        counter["n"] += 1
        n = counter["n"]
        admin = AdminUser(
            username=username or f"admin{n}",
            email=f"admin{n}@catdonation.id",
            password_hash=hash_password(PASSWORD),
            full_name=f"Admin Number {n}",
            role=role,
            is_active=is_active,
        )
        db.add(admin)
        db.commit()
        return admin

    return factory


@pytest.fixture
def make_campaign(db):
    def factory(owner, status=CampaignStatus.ACTIVE, target_amount="5000000",
                current_amount="0", title="Help Oyen Walk Again", days=30):
        campaign = Campaign(
            user_id=owner.id,
            title=title,
            description="Oyen needs surgery on his hind leg after an accident.",
            location="Bandung",
            category=CampaignCategory.MEDICAL,
            image="campaign_test.png",
            target_amount=Decimal(target_amount),
            current_amount=Decimal(current_amount),
            bank_account="1234567890",
            deadline=datetime.utcnow() + timedelta(days=days),
            status=status,
        )
        db.add(campaign)
        db.commit()
        return campaign

    return factory


def user_headers(user) -> dict:
    token = create_access_token(PrincipalKind.USER, user_token_claims(user))
    return {"Authorization": f"Bearer {token}"}


def admin_headers(admin) -> dict:
    token = create_access_token(PrincipalKind.ADMIN, admin_token_claims(admin))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_auth():
    return user_headers


@pytest.fixture
def admin_auth():
    return admin_headers
