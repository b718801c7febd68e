"""
User Service

Profile management for end users, plus the admin-side user directory
(listing, verification flag, role override).
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from database.db import transaction
from database.models import (
    Campaign, CampaignStatus, Donation, PaymentStatus, User, UserRole,
)
from services.auth_service import hash_password, verify_password
from services.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset({"name", "gender", "birth_date", "phone", "address"})
ASSIGNABLE_ROLES = (UserRole.USER, UserRole.COMMUNITY_MEMBER)

CENTS = Decimal("0.01")


def money(value) -> str:
    """Format an aggregate amount the way amounts are stored: two decimals."""
    return str(Decimal(str(value or 0)).quantize(CENTS))


def get_profile(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_profile(db: Session, user_id: str, updates: Dict[str, Any]) -> User:
    unknown = set(updates) - PROFILE_FIELDS
    if unknown:
        raise ValidationError("Validation Error", errors=[f"Field '{name}' cannot be updated" for name in sorted(unknown)])

    changes = {key: value for key, value in updates.items() if value is not None}
    if not changes:
        raise ValidationError("No fields to update")

    user = get_profile(db, user_id)
    if "phone" in changes:
        taken = db.query(User.id).filter(User.phone == changes["phone"], User.id != user_id).first()
        if taken:
            raise ConflictError("Phone number already in use")

    with transaction(db):
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = datetime.utcnow()

    logger.info(f"Profile updated for {user_id}: {sorted(changes)}")
    return user


def change_password(db: Session, user_id: str, current_password: str, new_password: str) -> None:
    user = get_profile(db, user_id)
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    with transaction(db):
        user.password_hash = hash_password(new_password)
        user.updated_at = datetime.utcnow()

    logger.info(f"Password changed for {user_id}")


def get_user_stats(db: Session, user_id: str) -> Dict[str, Any]:
    """Donation and campaign aggregates for one user."""
    is_success = Donation.payment_status == PaymentStatus.SUCCESS
    total, successful, donated = db.query(
        func.count(Donation.id),
        func.sum(case((is_success, 1), else_=0)),
        func.sum(case((is_success, Donation.amount), else_=0)),
    ).filter(Donation.user_id == user_id).one()

    campaigns, active, completed, raised = db.query(
        func.count(Campaign.id),
        func.sum(case((Campaign.status == CampaignStatus.ACTIVE, 1), else_=0)),
        func.sum(case((Campaign.status == CampaignStatus.COMPLETED, 1), else_=0)),
        func.sum(Campaign.current_amount),
    ).filter(Campaign.user_id == user_id).one()

    return {
        "donations": {
            "total_donations": total or 0,
            "successful_donations": int(successful or 0),
            "total_donated": money(donated),
        },
        "campaigns": {
            "total_campaigns": campaigns or 0,
            "active_campaigns": int(active or 0),
            "completed_campaigns": int(completed or 0),
            "total_raised": money(raised),
        },
    }


# ============================================
# Admin user directory
# ============================================

def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def update_user_verification(db: Session, user_id: str, is_verified: bool) -> User:
    user = get_profile(db, user_id)
    with transaction(db):
        user.is_verified = is_verified
        user.updated_at = datetime.utcnow()
    logger.info(f"User {user_id} verification set to {is_verified}")
    return user


def update_user_role(db: Session, user_id: str, role: str) -> User:
    """Admin override of a user's role (user or community_member only)."""
    try:
        new_role = UserRole(role)
    except ValueError:
        new_role = None
    if new_role not in ASSIGNABLE_ROLES:
        raise ValidationError("Invalid role. Must be 'user' or 'community_member'")

    user = get_profile(db, user_id)
    with transaction(db):
        user.role = new_role
        user.updated_at = datetime.utcnow()
    logger.info(f"User {user_id} role set to {new_role.value}")
    return user
