"""
Campaign Service

Campaign lifecycle:
1. A community member creates a campaign -> status=pending
2. An admin reviews it -> active (accepting donations) or rejected
3. The owner may edit descriptive fields at any time

Listing reads attach per-row derived values (days_remaining, donation
counts, owner name/email) that are computed on read and never stored.
"""

import uuid
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

import config
from database.db import transaction
from database.models import (
    Campaign, CampaignStatus, Donation, PaymentStatus, User, UserRole,
)
from services.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError,
)
from services.upload_service import CAMPAIGN_FOLDER, upload_url
from services.user_service import CENTS

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "title", "description", "location", "category",
    "target_amount", "deadline", "bank_account",
})

REVIEW_STATUSES = (CampaignStatus.ACTIVE, CampaignStatus.REJECTED)


# ============================================
# Read helpers
# ============================================

def days_remaining(deadline: Optional[datetime]) -> Optional[int]:
    """Whole days from today (UTC) until the deadline (negative once past)."""
    if deadline is None:
        return None
    return (deadline.date() - datetime.utcnow().date()).days


def _donation_stats():
    return (
        select(
            Donation.campaign_id.label("campaign_id"),
            func.count(Donation.id).label("total_donations"),
            func.sum(
                case((Donation.payment_status == PaymentStatus.SUCCESS, 1), else_=0)
            ).label("successful_donations"),
        )
        .group_by(Donation.campaign_id)
        .subquery()
    )


def campaign_to_dict(campaign: Campaign, **extra: Any) -> Dict[str, Any]:
    data = {column.name: getattr(campaign, column.name) for column in Campaign.__table__.columns}
    data["image_url"] = upload_url(CAMPAIGN_FOLDER, campaign.image)
    data["days_remaining"] = days_remaining(campaign.deadline)
    data.update(extra)
    return data


def _campaign_rows(db: Session, *criteria, order_by=None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    stats = _donation_stats()
    query = (
        db.query(
            Campaign,
            User.name,
            User.email,
            func.coalesce(stats.c.total_donations, 0),
            func.coalesce(stats.c.successful_donations, 0),
        )
        .outerjoin(User, Campaign.user_id == User.id)
        .outerjoin(stats, Campaign.id == stats.c.campaign_id)
        .filter(*criteria)
    )
    if order_by is not None:
        query = query.order_by(*order_by)
    if limit:
        query = query.limit(limit)

    return [
        campaign_to_dict(
            campaign,
            owner_name=owner_name,
            owner_email=owner_email,
            total_donations=int(total or 0),
            successful_donations=int(successful or 0),
        )
        for campaign, owner_name, owner_email, total, successful in query.all()
    ]


# ============================================
# Listings
# ============================================

def list_active_campaigns(db: Session) -> List[Dict[str, Any]]:
    """Public listing: active campaigns, newest first."""
    return _campaign_rows(
        db,
        Campaign.status == CampaignStatus.ACTIVE,
        order_by=(Campaign.created_at.desc(),),
    )


def list_featured_campaigns(db: Session, limit: int = config.FEATURED_CAMPAIGN_LIMIT) -> List[Dict[str, Any]]:
    """Active campaigns that raised the most, ties broken by recency."""
    return _campaign_rows(
        db,
        Campaign.status == CampaignStatus.ACTIVE,
        order_by=(Campaign.current_amount.desc(), Campaign.created_at.desc()),
        limit=limit,
    )


def list_user_campaigns(db: Session, user_id: str) -> List[Dict[str, Any]]:
    """All of one owner's campaigns, whatever their status."""
    return _campaign_rows(
        db,
        Campaign.user_id == user_id,
        order_by=(Campaign.created_at.desc(),),
    )


def list_all_campaigns(db: Session, status: Optional[CampaignStatus] = None) -> List[Dict[str, Any]]:
    """Admin listing, optionally filtered by status."""
    criteria = [Campaign.status == status] if status else []
    return _campaign_rows(db, *criteria, order_by=(Campaign.created_at.desc(),))


def get_campaign(db: Session, campaign_id: str) -> Dict[str, Any]:
    rows = _campaign_rows(db, Campaign.id == campaign_id)
    if not rows:
        raise NotFoundError("Campaign not found")
    return rows[0]


# ============================================
# Mutations
# ============================================

def create_campaign(db: Session, owner_id: str, payload: Dict[str, Any], image: Optional[str]) -> Dict[str, Any]:
    """
    Create a pending campaign owned by `owner_id`.

    Args:
        payload: title, description, location, category, target_amount,
            deadline, bank_account (already validated)
        image: Stored image filename; required
    """
    if not image:
        raise ValidationError("Campaign image is required")

    owner = db.get(User, owner_id)
    if not owner:
        raise NotFoundError("User not found")
    if owner.role != UserRole.COMMUNITY_MEMBER:
        raise AuthorizationError("Community membership required for this action")

    campaign = Campaign(
        id=str(uuid.uuid4()),
        user_id=owner_id,
        title=payload["title"],
        description=payload["description"],
        location=payload["location"],
        category=payload["category"],
        target_amount=Decimal(str(payload["target_amount"])).quantize(CENTS),
        current_amount=Decimal("0.00"),
        deadline=payload["deadline"],
        bank_account=payload["bank_account"],
        image=image,
        status=CampaignStatus.PENDING,
    )
    with transaction(db):
        db.add(campaign)

    logger.info(f"Campaign created: {campaign.id} by {owner_id} (pending review)")
    return get_campaign(db, campaign.id)


def update_campaign(db: Session, campaign_id: str, owner_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply an allow-listed partial update to a campaign the caller owns.

    A campaign owned by someone else is reported as not found so its
    existence is not revealed.
    """
    unknown = set(updates) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError("Validation Error", errors=[f"Field '{name}' cannot be updated" for name in sorted(unknown)])

    campaign = (
        db.query(Campaign)
        .filter(Campaign.id == campaign_id, Campaign.user_id == owner_id)
        .first()
    )
    if not campaign:
        raise NotFoundError("Campaign not found or access denied")

    changes = {key: value for key, value in updates.items() if value is not None}
    if not changes:
        raise ValidationError("No fields to update")
    if "target_amount" in changes:
        changes["target_amount"] = Decimal(str(changes["target_amount"])).quantize(CENTS)

    with transaction(db):
        for key, value in changes.items():
            setattr(campaign, key, value)
        campaign.updated_at = datetime.utcnow()

    logger.info(f"Campaign {campaign_id} updated by owner: {sorted(changes)}")
    return get_campaign(db, campaign_id)


def review_campaign(
    db: Session,
    campaign_id: str,
    admin_id: str,
    status: CampaignStatus,
    notes: Optional[str],
) -> Dict[str, Any]:
    """
    Approve (active) or reject a pending campaign.

    Raises:
        ValidationError: bad status or empty notes
        NotFoundError: campaign does not exist
        ConflictError: campaign was already reviewed
    """
    status = CampaignStatus(status)
    if status not in REVIEW_STATUSES:
        raise ValidationError("Status must be either 'active' or 'rejected'")
    if not notes or not notes.strip():
        raise ValidationError("Admin notes are required")

    now = datetime.utcnow()
    with transaction(db):
        decided = db.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id, Campaign.status == CampaignStatus.PENDING)
            .values(
                status=status,
                admin_notes=notes.strip(),
                reviewed_by=admin_id,
                reviewed_at=now,
                updated_at=now,
            )
        )
        if decided.rowcount == 0:
            current = db.execute(
                select(Campaign.status).where(Campaign.id == campaign_id)
            ).scalar_one_or_none()
            if current is None:
                raise NotFoundError("Campaign not found")
            raise ConflictError(f"Campaign has already been reviewed ({current.value})")

    logger.info(f"Campaign {campaign_id} reviewed by admin {admin_id}: {status.value}")
    return get_campaign(db, campaign_id)
