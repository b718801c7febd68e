"""
Donation Service

Records donations and credits the target campaign.

Creating a donation is one transaction:
1. Lock the campaign row (must exist and be active)
2. current_amount = current_amount + amount, evaluated by the database
3. Insert the donation with payment_status=success

Either every write commits or none does, so a campaign total always equals
the sum of the successful donations recorded against it. There is no
payment gateway; later status changes are asserted by the donor and do not
touch the campaign total.
"""

import uuid
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from database.db import transaction
from database.models import (
    Campaign, CampaignStatus, Donation, PaymentMethod, PaymentStatus, User,
)
from services.errors import NotFoundError, ValidationError
from services.user_service import CENTS

logger = logging.getLogger(__name__)


def donation_to_dict(donation: Donation, campaign: Optional[Campaign] = None, donor: Optional[User] = None) -> Dict[str, Any]:
    data = {column.name: getattr(donation, column.name) for column in Donation.__table__.columns}
    if campaign is not None:
        data.update(
            campaign_title=campaign.title,
            campaign_image=campaign.image,
            campaign_status=campaign.status,
        )
    if donor is not None:
        data.update(donor_name=donor.name, donor_email=donor.email)
    return data


def _donation_query(db: Session):
    return (
        db.query(Donation, Campaign, User)
        .join(Campaign, Donation.campaign_id == Campaign.id)
        .join(User, Donation.user_id == User.id)
    )


def create_donation(db: Session, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Record a donation and credit its campaign atomically.

    Args:
        user_id: Donor
        payload: campaign_id, amount (Decimal > 0), payment_method, notes

    Raises:
        ValidationError: amount is not positive
        NotFoundError: campaign missing or not active
    """
    amount = Decimal(str(payload["amount"])).quantize(CENTS)
    if amount <= 0:
        raise ValidationError("Donation amount must be greater than zero")
    campaign_id = payload["campaign_id"]

    donation = Donation(
        id=str(uuid.uuid4()),
        user_id=user_id,
        campaign_id=campaign_id,
        amount=amount,
        payment_method=PaymentMethod(payload["payment_method"]),
        payment_status=PaymentStatus.SUCCESS,
        notes=payload.get("notes"),
    )

    with transaction(db):
        campaign = db.execute(
            select(Campaign)
            .where(Campaign.id == campaign_id, Campaign.status == CampaignStatus.ACTIVE)
            .with_for_update()
        ).scalar_one_or_none()
        if not campaign:
            raise NotFoundError("Campaign not found or not active")

        db.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id)
            .values(
                current_amount=Campaign.current_amount + amount,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        db.add(donation)

    db.refresh(campaign)
    logger.info(
        f"Donation {donation.id} committed: {amount} to campaign {campaign_id} "
        f"by {user_id} (campaign total {campaign.current_amount})"
    )
    return donation_to_dict(donation, campaign=campaign)


def update_payment_status(
    db: Session,
    donation_id: str,
    user_id: str,
    status: PaymentStatus,
    transaction_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Set a donation's payment status. Only the donor may do this.

    The campaign total is left as is whatever the new status.
    """
    donation = (
        db.query(Donation)
        .filter(Donation.id == donation_id, Donation.user_id == user_id)
        .first()
    )
    if not donation:
        raise NotFoundError("Donation not found or access denied")

    with transaction(db):
        donation.payment_status = PaymentStatus(status)
        donation.transaction_id = transaction_id
        donation.updated_at = datetime.utcnow()

    logger.info(f"Donation {donation_id} payment status -> {donation.payment_status.value}")
    return donation_to_dict(donation)


def get_donation(db: Session, donation_id: str, user_id: str) -> Dict[str, Any]:
    """One of the caller's donations, with campaign context."""
    row = (
        _donation_query(db)
        .filter(Donation.id == donation_id, Donation.user_id == user_id)
        .first()
    )
    if not row:
        raise NotFoundError("Donation not found")
    donation, campaign, donor = row
    return donation_to_dict(donation, campaign=campaign, donor=donor)


def list_user_donations(db: Session, user_id: str) -> List[Dict[str, Any]]:
    rows = (
        _donation_query(db)
        .filter(Donation.user_id == user_id)
        .order_by(Donation.created_at.desc())
        .all()
    )
    return [donation_to_dict(d, campaign=c, donor=u) for d, c, u in rows]


def list_all_donations(db: Session, status: Optional[PaymentStatus] = None) -> List[Dict[str, Any]]:
    """Admin view of every donation, newest first."""
    query = _donation_query(db)
    if status:
        query = query.filter(Donation.payment_status == status)
    rows = query.order_by(Donation.created_at.desc()).all()
    return [donation_to_dict(d, campaign=c, donor=u) for d, c, u in rows]
