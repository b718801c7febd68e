"""
Stats Service

Public impact numbers and the admin dashboard aggregates.
"""

from typing import Any, Dict

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from database.models import (
    Campaign, CampaignStatus, CommunityRequest, CommunityRequestStatus,
    Donation, PaymentStatus, User, UserRole,
)
from services.user_service import money


def _count_where(condition):
    return func.sum(case((condition, 1), else_=0))


def get_impact_stats(db: Session) -> Dict[str, int]:
    """Active campaigns and distinct donors with at least one successful donation."""
    active_campaigns = (
        db.query(func.count(Campaign.id))
        .filter(Campaign.status == CampaignStatus.ACTIVE)
        .scalar()
    )
    active_donors = (
        db.query(func.count(func.distinct(Donation.user_id)))
        .filter(Donation.payment_status == PaymentStatus.SUCCESS)
        .scalar()
    )
    return {
        "active_campaigns": active_campaigns or 0,
        "active_donors": active_donors or 0,
    }


def get_dashboard_stats(db: Session) -> Dict[str, Any]:
    total_users, community_members, verified_users = db.query(
        func.count(User.id),
        _count_where(User.role == UserRole.COMMUNITY_MEMBER),
        _count_where(User.is_verified.is_(True)),
    ).one()

    total_campaigns, active_campaigns, pending_campaigns, total_raised = db.query(
        func.count(Campaign.id),
        _count_where(Campaign.status == CampaignStatus.ACTIVE),
        _count_where(Campaign.status == CampaignStatus.PENDING),
        func.sum(Campaign.current_amount),
    ).one()

    is_success = Donation.payment_status == PaymentStatus.SUCCESS
    total_donations, successful_donations, total_donated = db.query(
        func.count(Donation.id),
        _count_where(is_success),
        func.sum(case((is_success, Donation.amount), else_=0)),
    ).one()

    total_requests, pending_requests, approved_requests = db.query(
        func.count(CommunityRequest.id),
        _count_where(CommunityRequest.status == CommunityRequestStatus.PENDING),
        _count_where(CommunityRequest.status == CommunityRequestStatus.APPROVED),
    ).one()

    return {
        "users": {
            "total_users": total_users or 0,
            "community_members": int(community_members or 0),
            "verified_users": int(verified_users or 0),
        },
        "campaigns": {
            "total_campaigns": total_campaigns or 0,
            "active_campaigns": int(active_campaigns or 0),
            "pending_campaigns": int(pending_campaigns or 0),
            "total_raised": money(total_raised),
        },
        "donations": {
            "total_donations": total_donations or 0,
            "successful_donations": int(successful_donations or 0),
            "total_donated": money(total_donated),
        },
        "community": {
            "total_requests": total_requests or 0,
            "pending_requests": int(pending_requests or 0),
            "approved_requests": int(approved_requests or 0),
        },
    }
