"""
CatDonation Database Models

This module defines all SQLAlchemy models for the CatDonation platform.

Architecture:
- Users: End users who donate; community members may also run campaigns
- AdminUsers: Platform staff who review campaigns and membership requests
- Campaigns: Fundraising projects owned by a community member
- Donations: Individual contributions linked to a user and a campaign
- CommunityRequests: Applications to become a community member
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Text, Numeric,
    ForeignKey, CheckConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _enum_column(enum_cls, **kwargs):
    """Store enum values ("community_member"), not member names."""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        **kwargs,
    )


class UserRole(str, enum.Enum):
    """End-user roles. GUEST is virtual: it applies to anonymous access only."""
    GUEST = "guest"
    USER = "user"
    COMMUNITY_MEMBER = "community_member"


class AdminRole(str, enum.Enum):
    """Administrator roles."""
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class CampaignCategory(str, enum.Enum):
    MEDICAL = "medical"
    FOOD = "food"
    RESCUE = "rescue"
    SHELTER = "shelter"
    OTHER = "other"
    ADOPTION = "adoption"


class CampaignStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"
    EXPIRED = "expired"


class PaymentMethod(str, enum.Enum):
    QRIS = "qris"
    BANK_TRANSFER = "bank_transfer"
    E_WALLET = "e_wallet"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CommunityRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class User(Base):
    """
    End user of the platform.

    Roles:
    - user: Can donate and manage their profile (set at registration)
    - community_member: Can also create campaigns (granted by an approved
      community request or by an admin)
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'community_member')", name="ck_users_persisted_role"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Optional profile
    gender = Column(_enum_column(Gender, length=10))
    birth_date = Column(Date)
    address = Column(Text)

    role = Column(_enum_column(UserRole, length=20), default=UserRole.USER, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    campaigns = relationship("Campaign", back_populates="owner")
    donations = relationship("Donation", back_populates="user")
    community_requests = relationship("CommunityRequest", back_populates="user")


class AdminUser(Base):
    """
    Staff account. Deactivated admins (is_active=False) cannot authenticate,
    even with a token issued before deactivation.
    """
    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(_enum_column(AdminRole, length=20), default=AdminRole.ADMIN, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Campaign(Base):
    """
    Fundraising project run by a community member.

    Lifecycle:
    1. pending: Submitted, waiting for admin review
    2. active: Approved by an admin, accepting donations
    3. rejected: Declined by an admin (admin_notes explains why)
    4. completed / expired: Set by processes outside this service
    """
    __tablename__ = "campaigns"
    __table_args__ = (
        CheckConstraint("target_amount > 0", name="ck_campaigns_target_positive"),
        CheckConstraint("current_amount >= 0", name="ck_campaigns_current_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Basic Info
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    category = Column(_enum_column(CampaignCategory, length=20), nullable=False)
    image = Column(String(255), nullable=False)  # Stored upload filename

    # Money
    target_amount = Column(Numeric(15, 2), nullable=False)
    current_amount = Column(Numeric(15, 2), default=0, nullable=False)
    bank_account = Column(String(50), nullable=False)
    deadline = Column(DateTime, nullable=False)

    # Review
    status = Column(_enum_column(CampaignStatus, length=20), default=CampaignStatus.PENDING,
                    nullable=False, index=True)
    admin_notes = Column(Text)
    reviewed_by = Column(String(36), ForeignKey("admin_users.id"))
    reviewed_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="campaigns")
    reviewer = relationship("AdminUser")
    donations = relationship("Donation", back_populates="campaign")


class Donation(Base):
    """
    Individual donation.

    There is no payment gateway: creation records payment_status=success
    and credits the campaign in the same transaction. The owner may later
    assert another status; campaign totals are not adjusted by that.
    """
    __tablename__ = "donations"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_donations_amount_positive"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    campaign_id = Column(String(36), ForeignKey("campaigns.id"), nullable=False, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    payment_method = Column(_enum_column(PaymentMethod, length=20), nullable=False)
    payment_status = Column(_enum_column(PaymentStatus, length=20), default=PaymentStatus.PENDING,
                            nullable=False)
    transaction_id = Column(String(255))
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="donations")
    campaign = relationship("Campaign", back_populates="donations")


class CommunityRequest(Base):
    """
    Application to become a community member.

    A user holds at most one pending/approved request at a time. The
    national ID number is unique across all requests, whatever their status.
    """
    __tablename__ = "community_requests"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    full_name = Column(String(255), nullable=False)
    gender = Column(_enum_column(Gender, length=10), nullable=False)
    birth_place = Column(String(255), nullable=False)
    birth_date = Column(Date, nullable=False)
    national_id_number = Column(String(16), unique=True, nullable=False, index=True)
    id_photo = Column(String(255), nullable=False)  # Stored upload filename
    reason = Column(Text, nullable=False)
    data_agreement = Column(Boolean, default=False, nullable=False)

    status = Column(_enum_column(CommunityRequestStatus, length=20),
                    default=CommunityRequestStatus.PENDING, nullable=False, index=True)
    admin_notes = Column(Text)
    reviewed_by = Column(String(36), ForeignKey("admin_users.id"))
    reviewed_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="community_requests")

    def __repr__(self):
        return f"<CommunityRequest(id={self.id}, user_id={self.user_id}, status={self.status})>"
