"""
Output models shared by the routers.

Money fields are Decimal and serialize as strings ("1350000.00") so no
precision is lost on the way out. Password hashes have no field here and
therefore never leave the service.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from database.models import (
    UserRole, AdminRole, Gender, CampaignCategory, CampaignStatus,
    PaymentMethod, PaymentStatus, CommunityRequestStatus,
)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    role: UserRole
    is_verified: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminResponse(BaseModel):
    id: str
    username: str
    email: str
    full_name: str
    role: AdminRole
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CampaignResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: str
    location: str
    category: CampaignCategory
    image: str
    image_url: Optional[str] = None
    target_amount: Decimal
    current_amount: Decimal
    bank_account: str
    deadline: datetime
    status: CampaignStatus
    admin_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    # Derived per read, never stored
    days_remaining: Optional[int] = None
    total_donations: int = 0
    successful_donations: int = 0
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None

    class Config:
        from_attributes = True


class DonationResponse(BaseModel):
    id: str
    user_id: str
    campaign_id: str
    amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    campaign_title: Optional[str] = None
    campaign_image: Optional[str] = None
    campaign_status: Optional[CampaignStatus] = None
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None

    class Config:
        from_attributes = True


class CommunityRequestResponse(BaseModel):
    id: str
    user_id: str
    full_name: str
    gender: Gender
    birth_place: str
    birth_date: date
    national_id_number: str
    id_photo: str
    reason: str
    data_agreement: bool
    status: CommunityRequestStatus
    admin_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    user_name: Optional[str] = None
    user_email: Optional[str] = None

    class Config:
        from_attributes = True


def dump(model, obj) -> dict:
    """Validate an ORM object (or dict) against `model` and return JSON-ready data."""
    return model.model_validate(obj).model_dump(mode="json")


def dump_list(model, objs) -> list:
    return [dump(model, obj) for obj in objs]
