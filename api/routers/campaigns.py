"""
Campaigns Router

Public:
GET  /api/campaigns               - Active campaigns, newest first
GET  /api/campaigns/featured      - Top active campaigns by amount raised
GET  /api/campaigns/{id}          - One campaign (non-active ones: owner/admin only)

Community members:
GET  /api/campaigns/my/campaigns  - Caller's campaigns, any status
POST /api/campaigns               - Create (multipart, with an "image" file)
PUT  /api/campaigns/{id}          - Edit an owned campaign
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

import config
from api.dependencies import (
    AdminPrincipal, Principal, UserPrincipal,
    get_current_user, get_optional_principal, require_community_member,
    require_verified_user,
)
from api.responses import envelope
from api.schemas import CampaignResponse, dump, dump_list
from database.db import get_db
from database.models import CampaignCategory, CampaignStatus
from services import campaign_service
from services.errors import NotFoundError
from services.upload_service import CAMPAIGN_FOLDER, delete_upload, save_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/campaigns", tags=["Campaigns"])


# ============================================
# Request Models
# ============================================

def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CampaignCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=255)
    description: str = Field(..., min_length=20, max_length=5000)
    location: str = Field(..., min_length=3, max_length=255)
    category: CampaignCategory
    target_amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    deadline: datetime
    bank_account: str = Field(..., min_length=10, max_length=50)

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, value: datetime) -> datetime:
        value = _naive_utc(value)
        if value <= datetime.utcnow():
            raise ValueError("Deadline must be in the future")
        return value


class CampaignUpdate(BaseModel):
    """Only these fields may change; anything else is rejected."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: Optional[str] = Field(None, min_length=20, max_length=5000)
    location: Optional[str] = Field(None, min_length=3, max_length=255)
    category: Optional[CampaignCategory] = None
    target_amount: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)
    deadline: Optional[datetime] = None
    bank_account: Optional[str] = Field(None, min_length=10, max_length=50)

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return value
        value = _naive_utc(value)
        if value <= datetime.utcnow():
            raise ValueError("Deadline must be in the future")
        return value


def campaign_creator(principal: UserPrincipal = Depends(require_community_member)) -> UserPrincipal:
    """Community members only; verified accounts only when the switch is on."""
    if config.REQUIRE_VERIFIED_CAMPAIGN_OWNER:
        require_verified_user(principal)
    return principal


# ============================================
# Public endpoints
# ============================================

@router.get("")
@router.get("/", include_in_schema=False)
def list_campaigns(db: Session = Depends(get_db)):
    campaigns = campaign_service.list_active_campaigns(db)
    return envelope("Campaigns retrieved successfully", dump_list(CampaignResponse, campaigns))


@router.get("/featured")
def featured_campaigns(db: Session = Depends(get_db)):
    campaigns = campaign_service.list_featured_campaigns(db)
    return envelope("Featured campaigns retrieved successfully", dump_list(CampaignResponse, campaigns))


@router.get("/my/campaigns")
def my_campaigns(principal: UserPrincipal = Depends(get_current_user), db: Session = Depends(get_db)):
    campaigns = campaign_service.list_user_campaigns(db, principal.id)
    return envelope("User campaigns retrieved successfully", dump_list(CampaignResponse, campaigns))


@router.get("/{campaign_id}")
def get_campaign(
    campaign_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    """
    Campaign detail.

    Pending or rejected campaigns are only shown to their owner and to
    admins; everyone else gets 404.
    """
    campaign = campaign_service.get_campaign(db, campaign_id)
    if campaign["status"] != CampaignStatus.ACTIVE:
        is_admin = isinstance(principal, AdminPrincipal)
        is_owner = isinstance(principal, UserPrincipal) and principal.id == campaign["user_id"]
        if not (is_admin or is_owner):
            raise NotFoundError("Campaign not found")
    return envelope("Campaign retrieved successfully", dump(CampaignResponse, campaign))


# ============================================
# Community member endpoints
# ============================================

@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_campaign(
    title: str = Form(...),
    description: str = Form(...),
    location: str = Form(...),
    category: str = Form(...),
    target_amount: str = Form(...),
    deadline: str = Form(...),
    bank_account: str = Form(...),
    image: Optional[UploadFile] = File(None),
    principal: UserPrincipal = Depends(campaign_creator),
    db: Session = Depends(get_db),
):
    """Create a campaign. It stays pending until an admin reviews it."""
    payload = CampaignCreate(
        title=title,
        description=description,
        location=location,
        category=category,
        target_amount=target_amount,
        deadline=deadline,
        bank_account=bank_account,
    )
    filename = save_image(image, CAMPAIGN_FOLDER, "campaign")
    try:
        campaign = campaign_service.create_campaign(db, principal.id, payload.model_dump(), filename)
    except Exception:
        delete_upload(CAMPAIGN_FOLDER, filename)
        raise
    return envelope("Campaign created successfully and is pending review", dump(CampaignResponse, campaign))


@router.put("/{campaign_id}")
def update_campaign(
    campaign_id: str,
    request: CampaignUpdate,
    principal: UserPrincipal = Depends(require_community_member),
    db: Session = Depends(get_db),
):
    campaign = campaign_service.update_campaign(
        db, campaign_id, principal.id, request.model_dump(exclude_unset=True)
    )
    return envelope("Campaign updated successfully", dump(CampaignResponse, campaign))
