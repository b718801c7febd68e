"""
Admin Router

Every route needs an admin token. Routes under /admins additionally need
the super_admin role.

GET  /api/v1/admin/dashboard                  - Platform aggregates
GET  /api/v1/admin/community-requests         - Pending membership requests
PUT  /api/v1/admin/community-requests/{id}    - Approve / reject a request
GET  /api/v1/admin/community-requests/{id}/id-photo - The applicant's ID photo
GET  /api/v1/admin/campaigns                  - All campaigns
PUT  /api/v1/admin/campaigns/{id}/review      - Approve / reject a campaign
GET  /api/v1/admin/users                      - All users
PUT  /api/v1/admin/users/{id}/status          - Set verification flag
PUT  /api/v1/admin/users/{id}/role            - Override a user's role
GET  /api/v1/admin/donations                  - All donations
GET  /api/v1/admin/admins                     - (super admin) list admins
POST /api/v1/admin/admins                     - (super admin) create admin
GET  /api/v1/admin/admins/{id}                - (super admin) one admin
PUT  /api/v1/admin/admins/{id}                - (super admin) update admin
DELETE /api/v1/admin/admins/{id}              - (super admin) delete admin
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from api.dependencies import AdminPrincipal, require_any_admin, require_super_admin
from api.responses import envelope
from api.schemas import (
    AdminResponse, CampaignResponse, CommunityRequestResponse, DonationResponse,
    UserResponse, dump, dump_list,
)
from database.db import get_db
from database.models import (
    AdminRole, CampaignStatus, CommunityRequestStatus, PaymentStatus,
)
from services import (
    admin_service, campaign_service, community_service, donation_service,
    stats_service, user_service,
)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Admin"],
    dependencies=[Depends(require_any_admin)],
)


# Request Models
class CommunityReviewRequest(BaseModel):
    status: CommunityRequestStatus
    admin_notes: Optional[str] = None


class CampaignReviewRequest(BaseModel):
    status: CampaignStatus
    admin_notes: Optional[str] = None


class UserStatusUpdate(BaseModel):
    is_verified: bool


class UserRoleUpdate(BaseModel):
    role: str


class CreateAdminRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=2, max_length=255)
    role: AdminRole = AdminRole.ADMIN


class UpdateAdminRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[AdminRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)


# ============================================
# Dashboard
# ============================================

@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    return envelope("Dashboard data retrieved successfully", stats_service.get_dashboard_stats(db))


# ============================================
# Community requests
# ============================================

@router.get("/community-requests")
def list_community_requests(
    status_filter: Optional[CommunityRequestStatus] = Query(CommunityRequestStatus.PENDING, alias="status"),
    db: Session = Depends(get_db),
):
    requests = community_service.list_requests(db, status_filter)
    return envelope("Community requests retrieved successfully", dump_list(CommunityRequestResponse, requests))


@router.put("/community-requests/{request_id}")
def review_community_request(
    request_id: str,
    request: CommunityReviewRequest,
    admin: AdminPrincipal = Depends(require_any_admin),
    db: Session = Depends(get_db),
):
    """Approve (promotes the user to community_member) or reject a pending request."""
    reviewed = community_service.review_request(db, request_id, admin.id, request.status, request.admin_notes)
    return envelope(
        f"Community request {request.status.value} successfully",
        dump(CommunityRequestResponse, reviewed),
    )


@router.get("/community-requests/{request_id}/id-photo")
def get_community_request_id_photo(request_id: str, db: Session = Depends(get_db)):
    """ID scans are never on the public /uploads mount."""
    path = community_service.get_id_photo_path(db, request_id)
    return FileResponse(path, headers={"Cache-Control": "private, no-store"})


# ============================================
# Campaigns
# ============================================

@router.get("/campaigns")
def list_campaigns(
    status_filter: Optional[CampaignStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    campaigns = campaign_service.list_all_campaigns(db, status_filter)
    return envelope("Campaigns retrieved successfully", dump_list(CampaignResponse, campaigns))


@router.put("/campaigns/{campaign_id}/review")
def review_campaign(
    campaign_id: str,
    request: CampaignReviewRequest,
    admin: AdminPrincipal = Depends(require_any_admin),
    db: Session = Depends(get_db),
):
    campaign = campaign_service.review_campaign(db, campaign_id, admin.id, request.status, request.admin_notes)
    return envelope(f"Campaign {request.status.value} successfully", dump(CampaignResponse, campaign))


# ============================================
# Users
# ============================================

@router.get("/users")
def list_users(db: Session = Depends(get_db)):
    return envelope("Users retrieved successfully", dump_list(UserResponse, user_service.list_users(db)))


@router.put("/users/{user_id}/status")
def update_user_status(user_id: str, request: UserStatusUpdate, db: Session = Depends(get_db)):
    user = user_service.update_user_verification(db, user_id, request.is_verified)
    return envelope("User status updated successfully", dump(UserResponse, user))


@router.put("/users/{user_id}/role")
def update_user_role(user_id: str, request: UserRoleUpdate, db: Session = Depends(get_db)):
    user = user_service.update_user_role(db, user_id, request.role)
    return envelope("User role updated successfully", dump(UserResponse, user))


# ============================================
# Donations
# ============================================

@router.get("/donations")
def list_donations(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    donations = donation_service.list_all_donations(db, status_filter)
    return envelope("Donations retrieved successfully", dump_list(DonationResponse, donations))


# ============================================
# Admin directory (super admin only)
# ============================================

@router.get("/admins", dependencies=[Depends(require_super_admin)])
def list_admins(db: Session = Depends(get_db)):
    return envelope("Admins retrieved successfully", dump_list(AdminResponse, admin_service.list_admins(db)))


@router.post("/admins", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_super_admin)])
def create_admin(request: CreateAdminRequest, db: Session = Depends(get_db)):
    admin = admin_service.create_admin(db, request.model_dump())
    return envelope("Admin created successfully", dump(AdminResponse, admin))


@router.get("/admins/{admin_id}", dependencies=[Depends(require_super_admin)])
def get_admin(admin_id: str, db: Session = Depends(get_db)):
    return envelope("Admin retrieved successfully", dump(AdminResponse, admin_service.get_admin(db, admin_id)))


@router.put("/admins/{admin_id}", dependencies=[Depends(require_super_admin)])
def update_admin(admin_id: str, request: UpdateAdminRequest, db: Session = Depends(get_db)):
    admin = admin_service.update_admin(db, admin_id, request.model_dump(exclude_unset=True))
    return envelope("Admin updated successfully", dump(AdminResponse, admin))


@router.delete("/admins/{admin_id}")
def delete_admin(
    admin_id: str,
    admin: AdminPrincipal = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    admin_service.delete_admin(db, admin_id, admin.id)
    return envelope("Admin deleted successfully")
