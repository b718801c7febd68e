"""
Donations Router

POST /api/donations                - Donate to an active campaign
GET  /api/donations/my             - Caller's donations
GET  /api/donations/user/{user_id} - One user's donations (that user or an admin)
GET  /api/donations/{id}           - One of the caller's donations
PUT  /api/donations/{id}/payment   - Donor-asserted payment status change
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, UUID4
from sqlalchemy.orm import Session

from api.dependencies import (
    Principal, UserPrincipal, get_current_user, require_admin_or_owner,
)
from api.responses import envelope
from api.schemas import DonationResponse, dump, dump_list
from database.db import get_db
from database.models import PaymentMethod, PaymentStatus
from services import donation_service

router = APIRouter(prefix="/api/donations", tags=["Donations"])


class DonationCreate(BaseModel):
    campaign_id: UUID4
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=500)

    class Config:
        json_schema_extra = {
            "example": {
                "campaign_id": "6f1c2a0e-8d0b-4a51-9d7e-2b7f3f0c9a11",
                "amount": "100000",
                "payment_method": "qris",
                "notes": "Semoga cepat sembuh"
            }
        }


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus
    transaction_id: Optional[str] = Field(None, max_length=255)


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_donation(
    request: DonationCreate,
    principal: UserPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payload = request.model_dump()
    payload["campaign_id"] = str(request.campaign_id)
    donation = donation_service.create_donation(db, principal.id, payload)
    return envelope("Donation created successfully", dump(DonationResponse, donation))


@router.get("/my")
def my_donations(principal: UserPrincipal = Depends(get_current_user), db: Session = Depends(get_db)):
    donations = donation_service.list_user_donations(db, principal.id)
    return envelope("User donations retrieved successfully", dump_list(DonationResponse, donations))


@router.get("/user/{user_id}")
def user_donations(
    user_id: str,
    principal: Principal = Depends(require_admin_or_owner("user_id")),
    db: Session = Depends(get_db),
):
    donations = donation_service.list_user_donations(db, user_id)
    return envelope("User donations retrieved successfully", dump_list(DonationResponse, donations))


@router.get("/{donation_id}")
def get_donation(
    donation_id: str,
    principal: UserPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    donation = donation_service.get_donation(db, donation_id, principal.id)
    return envelope("Donation retrieved successfully", dump(DonationResponse, donation))


@router.put("/{donation_id}/payment")
def update_payment_status(
    donation_id: str,
    request: PaymentStatusUpdate,
    principal: UserPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    donation = donation_service.update_payment_status(
        db, donation_id, principal.id, request.payment_status, request.transaction_id
    )
    return envelope("Payment status updated successfully", dump(DonationResponse, donation))
