"""
User Profile Router

Self-service profile endpoints for logged-in users.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, model_validator
from sqlalchemy.orm import Session

from api.dependencies import UserPrincipal, get_current_user
from api.responses import envelope
from api.schemas import UserResponse, dump
from database.db import get_db
from database.models import Gender
from services import user_service

router = APIRouter(prefix="/api/v1/user", tags=["User"])


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = Field(None, min_length=10, max_length=20, pattern=r"^[0-9+\-\s()]+$")
    address: Optional[str] = Field(None, max_length=500)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


@router.get("/profile")
def get_profile(principal: UserPrincipal = Depends(get_current_user), db: Session = Depends(get_db)):
    user = user_service.get_profile(db, principal.id)
    return envelope("Profile retrieved successfully", dump(UserResponse, user))


@router.put("/profile")
def update_profile(
    request: ProfileUpdate,
    principal: UserPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, principal.id, request.model_dump(exclude_unset=True))
    return envelope("Profile updated successfully", dump(UserResponse, user))


@router.put("/change-password")
def change_password(
    request: ChangePasswordRequest,
    principal: UserPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_service.change_password(db, principal.id, request.current_password, request.new_password)
    return envelope("Password changed successfully")


@router.get("/stats")
def get_stats(principal: UserPrincipal = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope("User statistics retrieved successfully", user_service.get_user_stats(db, principal.id))
