"""
Community Membership Router

POST /api/v1/community/join        - Apply for membership (multipart, "id_photo" file)
GET  /api/v1/community/status      - Current role and latest request status
GET  /api/v1/community/my-request  - Latest request in full
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from api.dependencies import UserPrincipal, get_current_user
from api.responses import envelope
from api.schemas import CommunityRequestResponse, dump
from database.db import get_db
from database.models import Gender
from services import community_service
from services.upload_service import ID_PHOTO_FOLDER, delete_upload, save_image

router = APIRouter(prefix="/api/v1/community", tags=["Community"])


class JoinCommunityRequest(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=255)
    gender: Gender
    birth_place: str = Field(..., min_length=2, max_length=255)
    birth_date: date
    national_id_number: str = Field(..., pattern=r"^[0-9]{16}$")
    reason: str = Field(..., min_length=10, max_length=1000)
    data_agreement: bool

    @field_validator("data_agreement")
    @classmethod
    def must_agree(cls, value: bool) -> bool:
        if not value:
            raise ValueError("Data agreement must be accepted")
        return value


@router.post("/join", status_code=status.HTTP_201_CREATED)
def join_community(
    full_name: str = Form(...),
    gender: str = Form(...),
    birth_place: str = Form(...),
    birth_date: str = Form(...),
    national_id_number: str = Form(...),
    reason: str = Form(...),
    data_agreement: str = Form(...),
    id_photo: Optional[UploadFile] = File(None),
    principal: UserPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payload = JoinCommunityRequest(
        full_name=full_name,
        gender=gender,
        birth_place=birth_place,
        birth_date=birth_date,
        national_id_number=national_id_number,
        reason=reason,
        data_agreement=data_agreement,
    )
    filename = save_image(id_photo, ID_PHOTO_FOLDER, "id")
    try:
        request = community_service.submit_request(db, principal.id, payload.model_dump(), filename)
    except Exception:
        delete_upload(ID_PHOTO_FOLDER, filename)
        raise
    return envelope(
        "Community join request submitted successfully",
        dump(CommunityRequestResponse, request),
    )


@router.get("/status")
def community_status(principal: UserPrincipal = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope("Community status retrieved successfully", community_service.get_status(db, principal.id))


@router.get("/my-request")
def my_request(principal: UserPrincipal = Depends(get_current_user), db: Session = Depends(get_db)):
    request = community_service.get_latest_request(db, principal.id)
    if request is None:
        return envelope("No community request found")
    return envelope("Community request retrieved successfully", dump(CommunityRequestResponse, request))
