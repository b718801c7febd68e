"""
Community Membership Service

Users apply to become community members (the role that may run campaigns).

Workflow:
1. User submits a request with personal data and an ID photo -> pending
2. Admin approves or rejects it with notes
3. Approval promotes the user to community_member in the same transaction

Rules:
- At most one pending or approved request per user; a rejected request
  does not block a new one
- A national ID number can appear on only one request, ever
"""

import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from database.db import transaction
from database.models import (
    CommunityRequest, CommunityRequestStatus, User, UserRole,
)
from services.errors import ConflictError, NotFoundError, ValidationError
from services.upload_service import ID_PHOTO_FOLDER, stored_path

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (CommunityRequestStatus.PENDING, CommunityRequestStatus.APPROVED)
REVIEW_STATUSES = (CommunityRequestStatus.APPROVED, CommunityRequestStatus.REJECTED)


def request_to_dict(request: CommunityRequest, user: Optional[User] = None) -> Dict[str, Any]:
    data = {column.name: getattr(request, column.name) for column in CommunityRequest.__table__.columns}
    if user is not None:
        data.update(user_name=user.name, user_email=user.email)
    return data


def submit_request(db: Session, user_id: str, payload: Dict[str, Any], id_photo: Optional[str]) -> Dict[str, Any]:
    """
    File a membership request.

    Raises:
        ValidationError: no ID photo or data agreement not given
        ConflictError: user already has an active request, or the national
            ID number is already on file
    """
    if not id_photo:
        raise ValidationError("ID photo is required")
    if not payload.get("data_agreement"):
        raise ValidationError("Data agreement must be accepted")

    existing = (
        db.query(CommunityRequest)
        .filter(CommunityRequest.user_id == user_id, CommunityRequest.status.in_(ACTIVE_STATUSES))
        .first()
    )
    if existing:
        raise ConflictError("You already have a pending or approved community request")

    national_id = payload["national_id_number"]
    if db.query(CommunityRequest.id).filter(CommunityRequest.national_id_number == national_id).first():
        raise ConflictError("National ID number already registered")

    request = CommunityRequest(
        id=str(uuid.uuid4()),
        user_id=user_id,
        full_name=payload["full_name"],
        gender=payload["gender"],
        birth_place=payload["birth_place"],
        birth_date=payload["birth_date"],
        national_id_number=national_id,
        id_photo=id_photo,
        reason=payload["reason"],
        data_agreement=True,
        status=CommunityRequestStatus.PENDING,
    )
    with transaction(db):
        db.add(request)

    logger.info(f"Community request {request.id} submitted by {user_id}")
    return request_to_dict(request)


def _promote_to_community_member(db: Session, user_id: str) -> None:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("Request owner not found")
    user.role = UserRole.COMMUNITY_MEMBER
    user.updated_at = datetime.utcnow()
    db.flush()


def review_request(
    db: Session,
    request_id: str,
    admin_id: str,
    status: CommunityRequestStatus,
    notes: Optional[str],
) -> Dict[str, Any]:
    """
    Approve or reject a pending request.

    The decision is a conditional UPDATE on status=pending, so when two
    admins race on the same request only the first write matches a row.
    Approval and the owner's role promotion commit together or not at all.

    Raises:
        ValidationError: bad status or empty notes
        NotFoundError: request missing or already decided
    """
    status = CommunityRequestStatus(status)
    if status not in REVIEW_STATUSES:
        raise ValidationError("Status must be either 'approved' or 'rejected'")
    if not notes or not notes.strip():
        raise ValidationError("Admin notes are required")

    now = datetime.utcnow()
    with transaction(db):
        decided = db.execute(
            update(CommunityRequest)
            .where(
                CommunityRequest.id == request_id,
                CommunityRequest.status == CommunityRequestStatus.PENDING,
            )
            .values(
                status=status,
                admin_notes=notes.strip(),
                reviewed_by=admin_id,
                reviewed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if decided.rowcount == 0:
            raise NotFoundError("Request not found or has already been processed")

        request = db.get(CommunityRequest, request_id, populate_existing=True)
        if status == CommunityRequestStatus.APPROVED:
            _promote_to_community_member(db, request.user_id)

    logger.info(f"Community request {request_id} {status.value} by admin {admin_id}")
    return request_to_dict(request)


def get_status(db: Session, user_id: str) -> Dict[str, Any]:
    """The caller's role plus the state of their latest request."""
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    latest = get_latest_request(db, user_id)
    return {
        "current_role": user.role.value,
        "has_request": latest is not None,
        "request_status": latest.status.value if latest else None,
        "request_date": latest.created_at if latest else None,
    }


def get_latest_request(db: Session, user_id: str) -> Optional[CommunityRequest]:
    return (
        db.query(CommunityRequest)
        .filter(CommunityRequest.user_id == user_id)
        .order_by(CommunityRequest.created_at.desc())
        .first()
    )


def list_requests(db: Session, status: Optional[CommunityRequestStatus] = CommunityRequestStatus.PENDING) -> List[Dict[str, Any]]:
    """Admin listing; pending requests by default."""
    query = db.query(CommunityRequest, User).join(User, CommunityRequest.user_id == User.id)
    if status:
        query = query.filter(CommunityRequest.status == status)
    rows = query.order_by(CommunityRequest.created_at.desc()).all()
    return [request_to_dict(request, user=user) for request, user in rows]


def get_id_photo_path(db: Session, request_id: str) -> str:
    """Disk path of a request's ID photo (admin use only)."""
    request = db.get(CommunityRequest, request_id)
    path = stored_path(ID_PHOTO_FOLDER, request.id_photo) if request else None
    if not path:
        raise NotFoundError("ID photo not found")
    return path
