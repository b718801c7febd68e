"""
Admin Directory Service

CRUD over administrator accounts. The routing layer restricts every
mutation to super admins; this module enforces data rules only
(uniqueness, allow-listed fields, hashed passwords).
"""

import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.db import transaction
from database.models import AdminUser, AdminRole, Campaign, CommunityRequest
from services.auth_service import hash_password
from services.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"username", "email", "full_name", "role", "is_active", "password"})


def list_admins(db: Session) -> List[AdminUser]:
    return db.query(AdminUser).order_by(AdminUser.created_at.desc()).all()


def get_admin(db: Session, admin_id: str) -> AdminUser:
    admin = db.get(AdminUser, admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    return admin


def _ensure_unique(db: Session, username=None, email=None, exclude_id=None) -> None:
    clauses = []
    if username is not None:
        clauses.append(AdminUser.username == username)
    if email is not None:
        clauses.append(AdminUser.email == email)
    if not clauses:
        return
    query = db.query(AdminUser.id).filter(or_(*clauses))
    if exclude_id:
        query = query.filter(AdminUser.id != exclude_id)
    if query.first():
        raise ConflictError("Admin already exists with this username or email")


def create_admin(db: Session, data: Dict[str, Any]) -> AdminUser:
    """
    Create an admin account.

    Args:
        data: username, email, password, full_name, role (default admin)
    """
    _ensure_unique(db, username=data["username"], email=data["email"])

    admin = AdminUser(
        id=str(uuid.uuid4()),
        username=data["username"],
        email=data["email"],
        password_hash=hash_password(data["password"]),
        full_name=data["full_name"],
        role=AdminRole(data.get("role") or AdminRole.ADMIN),
        is_active=True,
    )
    with transaction(db):
        db.add(admin)

    logger.info(f"Admin created: {admin.username} ({admin.role.value})")
    return admin


def update_admin(db: Session, admin_id: str, updates: Dict[str, Any]) -> AdminUser:
    """Allow-listed partial update; a new password is re-hashed."""
    unknown = set(updates) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError("Validation Error", errors=[f"Field '{name}' cannot be updated" for name in sorted(unknown)])

    changes = {key: value for key, value in updates.items() if value is not None}
    if not changes:
        raise ValidationError("No fields to update")

    admin = get_admin(db, admin_id)
    _ensure_unique(db, username=changes.get("username"), email=changes.get("email"), exclude_id=admin_id)

    with transaction(db):
        password = changes.pop("password", None)
        if password:
            admin.password_hash = hash_password(password)
        if "role" in changes:
            changes["role"] = AdminRole(changes["role"])
        for key, value in changes.items():
            setattr(admin, key, value)
        admin.updated_at = datetime.utcnow()

    logger.info(f"Admin {admin_id} updated: {sorted(updates)}")
    return admin


def delete_admin(db: Session, admin_id: str, acting_admin_id: str) -> None:
    """Remove an admin account. Admins cannot delete themselves."""
    if admin_id == acting_admin_id:
        raise ValidationError("You cannot delete your own admin account")

    admin = get_admin(db, admin_id)
    reviewed = (
        db.query(Campaign.id).filter(Campaign.reviewed_by == admin_id).first()
        or db.query(CommunityRequest.id).filter(CommunityRequest.reviewed_by == admin_id).first()
    )
    if reviewed:
        raise ConflictError("Admin has review history; deactivate the account instead")

    with transaction(db):
        db.delete(admin)

    logger.info(f"Admin {admin_id} deleted by {acting_admin_id}")
