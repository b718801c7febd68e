"""
Upload Service

Stores user-supplied images (campaign pictures, ID photos) on local disk
under UPLOAD_DIR/<folder>/. The stored filename is what the database keeps.
Campaign pictures are public under /uploads/campaigns; ID photos are only
reachable through the admin API.
"""

import os
import uuid
import logging
from typing import Optional

from fastapi import UploadFile

import config
from services.errors import ValidationError

logger = logging.getLogger(__name__)

CAMPAIGN_FOLDER = "campaigns"
ID_PHOTO_FOLDER = "id_photos"


def folder_path(folder: str) -> str:
    path = os.path.join(config.UPLOAD_DIR, folder)
    os.makedirs(path, exist_ok=True)
    return path


def save_image(upload: Optional[UploadFile], folder: str, prefix: str) -> str:
    """
    Validate and store an uploaded image.

    Args:
        upload: The multipart file
        folder: Subdirectory of UPLOAD_DIR
        prefix: Filename prefix, e.g. "campaign"

    Returns:
        Stored filename, `<prefix>_<uuid><ext>`

    Raises:
        ValidationError: missing file, non-image content type, or file too large
    """
    if upload is None or not upload.filename:
        raise ValidationError("Image file is required")

    if not (upload.content_type or "").startswith("image/"):
        raise ValidationError("Only image files are allowed")

    contents = upload.file.read(config.MAX_UPLOAD_SIZE + 1)
    if len(contents) > config.MAX_UPLOAD_SIZE:
        max_mb = config.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValidationError(f"File size too large. Maximum size is {max_mb}MB.")

    extension = os.path.splitext(upload.filename)[1].lower()
    filename = f"{prefix}_{uuid.uuid4()}{extension}"
    with open(os.path.join(folder_path(folder), filename), "wb") as f:
        f.write(contents)

    logger.info(f"Stored upload {folder}/{filename} ({len(contents)} bytes)")
    return filename


def delete_upload(folder: str, filename: str) -> None:
    """Remove a stored file whose database write did not go through."""
    path = os.path.join(config.UPLOAD_DIR, folder, filename)
    if os.path.exists(path):
        os.remove(path)
        logger.info(f"Removed orphaned upload {folder}/{filename}")


def upload_url(folder: str, filename: str) -> str:
    return f"/uploads/{folder}/{filename}"


def stored_path(folder: str, filename: Optional[str]) -> Optional[str]:
    """Path of a stored upload, or None if it is not on disk."""
    if not filename or os.path.basename(filename) != filename:
        return None
    path = os.path.join(config.UPLOAD_DIR, folder, filename)
    return path if os.path.isfile(path) else None
