"""
CatDonation configuration

All settings come from environment variables (a local .env file is loaded
first). Modules import the values from here instead of calling os.getenv
themselves.
"""

import os
import re
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_JWT_EXPIRE = "24h"
_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> int:
    """
    Convert a duration like "24h", "30m", "7d" or "3600" to seconds.

    Raises ValueError for anything else.
    """
    match = re.fullmatch(r"(\d+)([smhd])?", value.strip())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit or "s"]


def _duration_from_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return parse_duration(raw)
    except ValueError:
        logger.warning(f"⚠️  Invalid {name} format ({raw!r}). Using default {default}")
        return parse_duration(default)


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Application
APP_ENV = os.getenv("APP_ENV", "development")
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", 8000))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

# Database
DATABASE_URL = os.getenv("DATABASE_URL")

# JWT
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or os.getenv("SECRET_KEY")
JWT_ALGORITHM = "HS256"
JWT_ISSUER = "cat-donation-api"
JWT_USER_AUDIENCE = "cat-donation-users"
JWT_ADMIN_AUDIENCE = "cat-donation-admins"
JWT_REFRESH_AUDIENCE = f"{JWT_USER_AUDIENCE}-refresh"
JWT_EXPIRE_SECONDS = _duration_from_env("JWT_EXPIRE", DEFAULT_JWT_EXPIRE)
JWT_REFRESH_EXPIRE_SECONDS = _duration_from_env("JWT_REFRESH_EXPIRE", "7d")

# Passwords
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

# Uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 5 * 1024 * 1024))

# Policy switches
REQUIRE_VERIFIED_CAMPAIGN_OWNER = _flag("REQUIRE_VERIFIED_CAMPAIGN_OWNER")

# Listings
FEATURED_CAMPAIGN_LIMIT = 6


def is_development() -> bool:
    return APP_ENV == "development"
