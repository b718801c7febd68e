"""
Bootstrap an administrator account.

Usage:
    python scripts/create_admin.py --username root --email root@catdonation.id \
        --full-name "Root Admin" --password "change-me" --role super_admin
"""

import os
import sys
import argparse
import getpass

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.db import SessionLocal, create_tables
from database.models import AdminRole
from services import admin_service
from services.errors import AppError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create a CatDonation admin account")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--full-name", required=True)
    parser.add_argument("--password", help="Prompted for when omitted")
    parser.add_argument(
        "--role",
        choices=[role.value for role in AdminRole],
        default=AdminRole.SUPER_ADMIN.value,
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("❌ Password must be at least 6 characters")
        return 1

    create_tables()
    db = SessionLocal()
    try:
        admin = admin_service.create_admin(db, {
            "username": args.username,
            "email": args.email,
            "password": password,
            "full_name": args.full_name,
            "role": args.role,
        })
        print(f"✅ Admin created: {admin.username} ({admin.role.value})")
        print(f"   ID: {admin.id}")
        return 0
    except AppError as e:
        print(f"❌ {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
