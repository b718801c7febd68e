"""
Seed data script for CatDonation database
Creates a super admin, sample users, a community member and campaigns for testing
"""
import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from sqlalchemy.orm import Session

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db import SessionLocal, create_tables
from database.models import (
    AdminUser, AdminRole, Campaign, CampaignCategory, CampaignStatus, User, UserRole,
)
from services.auth_service import hash_password

SEED_PASSWORD = "password123"


def seed_admin(db: Session) -> AdminUser:
    """Create the default super admin"""
    existing = db.query(AdminUser).filter(AdminUser.username == "superadmin").first()
    if existing:
        print(f"⚠️  Admin already exists: {existing.username} (ID: {existing.id})")
        return existing

    admin = AdminUser(
        username="superadmin",
        email="superadmin@catdonation.id",
        password_hash=hash_password(SEED_PASSWORD),
        full_name="Super Administrator",
        role=AdminRole.SUPER_ADMIN,
    )
    db.add(admin)
    db.commit()
    print(f"✅ Created Admin: {admin.username} (ID: {admin.id})")
    return admin


def seed_users(db: Session) -> list:
    """Create one regular donor and one community member"""
    users_data = [
        {"name": "Budi Santoso", "email": "budi@example.com", "phone": "081200000001",
         "role": UserRole.USER},
        {"name": "Rina Kusuma", "email": "rina@example.com", "phone": "081200000002",
         "role": UserRole.COMMUNITY_MEMBER, "is_verified": True},
    ]

    created_users = []
    for user_data in users_data:
        existing = db.query(User).filter(User.email == user_data["email"]).first()
        if existing:
            created_users.append(existing)
            print(f"⚠️  User already exists: {existing.email} (ID: {existing.id})")
            continue

        user = User(password_hash=hash_password(SEED_PASSWORD), **user_data)
        db.add(user)
        db.commit()
        created_users.append(user)
        print(f"✅ Created User: {user.email} [{user.role.value}] (ID: {user.id})")

    return created_users


def seed_campaigns(db: Session, owner: User, admin: AdminUser) -> list:
    """Create approved sample campaigns owned by the community member"""
    campaigns_data = [
        {
            "title": "Operasi Kaki Si Oyen",
            "description": "Oyen was hit by a motorbike and needs surgery on his hind leg.",
            "location": "Bandung",
            "category": CampaignCategory.MEDICAL,
            "target_amount": Decimal("5000000"),
            "bank_account": "1234567890",
            "image": "campaign_seed_oyen.jpg",
        },
        {
            "title": "Pakan Kucing Shelter Bulan Ini",
            "description": "Monthly food supply for the forty cats living in our shelter.",
            "location": "Yogyakarta",
            "category": CampaignCategory.FOOD,
            "target_amount": Decimal("3000000"),
            "bank_account": "0987654321",
            "image": "campaign_seed_food.jpg",
        },
    ]

    created_campaigns = []
    for campaign_data in campaigns_data:
        existing = db.query(Campaign).filter(Campaign.title == campaign_data["title"]).first()
        if existing:
            created_campaigns.append(existing)
            print(f"⚠️  Campaign already exists: {existing.title} (ID: {existing.id})")
            continue

        campaign = Campaign(
            user_id=owner.id,
            current_amount=Decimal("0"),
            deadline=datetime.utcnow() + timedelta(days=30),
            status=CampaignStatus.ACTIVE,
            admin_notes="Seeded",
            reviewed_by=admin.id,
            reviewed_at=datetime.utcnow(),
            **campaign_data,
        )
        db.add(campaign)
        db.commit()
        created_campaigns.append(campaign)
        print(f"✅ Created Campaign: {campaign.title} (ID: {campaign.id})")

    return created_campaigns


def main():
    """Run all seed functions"""
    print("\n🌱 Starting database seed...\n")

    create_tables()
    db = SessionLocal()
    try:
        print("📦 Seeding Admin...")
        admin = seed_admin(db)

        print("\n📦 Seeding Users...")
        users = seed_users(db)

        print("\n📦 Seeding Campaigns...")
        campaigns = seed_campaigns(db, users[1], admin)

        print(f"\n✅ Seed complete!")
        print(f"   - {len(users)} Users (password: {SEED_PASSWORD})")
        print(f"   - {len(campaigns)} Campaigns")
        print("\nYou can now test the API with real data!\n")
    finally:
        db.close()


if __name__ == "__main__":
    main()
