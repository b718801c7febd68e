"""
Test profile self-service, per-user statistics and the public impact stats.
"""

from database.models import CampaignStatus, User, UserRole
from services import donation_service
from services.auth_service import verify_password
from conftest import PASSWORD


class TestProfile:
    def test_get_profile(self, client, make_user, user_auth):
        user = make_user(name="Budi Santoso")

        response = client.get("/api/v1/user/profile", headers=user_auth(user))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Budi Santoso"
        assert "password_hash" not in data

    def test_update_profile(self, client, db, make_user, user_auth):
        user = make_user()

        response = client.put(
            "/api/v1/user/profile",
            json={"name": "Budi S.", "gender": "male", "birth_date": "1990-01-31", "address": "Jl. Merdeka 1"},
            headers=user_auth(user),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Budi S."
        assert data["gender"] == "male"
        assert data["birth_date"] == "1990-01-31"

    def test_profile_cannot_change_role_or_email(self, client, db, make_user, user_auth):
        user = make_user()

        response = client.put(
            "/api/v1/user/profile",
            json={"role": "community_member", "email": "new@example.com"},
            headers=user_auth(user),
        )

        assert response.status_code == 400
        db.expire_all()
        assert db.get(User, user.id).role == UserRole.USER

    def test_phone_must_stay_unique(self, client, make_user, user_auth):
        make_user(phone="081299999999")
        user = make_user()

        response = client.put("/api/v1/user/profile", json={"phone": "081299999999"}, headers=user_auth(user))

        assert response.status_code == 409
        assert response.json()["message"] == "Phone number already in use"

    def test_empty_update(self, client, make_user, user_auth):
        response = client.put("/api/v1/user/profile", json={}, headers=user_auth(make_user()))
        assert response.status_code == 400


class TestChangePassword:
    def test_change_password(self, client, db, make_user, user_auth):
        user = make_user(email="budi@example.com")

        response = client.put(
            "/api/v1/user/change-password",
            json={"current_password": PASSWORD, "new_password": "brand-new", "confirm_password": "brand-new"},
            headers=user_auth(user),
        )

        assert response.status_code == 200
        db.expire_all()
        assert verify_password("brand-new", db.get(User, user.id).password_hash)
        login = client.post("/api/auth/login", json={"email": "budi@example.com", "password": "brand-new"})
        assert login.status_code == 200

    def test_wrong_current_password(self, client, make_user, user_auth):
        response = client.put(
            "/api/v1/user/change-password",
            json={"current_password": "not-it", "new_password": "brand-new", "confirm_password": "brand-new"},
            headers=user_auth(make_user()),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    def test_confirmation_mismatch(self, client, make_user, user_auth):
        response = client.put(
            "/api/v1/user/change-password",
            json={"current_password": PASSWORD, "new_password": "brand-new", "confirm_password": "brand-old"},
            headers=user_auth(make_user()),
        )
        assert response.status_code == 400


class TestUserStats:
    def test_stats(self, client, db, make_user, user_auth, make_campaign):
        member = make_user(role=UserRole.COMMUNITY_MEMBER)
        campaign = make_campaign(member)
        make_campaign(member, status=CampaignStatus.PENDING)
        donor = make_user()
        for amount in ("1250000", "100000"):
            donation_service.create_donation(
                db, donor.id, {"campaign_id": campaign.id, "amount": amount, "payment_method": "bank_transfer"}
            )

        donor_stats = client.get("/api/v1/user/stats", headers=user_auth(donor)).json()["data"]
        member_stats = client.get("/api/v1/user/stats", headers=user_auth(member)).json()["data"]

        assert donor_stats["donations"] == {
            "total_donations": 2,
            "successful_donations": 2,
            "total_donated": "1350000.00",
        }
        assert member_stats["campaigns"]["total_campaigns"] == 2
        assert member_stats["campaigns"]["active_campaigns"] == 1
        assert member_stats["campaigns"]["total_raised"] == "1350000.00"

    def test_failed_donations_do_not_count_as_donated(self, client, db, make_user, user_auth, make_campaign):
        campaign = make_campaign(make_user(role=UserRole.COMMUNITY_MEMBER))
        donor = make_user()
        created = donation_service.create_donation(
            db, donor.id, {"campaign_id": campaign.id, "amount": "5000", "payment_method": "qris"}
        )
        donation_service.update_payment_status(db, created["id"], donor.id, "failed")

        stats = client.get("/api/v1/user/stats", headers=user_auth(donor)).json()["data"]

        assert stats["donations"]["total_donations"] == 1
        assert stats["donations"]["successful_donations"] == 0
        assert stats["donations"]["total_donated"] == "0.00"


class TestImpactStats:
    def test_empty_platform(self, client):
        response = client.get("/api/v1/stats")

        assert response.status_code == 200
        assert response.json()["data"] == {"active_campaigns": 0, "active_donors": 0}

    def test_counts_distinct_successful_donors(self, client, db, make_user, make_campaign):
        campaign = make_campaign(make_user(role=UserRole.COMMUNITY_MEMBER))
        make_campaign(make_user(role=UserRole.COMMUNITY_MEMBER), status=CampaignStatus.REJECTED)
        donor = make_user()
        for _ in range(2):
            donation_service.create_donation(
                db, donor.id, {"campaign_id": campaign.id, "amount": "1000", "payment_method": "qris"}
            )

        data = client.get("/api/v1/stats").json()["data"]

        assert data == {"active_campaigns": 1, "active_donors": 1}

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"
