"""
Test the admin area: dashboard, user directory and the super-admin-only
admin directory.
"""

from decimal import Decimal

from database.models import AdminRole, AdminUser, CampaignStatus, User, UserRole
from services import donation_service
from services.auth_service import verify_password


class TestDashboard:
    def test_dashboard_aggregates(self, client, db, make_user, make_admin, admin_auth, make_campaign):
        member = make_user(role=UserRole.COMMUNITY_MEMBER, is_verified=True)
        donor = make_user()
        active = make_campaign(member)
        make_campaign(member, status=CampaignStatus.PENDING)
        donation_service.create_donation(
            db, donor.id, {"campaign_id": active.id, "amount": Decimal("250000"), "payment_method": "qris"}
        )

        response = client.get("/api/v1/admin/dashboard", headers=admin_auth(make_admin()))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["users"] == {"total_users": 2, "community_members": 1, "verified_users": 1}
        assert data["campaigns"]["total_campaigns"] == 2
        assert data["campaigns"]["active_campaigns"] == 1
        assert data["campaigns"]["pending_campaigns"] == 1
        assert data["campaigns"]["total_raised"] == "250000.00"
        assert data["donations"]["successful_donations"] == 1
        assert data["donations"]["total_donated"] == "250000.00"
        assert data["community"]["pending_requests"] == 0

    def test_dashboard_needs_admin_token(self, client):
        assert client.get("/api/v1/admin/dashboard").status_code == 401


class TestUserDirectory:
    def test_list_users(self, client, make_user, make_admin, admin_auth):
        make_user()
        make_user()

        response = client.get("/api/v1/admin/users", headers=admin_auth(make_admin()))

        assert response.status_code == 200
        assert len(response.json()["data"]) == 2
        assert all("password_hash" not in u for u in response.json()["data"])

    def test_verify_user(self, client, db, make_user, make_admin, admin_auth):
        user = make_user()

        response = client.put(
            f"/api/v1/admin/users/{user.id}/status", json={"is_verified": True}, headers=admin_auth(make_admin())
        )

        assert response.status_code == 200
        assert response.json()["data"]["is_verified"] is True
        db.expire_all()
        assert db.get(User, user.id).is_verified is True

    def test_set_role(self, client, db, make_user, make_admin, admin_auth):
        user = make_user()

        response = client.put(
            f"/api/v1/admin/users/{user.id}/role", json={"role": "community_member"}, headers=admin_auth(make_admin())
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "community_member"

    def test_guest_role_cannot_be_assigned(self, client, make_user, make_admin, admin_auth):
        user = make_user()

        response = client.put(
            f"/api/v1/admin/users/{user.id}/role", json={"role": "guest"}, headers=admin_auth(make_admin())
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid role. Must be 'user' or 'community_member'"

    def test_unknown_user(self, client, make_admin, admin_auth):
        response = client.put(
            "/api/v1/admin/users/missing/status", json={"is_verified": True}, headers=admin_auth(make_admin())
        )
        assert response.status_code == 404

    def test_all_donations(self, client, db, make_user, make_admin, admin_auth, make_campaign):
        member = make_user(role=UserRole.COMMUNITY_MEMBER)
        campaign = make_campaign(member)
        donation_service.create_donation(
            db, make_user().id, {"campaign_id": campaign.id, "amount": "1000", "payment_method": "qris"}
        )

        response = client.get("/api/v1/admin/donations", headers=admin_auth(make_admin()))

        assert response.status_code == 200
        donations = response.json()["data"]
        assert len(donations) == 1
        assert donations[0]["campaign_title"] == campaign.title
        assert donations[0]["donor_name"]


class TestAdminDirectory:
    def _new_admin(self, **overrides):
        body = {
            "username": "moderator",
            "email": "moderator@catdonation.id",
            "password": "moderator123",
            "full_name": "Campaign Moderator",
        }
        body.update(overrides)
        return body

    def test_regular_admin_is_forbidden(self, client, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.ADMIN))

        listing = client.get("/api/v1/admin/admins", headers=headers)
        creation = client.post("/api/v1/admin/admins", json=self._new_admin(), headers=headers)

        assert listing.status_code == 403
        assert listing.json()["data"]["required_roles"] == ["super_admin"]
        assert creation.status_code == 403

    def test_create_admin(self, client, db, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))

        response = client.post("/api/v1/admin/admins", json=self._new_admin(), headers=headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["role"] == "admin"
        assert data["is_active"] is True
        assert "password_hash" not in data
        created = db.query(AdminUser).filter(AdminUser.username == "moderator").one()
        assert verify_password("moderator123", created.password_hash)

    def test_duplicate_admin(self, client, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))
        client.post("/api/v1/admin/admins", json=self._new_admin(), headers=headers)

        response = client.post(
            "/api/v1/admin/admins", json=self._new_admin(email="other@catdonation.id"), headers=headers
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Admin already exists with this username or email"

    def test_update_admin(self, client, db, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))
        target = make_admin()

        response = client.put(
            f"/api/v1/admin/admins/{target.id}",
            json={"full_name": "Renamed Admin", "is_active": False, "password": "fresh-pass"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["full_name"] == "Renamed Admin"
        assert response.json()["data"]["is_active"] is False
        db.expire_all()
        assert verify_password("fresh-pass", db.get(AdminUser, target.id).password_hash)

    def test_update_rejects_unknown_fields(self, client, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))
        target = make_admin()

        response = client.put(
            f"/api/v1/admin/admins/{target.id}", json={"last_login_at": "2024-01-01T00:00:00"}, headers=headers
        )

        assert response.status_code == 400

    def test_get_admin(self, client, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))
        target = make_admin()

        assert client.get(f"/api/v1/admin/admins/{target.id}", headers=headers).json()["data"]["id"] == target.id
        assert client.get("/api/v1/admin/admins/missing", headers=headers).status_code == 404

    def test_delete_admin(self, client, db, make_admin, admin_auth):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))
        target = make_admin()

        response = client.delete(f"/api/v1/admin/admins/{target.id}", headers=headers)

        assert response.status_code == 200
        assert db.query(AdminUser).filter(AdminUser.id == target.id).first() is None

    def test_cannot_delete_self(self, client, make_admin, admin_auth):
        me = make_admin(role=AdminRole.SUPER_ADMIN)

        response = client.delete(f"/api/v1/admin/admins/{me.id}", headers=admin_auth(me))

        assert response.status_code == 400

    def test_cannot_delete_admin_with_review_history(self, client, make_user, make_admin, admin_auth, make_campaign):
        headers = admin_auth(make_admin(role=AdminRole.SUPER_ADMIN))
        reviewer = make_admin()
        campaign = make_campaign(make_user(role=UserRole.COMMUNITY_MEMBER), status=CampaignStatus.PENDING)
        client.put(
            f"/api/v1/admin/campaigns/{campaign.id}/review",
            json={"status": "active", "admin_notes": "Looks fine"},
            headers=admin_auth(reviewer),
        )

        response = client.delete(f"/api/v1/admin/admins/{reviewer.id}", headers=headers)

        assert response.status_code == 409
