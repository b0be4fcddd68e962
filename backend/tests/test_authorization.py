"""
Authorization tests for the FitTrack API.

Verifies:
- Missing, malformed, forged and expired tokens return 401
- The role policy denies operations outside a role's grant (403)
- Row-level "own rows only" access for tailors and customers
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from fittrack.permissions import Access, Action, Resource, evaluate


# =============================================================================
# UNAUTHENTICATED ACCESS: 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/customers"),
            ("POST", "/api/customers"),
            ("GET", "/api/measurements"),
            ("POST", "/api/measurements"),
            ("GET", "/api/measurements/compare?ids=1,2"),
            ("GET", "/api/orders"),
            ("GET", "/api/fittings"),
            ("GET", "/api/reminders"),
            ("GET", "/api/tasks"),
            ("GET", "/api/notifications"),
            ("GET", "/api/permissions/me"),
            ("GET", "/api/users"),
            ("GET", "/api/reports/summary"),
            ("POST", "/api/backup/export"),
            ("POST", "/api/expiry-rules/run"),
            ("POST", "/api/validation/check"),
            ("GET", "/api/activity-logs"),
            ("GET", "/api/settings"),
            ("GET", "/api/search?q=jane"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["error"] == "Authentication required"

    @pytest.mark.parametrize(
        "header",
        [
            "Token abc.def.ghi",
            "bearer abc.def.ghi",
            "Bearer",
            "Bearer ",
            "Bearer not-a-jwt",
        ],
    )
    def test_malformed_header_rejected(self, client, header):
        resp = client.get("/api/customers", headers={"Authorization": header})
        assert resp.status_code == 401

    def test_forged_signature_rejected(self, client, admin):
        token = jwt.encode(
            {"userId": admin.id, "email": admin.email, "role": "admin"},
            "some-other-secret",
            algorithm="HS256",
        )
        resp = client.get("/api/customers", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid or expired token"

    def test_expired_token_rejected(self, client, admin):
        past = datetime.now(timezone.utc) - timedelta(days=8)
        token = jwt.encode(
            {
                "userId": admin.id,
                "email": admin.email,
                "role": "admin",
                "iat": past,
                "exp": past + timedelta(days=7),
            },
            "test-secret",
            algorithm="HS256",
        )
        resp = client.get("/api/customers", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_health_is_public(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok", "database": "ok"}


# =============================================================================
# ROLE POLICY: 403
# =============================================================================


class TestRolePolicy:
    """Roles are denied operations the policy does not grant them."""

    def test_unknown_combination_is_denied(self):
        assert evaluate("admin", "spaceship", "launch") == Access.DENY
        assert evaluate("janitor", Resource.CUSTOMER, Action.VIEW) == Access.DENY

    def test_admin_granted_everything_it_needs(self):
        assert evaluate("admin", Resource.BACKUP, Action.EXPORT) == Access.ALLOW
        assert evaluate("admin", Resource.MEASUREMENT, Action.DELETE) == Access.ALLOW

    def test_customer_cannot_list_customers(self, client, customer_headers):
        resp = client.get("/api/customers", headers=customer_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Insufficient permissions"

    def test_customer_cannot_create_measurement(self, client, customer_headers):
        resp = client.post(
            "/api/measurements",
            json={"client_name": "Me", "chest": 100},
            headers=customer_headers,
        )
        assert resp.status_code == 403

    def test_tailor_cannot_delete_customer(self, client, tailor_headers, make_customer):
        customer = make_customer()
        resp = client.delete(f"/api/customers/{customer.id}", headers=tailor_headers)
        assert resp.status_code == 403

    def test_manager_cannot_delete_measurement(self, client, manager_headers, make_measurement):
        measurement = make_measurement()
        resp = client.delete(f"/api/measurements/{measurement.id}", headers=manager_headers)
        assert resp.status_code == 403

    def test_tailor_cannot_list_users(self, client, tailor_headers):
        resp = client.get("/api/users", headers=tailor_headers)
        assert resp.status_code == 403

    def test_manager_cannot_export(self, client, manager_headers):
        resp = client.post("/api/backup/export", headers=manager_headers)
        assert resp.status_code == 403

    def test_tailor_cannot_update_settings(self, client, tailor_headers):
        resp = client.put("/api/settings", json={"business_name": "Mine"}, headers=tailor_headers)
        assert resp.status_code == 403

    def test_tailor_cannot_run_expiry_sweep(self, client, tailor_headers):
        resp = client.post("/api/expiry-rules/run", headers=tailor_headers)
        assert resp.status_code == 403

    def test_tailor_cannot_read_activity_log(self, client, tailor_headers):
        resp = client.get("/api/activity-logs", headers=tailor_headers)
        assert resp.status_code == 403

    def test_manager_can_list_users(self, client, manager_headers, tailor):
        resp = client.get("/api/users?role=tailor", headers=manager_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 1
        assert body["users"][0]["email"] == tailor.email
        assert "password_hash" not in body["users"][0]


# =============================================================================
# ROW-LEVEL SCOPING
# =============================================================================


class TestTailorFittingScope:
    """Tailors only see and change fittings assigned to them."""

    def test_list_only_returns_own_fittings(self, client, tailor, other_tailor, tailor_headers, make_fitting):
        mine = make_fitting(tailor)
        make_fitting(other_tailor)

        resp = client.get("/api/fittings", headers=tailor_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["pagination"]["total"] == 1
        assert [f["id"] for f in body["data"]] == [mine.id]

    def test_tailor_id_filter_cannot_widen_scope(self, client, tailor, other_tailor, tailor_headers, make_fitting):
        make_fitting(tailor)
        make_fitting(other_tailor)

        resp = client.get(f"/api/fittings?tailor_id={other_tailor.id}", headers=tailor_headers)
        assert resp.status_code == 200
        assert all(f["tailor_id"] == tailor.id for f in resp.get_json()["data"])

    def test_admin_sees_all_fittings(self, client, tailor, other_tailor, admin_headers, make_fitting):
        make_fitting(tailor)
        make_fitting(other_tailor)

        resp = client.get("/api/fittings", headers=admin_headers)
        assert resp.get_json()["pagination"]["total"] == 2

    def test_cannot_read_other_tailors_fitting(self, client, other_tailor, tailor_headers, make_fitting):
        theirs = make_fitting(other_tailor)
        resp = client.get(f"/api/fittings/{theirs.id}", headers=tailor_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Access denied"

    def test_cannot_update_other_tailors_fitting(self, client, other_tailor, tailor_headers, make_fitting):
        theirs = make_fitting(other_tailor)
        resp = client.patch(f"/api/fittings/{theirs.id}", json={"notes": "mine now"}, headers=tailor_headers)
        assert resp.status_code == 403

    def test_cannot_delete_other_tailors_fitting(self, client, other_tailor, tailor_headers, make_fitting):
        theirs = make_fitting(other_tailor)
        resp = client.delete(f"/api/fittings/{theirs.id}", headers=tailor_headers)
        assert resp.status_code == 403


class TestMeasurementScope:
    """Tailors see what they captured; customers see measurements recorded under their email."""

    def test_tailor_sees_only_own_measurements(self, client, tailor, other_tailor, tailor_headers, make_measurement):
        mine = make_measurement(created_by=tailor)
        make_measurement(created_by=other_tailor)

        resp = client.get("/api/measurements", headers=tailor_headers)
        body = resp.get_json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["id"] == mine.id

    def test_tailor_cannot_update_other_tailors_measurement(
        self, client, other_tailor, tailor_headers, make_measurement
    ):
        theirs = make_measurement(created_by=other_tailor)
        resp = client.put(f"/api/measurements/{theirs.id}", json={"chest": 101}, headers=tailor_headers)
        assert resp.status_code == 403

    def test_customer_sees_only_own_measurements(
        self, client, tailor, customer_user, customer_headers, make_customer, make_measurement
    ):
        me = make_customer(name="Cleo", email="CLEO@example.com")
        mine = make_measurement(customer=me, created_by=tailor)
        make_measurement(created_by=tailor)

        resp = client.get("/api/measurements", headers=customer_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["id"] == mine.id

    def test_customer_cannot_read_someone_elses_measurement(self, client, customer_headers, make_measurement):
        other = make_measurement()
        resp = client.get(f"/api/measurements/{other.id}", headers=customer_headers)
        assert resp.status_code == 403

    def test_tailor_sees_only_customers_they_measured(
        self, client, tailor, other_tailor, tailor_headers, make_customer, make_measurement
    ):
        mine = make_customer(name="Mine", phone="555-1000")
        theirs = make_customer(name="Theirs", phone="555-2000")
        make_measurement(customer=mine, created_by=tailor)
        make_measurement(customer=theirs, created_by=other_tailor)

        resp = client.get("/api/customers", headers=tailor_headers)
        assert [c["id"] for c in resp.get_json()["data"]] == [mine.id]

        resp = client.get(f"/api/customers/{theirs.id}", headers=tailor_headers)
        assert resp.status_code == 403


class TestPermissionsEndpoint:
    """GET /api/permissions/me reflects the seeded permissions table."""

    def test_reports_role_grants(self, client, tailor_headers, seeded_permissions):
        resp = client.get("/api/permissions/me", headers=tailor_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["role"] == "tailor"
        assert "view" in body["permissions"]["fitting"]
        assert "user" not in body["permissions"]

    def test_seed_is_idempotent(self, app):
        from fittrack.services import permission_service

        first = permission_service.seed_permissions()
        second = permission_service.seed_permissions()
        assert first > 0
        assert second == 0
