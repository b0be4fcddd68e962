"""
Login, token and password tests.
"""

import pytest

from fittrack.config import DEFAULT_JWT_SECRET
from fittrack.errors import AuthenticationError, ConflictError, ValidationError
from fittrack.extensions import db
from fittrack.models import AuditLog
from fittrack.services import auth_service, token_service
from fittrack.services.session_service import principal_from_claims

from conftest import PASSWORD


# =============================================================================
# LOGIN
# =============================================================================


class TestLogin:

    def test_login_returns_token_and_user(self, client, tailor):
        resp = client.post("/api/auth/login", json={"email": tailor.email, "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"] == {
            "id": tailor.id,
            "email": tailor.email,
            "name": tailor.name,
            "role": "tailor",
            "branch": "Downtown",
        }

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.get_json()["user"]["id"] == tailor.id

    def test_email_is_case_insensitive(self, client, tailor):
        resp = client.post("/api/auth/login", json={"email": "TAILOR@FitTrack.local", "password": PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password(self, client, tailor):
        resp = client.post("/api/auth/login", json={"email": tailor.email, "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_unknown_email_gets_same_error(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@fittrack.local", "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    @pytest.mark.parametrize("payload", [{}, {"email": "a@b.co"}, {"password": PASSWORD}])
    def test_missing_fields(self, client, payload):
        resp = client.post("/api/auth/login", json=payload)
        assert resp.status_code == 400

    @pytest.mark.parametrize("payload", [{"email": 5, "password": "x"}, {"email": "a@b.c", "password": ["x"]}])
    def test_non_string_credentials(self, client, payload):
        resp = client.post("/api/auth/login", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"].endswith("must be a string")

    def test_non_json_body(self, client):
        resp = client.post("/api/auth/login", data="email=x", content_type="text/plain")
        assert resp.status_code == 400

    def test_login_is_audited(self, client, tailor):
        client.post(
            "/api/auth/login",
            json={"email": tailor.email, "password": PASSWORD},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest"},
        )
        log = db.session.query(AuditLog).filter_by(action="login").one()
        assert log.user_id == tailor.id
        assert log.ip_address == "203.0.113.7"
        assert log.user_agent == "pytest"


# =============================================================================
# TOKENS
# =============================================================================


class TestTokens:

    def test_claims_survive_signing(self, app, admin):
        token = token_service.generate_token({"userId": admin.id, "email": admin.email, "role": "admin"})
        claims = token_service.verify_token(token)
        assert claims["userId"] == admin.id
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    def test_tampered_token_rejected(self, app, admin):
        token = token_service.generate_token({"userId": admin.id, "email": admin.email, "role": "tailor"})
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(AuthenticationError):
            token_service.verify_token(tampered)

    @pytest.mark.parametrize(
        "header,expected",
        [
            (None, None),
            ("", None),
            ("Basic dXNlcjpwYXNz", None),
            ("Bearer", None),
            ("Bearer    ", None),
            ("Bearer abc.def", "abc.def"),
        ],
    )
    def test_extract_token(self, header, expected):
        assert token_service.extract_token(header) == expected

    def test_production_refuses_default_secret(self, app):
        app.config["APP_ENV"] = "production"
        app.config["JWT_SECRET"] = DEFAULT_JWT_SECRET
        with pytest.raises(RuntimeError):
            token_service.generate_token({"userId": 1, "email": "a@b.co", "role": "admin"})

    def test_production_accepts_configured_secret(self, app):
        app.config["APP_ENV"] = "production"
        token = token_service.generate_token({"userId": 1, "email": "a@b.co", "role": "admin"})
        assert token_service.verify_token(token)["email"] == "a@b.co"

    def test_claims_missing_user_id(self):
        with pytest.raises(AuthenticationError):
            principal_from_claims({"email": "a@b.co", "role": "admin"})


# =============================================================================
# USERS
# =============================================================================


class TestCreateUser:

    def test_password_is_hashed(self, app):
        user = auth_service.create_user("New Tailor", "New@FitTrack.local", "longenough")
        assert user.email == "new@fittrack.local"
        assert user.password_hash != "longenough"
        assert auth_service.verify_password("longenough", user.password_hash)

    def test_short_password_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.create_user("Short", "short@fittrack.local", "1234567")

    def test_non_string_name_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.create_user(42, "num@fittrack.local", "longenough")

    def test_non_string_password_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.create_user("Num", "num@fittrack.local", 123456789)

    def test_unknown_role_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.create_user("Boss", "boss@fittrack.local", "longenough", role="owner")

    def test_duplicate_email_rejected(self, app, tailor):
        with pytest.raises(ConflictError):
            auth_service.create_user("Again", tailor.email.upper(), "longenough")

    def test_malformed_hash_does_not_verify(self):
        assert auth_service.verify_password("anything", "not-a-bcrypt-hash") is False
