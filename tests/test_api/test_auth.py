"""
Tests for /api/auth endpoints: login, register, me, logout and token checks.
"""

import datetime

from fastapi import status

from smart_inventory import models
from smart_inventory.middleware.rate_limit import limiter


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_demo_admin_login(self, client):
        response = client.post("/api/auth/login", json={"email": "admin@inventory.com", "password": "admin123."})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["token"]
        assert body["data"]["user"]["role"] == "admin"
        assert body["data"]["user"]["permissions"]["canManagePriorities"] is True

    def test_staff_login_permissions(self, client):
        response = client.post("/api/auth/login", json={"email": "staff@inventory.com", "password": "staff123."})

        user = response.json()["data"]["user"]
        assert user["role"] == "staff"
        assert user["permissions"] == {
            "canModifyStock": True,
            "canManageProducts": False,
            "canManagePriorities": False,
        }

    def test_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"email": "admin@inventory.com", "password": "nope"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"success": False, "error": "Invalid email or password"}

    def test_unknown_user(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@bar.com", "password": "whatever"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"email": "admin@inventory.com"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Validation error"

    def test_non_ascii_password_is_rejected_cleanly(self, client):
        response = client.post("/api/auth/login", json={"email": "admin@inventory.com", "password": "contraseña"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"success": False, "error": "Invalid email or password"}

    def test_rate_limited_login(self, client):
        limiter.reset()
        limiter.enabled = True
        try:
            codes = [
                client.post("/api/auth/login", json={"email": "admin@inventory.com", "password": "nope"}).status_code
                for _ in range(11)
            ]
            response = client.post("/api/auth/login", json={"email": "admin@inventory.com", "password": "nope"})
        finally:
            limiter.enabled = False
            limiter.reset()

        assert codes[:10] == [status.HTTP_401_UNAUTHORIZED] * 10
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Too many requests. Please try again later."


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_and_login(self, client, db_session):
        payload = {"email": "Bartender@Bar.com", "password": "secret1", "displayName": "Sam"}
        response = client.post("/api/auth/register", json=payload)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["email"] == "bartender@bar.com"
        assert data["role"] == "staff"

        stored = db_session.query(models.User).filter(models.User.email == "bartender@bar.com").first()
        assert stored.password_hash != "secret1"

        login = client.post("/api/auth/login", json={"email": "bartender@bar.com", "password": "secret1"})
        assert login.status_code == status.HTTP_200_OK
        assert login.json()["data"]["user"]["displayName"] == "Sam"

    def test_duplicate_email(self, client):
        payload = {"email": "cook@bar.com", "password": "secret1"}
        client.post("/api/auth/register", json=payload)
        response = client.post("/api/auth/register", json=payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Email already registered"

    def test_short_password(self, client):
        response = client.post("/api/auth/register", json={"email": "cook@bar.com", "password": "123"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_elevated_role_requires_admin(self, client, manager_headers):
        payload = {"email": "boss@bar.com", "password": "secret1", "role": "manager"}

        assert client.post("/api/auth/register", json=payload).status_code == status.HTTP_403_FORBIDDEN
        response = client.post("/api/auth/register", json=payload, headers=manager_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "Admin access required"

    def test_admin_can_create_manager(self, client, admin_headers):
        payload = {"email": "boss@bar.com", "password": "secret1", "role": "manager"}
        response = client.post("/api/auth/register", json=payload, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["role"] == "manager"

    def test_password_longer_than_bcrypt_limit(self, client):
        response = client.post("/api/auth/register", json={"email": "long@bar.com", "password": "x" * 100})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Validation error"

    def test_multibyte_password_counts_bytes(self, client):
        # 37 characters, 74 bytes
        response = client.post("/api/auth/register", json={"email": "long@bar.com", "password": "ñ" * 37})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unicode_password_round_trip(self, client):
        payload = {"email": "chef@bar.com", "password": "contraseña"}
        assert client.post("/api/auth/register", json=payload).status_code == status.HTTP_201_CREATED

        response = client.post("/api/auth/login", json=payload)
        assert response.status_code == status.HTTP_200_OK


class TestSession:
    """Tests for bearer token handling, /me and /logout."""

    def test_me(self, client, manager_headers):
        response = client.get("/api/auth/me", headers=manager_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == "manager@inventory.com"
        assert response.json()["data"]["role"] == "manager"

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"success": False, "error": "Unauthorized access"}

    def test_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_expired_token(self, client, db_session, staff_headers):
        token = staff_headers["Authorization"].split(" ", 1)[1]
        session = db_session.query(models.SessionToken).filter(models.SessionToken.token == token).first()
        session.expires_at = datetime.datetime.utcnow() - datetime.timedelta(minutes=1)
        db_session.commit()

        response = client.get("/api/auth/me", headers=staff_headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Token expired"

    def test_logout_revokes_token(self, client, staff_headers):
        response = client.post("/api/auth/logout", headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Logout successful"

        assert client.get("/api/auth/me", headers=staff_headers).status_code == status.HTTP_401_UNAUTHORIZED
