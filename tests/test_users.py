"""Tests for registration, login and onboarding endpoints."""
import uuid

from sqlalchemy import select

from simplishare.core.security import create_access_token, decode_token
from simplishare.exceptions import ErrorCode
from simplishare.models.user import User

ONBOARDING_PAYLOAD = {
    "first_name": "Alice",
    "last_name": "Smith",
    "profession": "Brand Owner",
    "company_name": "Acme",
    "industry": "Retail",
    "team_size": "11-50",
    "looking_for": "Community Sharing",
    "is_onboarding_complete": True,
    "instagram_Connected": True,
}


class TestRegister:
    """Tests for POST /api/v1/users/register."""

    def test_register_success(self, client):
        response = client.post(
            "/api/v1/users/register",
            json={"username": "ab1", "email": "a@b.com", "password": "12345678"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User has been successfully registered."
        assert body["data"] == {"email": "a@b.com"}

    def test_register_stores_hashed_password(self, client, run_db):
        client.post(
            "/api/v1/users/register",
            json={"username": "ab1", "email": "a@b.com", "password": "12345678"},
        )

        async def fetch(session):
            return await session.scalar(select(User.password))

        stored = run_db(fetch)
        assert stored and stored != "12345678"

    def test_register_duplicate_email(self, client):
        payload = {"username": "ab1", "email": "a@b.com", "password": "12345678"}
        client.post("/api/v1/users/register", json=payload)

        response = client.post("/api/v1/users/register", json={**payload, "username": "ab2"})

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Email Is Already Exists."
        assert body["errorCode"] == ErrorCode.DUPLICATE_ENTRY

    def test_register_duplicate_username(self, client):
        client.post(
            "/api/v1/users/register",
            json={"username": "ab1", "email": "a@b.com", "password": "12345678"},
        )

        response = client.post(
            "/api/v1/users/register",
            json={"username": "ab1", "email": "c@d.com", "password": "12345678"},
        )

        assert response.status_code == 409
        assert response.json()["message"] == "username is already in use."

    def test_register_validation_errors(self, client):
        response = client.post(
            "/api/v1/users/register",
            json={"username": "a b", "email": "not-an-email", "password": "short"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation Error"
        codes = {error["field"]: error["errorCode"] for error in body["error"]}
        assert codes == {
            "username": ErrorCode.INVALID_USER_NAME,
            "email": ErrorCode.INVALID_EMAIL_FORMAT,
            "password": ErrorCode.PASSWORD_TOO_SHORT,
        }

    def test_register_missing_password(self, client):
        response = client.post("/api/v1/users/register", json={"username": "ab1", "email": "a@b.com"})

        assert response.status_code == 400
        error = response.json()["error"][0]
        assert error["field"] == "password"
        assert error["errorCode"] == ErrorCode.PASSWORD_TOO_SHORT


class TestLogin:
    """Tests for POST /api/v1/users/login."""

    def test_login_returns_token_for_user(self, client, run_db, make_user):
        make_user()

        response = client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "password123"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["redirect"] == "/onboarding"

        async def fetch(session):
            return await session.scalar(select(User.id).where(User.email == "alice@example.com"))

        assert decode_token(data["accesstoken"])["id"] == str(run_db(fetch))

    def test_login_wrong_password(self, client, make_user):
        make_user()

        response = client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["errorCode"] == ErrorCode.INVALID_CREDENTIALS

    def test_login_unknown_email(self, client):
        response = client.post(
            "/api/v1/users/login",
            json={"email": "ghost@example.com", "password": "password123"},
        )

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "ghost@example.com does not exist."
        assert body["errorCode"] == ErrorCode.INVALID_CREDENTIALS

    def test_login_redirects_home_after_onboarding(self, client, auth_headers):
        client.post("/api/v1/users/onboarding", json=ONBOARDING_PAYLOAD, headers=auth_headers)

        response = client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "password123"},
        )

        assert response.json()["data"]["redirect"] == "./home"


class TestOnboarding:
    """Tests for POST /api/v1/users/onboarding."""

    def test_onboarding_success(self, client, auth_headers, run_db):
        response = client.post("/api/v1/users/onboarding", json=ONBOARDING_PAYLOAD, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["first_name"] == "Alice"
        assert data["last_name"] == "Smith"
        assert data["is_onboarding_complete"] is True

        async def fetch(session):
            return await session.get(User, uuid.UUID(data["id"]))

        user = run_db(fetch)
        assert user.company_name == "Acme"
        assert user.instagram_connected is True

    def test_onboarding_requires_auth(self, client):
        response = client.post("/api/v1/users/onboarding", json=ONBOARDING_PAYLOAD)

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "Authorization header is missing."
        assert body["errorCode"] == ErrorCode.UNAUTHORIZED_ACCESS

    def test_onboarding_rejects_bad_token(self, client):
        response = client.post(
            "/api/v1/users/onboarding",
            json=ONBOARDING_PAYLOAD,
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401
        assert response.json()["errorCode"] == ErrorCode.INVALID_TOKEN

    def test_onboarding_unknown_user(self, client):
        token = create_access_token(uuid.uuid4())
        response = client.post(
            "/api/v1/users/onboarding",
            json=ONBOARDING_PAYLOAD,
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 404
        assert response.json()["errorCode"] == ErrorCode.USER_NOT_FOUND

    def test_onboarding_validation(self, client, auth_headers):
        response = client.post(
            "/api/v1/users/onboarding",
            json={**ONBOARDING_PAYLOAD, "team_size": "lots"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert [error["field"] for error in response.json()["error"]] == ["team_size"]
