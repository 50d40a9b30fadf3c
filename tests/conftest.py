"""Shared test fixtures for all tests."""
import os
import tempfile

# Required settings must exist before the application is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./simplishare-test.db")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="simplishare-logs-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from simplishare.core.config import settings
from simplishare.email_service import EmailService, get_email_service
from simplishare.exceptions import EmailSendFailedError
from simplishare.main import app
from simplishare.schemas.email import EmailMessage


STORE_PAYLOAD = {
    "store_name": "Corner Bakery",
    "store_type": "Bakery",
    "email_id": "bakery@example.com",
    "manager_email_id": "manager@example.com",
    "address": "12 Baker Street",
    "city": "Pune",
    "state": "Maharashtra",
    "pincode": "411001",
}

OFFER_FIELDS = {
    "location": "Pune",
    "offerType": "Day Offers",
    "offerTitle": "Weekend bread sale",
    "offerDescription": "20% off all loaves",
    "startDate": "2025-01-01T00:00:00Z",
    "endDate": "2025-01-31T00:00:00Z",
    "discountPercentage": "20",
    "selectOfferStatus": "Active",
    "applicableProducts": "All bread",
    "offerStatus": "Published",
}


class RecordingEmailService(EmailService):
    """Keeps messages in an outbox instead of talking to SMTP."""

    def __init__(self):
        super().__init__(settings)
        self.outbox: list[EmailMessage] = []
        self.fail = False

    async def send_email(self, message: EmailMessage) -> None:
        if self.fail:
            raise EmailSendFailedError("Failed to send email: connection refused")
        self.outbox.append(message)


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def client(tmp_path, monkeypatch, email_service):
    """Test client backed by a fresh SQLite database file."""
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(settings, "db_auto_create", True)

    app.dependency_overrides[get_email_service] = lambda: email_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def run_db(client):
    """Run ``work(session)`` on the client's event loop and return its result."""
    def _run(work):
        async def _call():
            async with client.app.state.database.session() as session:
                return await work(session)
        return client.portal.call(_call)
    return _run


@pytest.fixture
def make_user(client):
    """Register and log in a user, returning bearer auth headers."""
    def _make(username="alice", email="alice@example.com", password="password123"):
        response = client.post(
            "/api/v1/users/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text

        response = client.post("/api/v1/users/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["data"]["accesstoken"]
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def auth_headers(make_user):
    return make_user()


@pytest.fixture
def other_auth_headers(make_user):
    return make_user(username="bob", email="bob@example.com")


@pytest.fixture
def make_store(client):
    """Create a store for the given user and return its id."""
    def _make(headers, **overrides):
        response = client.post("/api/v1/stores", json={**STORE_PAYLOAD, **overrides}, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["store_id"]
    return _make


@pytest.fixture
def store_id(make_store, auth_headers):
    return make_store(auth_headers)


@pytest.fixture
def make_offer(client):
    """Create an offer through a multipart request and return its id."""
    def _make(headers, store_id, images=(), **overrides):
        files = [("offerImages", image) for image in images]
        response = client.post(
            "/api/v1/offers",
            data={**OFFER_FIELDS, "store": store_id, **overrides},
            files=files or None,
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]["offer_id"]
    return _make
