"""Tests for the response envelope, request ids and global error handling."""
import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from simplishare.core.database import Database
from simplishare.error_handlers import duplicate_field
from simplishare.exceptions import ErrorCode
from simplishare.main import app
from simplishare.middleware import new_request_id


class TestEnvelope:
    """Tests for the success and error envelope."""

    def test_success_envelope(self, client):
        response = client.get("/health-check")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"success", "message", "data", "requestId"}
        assert body["success"] is True
        assert body["data"]["status"] == "healthy"
        assert body["data"]["database"] == "connected"

    def test_error_envelope(self, client):
        response = client.get("/api/v1/stores")

        body = response.json()
        assert set(body) == {"success", "message", "error", "errorCode", "requestId"}
        assert body["success"] is False
        assert body["error"] is None

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "Route GET /api/v1/nowhere not found"
        assert body["errorCode"] == ErrorCode.ROUTE_NOT_FOUND


class TestRequestId:
    """Tests for request correlation ids."""

    def test_header_matches_body(self, client):
        response = client.get("/health-check")

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 6 and request_id.isdigit()
        assert response.json()["requestId"] == int(request_id)
        assert "X-Process-Time" in response.headers

    def test_ids_are_six_digits(self):
        for _ in range(100):
            assert 100000 <= new_request_id() <= 999999


class TestServerErrors:
    """Tests for unexpected failures."""

    @pytest.fixture
    def failing_client(self, client):
        router = APIRouter()

        @router.get("/api/v1/explode")
        async def explode():
            raise RuntimeError("kaboom")

        app.include_router(router)
        try:
            with TestClient(app, raise_server_exceptions=False) as failing:
                yield failing
        finally:
            app.router.routes = [route for route in app.router.routes if route.path != "/api/v1/explode"]

    def test_unhandled_exception_is_500(self, failing_client):
        response = failing_client.get("/api/v1/explode")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "kaboom"
        assert body["errorCode"] == ErrorCode.SERVER_ERROR

    def test_health_check_reports_database_outage(self, client, monkeypatch):
        async def down(self):
            return False

        monkeypatch.setattr(Database, "ping", down)

        response = client.get("/health-check")

        assert response.status_code == 503
        body = response.json()
        assert body["errorCode"] == ErrorCode.DATABASE_CONNECTION
        assert body["error"]["database"] == "unavailable"


class TestDuplicateField:
    """Tests for picking the column out of a unique violation."""

    @pytest.mark.parametrize("driver_message, field", [
        ("UNIQUE constraint failed: stores.email_id", "email_id"),
        ('duplicate key value violates unique constraint "users_username_key"\n'
         "DETAIL:  Key (username)=(carol) already exists.", "username"),
    ])
    def test_unique_violation(self, driver_message, field):
        exc = IntegrityError("INSERT", {}, Exception(driver_message))
        assert duplicate_field(exc) == field

    @pytest.mark.parametrize("driver_message", [
        "NOT NULL constraint failed: stores.city",
        "FOREIGN KEY constraint failed",
    ])
    def test_other_integrity_errors(self, driver_message):
        exc = IntegrityError("UPDATE", {}, Exception(driver_message))
        assert duplicate_field(exc) is None
