"""Tests for the stores endpoints."""
import uuid

from sqlalchemy import func, select

from simplishare.exceptions import ErrorCode
from simplishare.models.offer import Offer
from conftest import STORE_PAYLOAD


class TestCreateStore:
    """Tests for POST /api/v1/stores."""

    def test_create_store(self, client, auth_headers):
        response = client.post("/api/v1/stores", json=STORE_PAYLOAD, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Store has been successfully added."
        assert body["data"]["store_name"] == "Corner Bakery"
        uuid.UUID(body["data"]["store_id"])

    def test_create_requires_auth(self, client):
        response = client.post("/api/v1/stores", json=STORE_PAYLOAD)

        assert response.status_code == 401
        assert response.json()["errorCode"] == ErrorCode.UNAUTHORIZED_ACCESS

    def test_duplicate_store_email(self, client, auth_headers, other_auth_headers, make_store):
        make_store(auth_headers)

        response = client.post("/api/v1/stores", json=STORE_PAYLOAD, headers=other_auth_headers)

        assert response.status_code == 409
        body = response.json()
        assert body["message"] == "A store with this email is already in use."
        assert body["errorCode"] == ErrorCode.DUPLICATE_ENTRY

    def test_create_validation(self, client, auth_headers):
        response = client.post(
            "/api/v1/stores",
            json={**STORE_PAYLOAD, "pincode": "12ab56", "email_id": "nope"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["error"]}
        assert fields == {"pincode", "email_id"}

    def test_text_is_trimmed(self, client, auth_headers):
        response = client.post(
            "/api/v1/stores",
            json={**STORE_PAYLOAD, "store_name": "  Corner Cafe  ", "city": " Pune "},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["store_name"] == "Corner Cafe"
        store = client.get("/api/v1/stores", headers=auth_headers).json()["data"][0]
        assert store["city"] == "Pune"


class TestListStores:
    """Tests for GET /api/v1/stores."""

    def test_lists_only_own_stores(self, client, auth_headers, other_auth_headers, make_store):
        mine = make_store(auth_headers)
        make_store(other_auth_headers, email_id="other@example.com")

        response = client.get("/api/v1/stores", headers=auth_headers)

        assert response.status_code == 200
        stores = response.json()["data"]
        assert [store["id"] for store in stores] == [mine]
        assert stores[0]["pincode"] == "411001"

    def test_empty_list(self, client, auth_headers):
        response = client.get("/api/v1/stores", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == []


class TestUpdateStore:
    """Tests for PUT /api/v1/stores/{store_id}."""

    def test_update_changes_only_given_fields(self, client, auth_headers, store_id):
        response = client.put(
            f"/api/v1/stores/{store_id}",
            json={"store_name": "Corner Cafe", "city": "Mumbai"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["store_name"] == "Corner Cafe"
        assert data["city"] == "Mumbai"
        assert data["address"] == STORE_PAYLOAD["address"]

    def test_empty_update_rejected(self, client, auth_headers, store_id):
        response = client.put(f"/api/v1/stores/{store_id}", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"][0]["type"] == "at_least_one_field"

    def test_null_field_rejected(self, client, auth_headers, store_id):
        response = client.put(
            f"/api/v1/stores/{store_id}",
            json={"city": None, "state": "Goa"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["errorCode"] == ErrorCode.INVALID_FIELD_FORMAT
        assert [(error["field"], error["type"]) for error in body["error"]] == [("city", "not_null")]
        store = client.get("/api/v1/stores", headers=auth_headers).json()["data"][0]
        assert store["city"] == STORE_PAYLOAD["city"]
        assert store["state"] == STORE_PAYLOAD["state"]

    def test_other_users_store_looks_missing(self, client, auth_headers, other_auth_headers, store_id):
        foreign = client.put(f"/api/v1/stores/{store_id}", json={"city": "Delhi"}, headers=other_auth_headers)
        missing = client.put(f"/api/v1/stores/{uuid.uuid4()}", json={"city": "Delhi"}, headers=other_auth_headers)

        assert foreign.status_code == missing.status_code == 404
        assert foreign.json()["errorCode"] == missing.json()["errorCode"] == ErrorCode.STORE_NOT_FOUND
        assert foreign.json()["message"] == missing.json()["message"]

    def test_update_to_taken_email(self, client, auth_headers, make_store, store_id):
        make_store(auth_headers, email_id="second@example.com")

        response = client.put(
            f"/api/v1/stores/{store_id}",
            json={"email_id": "second@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 409

    def test_malformed_id(self, client, auth_headers):
        response = client.put("/api/v1/stores/not-a-uuid", json={"city": "Delhi"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"][0]["field"] == "store_id"


class TestDeleteStore:
    """Tests for DELETE /api/v1/stores/{store_id}."""

    def test_delete_store_and_its_offers(self, client, auth_headers, store_id, make_offer, run_db):
        make_offer(auth_headers, store_id)

        response = client.delete(f"/api/v1/stores/{store_id}", headers=auth_headers)

        assert response.status_code == 200
        assert client.get("/api/v1/stores", headers=auth_headers).json()["data"] == []

        async def count_offers(session):
            return await session.scalar(select(func.count()).select_from(Offer))

        assert run_db(count_offers) == 0

    def test_delete_other_users_store(self, client, other_auth_headers, store_id):
        response = client.delete(f"/api/v1/stores/{store_id}", headers=other_auth_headers)

        assert response.status_code == 404
        assert response.json()["errorCode"] == ErrorCode.STORE_NOT_FOUND
