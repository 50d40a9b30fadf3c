"""Tests for the chunked image bucket."""
import io
import uuid

import pytest
from fastapi import UploadFile
from sqlalchemy import func, select
from starlette.datastructures import Headers

from simplishare.exceptions import BadRequestError, ErrorCode, ResourceNotFoundError
from simplishare.models.image import OfferImageChunk, OfferImageFile
from simplishare.storage import ImageBucket, parse_file_id


def upload_file(data: bytes, filename="photo.jpg", content_type="image/jpeg") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def small_bucket(client):
    """A bucket sharing the app database but with 4-byte chunks."""
    return ImageBucket(client.app.state.database.session_factory, chunk_size=4)


@pytest.fixture
def call(client):
    """Run a coroutine function on the client's event loop."""
    def _call(func, *args):
        return client.portal.call(func, *args)
    return _call


class TestParseFileId:
    def test_accepts_uuid(self):
        value = uuid.uuid4()
        assert parse_file_id(str(value)) == value

    def test_rejects_garbage(self):
        with pytest.raises(BadRequestError) as exc_info:
            parse_file_id("not-an-id")
        assert exc_info.value.message == "Invalid file ID format."


class TestImageBucket:
    """Tests for upload, streaming and deletion."""

    def test_upload_splits_into_chunks(self, small_bucket, call, run_db):
        file_id = call(small_bucket.upload, upload_file(b"0123456789"))

        async def inspect(session):
            record = await session.get(OfferImageFile, uuid.UUID(file_id))
            chunks = await session.scalars(
                select(OfferImageChunk.data)
                .where(OfferImageChunk.file_id == record.id)
                .order_by(OfferImageChunk.n)
            )
            return record, list(chunks)

        record, chunks = run_db(inspect)
        assert record.length == 10
        assert record.chunk_size == 4
        assert record.content_type == "image/jpeg"
        assert record.original_name == "photo.jpg"
        assert chunks == [b"0123", b"4567", b"89"]

    def test_read_reassembles_bytes(self, small_bucket, call):
        payload = bytes(range(256)) * 3
        file_id = call(small_bucket.upload, upload_file(payload))

        assert call(small_bucket.read, file_id) == payload

    def test_empty_file(self, small_bucket, call):
        file_id = call(small_bucket.upload, upload_file(b""))

        assert call(small_bucket.read, file_id) == b""

    def test_read_unknown_file(self, small_bucket, call):
        with pytest.raises(ResourceNotFoundError):
            call(small_bucket.read, str(uuid.uuid4()))

    def test_delete_removes_file_and_chunks(self, small_bucket, call, run_db):
        file_id = call(small_bucket.upload, upload_file(b"0123456789"))

        assert call(small_bucket.delete, file_id) is True

        async def count(session):
            return await session.scalar(select(func.count()).select_from(OfferImageChunk))

        assert run_db(count) == 0
        assert call(small_bucket.find, file_id) is None

    @pytest.mark.parametrize("file_id", ["not-an-id", str(uuid.uuid4())])
    def test_delete_is_best_effort(self, small_bucket, call, file_id):
        assert call(small_bucket.delete, file_id) is False

    def test_delete_many_counts_removed(self, small_bucket, call):
        ids = [call(small_bucket.upload, upload_file(b"abc")) for _ in range(2)]

        assert call(small_bucket.delete_many, ids + [str(uuid.uuid4())]) == 2


class TestImageEndpoint:
    """Tests for GET /api/v1/offers/image/{file_id}."""

    def test_streams_stored_bytes(self, client, call):
        bucket = client.app.state.image_bucket
        payload = b"\xff\xd8\xff" + b"jpeg" * 100
        file_id = call(bucket.upload, upload_file(payload))

        response = client.get(f"/api/v1/offers/image/{file_id}")

        assert response.status_code == 200
        assert response.content == payload
        assert response.headers["content-type"] == "image/jpeg"
        assert response.headers["content-length"] == str(len(payload))

    def test_multi_chunk_stream(self, client, small_bucket, call):
        payload = b"abcdefghij" * 3
        file_id = call(small_bucket.upload, upload_file(payload, content_type="image/png"))

        response = client.get(f"/api/v1/offers/image/{file_id}")

        assert response.content == payload
        assert response.headers["content-type"] == "image/png"

    def test_malformed_id(self, client):
        response = client.get("/api/v1/offers/image/not-an-id")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid file ID format."

    def test_unknown_id(self, client):
        response = client.get(f"/api/v1/offers/image/{uuid.uuid4()}")

        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "Image not found."
        assert body["errorCode"] == ErrorCode.NOT_FOUND
