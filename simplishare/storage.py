"""
Blob bucket for offer images.

Files are split into fixed-size chunks and stored in two tables, one row
per file and one row per chunk, so an image is never held in memory as a
whole while it is streamed back to a client. Images are tied to offers
only through the ids kept in ``Offer.offer_images``; keeping those lists
and the bucket in step is the caller's job.
"""
import math
import uuid
from typing import AsyncIterator, Iterable, Optional

from fastapi import Request, UploadFile
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .exceptions import BadRequestError, ResourceNotFoundError, StorageError
from .logging_config import get_logger
from .models.image import OfferImageChunk, OfferImageFile

logger = get_logger("storage")

DEFAULT_CHUNK_SIZE = 255 * 1024


def parse_file_id(file_id: str) -> uuid.UUID:
    """Parse a blob id, rejecting anything that is not a UUID."""
    try:
        return uuid.UUID(str(file_id))
    except ValueError:
        raise BadRequestError("Invalid file ID format.")


class ImageBucket:
    """Process-lifetime handle to the image bucket."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.session_factory = session_factory
        self.chunk_size = chunk_size

    async def upload(self, file: UploadFile) -> str:
        """
        Store an uploaded file and return its generated id.

        Raises:
            StorageError: if any chunk fails to persist
        """
        filename = file.filename or "upload"
        try:
            async with self.session_factory() as session:
                record = OfferImageFile(
                    filename=filename,
                    content_type=file.content_type or "application/octet-stream",
                    chunk_size=self.chunk_size,
                    original_name=file.filename,
                    length=0,
                )
                session.add(record)
                await session.flush()

                length = 0
                n = 0
                while True:
                    data = await file.read(self.chunk_size)
                    if not data:
                        break
                    session.add(OfferImageChunk(file_id=record.id, n=n, data=data))
                    length += len(data)
                    n += 1

                record.length = length
                await session.commit()
        except Exception as exc:
            logger.error(f"Upload of {filename} failed: {exc}", exc_info=True)
            raise StorageError("File upload to storage failed.")

        logger.info(f"Upload successful. ID: {record.id} ({length} bytes)")
        return str(record.id)

    async def find(self, file_id: str) -> Optional[OfferImageFile]:
        oid = parse_file_id(file_id)
        async with self.session_factory() as session:
            return await session.get(OfferImageFile, oid)

    async def open_download_stream(self, file_id: str) -> tuple[OfferImageFile, AsyncIterator[bytes]]:
        """
        Look up a file and return it with an iterator over its bytes.

        Raises:
            BadRequestError: malformed id
            ResourceNotFoundError: no file with this id
        """
        record = await self.find(file_id)
        if record is None:
            raise ResourceNotFoundError("Image not found.")
        return record, self._iter_chunks(record)

    async def _iter_chunks(self, record: OfferImageFile) -> AsyncIterator[bytes]:
        # One query per chunk keeps memory bounded by the chunk size
        count = math.ceil(record.length / record.chunk_size) if record.length else 0
        for n in range(count):
            async with self.session_factory() as session:
                data = await session.scalar(
                    select(OfferImageChunk.data).where(
                        OfferImageChunk.file_id == record.id,
                        OfferImageChunk.n == n,
                    )
                )
            if data is None:
                logger.error(f"Chunk {n} of {record.id} is missing")
                raise StorageError("Error streaming file.")
            yield data

    async def read(self, file_id: str) -> bytes:
        """Read a whole file into memory."""
        _, chunks = await self.open_download_stream(file_id)
        return b"".join([chunk async for chunk in chunks])

    async def delete(self, file_id: str) -> bool:
        """
        Best-effort delete. Failures are logged and reported as ``False``,
        never raised.
        """
        try:
            oid = uuid.UUID(str(file_id))
            async with self.session_factory() as session:
                await session.execute(delete(OfferImageChunk).where(OfferImageChunk.file_id == oid))
                result = await session.execute(delete(OfferImageFile).where(OfferImageFile.id == oid))
                await session.commit()
        except Exception as exc:
            logger.warning(f"Deletion warning for ID: {file_id}. Error: {exc}")
            return False

        if result.rowcount == 0:
            logger.warning(f"Deletion warning for ID: {file_id}. File not found")
            return False

        logger.info(f"Deletion successful for ID: {file_id}")
        return True

    async def delete_many(self, file_ids: Iterable[str]) -> int:
        """Delete several files one after another; returns how many went away."""
        deleted = 0
        for file_id in file_ids:
            if await self.delete(file_id):
                deleted += 1
        return deleted


def get_image_bucket(request: Request) -> ImageBucket:
    return request.app.state.image_bucket
