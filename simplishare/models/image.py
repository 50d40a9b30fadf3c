"""
Blob bucket tables for offer images: one file record plus its ordered chunks.
"""
from typing import Optional
import uuid

from sqlalchemy import String, Integer, BigInteger, LargeBinary, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from simplishare.core.database import Base


class OfferImageFile(Base):
    """File metadata; ``created_at`` doubles as the upload date."""

    __tablename__ = "offer_image_files"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), default="application/octet-stream", nullable=False)
    length: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    chunk_size: Mapped[int] = mapped_column(Integer, nullable=False)
    original_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<OfferImageFile(id={self.id}, filename={self.filename}, length={self.length})>"


class OfferImageChunk(Base):
    __tablename__ = "offer_image_chunks"

    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("offer_image_files.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    n: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    __table_args__ = (
        UniqueConstraint("file_id", "n", name="uq_offer_image_chunks_file_id_n"),
    )
