"""
Offer model. Offers are owned through their store.
"""
from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import String, Text, Float, DateTime, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column

from simplishare.core.database import Base, JSONList


class Offer(Base):
    """Promotional offer attached to a store."""

    __tablename__ = "offers"

    # Foreign keys
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False
    )

    location: Mapped[str] = mapped_column(String(255), nullable=False)
    offer_type: Mapped[str] = mapped_column(String(50), nullable=False)
    offer_title: Mapped[str] = mapped_column(String(255), nullable=False)
    offer_description: Mapped[str] = mapped_column(Text, nullable=False)

    # Validity window, start is not required to precede end
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Terms
    discount_percentage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    min_spend_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    coupon_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    applicable_products: Mapped[str] = mapped_column(Text, nullable=False)

    # Status
    select_offer_status: Mapped[str] = mapped_column(String(50), nullable=False)
    offer_status: Mapped[str] = mapped_column(String(50), nullable=False)
    audience: Mapped[str] = mapped_column(String(20), default="Public", nullable=False)

    # Blob ids in the image bucket, by reference only
    offer_images: Mapped[list[str]] = mapped_column(JSONList, default=list, nullable=False)

    __table_args__ = (
        Index("idx_offers_store_id", "store_id"),
    )

    def __repr__(self) -> str:
        return f"<Offer(id={self.id}, offer_title={self.offer_title}, store_id={self.store_id})>"
