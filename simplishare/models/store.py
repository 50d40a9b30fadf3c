"""
Store model. Every store belongs to exactly one user.
"""
import uuid

from sqlalchemy import String, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from simplishare.core.database import Base


class Store(Base):
    """A user's store, the parent of its offers."""

    __tablename__ = "stores"

    # Foreign keys
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    store_name: Mapped[str] = mapped_column(String(100), nullable=False)
    store_type: Mapped[str] = mapped_column(String(255), nullable=False)

    # Contact
    email_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    manager_email_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Address
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(255), nullable=False)
    pincode: Mapped[str] = mapped_column(String(6), nullable=False)

    def __repr__(self) -> str:
        return f"<Store(id={self.id}, store_name={self.store_name}, user_id={self.user_id})>"
