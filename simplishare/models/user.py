"""
User model for authentication, email verification and onboarding.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, validates

from simplishare.core.database import Base, JSONList
from simplishare.core.security import get_password_hash


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """User account model."""

    __tablename__ = "users"

    # User credentials
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    username: Mapped[Optional[str]] = mapped_column(String(30), unique=True, nullable=True)
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Role and permissions
    roles: Mapped[list[str]] = mapped_column(
        JSONList,
        default=lambda: [UserRole.USER.value],
        nullable=False
    )

    # Email verification challenge
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    email_verification_otp: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    email_verification_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    email_verification_expires: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Password reset
    reset_password_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reset_token_expires: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reset_password_verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Onboarding profile
    first_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    profession: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    team_size: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    looking_for: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_onboarding_complete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    instagram_connected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @validates("password")
    def _hash_password(self, key: str, value: Optional[str]) -> Optional[str]:
        # Only fires on assignment, never when a row is loaded
        if value is None:
            return None
        return get_password_hash(value)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, roles={self.roles})>"
