"""
Email verification and password reset flows.

A verification challenge is the triple (otp, token hash, expiry) stored on
the user. The plaintext token only ever lives with the client: the server
keeps its SHA-256 digest and compares digests. The OTP is short lived and
kept in the clear. Once verified, the challenge fields are cleared and the
account stays verified.
"""
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import Settings
from .email_service import EmailService
from .exceptions import (
    EmailAlreadyVerifiedError,
    ExpiredTokenError,
    InvalidOTPError,
    InvalidTokenError,
    UserDataNotFoundError,
    UserNotFoundError,
)
from .logging_config import get_logger
from .models.user import User

logger = get_logger("verification")

EMAIL_OTP_LENGTH = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def verify_token(client_token: str, hashed_token: Optional[str]) -> bool:
    if not hashed_token:
        return False
    return hmac.compare_digest(hash_token(client_token), hashed_token)


def generate_otp(length: int = 4) -> str:
    """Numeric code of exactly ``length`` digits, no leading zero."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def issue_challenge(user: User, email_service: EmailService, settings: Settings) -> str:
    """
    Start a fresh challenge on ``user`` and email the code.

    The caller commits. Returns the plaintext token for the client.
    """
    token = generate_token()
    otp = generate_otp(EMAIL_OTP_LENGTH)

    # A failed send leaves the stored challenge untouched
    await email_service.send_otp_email(user.email, otp)

    user.email_verification_token = hash_token(token)
    user.email_verification_otp = otp
    user.email_verification_expires = utcnow() + timedelta(minutes=settings.otp_expire_minutes)
    return token


async def resend_challenge(
    db: AsyncSession,
    email: str,
    client_token: str,
    email_service: EmailService,
    settings: Settings,
) -> tuple[str, bool]:
    """
    Replace an existing challenge once it has expired.

    Returns the token the client should hold from now on and whether a new
    code was sent. While the current challenge is still live the same token
    comes back and nothing is sent.

    Raises:
        UserNotFoundError: no account for ``email``
        UserDataNotFoundError: the account has no challenge to replace
        InvalidTokenError: ``client_token`` does not match the stored digest
        EmailAlreadyVerifiedError: the challenge expired on a verified account
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError(email)

    if not (user.email_verification_expires and user.email_verification_token and user.email_verification_otp):
        raise UserDataNotFoundError(f"No verification token or OTP is not found for user with email:{email}.")

    if not verify_token(client_token, user.email_verification_token):
        raise InvalidTokenError("Invalid token provided.")

    if utcnow() <= as_utc(user.email_verification_expires):
        return client_token, False

    if user.is_email_verified:
        raise EmailAlreadyVerifiedError()

    token = await issue_challenge(user, email_service, settings)
    await db.commit()
    logger.info(f"Verification code re-issued for {email}")
    return token, True


async def verify_challenge(db: AsyncSession, email: str, client_token: str, otp: str) -> User:
    """
    Consume the challenge and mark the email verified.

    Raises:
        UserNotFoundError: no account for ``email``
        ExpiredTokenError: the challenge is past its expiry
        UserDataNotFoundError: no challenge on the account
        InvalidTokenError: token digest mismatch
        InvalidOTPError: code mismatch
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError(email)

    if user.email_verification_expires and utcnow() > as_utc(user.email_verification_expires):
        raise ExpiredTokenError("verification token expired. Verify your email address again.")

    if not (user.email_verification_token and user.email_verification_otp):
        raise UserDataNotFoundError(f"No verification token or OTP is not found for user with email:{email}.")

    if not verify_token(client_token, user.email_verification_token):
        raise InvalidTokenError("Invalid token provided.")

    if not hmac.compare_digest(user.email_verification_otp.encode("utf-8"), otp.encode("utf-8")):
        raise InvalidOTPError()

    user.is_email_verified = True
    user.email_verification_token = None
    user.email_verification_otp = None
    user.email_verification_expires = None
    user.email_verified_at = utcnow()
    await db.commit()

    logger.info(f"Email verified for {email}")
    return user


async def start_password_reset(
    db: AsyncSession,
    email: str,
    email_service: EmailService,
    settings: Settings,
) -> None:
    """Store a reset token digest and email the reset link."""
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError(email)

    token = generate_token()
    query = urlencode({"token": token, "email": user.email})
    reset_link = f"{settings.frontend_url.rstrip('/')}/reset-password?{query}"

    await email_service.send_password_reset_email(user.email, reset_link)

    user.reset_password_token = hash_token(token)
    user.reset_token_expires = utcnow() + timedelta(minutes=settings.reset_token_expire_minutes)
    await db.commit()
    logger.info(f"Password reset requested for {email}")


async def complete_password_reset(db: AsyncSession, email: str, client_token: str, new_password: str) -> None:
    """
    Set a new password using the token from the reset link.

    Raises:
        UserNotFoundError, UserDataNotFoundError, ExpiredTokenError, InvalidTokenError
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError(email)

    if not (user.reset_password_token and user.reset_token_expires):
        raise UserDataNotFoundError(f"No password reset request found for user with email:{email}.")

    if utcnow() > as_utc(user.reset_token_expires):
        raise ExpiredTokenError("Password reset token expired. Request a new one.")

    if not verify_token(client_token, user.reset_password_token):
        raise InvalidTokenError("Invalid token provided.")

    user.password = new_password
    user.reset_password_token = None
    user.reset_token_expires = None
    user.reset_password_verified_at = utcnow()
    await db.commit()
    logger.info(f"Password reset completed for {email}")
