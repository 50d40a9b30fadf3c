"""
Security utilities for authentication and authorization.
Handles JWT tokens, password hashing, and request subject resolution.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
import uuid

from fastapi import Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings
from ..exceptions import AppException, ErrorCode, InvalidTokenError, UnauthorizedError
from ..logging_config import get_logger

logger = get_logger("security")

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds
)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt (per-hash random salt)."""
    return pwd_context.hash(password)


def create_access_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """
    Create a signed JWT access token.

    Args:
        subject: User ID the token is issued for
        expires_delta: Token lifetime; falls back to the configured lifetime,
            and no ``exp`` claim is set when neither is given
        additional_claims: Extra data to include in token

    Returns:
        Encoded JWT token string

    Raises:
        AppException: if signing fails
    """
    to_encode: dict[str, Any] = {
        "id": str(subject),
        "iss": settings.jwt_issuer,
        "iat": datetime.now(timezone.utc),
    }

    if expires_delta is None and settings.jwt_access_token_expire_minutes:
        expires_delta = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    if expires_delta is not None:
        to_encode["exp"] = datetime.now(timezone.utc) + expires_delta

    if additional_claims:
        to_encode.update(additional_claims)

    try:
        return jwt.encode(
            to_encode,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm
        )
    except JWTError as exc:
        logger.error(f"Token signing failed: {exc}")
        raise AppException("Token Generation Failed.", 500, ErrorCode.SERVER_ERROR)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token (signature, issuer, expiry).

    Raises:
        InvalidTokenError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except JWTError:
        raise InvalidTokenError("Invalid or Expired Token.")


def parse_authorization_header(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise UnauthorizedError("Authorization header is missing.")

    parts = authorization.split(" ")
    if len(parts) != 2:
        raise UnauthorizedError("Invalid Authorization Format.")

    return parts[1]


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> uuid.UUID:
    """
    Resolve the authenticated subject and bind it to the request.

    Raises:
        UnauthorizedError: header absent or malformed
        InvalidTokenError: bad signature, issuer, expiry or subject
    """
    token = parse_authorization_header(authorization)
    payload = decode_token(token)

    try:
        user_id = uuid.UUID(str(payload.get("id")))
    except ValueError:
        raise InvalidTokenError("Invalid or Expired Token.")

    request.state.user_id = user_id
    return user_id
