"""Application error taxonomy with stable client-facing error codes."""
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Stable error codes returned to clients, independent of HTTP status."""

    # Validation Errors (3000-3099)
    INVALID_EMAIL_FORMAT = 3000
    PASSWORD_TOO_SHORT = 3001
    INVALID_OTP = 3002
    INVALID_USER_NAME = 3003
    INVALID_FIELD_FORMAT = 3004
    ROUTE_NOT_FOUND = 3005

    # Authentication Errors (3100-3199)
    UNAUTHORIZED_ACCESS = 3100
    INVALID_TOKEN = 3101
    EXPIRED_TOKEN = 3102
    ACCESS_DENIED = 3103
    INVALID_CREDENTIALS = 3104
    ACCOUNT_NOT_VERIFIED = 3105

    # Database Errors (3200-3299)
    USER_NOT_FOUND = 3200
    DUPLICATE_ENTRY = 3201
    DATABASE_CONNECTION = 3202
    USER_DATA_NOT_FOUND = 3203
    STORE_NOT_FOUND = 3204
    NOT_FOUND = 3205
    OFFER_NOT_FOUND = 3206

    # Email Errors (3300-3399)
    EMAIL_SEND_FAILED = 3300
    EMAIL_ALREADY_VERIFIED = 3301

    # General Errors (3400-3499)
    SERVER_ERROR = 3400


class AppException(Exception):
    """Base exception for application-specific errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: ErrorCode = ErrorCode.SERVER_ERROR,
        error: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.error = error
        super().__init__(self.message)


class ValidationFailed(AppException):
    """Raised when a payload violates its schema; carries every violation."""

    def __init__(self, errors: list[dict]):
        super().__init__(
            message="Validation Error",
            status_code=400,
            error_code=ErrorCode.INVALID_FIELD_FORMAT,
            error=errors,
        )


class BadRequestError(AppException):
    def __init__(self, message: str):
        super().__init__(message, 400, ErrorCode.INVALID_FIELD_FORMAT)


class UnauthorizedError(AppException):
    def __init__(self, message: str = "Authentication required."):
        super().__init__(message, 401, ErrorCode.UNAUTHORIZED_ACCESS)


class InvalidTokenError(AppException):
    def __init__(self, message: str = "Invalid token provided."):
        super().__init__(message, 401, ErrorCode.INVALID_TOKEN)


class ExpiredTokenError(AppException):
    def __init__(self, message: str):
        super().__init__(message, 401, ErrorCode.EXPIRED_TOKEN)


class InvalidCredentialsError(AppException):
    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, 401, ErrorCode.INVALID_CREDENTIALS)


class ResourceNotFoundError(AppException):
    """Raised when a resource is missing or not owned by the caller."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(message, 404, error_code)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, email: str):
        super().__init__(f"{email} does not exist.", ErrorCode.USER_NOT_FOUND)


class UserDataNotFoundError(AppException):
    def __init__(self, message: str):
        super().__init__(message, 400, ErrorCode.USER_DATA_NOT_FOUND)


class DuplicateEntryError(AppException):
    def __init__(self, message: str):
        super().__init__(message, 409, ErrorCode.DUPLICATE_ENTRY)


class InvalidOTPError(AppException):
    def __init__(self, message: str = "Invalid OTP provided."):
        super().__init__(message, 400, ErrorCode.INVALID_OTP)


class EmailAlreadyVerifiedError(AppException):
    def __init__(self, message: str = "Email is already verified. No need to request a new OTP."):
        super().__init__(message, 400, ErrorCode.EMAIL_ALREADY_VERIFIED)


class EmailSendFailedError(AppException):
    def __init__(self, message: str = "Failed to send email."):
        super().__init__(message, 500, ErrorCode.EMAIL_SEND_FAILED)


class StorageError(AppException):
    def __init__(self, message: str = "File upload to storage failed."):
        super().__init__(message, 500, ErrorCode.SERVER_ERROR)
