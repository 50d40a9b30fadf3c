"""
Core configuration module using Pydantic Settings.
Supports environment variables and .env files.
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    # Application
    app_name: str = Field(default="SimpliShare API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")

    # Database
    database_url: str = Field(alias="DATABASE_URL")
    db_echo: bool = Field(default=False, alias="DB_ECHO")
    db_pool_size: int = Field(default=20, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=40, alias="DB_MAX_OVERFLOW")
    db_auto_create: bool = Field(default=False, alias="DB_AUTO_CREATE")

    # JWT Authentication
    jwt_secret_key: str = Field(alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_issuer: str = Field(default="simplishareserver.com", alias="JWT_ISSUER")
    # Unset means tokens are issued without an expiry claim
    jwt_access_token_expire_minutes: Optional[int] = Field(default=None, alias="JWT_ACCESS_TOKEN_EXPIRE_MINUTES")

    # Security
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    expose_internal_errors: bool = Field(default=True, alias="EXPOSE_INTERNAL_ERRORS")

    # Email verification / password reset
    otp_expire_minutes: int = Field(default=5, alias="OTP_EXPIRE_MINUTES")
    reset_token_expire_minutes: int = Field(default=15, alias="RESET_TOKEN_EXPIRE_MINUTES")
    require_email_verification: bool = Field(default=False, alias="REQUIRE_EMAIL_VERIFICATION")
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    # Email Settings
    email_enabled: bool = Field(default=False, alias="EMAIL_ENABLED")
    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(default=None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from_email: str = Field(default="noreply@simplishare.com", alias="SMTP_FROM_EMAIL")
    smtp_from_name: str = Field(default="SimpliShare", alias="SMTP_FROM_NAME")
    smtp_timeout: float = Field(default=10.0, alias="SMTP_TIMEOUT")

    # Offer images
    max_offer_images: int = Field(default=5, alias="MAX_OFFER_IMAGES")
    image_chunk_size: int = Field(default=255 * 1024, alias="IMAGE_CHUNK_SIZE")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="./logs", alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("jwt_secret_key", "database_url")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(sorted(LOG_LEVELS))}")
        return v

    @field_validator("port")
    @classmethod
    def valid_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("must be between 1 and 65535")
        return v

    @field_validator("otp_expire_minutes", "reset_token_expire_minutes", "max_offer_images", "image_chunk_size")
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


# Global settings instance; a missing or malformed variable stops the process here
settings = Settings()


def get_settings() -> Settings:
    """Dependency injection for FastAPI."""
    return settings
