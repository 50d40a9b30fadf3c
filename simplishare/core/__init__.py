"""Core application modules."""
from simplishare.core.config import settings, get_settings
from simplishare.core.database import Base, Database, get_db, get_database
from simplishare.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    decode_token,
    get_current_user_id,
)

__all__ = [
    "settings",
    "get_settings",
    "Base",
    "Database",
    "get_db",
    "get_database",
    "get_password_hash",
    "verify_password",
    "create_access_token",
    "decode_token",
    "get_current_user_id",
]
