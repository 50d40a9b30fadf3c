"""
Pydantic schemas for Store requests and responses.
"""
from datetime import datetime
from typing import Annotated, Any, Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from simplishare.core.validation import not_null, require_any_field
from simplishare.schemas.base import EmailField, NonEmptyStr, RequestSchema

StoreName = Annotated[str, Field(min_length=1, max_length=100)]
Address = Annotated[str, Field(min_length=5, max_length=500)]
Pincode = Annotated[str, Field(pattern=r"^\d{6}$")]


class _StoreRequest(RequestSchema):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class StoreCreate(_StoreRequest):
    """Schema for creating a store."""
    store_name: StoreName
    store_type: NonEmptyStr
    email_id: EmailField
    manager_email_id: EmailField
    address: Address
    city: NonEmptyStr
    state: NonEmptyStr
    pincode: Pincode


class StoreUpdate(_StoreRequest):
    """Sparse update; only the provided fields change."""
    store_name: Optional[StoreName] = None
    store_type: Optional[NonEmptyStr] = None
    email_id: Optional[EmailField] = None
    manager_email_id: Optional[EmailField] = None
    address: Optional[Address] = None
    city: Optional[NonEmptyStr] = None
    state: Optional[NonEmptyStr] = None
    pincode: Optional[Pincode] = None

    @model_validator(mode="before")
    @classmethod
    def at_least_one_field(cls, data: Any) -> Any:
        return require_any_field(data)

    @field_validator("*", mode="before")
    @classmethod
    def present_fields_not_null(cls, value: Any) -> Any:
        return not_null(value)


class StoreCreated(BaseModel):
    store_id: uuid.UUID
    store_name: str


class StoreResponse(BaseModel):
    """Schema for store response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    store_name: str
    store_type: str
    email_id: str
    manager_email_id: str
    address: str
    city: str
    state: str
    pincode: str
    created_at: datetime
    updated_at: datetime
