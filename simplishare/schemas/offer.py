"""
Pydantic schemas for Offer requests and responses.

Offers travel in camelCase on the wire (``offerTitle``, ``startDate``...)
and are stored in snake_case.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional
import uuid

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator

from simplishare.core.validation import not_null, require_any_field

OfferType = Literal["Day Offers", "Offers By Value", "BOGO"]
Audience = Literal["Public", "Private"]

Text = Annotated[str, Field(min_length=1)]
Percentage = Annotated[float, Field(ge=0, le=100)]
Amount = Annotated[float, Field(ge=0)]


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[datetime, AfterValidator(_assume_utc)]


class _OfferRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)


class OfferCreate(_OfferRequest):
    """Schema for creating an offer; images arrive as multipart files."""
    store: uuid.UUID
    location: Text
    offer_type: OfferType = Field(alias="offerType")
    offer_title: Text = Field(alias="offerTitle")
    offer_description: Text = Field(alias="offerDescription")
    start_date: Timestamp = Field(alias="startDate")
    end_date: Timestamp = Field(alias="endDate")
    discount_percentage: Optional[Percentage] = Field(default=None, alias="discountPercentage")
    min_spend_amount: Optional[Amount] = Field(default=None, alias="minSpendAmount")
    coupon_code: Optional[Text] = Field(default=None, alias="couponCode")
    select_offer_status: Text = Field(alias="selectOfferStatus")
    applicable_products: Text = Field(alias="applicableProducts")
    audience: Audience = "Public"
    offer_status: Text = Field(alias="offerStatus")


class OfferUpdate(_OfferRequest):
    """
    Sparse update; new images, when sent, replace the whole image set.
    Only the discount, minimum spend and coupon may be sent as null, which
    clears them.
    """
    store: Optional[uuid.UUID] = None
    location: Optional[Text] = None
    offer_type: Optional[OfferType] = Field(default=None, alias="offerType")
    offer_title: Optional[Text] = Field(default=None, alias="offerTitle")
    offer_description: Optional[Text] = Field(default=None, alias="offerDescription")
    start_date: Optional[Timestamp] = Field(default=None, alias="startDate")
    end_date: Optional[Timestamp] = Field(default=None, alias="endDate")
    discount_percentage: Optional[Percentage] = Field(default=None, alias="discountPercentage")
    min_spend_amount: Optional[Amount] = Field(default=None, alias="minSpendAmount")
    coupon_code: Optional[Text] = Field(default=None, alias="couponCode")
    select_offer_status: Optional[Text] = Field(default=None, alias="selectOfferStatus")
    applicable_products: Optional[Text] = Field(default=None, alias="applicableProducts")
    audience: Optional[Audience] = None
    offer_status: Optional[Text] = Field(default=None, alias="offerStatus")

    @model_validator(mode="before")
    @classmethod
    def at_least_one_field(cls, data: Any) -> Any:
        return require_any_field(data)

    @field_validator(
        "store", "location", "offer_type", "offer_title", "offer_description", "start_date",
        "end_date", "select_offer_status", "applicable_products", "audience", "offer_status",
        mode="before",
    )
    @classmethod
    def required_fields_not_null(cls, value: Any) -> Any:
        return not_null(value)


class OfferCreated(BaseModel):
    offer_id: uuid.UUID
    offer_title: str


class OfferResponse(BaseModel):
    """Schema for offer response, serialized with camelCase keys."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    store_id: uuid.UUID = Field(serialization_alias="store")
    location: str
    offer_type: str = Field(serialization_alias="offerType")
    offer_title: str = Field(serialization_alias="offerTitle")
    offer_description: str = Field(serialization_alias="offerDescription")
    start_date: datetime = Field(serialization_alias="startDate")
    end_date: datetime = Field(serialization_alias="endDate")
    discount_percentage: Optional[float] = Field(default=None, serialization_alias="discountPercentage")
    min_spend_amount: Optional[float] = Field(default=None, serialization_alias="minSpendAmount")
    coupon_code: Optional[str] = Field(default=None, serialization_alias="couponCode")
    select_offer_status: str = Field(serialization_alias="selectOfferStatus")
    applicable_products: str = Field(serialization_alias="applicableProducts")
    offer_images: list[str] = Field(default_factory=list, serialization_alias="offerImages")
    audience: str
    offer_status: str = Field(serialization_alias="offerStatus")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    @classmethod
    def dump(cls, offer: Any) -> dict:
        return cls.model_validate(offer).model_dump(mode="json", by_alias=True)
