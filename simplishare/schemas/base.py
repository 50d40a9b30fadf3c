"""Shared pieces for request schemas."""
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from simplishare.core.validation import email_address

EmailField = Annotated[str, Field(max_length=255), AfterValidator(email_address)]
NonEmptyStr = Annotated[str, Field(min_length=1)]


class RequestSchema(BaseModel):
    """Request bodies reject keys they do not declare."""
    model_config = ConfigDict(extra="forbid")
