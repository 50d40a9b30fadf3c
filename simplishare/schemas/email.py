"""Parameters accepted by the email collaborator."""
from typing import Annotated, Optional

from pydantic import Field

from simplishare.schemas.base import EmailField, NonEmptyStr, RequestSchema


class EmailMessage(RequestSchema):
    recipient_email: EmailField
    subject: NonEmptyStr
    text: Optional[Annotated[str, Field(min_length=10)]] = None
    html: Optional[str] = None
    otp: Optional[str] = None
    reset_password_link: Optional[str] = None
