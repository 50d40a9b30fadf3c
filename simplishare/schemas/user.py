"""
Pydantic schemas for registration, login, email verification and onboarding.
"""
from typing import Annotated, Literal, Optional
import uuid

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field

from simplishare.core.validation import alphanumeric, exact_length
from simplishare.schemas.base import EmailField, NonEmptyStr, RequestSchema

Profession = Literal["Brand Owner", "C Suit", "Franchaise Owner", "Freelancer"]
TeamSize = Literal[
    "1-10", "11-50", "51-250", "251-1K", "1K-5K", "5K-10K", "10K-50K", "50K-100K", "100K+"
]
LookingFor = Literal[
    "Brand Management",
    "Community Sharing",
    "Analyze & Insights",
    "Brand Strategy",
    "Brand Reputation",
]

Password = Annotated[str, Field(min_length=8, max_length=100)]
OTP_LENGTH = 8


class RegisterRequest(RequestSchema):
    """Schema for user registration."""
    username: Annotated[str, Field(min_length=3, max_length=30), AfterValidator(alphanumeric)]
    email: EmailField
    password: Password


class LoginRequest(RequestSchema):
    """Schema for login request."""
    email: EmailField
    password: NonEmptyStr


class SendOTPRequest(RequestSchema):
    email: EmailField
    token: NonEmptyStr


class VerifyOTPRequest(RequestSchema):
    email: EmailField
    token: NonEmptyStr
    otp: Annotated[str, AfterValidator(exact_length(OTP_LENGTH))]


class ForgotPasswordRequest(RequestSchema):
    email: EmailField


class ResetPasswordRequest(RequestSchema):
    """Completes a password reset with the token from the emailed link."""
    email: EmailField
    token: NonEmptyStr
    password: Password


class OnboardingRequest(RequestSchema):
    """Profile details collected after the first login."""
    first_name: Annotated[str, Field(min_length=1, max_length=50)]
    last_name: Annotated[str, Field(min_length=1, max_length=50)]
    profession: Profession
    company_name: Annotated[str, Field(min_length=1, max_length=50)]
    industry: NonEmptyStr
    team_size: TeamSize
    looking_for: LookingFor
    is_onboarding_complete: bool
    instagram_connected: bool = Field(
        validation_alias=AliasChoices("instagram_connected", "instagram_Connected")
    )


# Responses
class RegisterResponse(BaseModel):
    email: str
    token: Optional[str] = None


class LoginResponse(BaseModel):
    accesstoken: str
    redirect: str


class ChallengeResponse(BaseModel):
    """Returned by send-otp: the token the client must present to verify."""
    email: str
    token: str


class OnboardingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_onboarding_complete: bool
