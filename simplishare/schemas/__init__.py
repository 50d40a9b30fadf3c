"""
Pydantic schemas for request/response validation.
"""
from simplishare.schemas.user import (
    RegisterRequest, LoginRequest, SendOTPRequest, VerifyOTPRequest,
    ForgotPasswordRequest, ResetPasswordRequest, OnboardingRequest,
    RegisterResponse, LoginResponse, ChallengeResponse, OnboardingResponse
)
from simplishare.schemas.store import StoreCreate, StoreUpdate, StoreCreated, StoreResponse
from simplishare.schemas.offer import OfferCreate, OfferUpdate, OfferCreated, OfferResponse
from simplishare.schemas.email import EmailMessage

__all__ = [
    # User schemas
    "RegisterRequest", "LoginRequest", "SendOTPRequest", "VerifyOTPRequest",
    "ForgotPasswordRequest", "ResetPasswordRequest", "OnboardingRequest",
    "RegisterResponse", "LoginResponse", "ChallengeResponse", "OnboardingResponse",

    # Store schemas
    "StoreCreate", "StoreUpdate", "StoreCreated", "StoreResponse",

    # Offer schemas
    "OfferCreate", "OfferUpdate", "OfferCreated", "OfferResponse",

    # Email
    "EmailMessage",
]
