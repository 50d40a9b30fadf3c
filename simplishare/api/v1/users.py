"""
User API endpoints: registration, login, email verification, password reset
and onboarding.
"""
import uuid

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from simplishare.core.config import Settings, get_settings
from simplishare.core.database import get_db
from simplishare.core.responses import success_response
from simplishare.core.security import create_access_token, get_current_user_id, verify_password
from simplishare.email_service import EmailService, get_email_service
from simplishare.error_handlers import duplicate_field
from simplishare.exceptions import DuplicateEntryError, ErrorCode, InvalidCredentialsError, ResourceNotFoundError
from simplishare.logging_config import get_logger
from simplishare.models.user import User
from simplishare.schemas.user import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    SendOTPRequest,
    ChallengeResponse,
    VerifyOTPRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    OnboardingRequest,
    OnboardingResponse,
)
from simplishare.verification import (
    complete_password_reset,
    get_user_by_email,
    issue_challenge,
    resend_challenge,
    start_password_reset,
    utcnow,
    verify_challenge,
)

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger("api.users")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    user_data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
):
    """
    Register a new user account.

    - **username**: 3-30 letters and digits
    - **email**: Valid email address
    - **password**: Minimum 8 characters

    Accounts are verified on creation unless REQUIRE_EMAIL_VERIFICATION is
    set, in which case a verification code is emailed and the token needed
    to confirm it is returned.
    """
    if await get_user_by_email(db, user_data.email):
        raise DuplicateEntryError("Email Is Already Exists.")

    # Checked up front so no code is emailed for an account that cannot be created
    if await db.scalar(select(User.id).where(User.username == user_data.username)):
        raise DuplicateEntryError("username is already in use.")

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
    )

    token = None
    if settings.require_email_verification:
        token = await issue_challenge(new_user, email_service, settings)
    else:
        new_user.is_email_verified = True
        new_user.email_verified_at = utcnow()

    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        field = duplicate_field(exc)
        if field is None:
            raise
        raise DuplicateEntryError(f"{field} is already in use.")

    logger.info(f"User registered: {new_user.email}")
    data = RegisterResponse(email=new_user.email, token=token)
    return success_response(
        request,
        status.HTTP_201_CREATED,
        "User has been successfully registered.",
        data.model_dump(exclude_none=True),
    )


@router.post("/login")
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate user and return a bearer token.

    The ``redirect`` hint points at onboarding until the profile is complete.
    """
    user = await get_user_by_email(db, credentials.email)

    if user is None:
        raise InvalidCredentialsError(f"{credentials.email} does not exist.")

    if not verify_password(credentials.password, user.password):
        raise InvalidCredentialsError()

    token = create_access_token(subject=user.id)
    data = LoginResponse(
        accesstoken=token,
        redirect="./home" if user.is_onboarding_complete else "/onboarding",
    )
    return success_response(request, status.HTTP_200_OK, "ok", data.model_dump())


@router.post("/send-otp")
async def send_otp(
    request: Request,
    payload: SendOTPRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
):
    """
    Re-issue an expired verification challenge.

    - **email**: Account email
    - **token**: Token from the current challenge
    """
    token, reissued = await resend_challenge(db, payload.email, payload.token, email_service, settings)
    message = "OTP sent succesfully." if reissued else "Token is still valid. No new OTP sent."
    data = ChallengeResponse(email=payload.email, token=token)
    return success_response(request, status.HTTP_200_OK, message, data.model_dump())


@router.post("/verify-otp")
async def verify_otp(
    request: Request,
    payload: VerifyOTPRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Verify the email address with the emailed code.

    - **email**: Account email
    - **token**: Token from the current challenge
    - **otp**: 8-digit code
    """
    await verify_challenge(db, payload.email, payload.token, payload.otp)
    return success_response(request, status.HTTP_200_OK, "Email successfully verified.")


@router.post("/forgot-password")
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
):
    """Email a password reset link."""
    await start_password_reset(db, payload.email, email_service, settings)
    return success_response(
        request,
        status.HTTP_200_OK,
        "Password reset link sent successfully.",
        {"email": payload.email},
    )


@router.post("/reset-password")
async def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    """Set a new password with the token from the reset link."""
    await complete_password_reset(db, payload.email, payload.token, payload.password)
    return success_response(request, status.HTTP_200_OK, "Password has been reset successfully.")


@router.post("/onboarding")
async def onboarding(
    request: Request,
    profile: OnboardingRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Record the authenticated user's profile.

    Requires valid access token in Authorization header.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User not found", ErrorCode.USER_NOT_FOUND)

    for field, value in profile.model_dump().items():
        setattr(user, field, value)

    await db.commit()
    logger.info(f"User profile updated: {user.email}")

    return success_response(
        request,
        status.HTTP_200_OK,
        "Onboarding process completed successfully.",
        OnboardingResponse.model_validate(user).model_dump(),
    )
