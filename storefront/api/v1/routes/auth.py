"""Account authentication routes.

Registration, login, and the forgot/reset password flow. Login returns a
bearer session token; see ``storefront.api.shared.auth.session``.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.models import MessageResponse, UserResponse
from storefront.api.shared.auth import create_session_token, hash_password, verify_password
from storefront.api.shared.helpers import get_user_by_email, normalize_email
from storefront.api.shared.middleware.rate_limit import RATE_LIMITS, limiter
from storefront.config import get_config
from storefront.db.models import PasswordResetToken, User, UserRole
from storefront.db.session import get_db
from storefront.logging_config import get_logger
from storefront.services.mail import EmailService, get_email_service

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with that email, you will receive a password reset link shortly."
)


# ============================================================================
# Request/Response Models
# ============================================================================


class RegisterRequest(BaseModel):
    email: EmailStr = Field(..., description="Login email address")
    password: str = Field(..., min_length=8, description="Password (at least 8 characters)")
    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str = Field(..., description="Bearer session token")
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    email: str = ""


class ResetPasswordRequest(BaseModel):
    token: str = ""
    new_password: str = Field(..., min_length=8, description="New password (at least 8 characters)")


# ============================================================================
# Routes
# ============================================================================


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(RATE_LIMITS["auth"].to_slowapi_format())
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Create a customer account."""
    email = normalize_email(body.email)

    if await get_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(
        email=email,
        password_hash=await asyncio.to_thread(hash_password, body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        role=UserRole.USER,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    await db.refresh(user)

    logger.info("User registered", extra={"user_id": str(user.id)})
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(RATE_LIMITS["auth"].to_slowapi_format())
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange email and password for a session token."""
    user = await get_user_by_email(db, body.email)

    if not user or not await asyncio.to_thread(
        verify_password, body.password, user.password_hash
    ):
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token, expires_at = create_session_token(user)
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return LoginResponse(
        token=token,
        expires_at=expires_at,
        user=UserResponse.model_validate(user),
    )


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["password_reset"].to_slowapi_format())
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    """Email a password reset link.

    The response is identical whether or not the account exists, so the
    endpoint can't be used to discover registered emails.
    """
    if "@" not in body.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email address")

    email = normalize_email(body.email)
    user = await get_user_by_email(db, email)

    if user:
        config = get_config()
        token = str(uuid4())
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=config.auth.reset_token_ttl_minutes
        )

        await db.execute(delete(PasswordResetToken).where(PasswordResetToken.email == email))
        db.add(PasswordResetToken(email=email, token=token, expires_at=expires_at))
        await db.flush()

        reset_url = f"{config.store.public_url.rstrip('/')}/reset-password?token={token}"
        await email_service.send_password_reset(
            email,
            reset_url,
            store_name=config.store.name,
            ttl_minutes=config.auth.reset_token_ttl_minutes,
        )
        logger.info("Password reset requested", extra={"user_id": str(user.id)})

    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["auth"].to_slowapi_format())
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Set a new password using a token from the reset email.

    Tokens are single use; the password update and token deletion commit
    together.
    """
    if not body.token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")

    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == body.token)
    )
    reset_token = result.scalar_one_or_none()

    if not reset_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset link",
        )

    if reset_token.expires_at < datetime.now(timezone.utc):
        await db.delete(reset_token)
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reset link has expired. Please request a new one.",
        )

    user = await get_user_by_email(db, reset_token.email)
    if not user:
        await db.delete(reset_token)
        await db.commit()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user.password_hash = await asyncio.to_thread(hash_password, body.new_password)
    await db.delete(reset_token)
    await db.flush()

    logger.info("Password reset completed", extra={"user_id": str(user.id)})
    return MessageResponse(
        message="Password reset successful. You can now log in with your new password."
    )
