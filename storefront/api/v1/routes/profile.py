"""Profile routes for the signed-in user.

Avatars may be an external http(s) URL or an inline ``data:`` URL; inline
images are decoded and written to upload storage.
"""

import base64
import binascii
import re
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, HttpUrl
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.shared.helpers import get_current_db_user
from storefront.api.shared.services.storage import (
    AVATAR_IMAGE_TYPES,
    Storage,
    discard_upload,
    generate_filename,
    get_storage,
    validate_image,
)
from storefront.db.models import User, UserRole
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])

AVATAR_MAX_SIZE_MB = 5

DATA_URL_PATTERN = re.compile(r"^data:(image/[A-Za-z0-9.+-]+);base64,(.+)$", re.DOTALL)


# ============================================================================
# Request/Response Models
# ============================================================================


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    avatar: HttpUrl | None = Field(default=None, description="Avatar URL, or null to clear")


class AvatarUpload(BaseModel):
    avatar: str = Field(
        ...,
        min_length=1,
        description="http(s) URL or data:image/<type>;base64,... URL",
    )


# ============================================================================
# Helper Functions
# ============================================================================


def store_avatar(storage: Storage, user: User, avatar: str) -> str:
    """Resolve an avatar submission to the URL to save on the user.

    Raises:
        HTTPException: 400 for malformed URLs, unsupported types or
            images over the size limit
    """
    if avatar.startswith(("http://", "https://")):
        return avatar

    match = DATA_URL_PATTERN.match(avatar)
    if not match:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Avatar must be an http(s) URL or a base64 data URL",
        )

    content_type, encoded = match.groups()
    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid base64 image data",
        )

    image = validate_image(
        content,
        content_type,
        max_size_mb=AVATAR_MAX_SIZE_MB,
        allowed_types=AVATAR_IMAGE_TYPES,
    )
    filename = generate_filename(str(user.id), image.extension)
    return storage.save(image.content, "avatars", filename, image.content_type)


# ============================================================================
# Routes
# ============================================================================


@router.get("", response_model=ProfileResponse)
async def get_profile(user: User = Depends(get_current_db_user)) -> ProfileResponse:
    return ProfileResponse.model_validate(user)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    request: ProfileUpdate,
    user: User = Depends(get_current_db_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Update name fields and/or the avatar URL."""
    update_data = request.model_dump(exclude_unset=True)

    if "avatar" in update_data:
        update_data["avatar"] = str(request.avatar) if request.avatar else None

    for field, value in update_data.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)

    logger.info("Profile updated", extra={"user_id": str(user.id), "fields": sorted(update_data)})
    return ProfileResponse.model_validate(user)


@router.post("/avatar", response_model=ProfileResponse)
async def upload_avatar(
    request: AvatarUpload,
    user: User = Depends(get_current_db_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> ProfileResponse:
    """Set the avatar from a URL or an inline image, replacing any stored one."""
    previous = user.avatar
    user.avatar = store_avatar(storage, user, request.avatar)
    await db.flush()
    await db.refresh(user)

    if previous and previous != user.avatar:
        discard_upload(storage, previous)

    return ProfileResponse.model_validate(user)


@router.delete("/avatar", response_model=ProfileResponse)
async def delete_avatar(
    user: User = Depends(get_current_db_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> ProfileResponse:
    previous = user.avatar
    user.avatar = None
    await db.flush()
    await db.refresh(user)

    discard_upload(storage, previous)
    return ProfileResponse.model_validate(user)
