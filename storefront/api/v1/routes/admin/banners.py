"""Admin banner management routes.

Banners feed the home page hero slider. The slider's animation settings
are a singleton row edited under ``/admin/banners/settings``.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.models import MessageResponse, ReorderItem
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import apply_order, get_or_create_banner_settings
from storefront.api.shared.services.storage import Storage, discard_upload, get_storage
from storefront.api.v1.routes.banners import BannerResponse, BannerSettingsResponse
from storefront.db.models import (
    ANIMATION_TYPES,
    ARROW_DISPLAYS,
    BANNER_ALIGNMENTS,
    BANNER_DISPLAY_MODES,
    Banner,
)
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/banners", tags=["admin"])


# ============================================================================
# Request/Response Models
# ============================================================================


def _check_image_url(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Image URL is required")
    if not (value.startswith("/") or value.startswith("http")):
        raise ValueError("Invalid image URL format")
    return value


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _check_choice(value: Optional[str], choices: tuple[str, ...], label: str) -> Optional[str]:
    if value is not None and value not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return value


class BannerCreate(BaseModel):
    image_url: str
    title: Optional[str] = Field(default=None, max_length=200)
    subtitle: Optional[str] = Field(default=None, max_length=200)
    order: int = Field(default=0, ge=0)
    active: bool = True
    display_mode: str = "cover"
    alignment: str = "center"

    @field_validator("image_url")
    @classmethod
    def image_url_valid(cls, value: str) -> str:
        return _check_image_url(value)

    @field_validator("title", "subtitle")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _clean_text(value)

    @field_validator("display_mode")
    @classmethod
    def display_mode_valid(cls, value: str) -> str:
        return _check_choice(value, BANNER_DISPLAY_MODES, "Display mode")

    @field_validator("alignment")
    @classmethod
    def alignment_valid(cls, value: str) -> str:
        return _check_choice(value, BANNER_ALIGNMENTS, "Alignment")


class BannerUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    image_url: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    subtitle: Optional[str] = Field(default=None, max_length=200)
    order: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None
    display_mode: Optional[str] = None
    alignment: Optional[str] = None

    @field_validator("image_url")
    @classmethod
    def image_url_valid(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _check_image_url(value)

    @field_validator("title", "subtitle")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _clean_text(value)

    @field_validator("display_mode")
    @classmethod
    def display_mode_valid(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, BANNER_DISPLAY_MODES, "Display mode")

    @field_validator("alignment")
    @classmethod
    def alignment_valid(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, BANNER_ALIGNMENTS, "Alignment")


class ReorderBannersRequest(BaseModel):
    items: List[ReorderItem] = Field(..., description="New positions of banners")


class BannerSettingsUpdate(BaseModel):
    animation_speed: int = Field(..., ge=100, le=5000, description="Transition length in ms")
    slide_delay: int = Field(..., ge=1000, le=10000, description="Time per slide in ms")
    animation_type: str
    loop: bool = True
    arrow_display: str = "hover"

    @field_validator("animation_type")
    @classmethod
    def animation_type_valid(cls, value: str) -> str:
        return _check_choice(value, ANIMATION_TYPES, "Animation type")

    @field_validator("arrow_display")
    @classmethod
    def arrow_display_valid(cls, value: str) -> str:
        return _check_choice(value, ARROW_DISPLAYS, "Arrow display")


# ============================================================================
# Helper Functions
# ============================================================================


async def get_banner_or_404(db: AsyncSession, banner_id: UUID) -> Banner:
    banner = await db.get(Banner, banner_id)
    if not banner:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Banner not found")
    return banner


# ============================================================================
# Routes
# ============================================================================


@router.get("", response_model=List[BannerResponse])
async def list_banners(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[BannerResponse]:
    """All banners, active or not, in display order."""
    result = await db.execute(select(Banner).order_by(Banner.order.asc()))
    return [BannerResponse.model_validate(b) for b in result.scalars().all()]


@router.post("", response_model=BannerResponse, status_code=status.HTTP_201_CREATED)
async def create_banner(
    request: BannerCreate,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannerResponse:
    banner = Banner(**request.model_dump())
    db.add(banner)
    await db.flush()
    await db.refresh(banner)

    logger.info(
        "Banner created",
        extra={"banner_id": str(banner.id), "admin_id": str(admin.user_id)},
    )
    return BannerResponse.model_validate(banner)


@router.put("/reorder", response_model=List[BannerResponse])
async def reorder_banners(
    request: ReorderBannersRequest,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[BannerResponse]:
    banners = await apply_order(
        db, Banner, [(item.id, item.order) for item in request.items]
    )
    return [BannerResponse.model_validate(b) for b in banners]


@router.get("/settings", response_model=BannerSettingsResponse)
async def get_banner_settings(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannerSettingsResponse:
    return BannerSettingsResponse.model_validate(await get_or_create_banner_settings(db))


@router.put("/settings", response_model=BannerSettingsResponse)
async def update_banner_settings(
    request: BannerSettingsUpdate,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannerSettingsResponse:
    settings = await get_or_create_banner_settings(db)
    for field, value in request.model_dump().items():
        setattr(settings, field, value)
    await db.flush()

    logger.info("Banner settings updated", extra={"admin_id": str(admin.user_id)})
    return BannerSettingsResponse.model_validate(settings)


@router.get("/{banner_id}", response_model=BannerResponse)
async def get_banner(
    banner_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannerResponse:
    return BannerResponse.model_validate(await get_banner_or_404(db, banner_id))


@router.put("/{banner_id}", response_model=BannerResponse)
async def update_banner(
    banner_id: UUID,
    request: BannerUpdate,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BannerResponse:
    banner = await get_banner_or_404(db, banner_id)
    update_data = request.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        if value is None and field not in ("title", "subtitle"):
            continue
        setattr(banner, field, value)
    await db.flush()
    await db.refresh(banner)

    logger.info(
        "Banner updated",
        extra={"banner_id": str(banner_id), "fields": sorted(update_data)},
    )
    return BannerResponse.model_validate(banner)


@router.delete("/{banner_id}", response_model=MessageResponse)
async def delete_banner(
    banner_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> MessageResponse:
    """Delete a banner and its stored image.

    The row is removed first; if the file can't be deleted it is left for
    ``storefront cleanup-banners``.
    """
    banner = await get_banner_or_404(db, banner_id)
    image_url = banner.image_url
    await db.delete(banner)
    await db.flush()

    discard_upload(storage, image_url)

    logger.info(
        "Banner deleted",
        extra={"banner_id": str(banner_id), "admin_id": str(admin.user_id)},
    )
    return MessageResponse(message="Banner deleted")
