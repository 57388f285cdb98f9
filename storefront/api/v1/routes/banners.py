"""Public banner slider route."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Banner, BannerSettings
from storefront.db.session import get_db

router = APIRouter(prefix="/banners", tags=["banners"])


class BannerResponse(BaseModel):
    id: UUID
    image_url: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    order: int
    active: bool
    display_mode: str
    alignment: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BannerSettingsResponse(BaseModel):
    animation_speed: int = 500
    slide_delay: int = 3000
    animation_type: str = "slide"
    loop: bool = True
    arrow_display: str = "hover"

    model_config = {"from_attributes": True}


class BannerSliderResponse(BaseModel):
    banners: List[BannerResponse]
    settings: BannerSettingsResponse


@router.get("", response_model=BannerSliderResponse)
async def get_banners(db: AsyncSession = Depends(get_db)) -> BannerSliderResponse:
    """Active banners in display order, with the slider settings.

    Falls back to default settings without creating a row.
    """
    result = await db.execute(
        select(Banner).where(Banner.active.is_(True)).order_by(Banner.order.asc())
    )
    banners = result.scalars().all()

    settings_result = await db.execute(select(BannerSettings).limit(1))
    settings = settings_result.scalar_one_or_none()

    return BannerSliderResponse(
        banners=[BannerResponse.model_validate(b) for b in banners],
        settings=(
            BannerSettingsResponse.model_validate(settings)
            if settings
            else BannerSettingsResponse()
        ),
    )
