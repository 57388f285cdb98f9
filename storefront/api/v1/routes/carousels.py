"""Featured product carousels shown on the storefront home page.

There are two carousels, ``best-seller`` and ``new-products``. Reading is
public; changing the items requires an admin.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.api.models import MessageResponse, ProductSummary, ReorderItem
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import apply_order, get_or_create_carousel
from storefront.db.models import MAX_CAROUSEL_ITEMS, CarouselItem, CarouselType, Product
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/carousels", tags=["carousels"])


# ============================================================================
# Request/Response Models
# ============================================================================


class CarouselItemResponse(BaseModel):
    id: UUID
    product_id: UUID
    order: int
    product: ProductSummary

    model_config = {"from_attributes": True}


class CarouselResponse(BaseModel):
    id: UUID
    type: str
    items: List[CarouselItemResponse]

    model_config = {"from_attributes": True}


class AddCarouselItemRequest(BaseModel):
    product_id: UUID


class ReorderCarouselRequest(BaseModel):
    items: List[ReorderItem] = Field(..., description="New positions of carousel items")


# ============================================================================
# Helper Functions
# ============================================================================


def carousel_type_param(carousel_type: str = Path(..., alias="type")) -> str:
    """Validate the ``{type}`` path segment.

    Raises:
        HTTPException: 400 for anything but best-seller or new-products
    """
    valid = [t.value for t in CarouselType]
    if carousel_type not in valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid carousel type",
        )
    return carousel_type


# ============================================================================
# Routes
# ============================================================================


@router.get("/{type}", response_model=CarouselResponse)
async def get_carousel(
    carousel_type: str = Depends(carousel_type_param),
    db: AsyncSession = Depends(get_db),
) -> CarouselResponse:
    carousel = await get_or_create_carousel(db, carousel_type)
    return CarouselResponse.model_validate(carousel)


@router.post(
    "/{type}",
    response_model=CarouselItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_carousel_item(
    request: AddCarouselItemRequest,
    admin: SessionUser = Depends(require_admin),
    carousel_type: str = Depends(carousel_type_param),
    db: AsyncSession = Depends(get_db),
) -> CarouselItemResponse:
    """Append a product to the end of a carousel."""
    product = await db.get(Product, request.product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    carousel = await get_or_create_carousel(db, carousel_type)

    if len(carousel.items) >= MAX_CAROUSEL_ITEMS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Carousel cannot have more than {MAX_CAROUSEL_ITEMS} items",
        )
    if any(item.product_id == request.product_id for item in carousel.items):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product already in carousel",
        )

    item = CarouselItem(
        carousel_id=carousel.id,
        product_id=request.product_id,
        order=len(carousel.items),
    )
    db.add(item)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product already in carousel",
        )

    result = await db.execute(
        select(CarouselItem)
        .where(CarouselItem.id == item.id)
        .options(selectinload(CarouselItem.product))
    )
    item = result.scalar_one()

    logger.info(
        f"Added product to {carousel_type} carousel",
        extra={"product_id": str(request.product_id), "admin_id": str(admin.user_id)},
    )
    return CarouselItemResponse.model_validate(item)


@router.put("/{type}", response_model=CarouselResponse)
async def reorder_carousel(
    request: ReorderCarouselRequest,
    admin: SessionUser = Depends(require_admin),
    carousel_type: str = Depends(carousel_type_param),
    db: AsyncSession = Depends(get_db),
) -> CarouselResponse:
    carousel = await get_or_create_carousel(db, carousel_type)
    await apply_order(
        db,
        CarouselItem,
        [(item.id, item.order) for item in request.items],
        CarouselItem.carousel_id == carousel.id,
    )
    carousel = await get_or_create_carousel(db, carousel_type)
    return CarouselResponse.model_validate(carousel)


@router.delete("/{type}", response_model=MessageResponse)
async def remove_carousel_item(
    item_id: UUID = Query(..., description="Carousel item to remove"),
    admin: SessionUser = Depends(require_admin),
    carousel_type: str = Depends(carousel_type_param),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    carousel = await get_or_create_carousel(db, carousel_type)
    item = next((i for i in carousel.items if i.id == item_id), None)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Carousel item not found")

    await db.delete(item)
    await db.flush()
    return MessageResponse(message="Item removed from carousel")
