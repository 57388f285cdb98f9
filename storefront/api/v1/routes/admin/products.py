"""Admin product management routes.

Stock drives listing: a product with no stock is deactivated and adding
stock re-activates it, unless the request sets ``is_active`` explicitly.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.api.models import MessageResponse, ProductResponse
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import get_or_create_category
from storefront.api.shared.services.storage import Storage, discard_upload, get_storage
from storefront.db.models import CartItem, OrderItem, Product, ProductImage, Review
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/products", tags=["admin"])


# ============================================================================
# Request/Response Models
# ============================================================================


def _check_unique(images: List[str]) -> List[str]:
    if len(set(images)) != len(images):
        raise ValueError("Each image URL must be unique")
    return images


class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: int = Field(..., gt=0, description="Unit price in cents")
    category: str = Field(..., min_length=1, description="Category name; created if new")
    stock: int = Field(default=0, ge=0)
    images: List[str] = Field(..., min_length=1, description="Image URLs in display order")
    thumbnail: str = Field(..., min_length=1, description="Must be one of images")

    @field_validator("images")
    @classmethod
    def images_unique(cls, images: List[str]) -> List[str]:
        return _check_unique(images)


class ProductUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[int] = Field(default=None, gt=0)
    category: Optional[str] = Field(
        default=None,
        description="Category name; an empty string removes the category",
    )
    stock: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    images: Optional[List[str]] = Field(default=None, description="Replaces all images")
    thumbnail: Optional[str] = None

    @field_validator("images")
    @classmethod
    def images_unique(cls, images: Optional[List[str]]) -> Optional[List[str]]:
        return images if images is None else _check_unique(images)


class AdminProductResponse(ProductResponse):
    review_count: int = 0
    cart_item_count: int = 0
    order_item_count: int = 0


# ============================================================================
# Helper Functions
# ============================================================================


def _count(model, column) -> object:
    return (
        select(func.count(model.id))
        .where(column == Product.id)
        .correlate(Product)
        .scalar_subquery()
    )


async def load_product(db: AsyncSession, product_id: UUID) -> Product:
    """Fetch a product with images and category.

    Raises:
        HTTPException: 404 if it doesn't exist
    """
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .options(selectinload(Product.images), selectinload(Product.category))
        .execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def build_images(urls: List[str]) -> List[ProductImage]:
    return [ProductImage(url=url, position=index) for index, url in enumerate(urls)]


# ============================================================================
# Routes
# ============================================================================


@router.get("", response_model=List[AdminProductResponse])
async def list_products(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[AdminProductResponse]:
    """Every product, newest first, with how often it is referenced."""
    result = await db.execute(
        select(
            Product,
            _count(Review, Review.product_id).label("review_count"),
            _count(CartItem, CartItem.product_id).label("cart_item_count"),
            _count(OrderItem, OrderItem.product_id).label("order_item_count"),
        )
        .options(selectinload(Product.images), selectinload(Product.category))
        .order_by(Product.created_at.desc())
    )

    products = []
    for product, review_count, cart_item_count, order_item_count in result.all():
        base = ProductResponse.model_validate(product)
        products.append(
            AdminProductResponse(
                **base.model_dump(),
                review_count=review_count,
                cart_item_count=cart_item_count,
                order_item_count=order_item_count,
            )
        )
    return products


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreate,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    if request.thumbnail not in request.images:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Thumbnail must be one of the uploaded images",
        )

    category = await get_or_create_category(db, request.category.strip())
    product = Product(
        title=request.title,
        description=request.description,
        price=request.price,
        stock=request.stock,
        is_active=request.stock > 0,
        thumbnail=request.thumbnail,
        category_id=category.id,
        images=build_images(request.images),
    )
    db.add(product)
    await db.flush()

    logger.info(
        f"Product created: {product.title}",
        extra={"product_id": str(product.id), "admin_id": str(admin.user_id)},
    )
    return ProductResponse.model_validate(await load_product(db, product.id))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    return ProductResponse.model_validate(await load_product(db, product_id))


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    request: ProductUpdate,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    product = await load_product(db, product_id)
    update_data = request.model_dump(exclude_unset=True)

    image_urls = (
        update_data["images"]
        if update_data.get("images") is not None
        else [image.url for image in product.images]
    )
    thumbnail = update_data.get("thumbnail")
    if thumbnail is not None and thumbnail not in image_urls:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Thumbnail must be one of the product images",
        )

    for field in ("title", "description", "price"):
        if update_data.get(field) is not None:
            setattr(product, field, update_data[field])

    if "category" in update_data:
        name = (update_data["category"] or "").strip()
        product.category_id = (await get_or_create_category(db, name)).id if name else None

    if update_data.get("stock") is not None:
        product.stock = update_data["stock"]
        product.is_active = product.stock > 0
    if update_data.get("is_active") is not None:
        product.is_active = update_data["is_active"]

    if update_data.get("images") is not None:
        product.images = build_images(image_urls)
        if product.thumbnail not in image_urls and thumbnail is None:
            product.thumbnail = image_urls[0] if image_urls else None
    if thumbnail is not None:
        product.thumbnail = thumbnail

    await db.flush()

    logger.info(
        "Product updated",
        extra={"product_id": str(product_id), "fields": sorted(update_data)},
    )
    return ProductResponse.model_validate(await load_product(db, product_id))


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> MessageResponse:
    """Delete a product that no cart or order refers to.

    Products that have been bought or carted must be deactivated instead,
    so order history keeps its line items.
    """
    product = await load_product(db, product_id)

    in_carts = await db.scalar(
        select(func.count(CartItem.id)).where(CartItem.product_id == product_id)
    )
    if in_carts:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Product is in {in_carts} cart(s) and cannot be deleted. "
                "Deactivate it instead."
            ),
        )

    in_orders = await db.scalar(
        select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
    )
    if in_orders:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Product appears in {in_orders} order(s) and cannot be deleted. "
                "Deactivate it instead."
            ),
        )

    image_urls = [image.url for image in product.images]
    await db.delete(product)
    await db.flush()

    for url in image_urls:
        discard_upload(storage, url)

    logger.info(
        "Product deleted",
        extra={"product_id": str(product_id), "admin_id": str(admin.user_id)},
    )
    return MessageResponse(message="Product deleted")
