"""Shopping cart routes.

Every route returns the full cart view (items, payment config and totals)
so the client can re-render after a mutation without a second request.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.models import PaymentConfigResponse, ProductSummary
from storefront.api.shared.auth import SessionUser, get_current_user
from storefront.api.shared.helpers import get_cart, get_or_create_cart, get_or_create_payment_config
from storefront.db.models import Cart, CartItem, Product
from storefront.db.session import get_db
from storefront.logging_config import get_logger
from storefront.services.pricing import calculate_cart_totals

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


# ============================================================================
# Request/Response Models
# ============================================================================


class CartItemResponse(BaseModel):
    id: UUID
    product_id: UUID
    quantity: int
    line_total: int = Field(..., description="price * quantity in cents")
    product: ProductSummary


class CartTotalsResponse(BaseModel):
    subtotal: int
    tax_amount: int = Field(..., description="Tax included in the subtotal")
    shipping: int
    total: int
    is_free_shipping: bool


class CartResponse(BaseModel):
    id: UUID
    items: List[CartItemResponse]
    config: PaymentConfigResponse
    totals: CartTotalsResponse


class AddToCartRequest(BaseModel):
    product_id: UUID
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    item_id: UUID
    quantity: int = Field(..., description="New quantity; 0 or less removes the item")


class RemoveCartItemRequest(BaseModel):
    item_id: UUID


# ============================================================================
# Helper Functions
# ============================================================================


async def build_cart_response(db: AsyncSession, cart: Cart) -> CartResponse:
    """Render a cart (items and products loaded) with current totals."""
    config = await get_or_create_payment_config(db)
    totals = calculate_cart_totals(
        ((item.product.price, item.quantity) for item in cart.items),
        config,
    )
    return CartResponse(
        id=cart.id,
        items=[
            CartItemResponse(
                id=item.id,
                product_id=item.product_id,
                quantity=item.quantity,
                line_total=item.product.price * item.quantity,
                product=ProductSummary.model_validate(item.product),
            )
            for item in cart.items
        ],
        config=PaymentConfigResponse.model_validate(config),
        totals=CartTotalsResponse(**totals.to_dict()),
    )


async def get_cart_item(db: AsyncSession, user_id: UUID, item_id: UUID) -> CartItem:
    """Find an item in the user's cart.

    Raises:
        HTTPException: 404 if the user has no cart or the item isn't in it
    """
    cart_id = await db.scalar(select(Cart.id).where(Cart.user_id == user_id))
    if cart_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found")

    result = await db.execute(
        select(CartItem).where(CartItem.id == item_id, CartItem.cart_id == cart_id)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart")
    return item


# ============================================================================
# Routes
# ============================================================================


@router.get("", response_model=CartResponse)
async def view_cart(
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    cart = await get_or_create_cart(db, user.user_id)
    return await build_cart_response(db, cart)


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    """Add a product, or increase its quantity if it's already in the cart."""
    product = await db.get(Product, request.product_id)
    if not product or not product.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found or inactive",
        )

    cart = await get_or_create_cart(db, user.user_id)
    existing = next((i for i in cart.items if i.product_id == request.product_id), None)

    if existing:
        existing.quantity += request.quantity
    else:
        db.add(CartItem(cart_id=cart.id, product_id=request.product_id, quantity=request.quantity))
    await db.flush()

    logger.debug(
        "Added to cart",
        extra={"product_id": str(request.product_id), "quantity": request.quantity},
    )
    return await build_cart_response(db, await get_cart(db, user.user_id))


@router.post("/update", response_model=CartResponse)
async def update_cart_item(
    request: UpdateCartItemRequest,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    item = await get_cart_item(db, user.user_id, request.item_id)

    if request.quantity <= 0:
        await db.delete(item)
    else:
        item.quantity = request.quantity
    await db.flush()

    return await build_cart_response(db, await get_cart(db, user.user_id))


@router.post("/remove", response_model=CartResponse)
async def remove_cart_item(
    request: RemoveCartItemRequest,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    item = await get_cart_item(db, user.user_id, request.item_id)
    await db.delete(item)
    await db.flush()

    return await build_cart_response(db, await get_cart(db, user.user_id))
