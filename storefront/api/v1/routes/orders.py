"""Customer order routes.

Placing an order snapshots the cart: each OrderItem keeps the unit price
at the time of purchase, and the cart is emptied in the same transaction.
Stock is only decremented once payment succeeds (see webhooks).
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.api.models import OrderResponse
from storefront.api.shared.auth import SessionUser, get_current_user
from storefront.api.shared.helpers import get_cart, get_or_create_payment_config
from storefront.db.models import CartItem, Order, OrderItem, OrderStatus
from storefront.db.session import get_db
from storefront.logging_config import get_logger
from storefront.services.catalog import generate_order_number
from storefront.services.pricing import calculate_cart_totals

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


class OrderCreatedResponse(BaseModel):
    order_id: UUID
    order_number: str


# ============================================================================
# Helper Functions
# ============================================================================


async def load_order(db: AsyncSession, order_id: UUID) -> Order | None:
    """Fetch an order with its items and their products."""
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
    )
    return result.scalar_one_or_none()


async def get_owned_order(db: AsyncSession, order_id: UUID, user: SessionUser) -> Order:
    """Fetch one of the caller's orders.

    Raises:
        HTTPException: 404 if the order doesn't exist, 403 if it belongs
            to someone else
    """
    order = await load_order(db, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    if order.user_id != user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return order


# ============================================================================
# Routes
# ============================================================================


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrderCreatedResponse:
    """Turn the caller's cart into a PENDING order."""
    cart = await get_cart(db, user.user_id)
    if not cart or not cart.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty")

    for item in cart.items:
        product = item.product
        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f'Product "{product.title}" is no longer available',
            )
        if product.stock < item.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f'Insufficient stock for "{product.title}". '
                    f"Available: {product.stock}, Requested: {item.quantity}"
                ),
            )

    config = await get_or_create_payment_config(db)
    totals = calculate_cart_totals(
        ((item.product.price, item.quantity) for item in cart.items),
        config,
    )

    order = Order(
        user_id=user.user_id,
        status=OrderStatus.PENDING,
        total=totals.total,
        order_number=await generate_order_number(db),
    )
    db.add(order)
    await db.flush()

    for item in cart.items:
        db.add(
            OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.product.price,
            )
        )
    await db.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
    await db.flush()

    logger.info(
        f"Created order {order.order_number}",
        extra={"order_id": str(order.id), "total": order.total, "items": len(cart.items)},
    )
    return OrderCreatedResponse(order_id=order.id, order_number=order.order_number)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[OrderResponse]:
    """The caller's orders, newest first."""
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user.user_id)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
        .order_by(Order.created_at.desc())
    )
    return [OrderResponse.model_validate(o) for o in result.scalars().all()]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await get_owned_order(db, order_id, user)
    return OrderResponse.model_validate(order)
