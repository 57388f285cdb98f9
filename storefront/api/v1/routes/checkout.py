"""Checkout route: hands a pending order off to Stripe Checkout.

The client first places the order (``POST /orders``), lets the user pick
a shipping address, then calls this endpoint and redirects to the
returned Stripe URL. Payment completion arrives via the Stripe webhook.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.shared.auth import SessionUser, get_current_user
from storefront.api.shared.services.stripe_service import StripeService
from storefront.config import get_config
from storefront.db.models import Address, OrderStatus
from storefront.db.session import get_db
from storefront.logging_config import get_logger

from .orders import get_owned_order

logger = get_logger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


class CheckoutRequest(BaseModel):
    order_id: UUID
    address_id: Optional[UUID] = Field(
        default=None,
        description="Shipping address chosen in the first checkout step",
    )


class CheckoutResponse(BaseModel):
    url: str = Field(..., description="Stripe Checkout URL to redirect the customer to")


@router.post("", response_model=CheckoutResponse)
async def create_checkout(
    request: CheckoutRequest,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CheckoutResponse:
    """Create a Stripe Checkout Session for one of the caller's pending orders."""
    order = await get_owned_order(db, request.order_id, user)

    if order.status != OrderStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order is not pending payment",
        )

    if request.address_id is not None:
        address = await db.get(Address, request.address_id)
        if not address:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
        if address.user_id != user.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden: You don't own this address",
            )
        order.shipping_address_id = address.id

    public_url = get_config().store.public_url.rstrip("/")
    session = StripeService.create_checkout_session(
        order,
        success_url=f"{public_url}/checkout/success?order_id={order.id}",
        cancel_url=f"{public_url}/checkout/cancel",
        customer_email=user.email or None,
    )

    order.stripe_session_id = session.id
    await db.flush()

    logger.info(
        "Checkout session created",
        extra={"order_id": str(order.id), "session_id": session.id},
    )
    return CheckoutResponse(url=session.url)
