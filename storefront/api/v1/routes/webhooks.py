"""Webhook handlers for external services.

Stripe calls ``POST /webhooks/stripe`` when a Checkout Session completes.
The handler marks the order paid and takes the purchased units out of
stock. Events are claimed by ID before processing so retries and replays
are acknowledged without being applied twice.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.api.shared.middleware.rate_limit import RATE_LIMITS, limiter
from storefront.api.shared.services.stripe_service import StripeService
from storefront.config import get_config
from storefront.db.models import Order, OrderItem, OrderStatus, ProcessedWebhookEvent, Product
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

SETTLED_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED})


# ============================================================================
# Webhook Deduplication
# ============================================================================


async def try_claim_event(
    db: AsyncSession,
    event_id: str,
    source: str,
    event_type: str,
) -> bool:
    """Atomically try to claim a webhook event for processing.

    Uses INSERT ... ON CONFLICT DO NOTHING so two concurrent deliveries of
    the same event can't both pass an "already processed?" check. The
    claim is part of the request transaction, so it is rolled back if
    processing fails and the provider's retry gets another chance.

    Returns:
        True if this request claimed the event (should process it)
        False if the event was already claimed (skip processing)
    """
    from sqlalchemy.dialects.postgresql import insert as pg_insert

    stmt = pg_insert(ProcessedWebhookEvent).values(
        event_id=event_id,
        source=source,
        event_type=event_type,
        processed_at=datetime.now(timezone.utc),
    ).on_conflict_do_nothing(
        index_elements=["event_id", "source"]
    )

    result = await db.execute(stmt)
    await db.flush()

    return result.rowcount > 0


# ============================================================================
# Event Handlers
# ============================================================================


def apply_stock_decrement(product: Product, quantity: int) -> None:
    """Take sold units out of stock, delisting the product once it runs out."""
    product.stock -= quantity
    if product.stock <= 0:
        product.is_active = False


async def handle_checkout_completed(db: AsyncSession, data: dict[str, Any]) -> None:
    """Mark the order referenced by a completed Checkout Session as paid.

    Raises:
        HTTPException: 400 if the session carries no usable order reference
    """
    reference = data.get("client_reference_id")
    if not reference:
        logger.error("checkout.session.completed without client_reference_id")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No order ID provided")

    try:
        order_id = UUID(reference)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid order ID")

    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items))
        .with_for_update()
    )
    order = result.scalar_one_or_none()
    if not order:
        # Nothing to retry against; acknowledge so Stripe stops resending
        logger.error(f"Checkout completed for unknown order {order_id}")
        return

    if order.status in SETTLED_STATUSES:
        logger.warning(
            f"Checkout completed for order {order.order_number} already {order.status.value}",
            extra={"order_id": str(order.id)},
        )
        return
    if order.status != OrderStatus.PENDING:
        logger.warning(
            f"Payment received for order {order.order_number} in status {order.status.value}",
            extra={"order_id": str(order.id)},
        )

    quantities: dict[UUID, int] = {}
    for item in order.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

    products = await db.execute(
        select(Product).where(Product.id.in_(list(quantities))).with_for_update()
    )
    for product in products.scalars().all():
        apply_stock_decrement(product, quantities[product.id])
        if not product.is_active:
            logger.info(f"Product {product.id} sold out and was deactivated")

    order.status = OrderStatus.PAID
    if data.get("id"):
        order.stripe_session_id = data["id"]
    await db.flush()

    logger.info(
        f"Order {order.order_number} marked as PAID",
        extra={"order_id": str(order.id), "amount": order.total},
    )


# ============================================================================
# Routes
# ============================================================================


@router.post("/stripe")
@limiter.limit(RATE_LIMITS["webhook"].to_slowapi_format())
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_db),
) -> dict[str, str]:
    """Handle Stripe webhook events."""
    if not stripe_signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No signature provided")

    webhook_secret = get_config().stripe.webhook_secret
    if not webhook_secret:
        logger.error("Stripe webhook secret not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stripe webhook secret not configured",
        )

    payload = await request.body()
    event = StripeService.construct_webhook_event(
        payload=payload,
        signature=stripe_signature,
        webhook_secret=webhook_secret,
    )

    event_id = event["id"]
    event_type = event["type"]
    data = event["data"]["object"]

    logger.info(f"Received Stripe webhook: {event_type} (event_id={event_id})")

    if not await try_claim_event(db, event_id, "stripe", event_type):
        logger.info(f"Skipping duplicate Stripe event: {event_id}")
        return {"status": "ok", "message": "duplicate event skipped"}

    try:
        if event_type == "checkout.session.completed":
            await handle_checkout_completed(db, data)
        else:
            logger.debug(f"Unhandled Stripe event type: {event_type}")

    except HTTPException:
        raise
    except Exception as e:
        # Returning 500 lets Stripe retry with backoff
        logger.error(
            f"Error processing Stripe webhook {event_type}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal error processing webhook: {event_type}",
        )

    await db.commit()
    return {"status": "ok"}
