"""Stripe service for Checkout Sessions and webhook verification.

This module provides:
1. Creation of hosted Checkout Sessions for pending orders
2. Webhook signature verification
3. Mapping of Stripe errors to HTTP responses
"""

import logging
from typing import Any, Dict

import stripe
from fastapi import HTTPException

from storefront.config import get_config
from storefront.db.models import Order

logger = logging.getLogger(__name__)

# Configure Stripe API key
stripe.api_key = get_config().stripe.secret_key or ""


def handle_stripe_error(error: stripe.StripeError, context: str) -> HTTPException:
    """Convert Stripe errors to appropriate HTTP exceptions.

    Maps Stripe error types to HTTP status codes:
    - CardError: 402 (Payment Required) - card was declined
    - RateLimitError: 429 (Too Many Requests) - rate limited
    - InvalidRequestError: 400 (Bad Request) - invalid parameters
    - AuthenticationError: 500 - API key issue, not the caller's fault
    - APIConnectionError: 503 (Service Unavailable) - network issue
    - StripeError: 500 (Internal Server Error) - generic fallback

    Args:
        error: The Stripe error
        context: Description of what operation failed

    Returns:
        HTTPException with appropriate status code and user-friendly message
    """
    logger.error(f"Stripe error in {context}: {type(error).__name__}: {error}")

    if isinstance(error, stripe.CardError):
        return HTTPException(
            status_code=402,
            detail=error.user_message or "Your card was declined. Please try a different payment method.",
        )
    elif isinstance(error, stripe.RateLimitError):
        return HTTPException(
            status_code=429,
            detail="Too many payment requests. Please wait a moment and try again.",
        )
    elif isinstance(error, stripe.InvalidRequestError):
        return HTTPException(
            status_code=400,
            detail="Invalid payment request. Please check your details and try again.",
        )
    elif isinstance(error, stripe.AuthenticationError):
        logger.critical(f"Stripe authentication failed: {error}")
        return HTTPException(
            status_code=500,
            detail="Payment service configuration error. Please contact support.",
        )
    elif isinstance(error, stripe.APIConnectionError):
        return HTTPException(
            status_code=503,
            detail="Payment service temporarily unavailable. Please try again.",
        )
    else:
        return HTTPException(
            status_code=500,
            detail="Payment processing failed. Please try again or contact support.",
        )


def build_line_items(order: Order, currency: str = "usd") -> list[Dict[str, Any]]:
    """Build Checkout line items from an order's price snapshots.

    Args:
        order: Order with ``items`` and their ``product`` loaded

    Returns:
        List of Stripe ``line_items`` entries
    """
    line_items = []
    for item in order.items:
        product_data: Dict[str, Any] = {"name": item.product.title}
        if item.product.description:
            product_data["description"] = item.product.description[:500]
        if item.product.thumbnail and item.product.thumbnail.startswith("http"):
            product_data["images"] = [item.product.thumbnail]

        line_items.append({
            "price_data": {
                "currency": currency,
                "product_data": product_data,
                "unit_amount": item.price,
            },
            "quantity": item.quantity,
        })
    return line_items


class StripeService:
    """Thin wrapper over the Stripe API calls used by checkout."""

    @staticmethod
    def create_checkout_session(
        order: Order,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
    ) -> stripe.checkout.Session:
        """Create a hosted Checkout Session for a pending order.

        The order ID is passed as ``client_reference_id`` so the
        ``checkout.session.completed`` webhook can find the order again.

        Args:
            order: Order with items and products loaded
            success_url: Redirect after successful payment
            cancel_url: Redirect if the customer abandons checkout
            customer_email: Prefill for the Checkout form

        Returns:
            The created Checkout Session (``url`` is the redirect target)

        Raises:
            HTTPException: If Stripe is not configured or the API call fails
        """
        if not stripe.api_key:
            raise HTTPException(
                status_code=500,
                detail="Payment service configuration error. Please contact support.",
            )

        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "client_reference_id": str(order.id),
            "line_items": build_line_items(order, get_config().stripe.currency),
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": {
                "order_id": str(order.id),
                "order_number": order.order_number or "",
            },
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            raise handle_stripe_error(e, "create_checkout_session")

        logger.info(
            f"Created checkout session {session.id} for order {order.id}",
            extra={"order_id": str(order.id), "amount": order.total},
        )
        return session

    @staticmethod
    def construct_webhook_event(
        payload: bytes,
        signature: str,
        webhook_secret: str,
    ) -> Dict[str, Any]:
        """Construct and verify a Stripe webhook event.

        Args:
            payload: Raw request body
            signature: Stripe-Signature header
            webhook_secret: Webhook secret for verification

        Returns:
            Verified Stripe event

        Raises:
            HTTPException: If signature verification fails
        """
        try:
            return stripe.Webhook.construct_event(payload, signature, webhook_secret)
        except stripe.SignatureVerificationError:
            raise HTTPException(status_code=400, detail="Invalid signature")
        except ValueError as e:
            logger.error(f"Webhook construction error: {e}")
            raise HTTPException(status_code=400, detail="Invalid webhook")
