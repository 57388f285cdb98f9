"""Unit tests for the Stripe webhook handler."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException

from storefront.api.v1.routes.webhooks import (
    apply_stock_decrement,
    handle_checkout_completed,
    stripe_webhook,
    try_claim_event,
)
from storefront.db.models import OrderStatus
from tests.factories import (
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    scalar_result,
    scalars_result,
)

WEBHOOK_ROUTES = "storefront.api.v1.routes.webhooks"


@pytest.fixture
def product():
    return ProductFactory.build(stock=5)


@pytest.fixture
def pending_order(product):
    order = OrderFactory.build(total=3000)
    order.items = [OrderItemFactory.build(order_id=order.id, product=product, quantity=2)]
    return order


def completed_session(order):
    return {"id": "cs_test_1", "client_reference_id": str(order.id)}


class TestStockDecrement:
    def test_decrements(self):
        product = ProductFactory.build(stock=5)
        apply_stock_decrement(product, 2)

        assert product.stock == 3
        assert product.is_active is True

    def test_sold_out_product_is_delisted(self):
        product = ProductFactory.build(stock=2)
        apply_stock_decrement(product, 2)

        assert product.stock == 0
        assert product.is_active is False


class TestHandleCheckoutCompleted:
    @pytest.mark.asyncio
    async def test_marks_order_paid(self, mock_db, pending_order, product):
        mock_db.execute = AsyncMock(
            side_effect=[scalar_result(pending_order), scalars_result([product])]
        )

        await handle_checkout_completed(mock_db, completed_session(pending_order))

        assert pending_order.status == OrderStatus.PAID
        assert pending_order.stripe_session_id == "cs_test_1"
        assert product.stock == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "settled", [OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED]
    )
    async def test_settled_order_is_ignored(self, mock_db, pending_order, product, settled):
        pending_order.status = settled
        mock_db.execute = AsyncMock(return_value=scalar_result(pending_order))

        await handle_checkout_completed(mock_db, completed_session(pending_order))

        assert pending_order.status == settled
        assert product.stock == 5
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_canceled_order_is_paid_when_payment_arrives(
        self, mock_db, pending_order, product
    ):
        pending_order.status = OrderStatus.CANCELED
        mock_db.execute = AsyncMock(
            side_effect=[scalar_result(pending_order), scalars_result([product])]
        )

        await handle_checkout_completed(mock_db, completed_session(pending_order))

        assert pending_order.status == OrderStatus.PAID
        assert product.stock == 3

    @pytest.mark.asyncio
    async def test_unknown_order_is_acknowledged(self, mock_db):
        mock_db.execute = AsyncMock(return_value=scalar_result(None))

        await handle_checkout_completed(mock_db, {"client_reference_id": str(uuid4())})

    @pytest.mark.asyncio
    async def test_missing_reference(self, mock_db):
        with pytest.raises(HTTPException) as exc_info:
            await handle_checkout_completed(mock_db, {"id": "cs_test_1"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "No order ID provided"

    @pytest.mark.asyncio
    async def test_malformed_reference(self, mock_db):
        with pytest.raises(HTTPException) as exc_info:
            await handle_checkout_completed(mock_db, {"client_reference_id": "order-7"})
        assert exc_info.value.detail == "Invalid order ID"


class TestClaimEvent:
    @pytest.mark.asyncio
    async def test_first_delivery_claims(self, mock_db):
        result = MagicMock(rowcount=1)
        mock_db.execute = AsyncMock(return_value=result)

        assert await try_claim_event(mock_db, "evt_1", "stripe", "checkout.session.completed") is True

    @pytest.mark.asyncio
    async def test_redelivery_is_skipped(self, mock_db):
        mock_db.execute = AsyncMock(return_value=MagicMock(rowcount=0))

        assert await try_claim_event(mock_db, "evt_1", "stripe", "checkout.session.completed") is False


class TestStripeWebhookRoute:
    @pytest.fixture
    def request_stub(self):
        request = MagicMock()
        request.body = AsyncMock(return_value=b"{}")
        return request

    def event(self, event_type="checkout.session.completed", data=None):
        return {"id": "evt_1", "type": event_type, "data": {"object": data or {}}}

    @pytest.mark.asyncio
    async def test_missing_signature(self, mock_db, request_stub):
        with pytest.raises(HTTPException) as exc_info:
            await stripe_webhook(request_stub, None, mock_db)
        assert exc_info.value.detail == "No signature provided"

    @pytest.mark.asyncio
    async def test_dispatches_checkout_completed(self, mock_db, request_stub):
        with patch(f"{WEBHOOK_ROUTES}.StripeService.construct_webhook_event", return_value=self.event(data={"x": 1})), \
                patch(f"{WEBHOOK_ROUTES}.try_claim_event", AsyncMock(return_value=True)), \
                patch(f"{WEBHOOK_ROUTES}.handle_checkout_completed", AsyncMock()) as handler:
            response = await stripe_webhook(request_stub, "t=1,v1=sig", mock_db)

        assert response == {"status": "ok"}
        handler.assert_awaited_once_with(mock_db, {"x": 1})
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_event(self, mock_db, request_stub):
        with patch(f"{WEBHOOK_ROUTES}.StripeService.construct_webhook_event", return_value=self.event()), \
                patch(f"{WEBHOOK_ROUTES}.try_claim_event", AsyncMock(return_value=False)), \
                patch(f"{WEBHOOK_ROUTES}.handle_checkout_completed", AsyncMock()) as handler:
            response = await stripe_webhook(request_stub, "t=1,v1=sig", mock_db)

        assert response["message"] == "duplicate event skipped"
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_events_are_acknowledged(self, mock_db, request_stub):
        with patch(f"{WEBHOOK_ROUTES}.StripeService.construct_webhook_event", return_value=self.event("charge.refunded")), \
                patch(f"{WEBHOOK_ROUTES}.try_claim_event", AsyncMock(return_value=True)), \
                patch(f"{WEBHOOK_ROUTES}.handle_checkout_completed", AsyncMock()) as handler:
            response = await stripe_webhook(request_stub, "t=1,v1=sig", mock_db)

        assert response == {"status": "ok"}
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_processing_error_returns_500(self, mock_db, request_stub):
        with patch(f"{WEBHOOK_ROUTES}.StripeService.construct_webhook_event", return_value=self.event()), \
                patch(f"{WEBHOOK_ROUTES}.try_claim_event", AsyncMock(return_value=True)), \
                patch(f"{WEBHOOK_ROUTES}.handle_checkout_completed", AsyncMock(side_effect=RuntimeError("db down"))):
            with pytest.raises(HTTPException) as exc_info:
                await stripe_webhook(request_stub, "t=1,v1=sig", mock_db)

        assert exc_info.value.status_code == 500
        mock_db.commit.assert_not_awaited()
