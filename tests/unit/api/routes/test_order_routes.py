"""Unit tests for customer order and checkout routes."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException

from storefront.api.v1.routes.checkout import CheckoutRequest, create_checkout
from storefront.api.v1.routes.orders import create_order, get_order, get_owned_order, list_orders
from storefront.db.models import Order, OrderItem, OrderStatus, PaymentConfig
from tests.factories import (
    AddressFactory,
    CartFactory,
    CartItemFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    assign_ids_on_flush,
    scalar_result,
    scalars_result,
)

ORDER_ROUTES = "storefront.api.v1.routes.orders"
CHECKOUT_ROUTES = "storefront.api.v1.routes.checkout"


def cart_with(user_id, *lines):
    cart = CartFactory.build(user_id=user_id)
    cart.items = [CartItemFactory.build(cart_id=cart.id, product=p, quantity=q) for p, q in lines]
    return cart


def order_for(user_id, **kwargs):
    order = OrderFactory.build(user_id=user_id, **kwargs)
    order.items = [OrderItemFactory.build(order_id=order.id, quantity=2)]
    return order


class TestCreateOrder:
    @pytest.fixture(autouse=True)
    def pricing(self):
        config = PaymentConfig(tax_percent=10, shipping_fee=500, free_shipping_threshold=10000)
        with patch(f"{ORDER_ROUTES}.get_or_create_payment_config", AsyncMock(return_value=config)), \
                patch(f"{ORDER_ROUTES}.generate_order_number", AsyncMock(return_value="000000005")):
            yield

    @pytest.mark.asyncio
    async def test_snapshots_cart(self, mock_db, customer):
        product = ProductFactory.build(price=1500, stock=5)
        cart = cart_with(customer.user_id, (product, 2))
        assign_ids_on_flush(mock_db)

        with patch(f"{ORDER_ROUTES}.get_cart", AsyncMock(return_value=cart)):
            response = await create_order(customer, mock_db)

        added = [call.args[0] for call in mock_db.add.call_args_list]
        order = next(obj for obj in added if isinstance(obj, Order))
        item = next(obj for obj in added if isinstance(obj, OrderItem))

        assert order.status == OrderStatus.PENDING
        assert order.total == 3500  # 3000 + 500 shipping
        assert order.order_number == "000000005"
        assert item.price == 1500
        assert item.quantity == 2
        assert response.order_number == "000000005"
        # Cart emptied in the same transaction
        mock_db.execute.assert_awaited()
        # Stock only changes on payment
        assert product.stock == 5

    @pytest.mark.asyncio
    async def test_empty_cart(self, mock_db, customer):
        with patch(f"{ORDER_ROUTES}.get_cart", AsyncMock(return_value=cart_with(customer.user_id))):
            with pytest.raises(HTTPException) as exc_info:
                await create_order(customer, mock_db)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Cart is empty"

    @pytest.mark.asyncio
    async def test_no_cart(self, mock_db, customer):
        with patch(f"{ORDER_ROUTES}.get_cart", AsyncMock(return_value=None)):
            with pytest.raises(HTTPException):
                await create_order(customer, mock_db)

    @pytest.mark.asyncio
    async def test_insufficient_stock(self, mock_db, customer):
        product = ProductFactory.build(title="Lamp", stock=1)
        cart = cart_with(customer.user_id, (product, 3))

        with patch(f"{ORDER_ROUTES}.get_cart", AsyncMock(return_value=cart)):
            with pytest.raises(HTTPException) as exc_info:
                await create_order(customer, mock_db)

        assert exc_info.value.detail == (
            'Insufficient stock for "Lamp". Available: 1, Requested: 3'
        )
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_product(self, mock_db, customer):
        product = ProductFactory.build(title="Lamp", inactive=True)
        cart = cart_with(customer.user_id, (product, 1))

        with patch(f"{ORDER_ROUTES}.get_cart", AsyncMock(return_value=cart)):
            with pytest.raises(HTTPException) as exc_info:
                await create_order(customer, mock_db)

        assert exc_info.value.detail == 'Product "Lamp" is no longer available'


class TestReadOrders:
    @pytest.mark.asyncio
    async def test_list(self, mock_db, customer):
        orders = [order_for(customer.user_id), order_for(customer.user_id)]
        mock_db.execute = AsyncMock(return_value=scalars_result(orders))

        response = await list_orders(customer, mock_db)

        assert [o.id for o in response] == [o.id for o in orders]
        assert response[0].items[0].quantity == 2

    @pytest.mark.asyncio
    async def test_get_own_order(self, mock_db, customer):
        order = order_for(customer.user_id)
        mock_db.execute = AsyncMock(return_value=scalar_result(order))

        response = await get_order(order.id, customer, mock_db)
        assert response.id == order.id

    @pytest.mark.asyncio
    async def test_other_users_order(self, mock_db, customer):
        mock_db.execute = AsyncMock(return_value=scalar_result(order_for(uuid4())))

        with pytest.raises(HTTPException) as exc_info:
            await get_owned_order(mock_db, uuid4(), customer)
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_order(self, mock_db, customer):
        mock_db.execute = AsyncMock(return_value=scalar_result(None))

        with pytest.raises(HTTPException) as exc_info:
            await get_owned_order(mock_db, uuid4(), customer)
        assert exc_info.value.status_code == 404


class TestCheckout:
    @pytest.fixture
    def stripe_session(self):
        session = SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")
        with patch(
            f"{CHECKOUT_ROUTES}.StripeService.create_checkout_session",
            MagicMock(return_value=session),
        ) as create:
            yield create

    @pytest.mark.asyncio
    async def test_creates_session(self, mock_db, customer, stripe_session):
        order = order_for(customer.user_id)
        address = AddressFactory.build(user_id=customer.user_id)
        mock_db.get = AsyncMock(return_value=address)

        with patch(f"{CHECKOUT_ROUTES}.get_owned_order", AsyncMock(return_value=order)):
            response = await create_checkout(
                CheckoutRequest(order_id=order.id, address_id=address.id), customer, mock_db
            )

        assert response.url == "https://checkout.stripe.com/c/pay/cs_test_123"
        assert order.stripe_session_id == "cs_test_123"
        assert order.shipping_address_id == address.id

        kwargs = stripe_session.call_args.kwargs
        assert kwargs["success_url"].endswith(f"/checkout/success?order_id={order.id}")
        assert kwargs["cancel_url"].endswith("/checkout/cancel")
        assert kwargs["customer_email"] == customer.email

    @pytest.mark.asyncio
    async def test_order_not_pending(self, mock_db, customer, stripe_session):
        order = order_for(customer.user_id, status=OrderStatus.PAID)

        with patch(f"{CHECKOUT_ROUTES}.get_owned_order", AsyncMock(return_value=order)):
            with pytest.raises(HTTPException) as exc_info:
                await create_checkout(CheckoutRequest(order_id=order.id), customer, mock_db)

        assert exc_info.value.detail == "Order is not pending payment"
        stripe_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_foreign_address(self, mock_db, customer, stripe_session):
        order = order_for(customer.user_id)
        mock_db.get = AsyncMock(return_value=AddressFactory.build())

        with patch(f"{CHECKOUT_ROUTES}.get_owned_order", AsyncMock(return_value=order)):
            with pytest.raises(HTTPException) as exc_info:
                await create_checkout(
                    CheckoutRequest(order_id=order.id, address_id=uuid4()), customer, mock_db
                )

        assert exc_info.value.status_code == 403
        stripe_session.assert_not_called()
