"""Unit tests for shopping cart routes."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException

from storefront.api.v1.routes.cart import (
    AddToCartRequest,
    RemoveCartItemRequest,
    UpdateCartItemRequest,
    add_to_cart,
    build_cart_response,
    get_cart_item,
    remove_cart_item,
    update_cart_item,
    view_cart,
)
from storefront.db.models import CartItem, PaymentConfig
from tests.factories import CartFactory, CartItemFactory, ProductFactory, scalar_result

CART_ROUTES = "storefront.api.v1.routes.cart"


@pytest.fixture
def payment_config():
    return PaymentConfig(tax_percent=10, shipping_fee=500, free_shipping_threshold=5000)


@pytest.fixture
def patched_config(payment_config):
    with patch(
        f"{CART_ROUTES}.get_or_create_payment_config",
        AsyncMock(return_value=payment_config),
    ):
        yield payment_config


def cart_with(user_id, *lines):
    cart = CartFactory.build(user_id=user_id)
    cart.items = [CartItemFactory.build(cart_id=cart.id, product=p, quantity=q) for p, q in lines]
    return cart


class TestBuildCartResponse:
    @pytest.mark.asyncio
    async def test_totals_below_free_shipping(self, mock_db, customer, patched_config):
        cart = cart_with(customer.user_id, (ProductFactory.build(price=1000), 2))

        response = await build_cart_response(mock_db, cart)

        assert response.items[0].line_total == 2000
        assert response.totals.subtotal == 2000
        assert response.totals.shipping == 500
        assert response.totals.total == 2500
        assert response.totals.tax_amount == 200
        assert response.config.free_shipping_threshold == 5000

    @pytest.mark.asyncio
    async def test_free_shipping(self, mock_db, customer, patched_config):
        cart = cart_with(customer.user_id, (ProductFactory.build(price=2500), 2))

        response = await build_cart_response(mock_db, cart)

        assert response.totals.is_free_shipping is True
        assert response.totals.total == 5000


class TestCartRoutes:
    @pytest.mark.asyncio
    async def test_view_creates_cart(self, mock_db, customer, patched_config):
        cart = cart_with(customer.user_id)
        with patch(f"{CART_ROUTES}.get_or_create_cart", AsyncMock(return_value=cart)) as create:
            response = await view_cart(customer, mock_db)

        create.assert_awaited_once_with(mock_db, customer.user_id)
        assert response.items == []
        assert response.totals.subtotal == 0

    @pytest.mark.asyncio
    async def test_add_new_product(self, mock_db, customer, patched_config):
        product = ProductFactory.build()
        mock_db.get = AsyncMock(return_value=product)
        cart = cart_with(customer.user_id)

        with patch(f"{CART_ROUTES}.get_or_create_cart", AsyncMock(return_value=cart)), \
                patch(f"{CART_ROUTES}.get_cart", AsyncMock(return_value=cart)):
            await add_to_cart(AddToCartRequest(product_id=product.id, quantity=3), customer, mock_db)

        added = mock_db.add.call_args.args[0]
        assert isinstance(added, CartItem)
        assert added.product_id == product.id
        assert added.quantity == 3

    @pytest.mark.asyncio
    async def test_add_existing_product_increments(self, mock_db, customer, patched_config):
        product = ProductFactory.build()
        mock_db.get = AsyncMock(return_value=product)
        cart = cart_with(customer.user_id, (product, 2))

        with patch(f"{CART_ROUTES}.get_or_create_cart", AsyncMock(return_value=cart)), \
                patch(f"{CART_ROUTES}.get_cart", AsyncMock(return_value=cart)):
            response = await add_to_cart(
                AddToCartRequest(product_id=product.id, quantity=1), customer, mock_db
            )

        mock_db.add.assert_not_called()
        assert response.items[0].quantity == 3

    @pytest.mark.asyncio
    async def test_add_inactive_product(self, mock_db, customer):
        mock_db.get = AsyncMock(return_value=ProductFactory.build(inactive=True))

        with pytest.raises(HTTPException) as exc_info:
            await add_to_cart(AddToCartRequest(product_id=uuid4()), customer, mock_db)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Product not found or inactive"

    @pytest.mark.asyncio
    async def test_update_to_zero_removes_item(self, mock_db, customer, patched_config):
        cart = cart_with(customer.user_id, (ProductFactory.build(), 2))
        item = cart.items[0]

        with patch(f"{CART_ROUTES}.get_cart_item", AsyncMock(return_value=item)), \
                patch(f"{CART_ROUTES}.get_cart", AsyncMock(return_value=cart_with(customer.user_id))):
            response = await update_cart_item(
                UpdateCartItemRequest(item_id=item.id, quantity=0), customer, mock_db
            )

        mock_db.delete.assert_awaited_once_with(item)
        assert response.items == []

    @pytest.mark.asyncio
    async def test_update_quantity(self, mock_db, customer, patched_config):
        cart = cart_with(customer.user_id, (ProductFactory.build(), 2))
        item = cart.items[0]

        with patch(f"{CART_ROUTES}.get_cart_item", AsyncMock(return_value=item)), \
                patch(f"{CART_ROUTES}.get_cart", AsyncMock(return_value=cart)):
            response = await update_cart_item(
                UpdateCartItemRequest(item_id=item.id, quantity=5), customer, mock_db
            )

        assert item.quantity == 5
        assert response.items[0].quantity == 5

    @pytest.mark.asyncio
    async def test_remove(self, mock_db, customer, patched_config):
        cart = cart_with(customer.user_id, (ProductFactory.build(), 1))
        item = cart.items[0]

        with patch(f"{CART_ROUTES}.get_cart_item", AsyncMock(return_value=item)), \
                patch(f"{CART_ROUTES}.get_cart", AsyncMock(return_value=cart_with(customer.user_id))):
            await remove_cart_item(RemoveCartItemRequest(item_id=item.id), customer, mock_db)

        mock_db.delete.assert_awaited_once_with(item)


class TestGetCartItem:
    @pytest.mark.asyncio
    async def test_no_cart(self, mock_db, customer):
        mock_db.scalar = AsyncMock(return_value=None)

        with pytest.raises(HTTPException) as exc_info:
            await get_cart_item(mock_db, customer.user_id, uuid4())
        assert exc_info.value.detail == "Cart not found"

    @pytest.mark.asyncio
    async def test_item_in_other_cart(self, mock_db, customer):
        mock_db.scalar = AsyncMock(return_value=uuid4())
        mock_db.execute = AsyncMock(return_value=scalar_result(None))

        with pytest.raises(HTTPException) as exc_info:
            await get_cart_item(mock_db, customer.user_id, uuid4())
        assert exc_info.value.detail == "Item not found in cart"
