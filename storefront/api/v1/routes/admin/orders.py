"""Admin order management routes.

Lists and filters orders, moves them through fulfilment statuses, and
renders invoices and shipping labels as PDF.
"""

import asyncio
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import BaseModel, Field
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.api.models import AddressResponse, OrderResponse, UserResponse
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import get_or_create_payment_config
from storefront.config import get_config
from storefront.db.models import Address, Order, OrderItem, OrderStatus, User
from storefront.db.session import get_db
from storefront.logging_config import get_logger
from storefront.services.documents import InvoiceBuilder, ShippingLabelBuilder

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/orders", tags=["admin"])
counts_router = APIRouter(prefix="/admin", tags=["admin"])

# Dashboard filter names -> stored statuses
STATUS_FILTERS = {
    "pending": OrderStatus.PENDING,
    "ready_to_ship": OrderStatus.PAID,
    "shipped": OrderStatus.SHIPPED,
    "delivered": OrderStatus.COMPLETED,
    "cancelled": OrderStatus.CANCELED,
}

DEFAULT_PAGE_SIZE = 15


# ============================================================================
# Request/Response Models
# ============================================================================


class AdminOrderRow(OrderResponse):
    user_email: str


class AdminOrderListResponse(BaseModel):
    orders: List[AdminOrderRow]
    has_more: bool


class AdminOrderDetailResponse(OrderResponse):
    user: UserResponse
    address: Optional[AddressResponse] = None


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(..., description="One of PENDING, PAID, SHIPPED, COMPLETED, CANCELED")


class NewOrdersCountResponse(BaseModel):
    count: int


# ============================================================================
# Helper Functions
# ============================================================================


def build_search_filter(search: str):
    """Digits match the order number; anything else matches the customer."""
    term = search.strip()
    if term.isdigit():
        return Order.order_number.contains(term)
    pattern = f"%{term}%"
    return or_(
        User.email.ilike(pattern),
        User.first_name.ilike(pattern),
        User.last_name.ilike(pattern),
    )


async def load_admin_order(db: AsyncSession, order_id: UUID) -> Order:
    """Fetch an order with items, products, user and shipping address.

    Raises:
        HTTPException: 404 if it doesn't exist
    """
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.user),
            selectinload(Order.shipping_address),
        )
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


async def resolve_address(db: AsyncSession, order: Order) -> Optional[Address]:
    """The address chosen at checkout, else the customer's most recent one."""
    if order.shipping_address is not None:
        return order.shipping_address
    result = await db.execute(
        select(Address)
        .where(Address.user_id == order.user_id)
        .order_by(Address.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


# ============================================================================
# Routes
# ============================================================================


@router.get("", response_model=AdminOrderListResponse)
async def list_orders(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
    sort: str = Query(default="date"),
    order: str = Query(default="desc"),
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminOrderListResponse:
    """Paginated order list for the dashboard.

    Unknown ``status`` values are ignored rather than rejected.
    """
    filters = []
    if status_filter in STATUS_FILTERS:
        filters.append(Order.status == STATUS_FILTERS[status_filter])
    if search and search.strip():
        filters.append(build_search_filter(search))

    sort_column = Order.total if sort == "total" else Order.created_at
    direction = sort_column.asc() if order == "asc" else sort_column.desc()
    skip = (page - 1) * limit

    total_count = await db.scalar(
        select(func.count(Order.id)).join(User, Order.user_id == User.id).where(*filters)
    )
    result = await db.execute(
        select(Order)
        .join(User, Order.user_id == User.id)
        .where(*filters)
        .options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.user),
        )
        .order_by(direction, Order.id)
        .offset(skip)
        .limit(limit)
    )
    orders = list(result.scalars().all())

    rows = [
        AdminOrderRow(**OrderResponse.model_validate(o).model_dump(), user_email=o.user.email)
        for o in orders
    ]
    return AdminOrderListResponse(
        orders=rows,
        has_more=skip + len(orders) < (total_count or 0),
    )


@router.get("/{order_id}", response_model=AdminOrderDetailResponse)
async def get_order(
    order_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminOrderDetailResponse:
    order = await load_admin_order(db, order_id)
    address = await resolve_address(db, order)

    return AdminOrderDetailResponse(
        **OrderResponse.model_validate(order).model_dump(),
        user=UserResponse.model_validate(order.user),
        address=AddressResponse.model_validate(address) if address else None,
    )


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    request: UpdateOrderStatusRequest,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    try:
        new_status = OrderStatus(request.status)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status. Must be one of: {', '.join(s.value for s in OrderStatus)}",
        )

    order = await load_admin_order(db, order_id)
    previous = order.status
    order.status = new_status
    await db.flush()

    logger.info(
        f"Order {order.order_number} status {previous.value} -> {new_status.value}",
        extra={"order_id": str(order_id), "admin_id": str(admin.user_id)},
    )
    return OrderResponse.model_validate(await load_admin_order(db, order_id))


@router.get("/{order_id}/invoice")
async def get_invoice(
    order_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    order = await load_admin_order(db, order_id)
    address = await resolve_address(db, order)
    payment_config = await get_or_create_payment_config(db)

    builder = InvoiceBuilder(get_config().store.name, payment_config.tax_percent)
    content = await asyncio.to_thread(builder.render, order, address)
    return pdf_response(content, f"invoice-{order.order_number or order.id}.pdf")


@router.get("/{order_id}/shipping-label")
async def get_shipping_label(
    order_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    order = await load_admin_order(db, order_id)
    address = await resolve_address(db, order)
    if address is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No shipping address found for this order",
        )

    builder = ShippingLabelBuilder(get_config().store.name)
    content = await asyncio.to_thread(builder.render, order, address)
    return pdf_response(content, f"label-{order.order_number or order.id}.pdf")


@counts_router.get("/new-orders-count", response_model=NewOrdersCountResponse)
async def new_orders_count(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> NewOrdersCountResponse:
    """Paid orders waiting to ship, for the dashboard badge."""
    count = await db.scalar(
        select(func.count(Order.id)).where(Order.status == OrderStatus.PAID)
    )
    return NewOrdersCountResponse(count=count or 0)
