"""Order models.

An order is an immutable snapshot of a cart: each OrderItem records the
unit price at the time the order was placed, so later price changes do
not affect existing orders.
"""

import enum
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, generate_repr

if TYPE_CHECKING:
    from .address import Address
    from .catalog import Product
    from .user import User


class OrderStatus(str, enum.Enum):
    """Lifecycle status of an order."""

    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


# Statuses whose totals count as realized revenue
REVENUE_STATUSES = (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED)


class Order(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A placed order.

    Attributes:
        id: UUID primary key
        order_number: 9-digit zero-padded sequential number
        user_id: Customer who placed the order
        status: Current lifecycle status
        total: Amount charged in cents (subtotal + shipping)
        shipping_address_id: Address chosen at checkout (optional)
        stripe_session_id: Stripe Checkout Session ID, once checkout starts
        items: Line item snapshots
    """

    __tablename__ = "orders"

    order_number: Mapped[str | None] = mapped_column(
        String(9),
        unique=True,
        nullable=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(
            OrderStatus,
            name="order_status",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    shipping_address_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("addresses.id", ondelete="SET NULL"),
        nullable=True,
    )
    stripe_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="orders")
    shipping_address: Mapped[Optional["Address"]] = relationship("Address")
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_orders_user_id_created_at", "user_id", "created_at"),
        Index("ix_orders_status", "status"),
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "order_number", "status", "total")


class OrderItem(Base, UUIDPrimaryKeyMixin):
    """A product line of an order with its price at purchase time."""

    __tablename__ = "order_items"

    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    product: Mapped["Product"] = relationship("Product", back_populates="order_items")

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def __repr__(self) -> str:
        return generate_repr(self, "id", "product_id", "quantity", "price")
