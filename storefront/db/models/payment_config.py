"""Store-wide pricing configuration."""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, generate_repr


class PaymentConfig(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Singleton row with tax and shipping settings.

    Attributes:
        tax_percent: Tax rate already included in product prices
        shipping_fee: Flat shipping fee in cents
        free_shipping_threshold: Subtotal in cents at which shipping is free
    """

    __tablename__ = "payment_config"

    tax_percent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    shipping_fee: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    free_shipping_threshold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return generate_repr(
            self, "id", "tax_percent", "shipping_fee", "free_shipping_threshold"
        )
