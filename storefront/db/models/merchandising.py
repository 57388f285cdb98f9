"""Merchandising models: hero banners, slider settings and product carousels.

Banners and carousel items are ordered by an integer ``order`` column
that admins rewrite when reordering lists.
"""

import enum
from typing import TYPE_CHECKING, List
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, generate_repr

if TYPE_CHECKING:
    from .catalog import Product


BANNER_DISPLAY_MODES = ("cover", "contain", "fill", "scale-down", "none")
BANNER_ALIGNMENTS = (
    "center",
    "top",
    "bottom",
    "left",
    "right",
    "top left",
    "top right",
    "bottom left",
    "bottom right",
)
ANIMATION_TYPES = ("slide", "fade", "zoom")
ARROW_DISPLAYS = ("show", "hover", "invisible")

MAX_CAROUSEL_ITEMS = 12


class CarouselType(str, enum.Enum):
    """Storefront carousels that admins can curate."""

    BEST_SELLER = "best-seller"
    NEW_PRODUCTS = "new-products"


class Banner(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A hero slider image with optional caption."""

    __tablename__ = "banners"

    image_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    subtitle: Mapped[str | None] = mapped_column(String(200), nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_mode: Mapped[str] = mapped_column(String(20), default="cover", nullable=False)
    alignment: Mapped[str] = mapped_column(String(20), default="center", nullable=False)

    def __repr__(self) -> str:
        return generate_repr(self, "id", "order", "active")


class BannerSettings(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Singleton row holding hero slider behaviour."""

    __tablename__ = "banner_settings"

    animation_speed: Mapped[int] = mapped_column(Integer, default=500, nullable=False)
    slide_delay: Mapped[int] = mapped_column(Integer, default=3000, nullable=False)
    animation_type: Mapped[str] = mapped_column(String(20), default="slide", nullable=False)
    loop: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    arrow_display: Mapped[str] = mapped_column(String(20), default="hover", nullable=False)

    def __repr__(self) -> str:
        return generate_repr(self, "id", "animation_type", "slide_delay")


class Carousel(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A curated product strip, one per CarouselType."""

    __tablename__ = "carousels"

    type: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    items: Mapped[List["CarouselItem"]] = relationship(
        "CarouselItem",
        back_populates="carousel",
        cascade="all, delete-orphan",
        order_by="CarouselItem.order",
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "type")


class CarouselItem(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A product placed in a carousel at a given position."""

    __tablename__ = "carousel_items"

    carousel_id: Mapped[UUID] = mapped_column(
        ForeignKey("carousels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    carousel: Mapped["Carousel"] = relationship("Carousel", back_populates="items")
    product: Mapped["Product"] = relationship("Product")

    __table_args__ = (
        UniqueConstraint("carousel_id", "product_id", name="uq_carousel_items_carousel_product"),
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "product_id", "order")
