"""Catalog models: categories, products, product images and reviews."""

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, generate_repr

if TYPE_CHECKING:
    from .cart import CartItem
    from .order import OrderItem
    from .user import User


class Category(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Product category, identified by its unique name."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    products: Mapped[List["Product"]] = relationship(
        "Product",
        back_populates="category",
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "name")


class Product(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A sellable product.

    Attributes:
        id: UUID primary key
        title: Display title (1-200 characters)
        description: Long description
        price: Unit price in cents (tax inclusive)
        stock: Units available
        is_active: Whether the product is listed in the storefront
        thumbnail: URL of the primary image (one of ``images``)
        category_id: Optional category foreign key
        images: Gallery images in display order
        reviews: Customer reviews
    """

    __tablename__ = "products"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    thumbnail: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    category: Mapped[Optional["Category"]] = relationship(
        "Category",
        back_populates="products",
    )
    images: Mapped[List["ProductImage"]] = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.position",
    )
    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    cart_items: Mapped[List["CartItem"]] = relationship(
        "CartItem",
        back_populates="product",
    )
    order_items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="product",
    )

    __table_args__ = (
        CheckConstraint("price > 0", name="price_positive"),
        Index("ix_products_is_active_created_at", "is_active", "created_at"),
        Index("ix_products_category_id", "category_id"),
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "title", "price", "stock")


class ProductImage(Base, UUIDPrimaryKeyMixin):
    """Gallery image of a product."""

    __tablename__ = "product_images"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    product: Mapped["Product"] = relationship("Product", back_populates="images")

    def __repr__(self) -> str:
        return generate_repr(self, "id", "url", "position")


class Review(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A 1-5 star rating left by a user; one per user per product."""

    __tablename__ = "reviews"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    product: Mapped["Product"] = relationship("Product", back_populates="reviews")
    user: Mapped["User"] = relationship("User", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_reviews_product_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "product_id", "rating")
