"""Initial storefront schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates the initial database schema for the storefront:
- users, password_reset_tokens: accounts and password reset
- categories, products, product_images, reviews: catalog
- carts, cart_items: one cart per user
- addresses, orders, order_items: checkout and fulfilment
- banners, banner_settings, carousels, carousel_items: merchandising
- payment_config: singleton tax and shipping settings
- processed_webhook_events: webhook deduplication
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Create enum types first
    user_role_enum = postgresql.ENUM(
        "USER", "ADMIN",
        name="user_role",
        create_type=False,
    )
    user_role_enum.create(op.get_bind(), checkfirst=True)

    order_status_enum = postgresql.ENUM(
        "PENDING", "PAID", "SHIPPED", "COMPLETED", "CANCELED",
        name="order_status",
        create_type=False,
    )
    order_status_enum.create(op.get_bind(), checkfirst=True)

    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(50), nullable=True),
        sa.Column("last_name", sa.String(50), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column(
            "role",
            postgresql.ENUM("USER", "ADMIN", name="user_role", create_type=False),
            server_default="USER",
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "password_reset_tokens",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("token", name="uq_password_reset_tokens_token"),
    )
    op.create_index("ix_password_reset_tokens_email", "password_reset_tokens", ["email"])

    # Catalog
    op.create_table(
        "categories",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_categories_name"),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("stock", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("thumbnail", sa.String(2048), nullable=True),
        sa.Column(
            "category_id",
            sa.UUID(),
            sa.ForeignKey("categories.id", ondelete="SET NULL", name="fk_products_category_id_categories"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint("price > 0", name="ck_products_price_positive"),
    )
    op.create_index("ix_products_is_active_created_at", "products", ["is_active", "created_at"])
    op.create_index("ix_products_category_id", "products", ["category_id"])

    op.create_table(
        "product_images",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "product_id",
            sa.UUID(),
            sa.ForeignKey("products.id", ondelete="CASCADE", name="fk_product_images_product_id_products"),
            nullable=False,
        ),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
    )
    op.create_index("ix_product_images_product_id", "product_images", ["product_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "product_id",
            sa.UUID(),
            sa.ForeignKey("products.id", ondelete="CASCADE", name="fk_reviews_product_id_products"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_reviews_user_id_users"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("product_id", "user_id", name="uq_reviews_product_user"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    # Carts
    op.create_table(
        "carts",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_carts_user_id_users"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_carts_user_id"),
    )

    op.create_table(
        "cart_items",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "cart_id",
            sa.UUID(),
            sa.ForeignKey("carts.id", ondelete="CASCADE", name="fk_cart_items_cart_id_carts"),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            sa.UUID(),
            sa.ForeignKey("products.id", ondelete="RESTRICT", name="fk_cart_items_product_id_products"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), server_default="1", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
    )
    op.create_index("ix_cart_items_cart_id", "cart_items", ["cart_id"])

    # Orders
    op.create_table(
        "addresses",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_addresses_user_id_users"),
            nullable=False,
        ),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("district", sa.String(100), nullable=False),
        sa.Column("neighborhood", sa.String(100), nullable=False),
        sa.Column("full_address", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_addresses_user_id", "addresses", ["user_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("order_number", sa.String(9), nullable=True),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_orders_user_id_users"),
            nullable=False,
        ),
        sa.Column(
            "status",
            postgresql.ENUM(
                "PENDING", "PAID", "SHIPPED", "COMPLETED", "CANCELED",
                name="order_status",
                create_type=False,
            ),
            server_default="PENDING",
            nullable=False,
        ),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column(
            "shipping_address_id",
            sa.UUID(),
            sa.ForeignKey("addresses.id", ondelete="SET NULL", name="fk_orders_shipping_address_id_addresses"),
            nullable=True,
        ),
        sa.Column("stripe_session_id", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("order_number", name="uq_orders_order_number"),
    )
    op.create_index("ix_orders_user_id_created_at", "orders", ["user_id", "created_at"])
    op.create_index("ix_orders_status", "orders", ["status"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "order_id",
            sa.UUID(),
            sa.ForeignKey("orders.id", ondelete="CASCADE", name="fk_order_items_order_id_orders"),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            sa.UUID(),
            sa.ForeignKey("products.id", ondelete="RESTRICT", name="fk_order_items_product_id_products"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    # Merchandising
    op.create_table(
        "banners",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("image_url", sa.String(2048), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("subtitle", sa.String(200), nullable=True),
        sa.Column("order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("display_mode", sa.String(20), server_default="cover", nullable=False),
        sa.Column("alignment", sa.String(20), server_default="center", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "banner_settings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("animation_speed", sa.Integer(), server_default="500", nullable=False),
        sa.Column("slide_delay", sa.Integer(), server_default="3000", nullable=False),
        sa.Column("animation_type", sa.String(20), server_default="slide", nullable=False),
        sa.Column("loop", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("arrow_display", sa.String(20), server_default="hover", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "carousels",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("type", sa.String(50), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("type", name="uq_carousels_type"),
    )

    op.create_table(
        "carousel_items",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "carousel_id",
            sa.UUID(),
            sa.ForeignKey("carousels.id", ondelete="CASCADE", name="fk_carousel_items_carousel_id_carousels"),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            sa.UUID(),
            sa.ForeignKey("products.id", ondelete="CASCADE", name="fk_carousel_items_product_id_products"),
            nullable=False,
        ),
        sa.Column("order", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("carousel_id", "product_id", name="uq_carousel_items_carousel_product"),
    )
    op.create_index("ix_carousel_items_carousel_id", "carousel_items", ["carousel_id"])

    # Settings and bookkeeping
    op.create_table(
        "payment_config",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("tax_percent", sa.Integer(), server_default="0", nullable=False),
        sa.Column("shipping_fee", sa.Integer(), server_default="0", nullable=False),
        sa.Column("free_shipping_threshold", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "processed_webhook_events",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("event_id", sa.String(255), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("event_type", sa.String(255), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("event_id", "source", name="uq_processed_webhook_events_event_source"),
    )


def downgrade() -> None:
    op.drop_table("processed_webhook_events")
    op.drop_table("payment_config")
    op.drop_index("ix_carousel_items_carousel_id", table_name="carousel_items")
    op.drop_table("carousel_items")
    op.drop_table("carousels")
    op.drop_table("banner_settings")
    op.drop_table("banners")
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_user_id_created_at", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_addresses_user_id", table_name="addresses")
    op.drop_table("addresses")
    op.drop_index("ix_cart_items_cart_id", table_name="cart_items")
    op.drop_table("cart_items")
    op.drop_table("carts")
    op.drop_table("reviews")
    op.drop_index("ix_product_images_product_id", table_name="product_images")
    op.drop_table("product_images")
    op.drop_index("ix_products_category_id", table_name="products")
    op.drop_index("ix_products_is_active_created_at", table_name="products")
    op.drop_table("products")
    op.drop_table("categories")
    op.drop_index("ix_password_reset_tokens_email", table_name="password_reset_tokens")
    op.drop_table("password_reset_tokens")
    op.drop_table("users")

    # Drop enum types
    op.execute("DROP TYPE IF EXISTS order_status")
    op.execute("DROP TYPE IF EXISTS user_role")
