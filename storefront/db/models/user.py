"""User accounts and password reset tokens.

This module defines the User model for email/password accounts and the
short-lived tokens issued by the forgot-password flow.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, generate_repr

if TYPE_CHECKING:
    from .address import Address
    from .cart import Cart
    from .catalog import Review
    from .order import Order


class UserRole(str, enum.Enum):
    """Access role of a user account."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A customer or administrator account.

    Attributes:
        id: UUID primary key
        email: Login email address (unique, stored lowercase)
        password_hash: bcrypt hash of the password
        first_name: Given name (optional)
        last_name: Family name (optional)
        phone: Contact phone number (optional)
        avatar: Avatar URL or data URL (optional)
        role: USER or ADMIN
        created_at: When the account was created
        updated_at: When the account was last updated
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    password_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=UserRole.USER,
        nullable=False,
    )

    # Relationships
    addresses: Mapped[List["Address"]] = relationship(
        "Address",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    orders: Mapped[List["Order"]] = relationship(
        "Order",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    cart: Mapped[Optional["Cart"]] = relationship(
        "Cart",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )

    @property
    def full_name(self) -> str | None:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return generate_repr(self, "id", "email", "role")


class PasswordResetToken(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One-time token emailed to a user who forgot their password.

    Attributes:
        email: Email address the token was issued for
        token: Opaque token value (UUID4 string)
        expires_at: When the token stops being accepted
    """

    __tablename__ = "password_reset_tokens"

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "email", "expires_at")
