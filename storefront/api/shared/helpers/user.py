"""Shared user helper functions for API routes.

This module provides centralized user lookup functions to avoid code
duplication across route modules.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.shared.auth import SessionUser, get_current_user
from storefront.db.models import User
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_db_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
    """Get database user by ID.

    Args:
        db: Database session
        user_id: User identifier from the session token

    Returns:
        User model instance or None if not found
    """
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Get database user by (normalized) email address."""
    result = await db.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_current_db_user(
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the session user to its database row.

    A valid token whose account has since been deleted is treated as
    unauthenticated.
    """
    db_user = await get_db_user(db, user.user_id)
    if db_user is None:
        logger.warning(f"Session refers to missing user {user.user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return db_user
