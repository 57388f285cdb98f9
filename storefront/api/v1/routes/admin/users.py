"""Admin user management routes."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.models import MessageResponse, UserResponse
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import get_db_user
from storefront.db.models import User, UserRole
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin"])


class UpdateRoleRequest(BaseModel):
    role: str


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await get_db_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=List[UserResponse])
async def list_users(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return [UserResponse.model_validate(user) for user in result.scalars().all()]


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    request: UpdateRoleRequest,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Grant or revoke admin access.

    The new role applies to the user's next request.
    """
    if request.role not in (UserRole.USER.value, UserRole.ADMIN.value):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")

    user = await get_user_or_404(db, user_id)
    user.role = UserRole(request.role)
    await db.flush()

    logger.info(
        f"User role changed to {user.role.value}",
        extra={"user_id": str(user_id), "admin_id": str(admin.user_id)},
    )
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete an account along with its cart, addresses, reviews and orders."""
    if user_id == admin.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )

    user = await get_user_or_404(db, user_id)
    await db.delete(user)
    await db.flush()

    logger.info(
        "User deleted",
        extra={"user_id": str(user_id), "admin_id": str(admin.user_id)},
    )
    return MessageResponse(message="User deleted")
