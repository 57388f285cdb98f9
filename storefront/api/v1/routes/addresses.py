"""Address book routes for the signed-in user."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.models import AddressResponse, MessageResponse
from storefront.api.shared.auth import SessionUser, get_current_user
from storefront.db.models import Address
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/addresses", tags=["addresses"])

ADDRESS_FIELDS = (
    "title",
    "first_name",
    "last_name",
    "phone",
    "city",
    "district",
    "neighborhood",
    "full_address",
)


class AddressRequest(BaseModel):
    """Address body. Every field is required and must not be blank."""

    title: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    neighborhood: Optional[str] = None
    full_address: Optional[str] = None


def validated_fields(request: AddressRequest) -> dict[str, str]:
    """Return the stripped field values.

    Raises:
        HTTPException: 400 if any field is missing or blank
    """
    values = {name: (getattr(request, name) or "").strip() for name in ADDRESS_FIELDS}
    if not all(values.values()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All fields are required",
        )
    return values


async def get_owned_address(db: AsyncSession, address_id: UUID, user: SessionUser) -> Address:
    address = await db.get(Address, address_id)
    if not address:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    if address.user_id != user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: You don't own this address",
        )
    return address


@router.get("", response_model=List[AddressResponse])
async def list_addresses(
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[AddressResponse]:
    result = await db.execute(
        select(Address)
        .where(Address.user_id == user.user_id)
        .order_by(Address.created_at.desc())
    )
    return [AddressResponse.model_validate(a) for a in result.scalars().all()]


@router.post("", response_model=AddressResponse, status_code=status.HTTP_201_CREATED)
async def create_address(
    request: AddressRequest,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AddressResponse:
    address = Address(user_id=user.user_id, **validated_fields(request))
    db.add(address)
    await db.flush()
    await db.refresh(address)

    logger.info("Address added", extra={"address_id": str(address.id)})
    return AddressResponse.model_validate(address)


@router.put("/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: UUID,
    request: AddressRequest,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AddressResponse:
    fields = validated_fields(request)
    address = await get_owned_address(db, address_id, user)

    for name, value in fields.items():
        setattr(address, name, value)
    await db.flush()
    await db.refresh(address)

    return AddressResponse.model_validate(address)


@router.delete("/{address_id}", response_model=MessageResponse)
async def delete_address(
    address_id: UUID,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    address = await get_owned_address(db, address_id, user)
    await db.delete(address)
    await db.flush()

    logger.info("Address deleted", extra={"address_id": str(address_id)})
    return MessageResponse(message="Address deleted successfully")
