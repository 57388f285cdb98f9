"""Admin payment configuration: tax rate, shipping fee and free-shipping threshold."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.models import PaymentConfigResponse
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import get_or_create_payment_config
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/payment-config", tags=["admin"])


class PaymentConfigUpdate(BaseModel):
    tax_percent: int = Field(..., ge=0, le=100, description="Tax rate included in prices, percent")
    shipping_fee: int = Field(..., ge=0, description="Flat shipping fee in cents")
    free_shipping_threshold: int = Field(
        ..., ge=0, description="Subtotal in cents at which shipping becomes free"
    )


@router.get("", response_model=PaymentConfigResponse)
async def get_payment_config(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PaymentConfigResponse:
    return PaymentConfigResponse.model_validate(await get_or_create_payment_config(db))


@router.post("", response_model=PaymentConfigResponse)
async def update_payment_config(
    request: PaymentConfigUpdate,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PaymentConfigResponse:
    config = await get_or_create_payment_config(db)
    config.tax_percent = request.tax_percent
    config.shipping_fee = request.shipping_fee
    config.free_shipping_threshold = request.free_shipping_threshold
    await db.flush()

    logger.info(
        "Payment config updated",
        extra={"admin_id": str(admin.user_id), **request.model_dump()},
    )
    return PaymentConfigResponse.model_validate(config)
