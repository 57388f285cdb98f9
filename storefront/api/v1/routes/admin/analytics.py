"""Admin sales analysis for the dashboard."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.helpers import get_or_create_payment_config
from storefront.db.session import get_db
from storefront.services.sales import get_sales_summary

router = APIRouter(prefix="/admin", tags=["admin"])


class DailySalesResponse(BaseModel):
    day: int = Field(..., description="Day of month, 1-based")
    label: str = Field(..., description="Chart label, e.g. 'Mar 7'")
    total: int = Field(..., description="Revenue in cents")

    model_config = {"from_attributes": True}


class SalesAnalysisResponse(BaseModel):
    """Current-month figures. Amounts are in cents."""

    today_orders_count: int
    pending_shipments_count: int
    today_revenue: int
    monthly_revenue: int
    estimated_profit: int
    estimated_tax: int
    low_stock_count: int
    daily_sales: List[DailySalesResponse]

    model_config = {"from_attributes": True}


@router.get("/sales-analysis", response_model=SalesAnalysisResponse)
async def sales_analysis(
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SalesAnalysisResponse:
    payment_config = await get_or_create_payment_config(db)
    summary = await get_sales_summary(db, payment_config.tax_percent)
    return SalesAnalysisResponse.model_validate(summary)
