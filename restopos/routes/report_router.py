from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.auth.auth import get_current_admin
from restopos.database.database import get_db
from restopos.models.models import User
from restopos.schemas.report_schema import (
    CategoryShare,
    DailySalesCreate,
    DailySalesResponse,
    DateRange,
    HourlyOrdersCreate,
    ItemSalesCreate,
    PeakHour,
    PopularItem,
    SalesSummary,
)
from restopos.services import report_service

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/summary", status_code=status.HTTP_200_OK)
async def sales_summary(
    date_range: DateRange = DateRange.LAST_7_DAYS,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> SalesSummary:
    """Total sales, orders, average order value and growth.

    - Args:
        - date_range: 7days, 30days or 3months.

    - Returns:
        - The summary of the window ending today.
    """
    try:
        return await report_service.get_summary(db=db, date_range=date_range)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/sales-trend", status_code=status.HTTP_200_OK)
async def sales_trend(
    date_range: DateRange = DateRange.LAST_7_DAYS,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[DailySalesResponse]:
    try:
        return await report_service.get_sales_trend(db=db, date_range=date_range)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/popular-items", status_code=status.HTTP_200_OK)
async def popular_items(
    date_range: DateRange = DateRange.LAST_7_DAYS,
    limit: int = 5,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[PopularItem]:
    try:
        return await report_service.get_popular_items(
            db=db, date_range=date_range, limit=limit
        )
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/categories", status_code=status.HTTP_200_OK)
async def category_share(
    date_range: DateRange = DateRange.LAST_7_DAYS,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[CategoryShare]:
    try:
        return await report_service.get_category_share(db=db, date_range=date_range)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/peak-hours", status_code=status.HTTP_200_OK)
async def peak_hours(
    date_range: DateRange = DateRange.LAST_7_DAYS,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[PeakHour]:
    try:
        return await report_service.get_peak_hours(db=db, date_range=date_range)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/export", status_code=status.HTTP_200_OK)
async def export_sales(
    date_range: DateRange = DateRange.LAST_7_DAYS,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        content = await report_service.export_sales_csv(db=db, date_range=date_range)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="sales-{date_range.value}.csv"'
        },
    )


@router.put("/daily-sales", status_code=status.HTTP_202_ACCEPTED)
async def record_daily_sales(
    data: DailySalesCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> DailySalesResponse:
    try:
        return await report_service.record_daily_sales(db=db, data=data)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/item-sales", status_code=status.HTTP_202_ACCEPTED)
async def record_item_sales(
    data: ItemSalesCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> ItemSalesCreate:
    try:
        return await report_service.record_item_sales(db=db, data=data)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/hourly-orders", status_code=status.HTTP_202_ACCEPTED)
async def record_hourly_orders(
    data: HourlyOrdersCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> HourlyOrdersCreate:
    try:
        return await report_service.record_hourly_orders(db=db, data=data)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
