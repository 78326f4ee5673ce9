import csv
import io
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
import logfire

from restopos.models.models import DailySales, HourlyOrders, ItemSales
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

TWO_PLACES = Decimal("0.01")
ONE_PLACE = Decimal("0.1")


def period_bounds(date_range: DateRange, today: date | None = None) -> tuple[date, date]:
    """First and last day (inclusive) of the window ending today."""
    end = today or date.today()
    return end - timedelta(days=date_range.days - 1), end


def previous_period_bounds(
    date_range: DateRange, today: date | None = None
) -> tuple[date, date]:
    start, _ = period_bounds(date_range, today)
    return start - timedelta(days=date_range.days), start - timedelta(days=1)


def summarize(
    date_range: DateRange, current: Iterable, previous: Iterable = ()
) -> SalesSummary:
    """
    Sales totals of a window, compared against the window before it.

    Rows need ``sales`` and ``orders``. The growth rate is None when the
    previous window sold nothing.
    """
    current = list(current)
    total_sales = sum((Decimal(row.sales) for row in current), Decimal(0))
    total_orders = sum(row.orders for row in current)
    previous_sales = sum((Decimal(row.sales) for row in previous), Decimal(0))

    avg_order_value = (
        (total_sales / total_orders).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        if total_orders
        else Decimal("0.00")
    )
    growth_rate = (
        ((total_sales - previous_sales) / previous_sales * 100).quantize(
            ONE_PLACE, rounding=ROUND_HALF_UP
        )
        if previous_sales
        else None
    )

    return SalesSummary(
        date_range=date_range,
        total_sales=total_sales.quantize(TWO_PLACES),
        total_orders=total_orders,
        avg_order_value=avg_order_value,
        growth_rate=growth_rate,
    )


def category_shares(rows: Iterable[tuple[str, int]]) -> list[CategoryShare]:
    """Percentage of item orders per category, largest first."""
    rows = [(name, orders or 0) for name, orders in rows]
    total_orders = sum(orders for _, orders in rows)
    if not total_orders:
        return []

    shares = [
        CategoryShare(
            name=name,
            value=int(
                (Decimal(orders) * 100 / total_orders).quantize(
                    Decimal(1), rounding=ROUND_HALF_UP
                )
            ),
        )
        for name, orders in rows
    ]
    return sorted(shares, key=lambda share: (-share.value, share.name))


async def _daily_rows(db: AsyncSession, start: date, end: date) -> list[DailySales]:
    result = await db.execute(
        select(DailySales)
        .where(DailySales.day >= start, DailySales.day <= end)
        .order_by(DailySales.day)
    )
    return result.scalars().all()


async def get_summary(
    db: AsyncSession, date_range: DateRange, today: date | None = None
) -> SalesSummary:
    current = await _daily_rows(db, *period_bounds(date_range, today))
    previous = await _daily_rows(db, *previous_period_bounds(date_range, today))
    return summarize(date_range, current, previous)


async def get_sales_trend(
    db: AsyncSession, date_range: DateRange, today: date | None = None
) -> list[DailySalesResponse]:
    return await _daily_rows(db, *period_bounds(date_range, today))


async def get_popular_items(
    db: AsyncSession, date_range: DateRange, limit: int = 5, today: date | None = None
) -> list[PopularItem]:
    """
    Top selling menu items by orders, then revenue.
    """
    start, end = period_bounds(date_range, today)
    orders = func.sum(ItemSales.orders)
    revenue = func.sum(ItemSales.revenue)
    result = await db.execute(
        select(ItemSales.item_name, orders, revenue)
        .where(ItemSales.day >= start, ItemSales.day <= end)
        .group_by(ItemSales.item_name)
        .order_by(orders.desc(), revenue.desc(), ItemSales.item_name)
        .limit(limit)
    )
    return [
        PopularItem(name=name, orders=total_orders, revenue=total_revenue)
        for name, total_orders, total_revenue in result.all()
    ]


async def get_category_share(
    db: AsyncSession, date_range: DateRange, today: date | None = None
) -> list[CategoryShare]:
    start, end = period_bounds(date_range, today)
    result = await db.execute(
        select(ItemSales.category_name, func.sum(ItemSales.orders))
        .where(ItemSales.day >= start, ItemSales.day <= end)
        .group_by(ItemSales.category_name)
    )
    return category_shares(result.all())


async def get_peak_hours(
    db: AsyncSession, date_range: DateRange, today: date | None = None
) -> list[PeakHour]:
    start, end = period_bounds(date_range, today)
    result = await db.execute(
        select(HourlyOrders.hour, func.sum(HourlyOrders.orders))
        .where(HourlyOrders.day >= start, HourlyOrders.day <= end)
        .group_by(HourlyOrders.hour)
        .order_by(HourlyOrders.hour)
    )
    return [PeakHour(hour=hour, orders=orders) for hour, orders in result.all()]


async def export_sales_csv(
    db: AsyncSession, date_range: DateRange, today: date | None = None
) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["date", "sales", "orders"])
    for row in await get_sales_trend(db, date_range, today):
        writer.writerow([row.day.isoformat(), f"{Decimal(row.sales):.2f}", row.orders])
    return buffer.getvalue()


async def record_daily_sales(
    db: AsyncSession, data: DailySalesCreate
) -> DailySalesResponse:
    """
    Create or replace the sales figures of one day.
    """
    result = await db.execute(select(DailySales).where(DailySales.day == data.day))
    row = result.scalar_one_or_none()

    if row is None:
        row = DailySales(day=data.day)
        db.add(row)
    row.sales = data.sales
    row.orders = data.orders

    try:
        await db.commit()
        await db.refresh(row)
    except Exception:
        await db.rollback()
        raise
    logfire.info("recorded sales for {day}", day=data.day.isoformat())
    return row


async def record_item_sales(db: AsyncSession, data: ItemSalesCreate) -> ItemSalesCreate:
    result = await db.execute(
        select(ItemSales).where(
            ItemSales.day == data.day, ItemSales.item_name == data.item_name
        )
    )
    row = result.scalar_one_or_none()

    if row is None:
        row = ItemSales(day=data.day, item_name=data.item_name)
        db.add(row)
    row.category_name = data.category_name
    row.orders = data.orders
    row.revenue = data.revenue

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return data


async def record_hourly_orders(
    db: AsyncSession, data: HourlyOrdersCreate
) -> HourlyOrdersCreate:
    result = await db.execute(
        select(HourlyOrders).where(
            HourlyOrders.day == data.day, HourlyOrders.hour == data.hour
        )
    )
    row = result.scalar_one_or_none()

    if row is None:
        row = HourlyOrders(day=data.day, hour=data.hour)
        db.add(row)
    row.orders = data.orders

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return data
