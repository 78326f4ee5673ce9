from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import httpx
from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.models.models import HourlyOrders
from restopos.schemas.report_schema import DateRange, HourlyOrdersCreate
from restopos.services import report_service
from tests.conftest import fail_commits


def day_row(sales, orders):
    return SimpleNamespace(sales=Decimal(sales), orders=orders)


def test_period_bounds():
    today = date(2024, 3, 10)
    assert report_service.period_bounds(DateRange.LAST_7_DAYS, today) == (
        date(2024, 3, 4),
        today,
    )
    assert report_service.previous_period_bounds(DateRange.LAST_7_DAYS, today) == (
        date(2024, 2, 26),
        date(2024, 3, 3),
    )
    assert DateRange.LAST_3_MONTHS.days == 90


def test_summarize_with_growth():
    summary = report_service.summarize(
        DateRange.LAST_7_DAYS,
        current=[day_row("12000", 40), day_row("13000", 45)],
        previous=[day_row("20000", 70)],
    )

    assert summary.total_sales == Decimal("25000.00")
    assert summary.total_orders == 85
    assert summary.avg_order_value == Decimal("294.12")
    assert summary.growth_rate == Decimal("25.0")


def test_summarize_without_orders_or_history():
    summary = report_service.summarize(DateRange.LAST_30_DAYS, current=[], previous=[])

    assert summary.total_sales == Decimal("0.00")
    assert summary.avg_order_value == Decimal("0.00")
    assert summary.growth_rate is None


def test_category_shares():
    shares = report_service.category_shares(
        [("Beverages", 30), ("Main Course", 60), ("Desserts", 10)]
    )
    assert [(s.name, s.value) for s in shares] == [
        ("Main Course", 60),
        ("Beverages", 30),
        ("Desserts", 10),
    ]


def test_category_shares_ties_sort_by_name():
    shares = report_service.category_shares([("Starters", 5), ("Breads", 5)])
    assert [(s.name, s.value) for s in shares] == [("Breads", 50), ("Starters", 50)]


def test_category_shares_without_orders():
    assert report_service.category_shares([("Beverages", 0)]) == []


async def record_day(client, headers, day, sales, orders):
    response = await client.put(
        "/api/reports/daily-sales",
        json={"day": day.isoformat(), "sales": sales, "orders": orders},
        headers=headers,
    )
    assert response.status_code == status.HTTP_202_ACCEPTED
    return response.json()


@pytest.mark.asyncio
async def test_reports_require_admin(client: httpx.AsyncClient, waiter_headers: dict):
    response = await client.get("/api/reports/summary", headers=waiter_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_invalid_date_range(client: httpx.AsyncClient, admin_headers: dict):
    response = await client.get(
        "/api/reports/summary", params={"date_range": "1year"}, headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_summary_and_trend(client: httpx.AsyncClient, admin_headers: dict):
    today = date.today()
    await record_day(client, admin_headers, today, "13000", 45)
    await record_day(client, admin_headers, today - timedelta(days=1), "12000", 40)
    await record_day(client, admin_headers, today - timedelta(days=8), "20000", 70)

    response = await client.get("/api/reports/summary", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    summary = response.json()
    assert summary["date_range"] == "7days"
    assert summary["total_orders"] == 85
    assert Decimal(summary["total_sales"]) == Decimal("25000")
    assert Decimal(summary["growth_rate"]) == Decimal("25.0")

    response = await client.get("/api/reports/sales-trend", headers=admin_headers)
    assert [row["day"] for row in response.json()] == [
        (today - timedelta(days=1)).isoformat(),
        today.isoformat(),
    ]

    response = await client.get(
        "/api/reports/sales-trend",
        params={"date_range": "30days"},
        headers=admin_headers,
    )
    assert len(response.json()) == 3


@pytest.mark.asyncio
async def test_recording_a_day_twice_replaces_it(
    client: httpx.AsyncClient, admin_headers: dict
):
    today = date.today()
    await record_day(client, admin_headers, today, "1000", 4)
    await record_day(client, admin_headers, today, "1500", 6)

    response = await client.get("/api/reports/sales-trend", headers=admin_headers)
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["orders"] == 6


@pytest.mark.asyncio
async def test_popular_items_and_categories(
    client: httpx.AsyncClient, admin_headers: dict
):
    today = date.today()
    sales = [
        ("Veg Pizza", "Main Course", 30, "7500"),
        ("Masala Chai", "Beverages", 50, "2000"),
        ("Gulab Jamun", "Desserts", 20, "1600"),
    ]
    for item_name, category_name, orders, revenue in sales:
        response = await client.put(
            "/api/reports/item-sales",
            json={
                "day": today.isoformat(),
                "item_name": item_name,
                "category_name": category_name,
                "orders": orders,
                "revenue": revenue,
            },
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_202_ACCEPTED

    response = await client.get(
        "/api/reports/popular-items", params={"limit": 2}, headers=admin_headers
    )
    assert [item["name"] for item in response.json()] == ["Masala Chai", "Veg Pizza"]

    response = await client.get("/api/reports/categories", headers=admin_headers)
    assert response.json() == [
        {"name": "Beverages", "value": 50},
        {"name": "Main Course", "value": 30},
        {"name": "Desserts", "value": 20},
    ]


@pytest.mark.asyncio
async def test_peak_hours(client: httpx.AsyncClient, admin_headers: dict):
    today = date.today()
    for day, hour, orders in [
        (today, 13, 20),
        (today, 20, 35),
        (today - timedelta(days=1), 13, 15),
    ]:
        response = await client.put(
            "/api/reports/hourly-orders",
            json={"day": day.isoformat(), "hour": hour, "orders": orders},
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_202_ACCEPTED

    response = await client.get("/api/reports/peak-hours", headers=admin_headers)
    assert response.json() == [
        {"hour": 13, "orders": 35},
        {"hour": 20, "orders": 35},
    ]

    response = await client.put(
        "/api/reports/hourly-orders",
        json={"day": today.isoformat(), "hour": 24, "orders": 1},
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_export_csv(client: httpx.AsyncClient, admin_headers: dict):
    today = date.today()
    await record_day(client, admin_headers, today, "1234.5", 7)

    response = await client.get(
        "/api/reports/export", params={"date_range": "30days"}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/csv")
    assert "sales-30days.csv" in response.headers["content-disposition"]
    assert response.text.splitlines() == [
        "date,sales,orders",
        f"{today.isoformat()},1234.50,7",
    ]


@pytest.mark.asyncio
async def test_failed_upsert_is_rolled_back(
    test_db: AsyncSession, monkeypatch: pytest.MonkeyPatch
):
    rollbacks = fail_commits(test_db, monkeypatch)

    with pytest.raises(SQLAlchemyError):
        await report_service.record_hourly_orders(
            db=test_db,
            data=HourlyOrdersCreate(day=date.today(), hour=13, orders=20),
        )

    assert rollbacks == [True]
    result = await test_db.execute(select(func.count()).select_from(HourlyOrders))
    assert result.scalar_one() == 0
