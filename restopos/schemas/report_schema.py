from datetime import date
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class DateRange(str, Enum):
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_3_MONTHS = "3months"

    @property
    def days(self) -> int:
        return {"7days": 7, "30days": 30, "3months": 90}[self.value]


class DailySalesCreate(BaseModel):
    day: date
    sales: Decimal = Field(..., ge=0)
    orders: int = Field(..., ge=0)


class ItemSalesCreate(BaseModel):
    day: date
    item_name: str = Field(..., min_length=1)
    category_name: str = Field(..., min_length=1)
    orders: int = Field(..., ge=0)
    revenue: Decimal = Field(..., ge=0)


class HourlyOrdersCreate(BaseModel):
    day: date
    hour: int = Field(..., ge=0, le=23)
    orders: int = Field(..., ge=0)


class DailySalesResponse(DailySalesCreate):
    model_config = ConfigDict(from_attributes=True)


class SalesSummary(BaseModel):
    date_range: DateRange
    total_sales: Decimal
    total_orders: int
    avg_order_value: Decimal
    growth_rate: Decimal | None = None


class PopularItem(BaseModel):
    name: str
    orders: int
    revenue: Decimal


class CategoryShare(BaseModel):
    name: str
    value: int  # percentage of item orders


class PeakHour(BaseModel):
    hour: int
    orders: int
