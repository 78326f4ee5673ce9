"""
Stock level rules for inventory items.

Works on any record exposing ``current_stock``, ``min_stock``, ``max_stock``
and ``cost_per_unit`` (ORM rows or schemas alike).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

from restopos.schemas.inventory_schema import (
    InventoryOverview,
    StockEvaluation,
    StockStatus,
)

HIGH_STOCK_RATIO = Decimal("0.8")
TWO_PLACES = Decimal("0.01")


class StockLevels(Protocol):
    name: str
    current_stock: int
    min_stock: int
    max_stock: int
    cost_per_unit: Decimal


class StockConfigurationError(ValueError):
    """Raised when an item's thresholds make a calculation impossible."""


def status(item: StockLevels) -> StockStatus:
    """
    Classify an item's stock level.

    Low is checked first, so an item meeting both thresholds is Low.
    """
    if item.current_stock <= item.min_stock:
        return StockStatus.LOW
    if item.current_stock >= HIGH_STOCK_RATIO * item.max_stock:
        return StockStatus.HIGH
    return StockStatus.NORMAL


def fill_percentage(item: StockLevels) -> Decimal:
    if not item.max_stock:
        raise StockConfigurationError(
            f"Item {item.name!r} has no max_stock, fill percentage is undefined"
        )
    percentage = Decimal(item.current_stock) / Decimal(item.max_stock) * 100
    return percentage.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def low_stock_set(items: Iterable[StockLevels]) -> list[StockLevels]:
    return [item for item in items if status(item) == StockStatus.LOW]


def total_inventory_value(items: Iterable[StockLevels]) -> Decimal:
    total = sum(
        (Decimal(item.current_stock) * Decimal(item.cost_per_unit) for item in items),
        Decimal(0),
    )
    return total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def evaluate(item: StockLevels) -> StockEvaluation:
    return StockEvaluation(status=status(item), fill_percentage=fill_percentage(item))


def inventory_overview(items: Iterable[StockLevels]) -> InventoryOverview:
    items = list(items)
    return InventoryOverview(
        total_items=len(items),
        low_stock_count=len(low_stock_set(items)),
        total_value=total_inventory_value(items),
    )
