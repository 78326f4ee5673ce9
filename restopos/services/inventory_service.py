from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logfire

from restopos.models.models import InventoryItem, Supplier
from restopos.schemas.inventory_schema import (
    InventoryItemCreate,
    InventoryItemReport,
    InventoryItemResponse,
    InventoryOverview,
    StockLevelUpdate,
    StockStatus,
    SupplierCreate,
    SupplierResponse,
)
from restopos.services import stock_evaluator


def item_report(item: InventoryItem) -> InventoryItemReport:
    return InventoryItemReport(
        **InventoryItemResponse.model_validate(item).model_dump(),
        **stock_evaluator.evaluate(item).model_dump(),
    )


async def _all_items(db: AsyncSession) -> list[InventoryItem]:
    result = await db.execute(select(InventoryItem).order_by(InventoryItem.id))
    return result.scalars().all()


async def get_items(db: AsyncSession) -> list[InventoryItemReport]:
    """
    Retrieve every inventory item with its stock status and fill level.
    """
    return [item_report(item) for item in await _all_items(db)]


async def get_overview(db: AsyncSession) -> InventoryOverview:
    return stock_evaluator.inventory_overview(await _all_items(db))


async def get_low_stock_alerts(db: AsyncSession) -> list[InventoryItemReport]:
    return [
        item_report(item)
        for item in stock_evaluator.low_stock_set(await _all_items(db))
    ]


async def create_item(
    db: AsyncSession, data: InventoryItemCreate
) -> InventoryItemReport:
    """
    Create a new inventory item.
    """
    new_item = InventoryItem(**data.model_dump())
    try:
        db.add(new_item)
        await db.commit()
        await db.refresh(new_item)
    except Exception as e:
        await db.rollback()
        raise Exception(str(e))

    logfire.info("created inventory item {name}", name=new_item.name)
    if stock_evaluator.status(new_item) == StockStatus.LOW:
        logfire.warn(
            "{name} is low on stock: {current} {unit} (min {minimum})",
            name=new_item.name,
            current=new_item.current_stock,
            unit=new_item.unit,
            minimum=new_item.min_stock,
        )
    return item_report(new_item)


async def update_stock_level(
    db: AsyncSession, item_id: int, data: StockLevelUpdate
) -> InventoryItemReport:
    """
    Set an item's current stock and report its new status.
    """
    item = await db.get(InventoryItem, item_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Inventory item with ID {item_id} not found",
        )

    previous_status = stock_evaluator.status(item)
    item.current_stock = data.current_stock
    try:
        await db.commit()
        await db.refresh(item)
    except Exception:
        await db.rollback()
        raise

    current_status = stock_evaluator.status(item)
    if current_status == StockStatus.LOW and previous_status != StockStatus.LOW:
        logfire.warn(
            "{name} dropped to low stock: {current} {unit} (min {minimum})",
            name=item.name,
            current=item.current_stock,
            unit=item.unit,
            minimum=item.min_stock,
        )
    elif previous_status == StockStatus.LOW and current_status != StockStatus.LOW:
        logfire.info("{name} restocked to {current}", name=item.name, current=item.current_stock)

    return item_report(item)


async def get_suppliers(db: AsyncSession) -> list[SupplierResponse]:
    result = await db.execute(select(Supplier).order_by(func.lower(Supplier.name)))
    return result.scalars().all()


async def create_supplier(db: AsyncSession, data: SupplierCreate) -> SupplierResponse:
    name = data.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="name is required"
        )

    existing = await db.execute(
        select(Supplier).where(func.lower(Supplier.name) == name.lower())
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Supplier already exists"
        )

    supplier = Supplier(name=name, contact=data.contact, email=data.email)
    try:
        db.add(supplier)
        await db.commit()
        await db.refresh(supplier)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Supplier already exists"
        )
    except Exception:
        await db.rollback()
        raise

    logfire.info("created supplier {name}", name=supplier.name)
    return supplier
