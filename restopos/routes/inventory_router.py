from fastapi import APIRouter, Depends, status, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.auth.auth import get_current_admin
from restopos.database.database import get_db
from restopos.models.models import User
from restopos.services import inventory_service
from restopos.schemas.inventory_schema import (
    InventoryItemCreate,
    InventoryItemReport,
    InventoryOverview,
    StockLevelUpdate,
    SupplierCreate,
    SupplierResponse,
)

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


@router.get("/items", status_code=status.HTTP_200_OK)
async def get_items(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[InventoryItemReport]:
    try:
        return await inventory_service.get_items(db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_item(
    data: InventoryItemCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> InventoryItemReport:
    try:
        return await inventory_service.create_item(data=data, db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/items/{item_id}/stock", status_code=status.HTTP_202_ACCEPTED)
async def update_stock_level(
    item_id: int,
    data: StockLevelUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> InventoryItemReport:
    try:
        return await inventory_service.update_stock_level(
            db=db, item_id=item_id, data=data
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/overview", status_code=status.HTTP_200_OK)
async def get_overview(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> InventoryOverview:
    try:
        return await inventory_service.get_overview(db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/alerts", status_code=status.HTTP_200_OK)
async def get_low_stock_alerts(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[InventoryItemReport]:
    try:
        return await inventory_service.get_low_stock_alerts(db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/suppliers", status_code=status.HTTP_200_OK)
async def get_suppliers(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[SupplierResponse]:
    try:
        return await inventory_service.get_suppliers(db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/suppliers", status_code=status.HTTP_201_CREATED)
async def create_supplier(
    data: SupplierCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> SupplierResponse:
    try:
        return await inventory_service.create_supplier(db=db, data=data)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
