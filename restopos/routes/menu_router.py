from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.auth.auth import get_current_admin, get_current_user
from restopos.database.database import get_db
from restopos.models.models import User
from restopos.services import menu_service
from restopos.schemas.menu_schema import (
    MenuCategoryCreate,
    MenuCategoryResponse,
    MenuCategoryUpdate,
    MenuItemAvailability,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    POSMenuResponse,
)

router = APIRouter(prefix="/api/menu", tags=["Menu"])


@router.get("/categories", status_code=status.HTTP_200_OK)
async def get_categories(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[MenuCategoryResponse]:
    try:
        return await menu_service.get_categories(db=db, active_only=active_only)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    data: MenuCategoryCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> MenuCategoryResponse:
    try:
        return await menu_service.create_category(db=db, data=data)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/categories/{category_id}", status_code=status.HTTP_202_ACCEPTED)
async def update_category(
    category_id: int,
    data: MenuCategoryUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> MenuCategoryResponse:
    try:
        return await menu_service.update_category(
            db=db, category_id=category_id, data=data
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/items", status_code=status.HTTP_200_OK)
async def get_items(
    category_id: int | None = None,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemResponse]:
    try:
        return await menu_service.get_items(db=db, category_id=category_id)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_item(
    data: MenuItemCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    try:
        return await menu_service.create_item(db=db, data=data)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/items/{item_id}", status_code=status.HTTP_202_ACCEPTED)
async def update_item(
    item_id: int,
    data: MenuItemUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    try:
        return await menu_service.update_item(db=db, item_id=item_id, data=data)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/items/{item_id}/toggle-availability", status_code=status.HTTP_202_ACCEPTED)
async def toggle_item_availability(
    item_id: int,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> MenuItemAvailability:
    try:
        return await menu_service.toggle_item_availability(db=db, item_id=item_id)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/pos", status_code=status.HTTP_200_OK)
async def pos_menu(
    search: str | None = None,
    category: str = menu_service.ALL_CATEGORIES,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> POSMenuResponse:
    """Browse the sellable menu.

    - Args:
        - search: part of an item name.
        - category: category name, or All.

    - Returns:
        - Active categories and the available items matching the filters.
    """
    try:
        return await menu_service.get_pos_menu(db=db, search=search, category=category)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
