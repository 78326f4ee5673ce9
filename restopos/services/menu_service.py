import json
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logfire

from restopos.config.config import redis_client, settings
from restopos.models.models import MenuCategory, MenuItem
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

CATEGORIES_CACHE_KEY = "menu:categories"
ITEMS_CACHE_KEY = "menu:items"
ALL_CATEGORIES = "All"


def invalidate_menu_cache() -> None:
    redis_client.delete(CATEGORIES_CACHE_KEY, ITEMS_CACHE_KEY)


async def get_categories(
    db: AsyncSession, active_only: bool = False
) -> list[MenuCategoryResponse]:
    """
    Retrieve menu categories ordered by sort order.
    """
    cached_categories = redis_client.get(CATEGORIES_CACHE_KEY)

    if cached_categories:
        categories = json.loads(cached_categories)
    else:
        result = await db.execute(
            select(MenuCategory).order_by(MenuCategory.sort_order, MenuCategory.id)
        )
        categories = [
            MenuCategoryResponse.model_validate(category).model_dump()
            for category in result.scalars().all()
        ]
        redis_client.set(
            CATEGORIES_CACHE_KEY,
            json.dumps(categories, default=str),
            ex=settings.REDIS_EX,
        )

    if active_only:
        return [category for category in categories if category["is_active"]]
    return categories


async def create_category(
    db: AsyncSession, data: MenuCategoryCreate
) -> MenuCategoryResponse:
    """
    Create a new menu category.
    """
    new_category = MenuCategory(**data.model_dump())
    try:
        db.add(new_category)
        await db.commit()
        await db.refresh(new_category)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category {data.name!r} already exists",
        )

    invalidate_menu_cache()
    logfire.info("created menu category {name}", name=new_category.name)
    return new_category


async def update_category(
    db: AsyncSession, category_id: int, data: MenuCategoryUpdate
) -> MenuCategoryResponse:
    category = await db.get(MenuCategory, category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category with ID {category_id} not found",
        )

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(category, field, value)

    try:
        await db.commit()
        await db.refresh(category)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category {data.name!r} already exists",
        )

    invalidate_menu_cache()
    return category


async def get_items(
    db: AsyncSession, category_id: int | None = None
) -> list[MenuItemResponse]:
    """
    Retrieve all menu items with their category name, ordered by sort order.
    """
    cached_items = redis_client.get(ITEMS_CACHE_KEY)

    if cached_items:
        items = json.loads(cached_items)
    else:
        result = await db.execute(
            select(MenuItem).order_by(MenuItem.sort_order, MenuItem.id)
        )
        items = [
            MenuItemResponse.model_validate(item).model_dump()
            for item in result.scalars().all()
        ]
        redis_client.set(
            ITEMS_CACHE_KEY, json.dumps(items, default=str), ex=settings.REDIS_EX
        )

    if category_id is not None:
        return [item for item in items if item["category_id"] == category_id]
    return items


async def get_item_by_id(db: AsyncSession, item_id: int) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Menu item with ID {item_id} not found",
        )
    return item


async def _check_category(db: AsyncSession, category_id: int) -> None:
    if await db.get(MenuCategory, category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Category with ID {category_id} not found",
        )


async def create_item(db: AsyncSession, data: MenuItemCreate) -> MenuItemResponse:
    """
    Create a new menu item in an existing category.
    """
    await _check_category(db, data.category_id)

    new_item = MenuItem(**data.model_dump())
    try:
        db.add(new_item)
        await db.commit()
        await db.refresh(new_item, attribute_names=["category"])
    except Exception as e:
        await db.rollback()
        raise Exception(str(e))

    invalidate_menu_cache()
    logfire.info("created menu item {name}", name=new_item.name)
    return new_item


async def update_item(
    db: AsyncSession, item_id: int, data: MenuItemUpdate
) -> MenuItemResponse:
    item = await get_item_by_id(db, item_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("category_id") is not None:
        await _check_category(db, changes["category_id"])

    for field, value in changes.items():
        setattr(item, field, value)

    try:
        await db.commit()
        await db.refresh(item, attribute_names=["category"])
    except Exception:
        await db.rollback()
        raise

    invalidate_menu_cache()
    return item


async def toggle_item_availability(
    db: AsyncSession, item_id: int
) -> MenuItemAvailability:
    item = await get_item_by_id(db, item_id)
    item.is_available = not item.is_available
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    invalidate_menu_cache()
    logfire.info(
        "menu item {name} {state}",
        name=item.name,
        state="enabled" if item.is_available else "disabled",
    )
    return MenuItemAvailability(id=item.id, is_available=item.is_available)


async def get_pos_menu(
    db: AsyncSession, search: str | None = None, category: str = ALL_CATEGORIES
) -> POSMenuResponse:
    """
    Active categories and the available items a cashier can sell.

    ``search`` matches item names case-insensitively, ``category`` is a
    category name or ``All``.
    """
    categories = await db.execute(
        select(MenuCategory)
        .where(MenuCategory.is_active.is_(True))
        .order_by(MenuCategory.sort_order, MenuCategory.id)
    )

    stmt = (
        select(MenuItem)
        .where(MenuItem.is_available.is_(True))
        .order_by(MenuItem.sort_order, MenuItem.id)
    )
    if search:
        stmt = stmt.where(func.lower(MenuItem.name).contains(search.strip().lower()))
    if category and category != ALL_CATEGORIES:
        stmt = stmt.join(MenuItem.category).where(MenuCategory.name == category)

    items = await db.execute(stmt)

    return POSMenuResponse(
        categories=[
            MenuCategoryResponse.model_validate(c) for c in categories.scalars().all()
        ],
        items=[MenuItemResponse.model_validate(i) for i in items.scalars().all()],
    )
