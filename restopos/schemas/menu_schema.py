from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class MenuCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    is_active: bool = True
    sort_order: int = 0


class MenuCategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    description: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class MenuCategoryResponse(MenuCategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    base_price: Decimal = Field(..., ge=0, decimal_places=2)
    category_id: int
    is_vegetarian: bool = False
    is_available: bool = True
    preparation_time: int = Field(15, ge=0)  # minutes
    sort_order: int = 0


class MenuItemUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    description: str | None = None
    base_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    category_id: int | None = None
    is_vegetarian: bool | None = None
    is_available: bool | None = None
    preparation_time: int | None = Field(None, ge=0)
    sort_order: int | None = None


class MenuItemResponse(MenuItemCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_name: str | None = None


class MenuItemAvailability(BaseModel):
    id: int
    is_available: bool


class POSMenuResponse(BaseModel):
    categories: list[MenuCategoryResponse]
    items: list[MenuItemResponse]
