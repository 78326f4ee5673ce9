from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: int
    name: str
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class AddToCart(BaseModel):
    item_id: int


class CartResponse(BaseModel):
    lines: list[CartLine]
    item_count: int
    total: Decimal
