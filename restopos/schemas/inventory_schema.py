from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class StockStatus(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    current_stock: int = Field(..., ge=0)
    min_stock: int = Field(..., ge=0)
    max_stock: int = Field(..., gt=0)
    unit: str = Field(..., min_length=1)  # e.g kg, pcs, ltr
    cost_per_unit: Decimal = Field(..., ge=0, decimal_places=2)
    supplier: str

    @model_validator(mode="after")
    def check_thresholds(self):
        if self.min_stock > self.max_stock:
            raise ValueError("min_stock cannot be greater than max_stock")
        return self


class StockLevelUpdate(BaseModel):
    current_stock: int = Field(..., ge=0)


class InventoryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    current_stock: int
    min_stock: int
    max_stock: int
    unit: str
    cost_per_unit: Decimal
    supplier: str


class StockEvaluation(BaseModel):
    status: StockStatus
    fill_percentage: Decimal


class InventoryItemReport(InventoryItemResponse, StockEvaluation):
    pass


class InventoryOverview(BaseModel):
    total_items: int
    low_stock_count: int
    total_value: Decimal


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1)
    contact: str
    email: EmailStr


class SupplierResponse(SupplierCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
