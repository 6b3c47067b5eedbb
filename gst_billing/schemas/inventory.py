# FILE: gst_billing/schemas/inventory.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BusinessCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    gstin: Optional[str] = Field(default=None, max_length=15)
    state_code: Optional[str] = Field(default=None, max_length=2)


class BusinessOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    gstin: Optional[str] = None
    state_code: Optional[str] = None
    created_at: datetime


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: Literal["product", "service"] = "product"
    hsn_sac: str = ""
    unit: str = "Nos"
    sales_price: Decimal = Field(default=Decimal("0"), ge=0)
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)
    gst_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_inclusive: bool = True
    maintain_stock: bool = False
    # opening stock is recorded as an adjustment movement
    opening_stock: Decimal = Field(default=Decimal("0"), ge=0)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    name: str
    type: str
    hsn_sac: Optional[str] = None
    unit: str
    sales_price: Decimal
    purchase_price: Decimal
    gst_percent: Decimal
    tax_inclusive: bool
    maintain_stock: bool
    current_stock: Decimal
    stock_value: Decimal = Decimal("0")


class StockAdjustIn(BaseModel):
    quantity_change: Decimal
    remark: str = ""

    @field_validator("quantity_change")
    @classmethod
    def _non_zero(cls, v: Decimal) -> Decimal:
        if v == 0:
            raise ValueError("quantity_change must be non-zero "
                             "(positive to add, negative to reduce)")
        return v


class StockMovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: str
    quantity_change: Decimal
    final_stock: Decimal
    activity_type: str
    reference_id: Optional[str] = None
    reference_number: Optional[str] = None
    remark: Optional[str] = None
    unit: str
    created_at: datetime


class StockMovementPage(BaseModel):
    stock_movements: List[StockMovementOut]
    count: int
    next_token: Optional[str] = None


class InventorySettingsOut(BaseModel):
    reduce_stock_on: Literal["invoice", "deliveryChallan"]
    stock_value_based_on: Literal["purchase", "sale"]
    allow_negative_stock: bool


class InventorySettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reduce_stock_on: Optional[Literal["invoice", "deliveryChallan"]] = None
    stock_value_based_on: Optional[Literal["purchase", "sale"]] = None
    allow_negative_stock: Optional[bool] = None
