# FILE: gst_billing/schemas/billing.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LineItemIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    item_id: Optional[str] = None  # product id; drives stock deductions
    name: Optional[str] = None
    hsn_sac: Optional[str] = None
    unit: Optional[str] = None

    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)

    discount_type: Optional[Literal["percentage", "flat"]] = None
    discount_value: Decimal = Field(default=Decimal("0"), ge=0)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)

    gst_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_inclusive: bool = False

    cess_type: Literal["Percentage", "Fixed", "Per Unit"] = "Percentage"
    cess_value: Decimal = Field(default=Decimal("0"), ge=0)


class AdditionalChargeIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    gst_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    is_tax_inclusive: bool = False


class TcsInfoIn(BaseModel):
    percentage: Decimal = Field(ge=0, le=100)
    basis: Literal["taxableAmount", "finalAmount"] = "finalAmount"


class TotalsIn(BaseModel):
    """Body of the totals preview; same money fields a billing document carries."""
    items: List[LineItemIn] = Field(default_factory=list)
    additional_charges: List[AdditionalChargeIn] = Field(default_factory=list)
    tcs_info: Optional[TcsInfoIn] = None

    # accepted but not part of the computed summary
    global_discount_type: Optional[Literal["percentage", "flat"]] = None
    global_discount_value: Decimal = Field(default=Decimal("0"), ge=0)
    round_off: Decimal = Decimal("0")
