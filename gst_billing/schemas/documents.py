# FILE: gst_billing/schemas/documents.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from gst_billing.schemas.billing import AdditionalChargeIn, LineItemIn, TcsInfoIn, TotalsIn

DocStatusLit = Literal["draft", "saved", "cancelled"]


class DocumentCreate(TotalsIn):
    # doc-specific extras (transport details, bank info ...) are kept as-is
    model_config = ConfigDict(extra="allow")

    voucher_number: str = Field(min_length=1, max_length=100)
    status: DocStatusLit = "saved"
    document_date: Optional[date] = None
    due_date: Optional[date] = None

    party_id: Optional[str] = None
    party_name: Optional[str] = None
    party_gstin: Optional[str] = None
    place_of_supply: Optional[str] = None
    notes: Optional[str] = None

    # payment receipts
    amount_received: Optional[Decimal] = Field(default=None, ge=0)
    payment_mode: Optional[str] = None
    invoice_ids: List[str] = Field(default_factory=list)


class DocumentUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    voucher_number: Optional[str] = Field(default=None, min_length=1, max_length=100)
    status: Optional[DocStatusLit] = None
    document_date: Optional[date] = None
    due_date: Optional[date] = None

    party_id: Optional[str] = None
    party_name: Optional[str] = None
    party_gstin: Optional[str] = None
    place_of_supply: Optional[str] = None
    notes: Optional[str] = None

    items: Optional[List[LineItemIn]] = None
    additional_charges: Optional[List[AdditionalChargeIn]] = None
    tcs_info: Optional[TcsInfoIn] = None
    global_discount_type: Optional[Literal["percentage", "flat"]] = None
    global_discount_value: Optional[Decimal] = Field(default=None, ge=0)
    round_off: Optional[Decimal] = None

    amount_received: Optional[Decimal] = Field(default=None, ge=0)
    payment_mode: Optional[str] = None
    invoice_ids: Optional[List[str]] = None


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    doc_type: str
    voucher_number: str
    status: str
    data: Dict[str, Any]
    totals: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
