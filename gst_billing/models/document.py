# FILE: gst_billing/models/document.py
from __future__ import annotations

import enum
import uuid

from sqlalchemy import Column, String, DateTime, JSON, Index

from gst_billing.db.base import Base
from gst_billing.utils.timezone import now_utc


class DocType(str, enum.Enum):
    INVOICE = "INVOICE"
    QUOTATION = "QUOTATION"
    SALES_DEBIT_NOTE = "SALES_DEBIT_NOTE"
    DELIVERY_CHALLAN = "DELIVERY_CHALLAN"
    PAYMENT_RECEIPT = "PAYMENT_RECEIPT"


class DocStatus(str, enum.Enum):
    DRAFT = "draft"
    SAVED = "saved"
    CANCELLED = "cancelled"


class BillingDocument(Base):
    """
    Invoices, quotations, debit notes, challans and receipts share one table.
    Line items live inside `data`; totals are recomputed on every read.
    """
    __tablename__ = "billing_documents"
    __table_args__ = (
        Index("ix_billing_docs_scope_type", "owner_id", "business_id", "doc_type"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(64), nullable=False)
    business_id = Column(String(36), nullable=False)
    doc_type = Column(String(30), nullable=False)
    voucher_number = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default=DocStatus.SAVED.value)

    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=now_utc)
    updated_at = Column(DateTime, nullable=False, default=now_utc, onupdate=now_utc)

    @property
    def items(self) -> list:
        return list((self.data or {}).get("items") or [])
