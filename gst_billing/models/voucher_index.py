# FILE: gst_billing/models/voucher_index.py
from __future__ import annotations

from sqlalchemy import Column, String, DateTime

from gst_billing.db.base import Base
from gst_billing.utils.timezone import now_utc


class VoucherIndex(Base):
    """
    Uniqueness lock for human-facing document numbers.
    The composite primary key is what makes a claim an atomic insert-if-absent.
    """
    __tablename__ = "voucher_index"

    owner_id = Column(String(64), primary_key=True)
    business_id = Column(String(36), primary_key=True)
    doc_type = Column(String(30), primary_key=True)
    voucher_number = Column(String(100), primary_key=True)  # normalized

    document_id = Column(String(36), nullable=True)
    claimed_at = Column(DateTime, nullable=False, default=now_utc)
