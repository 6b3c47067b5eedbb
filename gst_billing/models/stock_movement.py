# FILE: gst_billing/models/stock_movement.py
from __future__ import annotations

import enum

from sqlalchemy import Column, Integer, String, DateTime, Index

from gst_billing.db.base import Base
from gst_billing.models.product import Qty
from gst_billing.utils.timezone import now_utc


class ActivityType(str, enum.Enum):
    ADJUSTMENT = "adjustment"
    INVOICE = "invoice"
    DELIVERY_CHALLAN = "deliveryChallan"


class StockMovement(Base):
    """Append-only ledger row. Never updated or deleted."""
    __tablename__ = "stock_movements"
    __table_args__ = (
        Index("ix_stock_mv_scope_product_time", "owner_id", "business_id",
              "product_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False)
    business_id = Column(String(36), nullable=False)
    product_id = Column(String(36), nullable=False)

    quantity_change = Column(Qty, nullable=False)  # +IN / -OUT
    final_stock = Column(Qty, nullable=False)
    activity_type = Column(String(30), nullable=False,
                           default=ActivityType.ADJUSTMENT.value)

    reference_id = Column(String(36), nullable=True)
    reference_number = Column(String(100), nullable=True)
    remark = Column(String(1000), nullable=True)
    unit = Column(String(20), nullable=False, default="Nos")

    created_at = Column(DateTime, nullable=False, default=now_utc)
