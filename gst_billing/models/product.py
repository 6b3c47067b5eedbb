# FILE: gst_billing/models/product.py
from __future__ import annotations

import uuid

from sqlalchemy import (
    Column, String, Boolean, DateTime, Numeric, Index
)

from gst_billing.db.base import Base
from gst_billing.utils.timezone import now_utc

Money = Numeric(14, 2)
Qty = Numeric(14, 4)


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_owner_business", "owner_id", "business_id"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(64), nullable=False)
    business_id = Column(String(36), nullable=False)

    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, default="product")  # product / service
    hsn_sac = Column(String(20), default="")
    unit = Column(String(20), nullable=False, default="Nos")

    sales_price = Column(Money, nullable=False, default=0)
    purchase_price = Column(Money, nullable=False, default=0)
    gst_percent = Column(Numeric(5, 2), nullable=False, default=0)
    tax_inclusive = Column(Boolean, nullable=False, default=True)

    maintain_stock = Column(Boolean, nullable=False, default=False)
    # written only through services.inventory.apply_stock_change
    current_stock = Column(Qty, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=now_utc)
    updated_at = Column(DateTime, nullable=False, default=now_utc, onupdate=now_utc)
