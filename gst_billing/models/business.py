# FILE: gst_billing/models/business.py
from __future__ import annotations

import uuid

from sqlalchemy import Column, String, DateTime, JSON, Index

from gst_billing.db.base import Base
from gst_billing.utils.timezone import now_utc


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = (Index("ix_businesses_owner", "owner_id"), )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(64), nullable=False)
    name = Column(String(255), nullable=False)
    gstin = Column(String(15), nullable=True)
    state_code = Column(String(2), nullable=True)

    # raw {reduceStockOn, stockValueBasedOn, allowNegativeStock}; normalized on read
    inventory_settings = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=now_utc)
    updated_at = Column(DateTime, nullable=False, default=now_utc, onupdate=now_utc)
