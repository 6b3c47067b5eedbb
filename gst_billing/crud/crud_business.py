# FILE: gst_billing/crud/crud_business.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from gst_billing.models.business import Business


def create_business(db: Session, owner_id: str, *, name: str,
                    gstin: Optional[str] = None,
                    state_code: Optional[str] = None,
                    inventory_settings: Optional[Dict[str, Any]] = None) -> Business:
    obj = Business(
        owner_id=owner_id,
        name=name.strip(),
        gstin=(gstin or "").strip().upper() or None,
        state_code=state_code,
        inventory_settings=inventory_settings,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def get_business(db: Session, owner_id: str, business_id: str) -> Optional[Business]:
    return (db.query(Business).filter(
        Business.owner_id == owner_id,
        Business.id == business_id,
    ).first())


def list_businesses(db: Session, owner_id: str) -> List[Business]:
    return (db.query(Business).filter(Business.owner_id == owner_id).order_by(
        Business.created_at.asc()).all())


def save_inventory_settings(db: Session, business: Business,
                            values: Dict[str, Any]) -> Business:
    # JSON column: assign a new dict so the change is tracked
    business.inventory_settings = dict(values)
    db.add(business)
    db.commit()
    db.refresh(business)
    return business
