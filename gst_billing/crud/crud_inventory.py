# FILE: gst_billing/crud/crud_inventory.py
from __future__ import annotations

import base64
import json
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from gst_billing.models.product import Product
from gst_billing.models.stock_movement import StockMovement


class InvalidCursor(ValueError):
    pass


# ---------------------------------------------------------------
# Products
# ---------------------------------------------------------------
def create_product(db: Session, owner_id: str, business_id: str, **fields) -> Product:
    obj = Product(owner_id=owner_id, business_id=business_id, **fields)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def get_product(db: Session, owner_id: str, business_id: str,
                product_id: str) -> Optional[Product]:
    return (db.query(Product).filter(
        Product.owner_id == owner_id,
        Product.business_id == business_id,
        Product.id == product_id,
    ).first())


def list_products(db: Session, owner_id: str, business_id: str) -> List[Product]:
    return (db.query(Product).filter(
        Product.owner_id == owner_id,
        Product.business_id == business_id,
    ).order_by(Product.name.asc()).all())


def set_product_stock(db: Session, product: Product, new_stock: Decimal) -> Product:
    """Flushes only; the stock ledger commits stock + movement together."""
    product.current_stock = new_stock
    db.add(product)
    db.flush()
    return product


# ---------------------------------------------------------------
# Stock movements (append-only)
# ---------------------------------------------------------------
def append_stock_movement(db: Session, owner_id: str, business_id: str,
                          **fields) -> StockMovement:
    mv = StockMovement(owner_id=owner_id, business_id=business_id, **fields)
    db.add(mv)
    db.flush()
    return mv


def encode_cursor(mv: StockMovement) -> str:
    raw = json.dumps({"t": mv.created_at.isoformat(), "id": mv.id})
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(token: str) -> Tuple[datetime, int]:
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        return datetime.fromisoformat(raw["t"]), int(raw["id"])
    except (ValueError, KeyError, TypeError) as e:
        raise InvalidCursor("Invalid nextToken") from e


def list_stock_movements(
    db: Session,
    owner_id: str,
    business_id: str,
    product_id: str,
    *,
    limit: int,
    next_token: Optional[str] = None,
) -> Tuple[List[StockMovement], Optional[str]]:
    """Newest first. Returns (page, next_token or None)."""
    q = db.query(StockMovement).filter(
        StockMovement.owner_id == owner_id,
        StockMovement.business_id == business_id,
        StockMovement.product_id == product_id,
    )
    if next_token:
        ts, last_id = decode_cursor(next_token)
        q = q.filter(
            or_(
                StockMovement.created_at < ts,
                and_(StockMovement.created_at == ts, StockMovement.id < last_id),
            ))

    rows = (q.order_by(
        StockMovement.created_at.desc(),
        StockMovement.id.desc(),
    ).limit(limit + 1).all())

    page = rows[:limit]
    token = encode_cursor(page[-1]) if len(rows) > limit else None
    return page, token
