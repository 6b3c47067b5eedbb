# FILE: gst_billing/services/inventory.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from gst_billing.core.config import settings as app_settings
from gst_billing.crud import crud_business, crud_inventory
from gst_billing.models.product import Product
from gst_billing.models.stock_movement import ActivityType, StockMovement
from gst_billing.services.billing_math import D, ZERO, money2

logger = logging.getLogger(__name__)

REVERSAL_REMARK = "Reversal"


# ============================================================
# Errors
# ============================================================
class InventoryError(RuntimeError):
    code = "INVENTORY_ERROR"


class ProductNotFound(InventoryError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        super().__init__("Product not found")
        self.product_id = product_id


class StockNotTracked(InventoryError):
    code = "STOCK_NOT_TRACKED"

    def __init__(self, product_id: str):
        super().__init__("Stock tracking is not enabled for this product")
        self.product_id = product_id


class InsufficientStock(InventoryError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, current_stock: Decimal,
                 requested_change: Decimal, unit: str):
        super().__init__(
            f"Insufficient stock. Current: {current_stock} {unit}, "
            f"requested change: {requested_change}. Enable \"Allow negative stock\" "
            f"in Inventory Settings to permit overselling.")
        self.product_id = product_id
        self.current_stock = current_stock
        self.requested_change = requested_change


# ============================================================
# Settings
# ============================================================
@dataclass(frozen=True)
class InventorySettings:
    reduce_stock_on: str = ActivityType.INVOICE.value
    stock_value_based_on: str = "purchase"
    allow_negative_stock: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


DEFAULT_INVENTORY_SETTINGS = InventorySettings()


def normalize_inventory_settings(raw: Optional[Mapping[str, Any]]) -> InventorySettings:
    """Unknown or missing values fall back to the defaults."""
    if not isinstance(raw, Mapping):
        return DEFAULT_INVENTORY_SETTINGS
    reduce_on = raw.get("reduce_stock_on", raw.get("reduceStockOn"))
    value_on = raw.get("stock_value_based_on", raw.get("stockValueBasedOn"))
    allow_neg = raw.get("allow_negative_stock", raw.get("allowNegativeStock"))
    return InventorySettings(
        reduce_stock_on=(ActivityType.DELIVERY_CHALLAN.value
                         if reduce_on == ActivityType.DELIVERY_CHALLAN.value else
                         ActivityType.INVOICE.value),
        stock_value_based_on="sale" if value_on == "sale" else "purchase",
        allow_negative_stock=bool(allow_neg),
    )


def get_business_inventory_settings(db: Session, owner_id: str,
                                    business_id: str) -> InventorySettings:
    business = crud_business.get_business(db, owner_id, business_id)
    return normalize_inventory_settings(
        business.inventory_settings if business else None)


def compute_stock_value(product: Product, settings: InventorySettings) -> Decimal:
    qty = D(product.current_stock)
    if settings.stock_value_based_on == "sale":
        price = D(product.sales_price)
    else:
        price = D(product.purchase_price)
    return money2(qty * price)


# ============================================================
# Stock ledger
# ============================================================
def apply_stock_change(
    db: Session,
    owner_id: str,
    business_id: str,
    product_id: str,
    quantity_change,
    *,
    activity_type: ActivityType | str = ActivityType.ADJUSTMENT,
    reference_id: Optional[str] = None,
    reference_number: Optional[str] = None,
    remark: Optional[str] = None,
    settings: Optional[InventorySettings] = None,
) -> Tuple[Product, StockMovement]:
    """
    The only writer of Product.current_stock.

    Product stock and the movement row are committed together. When
    `settings` is None the business settings are read for this call.
    """
    product = crud_inventory.get_product(db, owner_id, business_id, product_id)
    if product is None:
        raise ProductNotFound(product_id)
    if not product.maintain_stock:
        raise StockNotTracked(product_id)

    if settings is None:
        settings = get_business_inventory_settings(db, owner_id, business_id)

    change = D(quantity_change)
    current = D(product.current_stock)
    new_stock = current + change
    unit = product.unit or app_settings.DEFAULT_STOCK_UNIT

    if not settings.allow_negative_stock and new_stock < 0:
        raise InsufficientStock(product_id, current, change, unit)

    try:
        crud_inventory.set_product_stock(db, product, new_stock)
        movement = crud_inventory.append_stock_movement(
            db,
            owner_id,
            business_id,
            product_id=product_id,
            quantity_change=change,
            final_stock=new_stock,
            activity_type=(activity_type.value if isinstance(activity_type, ActivityType)
                           else activity_type),
            reference_id=reference_id,
            reference_number=reference_number,
            remark=remark or None,
            unit=unit,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    db.refresh(movement)
    logger.info("stock change product=%s change=%s final=%s activity=%s ref=%s",
                product_id, change, new_stock, movement.activity_type, reference_id)
    return product, movement


# ============================================================
# Document deductions (forward pass / reverse pass)
# ============================================================
def _item_field(item, *names):
    for name in names:
        value = item.get(name) if isinstance(item, Mapping) else getattr(item, name, None)
        if value is not None:
            return value
    return None


def stock_lines(items: Iterable[Any]) -> List[Tuple[str, Decimal]]:
    """(product_id, quantity) for lines that can move stock."""
    lines: List[Tuple[str, Decimal]] = []
    for item in items or []:
        product_id = _item_field(item, "item_id", "itemId")
        qty = D(_item_field(item, "quantity"))
        if not product_id or qty <= 0:
            continue
        lines.append((str(product_id), qty))
    return lines


def apply_document_stock_deductions(
    db: Session,
    doc,
    activity_type: ActivityType | str,
    settings: Optional[InventorySettings] = None,
) -> None:
    """
    Deduct every line of `doc` from stock. If any line fails, every line
    already deducted is added back (tagged "Reversal") and the original
    error is re-raised. No partially applied document is ever left behind.
    """
    activity = ActivityType(activity_type)
    if settings is None:
        settings = get_business_inventory_settings(db, doc.owner_id, doc.business_id)
    if settings.reduce_stock_on != activity.value:
        return

    applied: List[Tuple[str, Decimal]] = []
    for product_id, qty in stock_lines(doc.items):
        try:
            apply_stock_change(
                db,
                doc.owner_id,
                doc.business_id,
                product_id,
                -qty,
                activity_type=activity,
                reference_id=doc.id,
                reference_number=doc.voucher_number,
                settings=settings,
            )
        except Exception:
            logger.warning("stock deduction failed doc=%s product=%s; reversing %d line(s)",
                           doc.id, product_id, len(applied))
            _add_back(db, doc, activity, applied, settings)
            raise
        applied.append((product_id, qty))


def reverse_document_stock_deductions(
    db: Session,
    doc,
    activity_type: ActivityType | str,
    settings: Optional[InventorySettings] = None,
) -> None:
    """Adds back every line of a deleted document. Never raises."""
    activity = ActivityType(activity_type)
    try:
        if settings is None:
            settings = get_business_inventory_settings(db, doc.owner_id, doc.business_id)
    except Exception:
        logger.exception("inventory settings unavailable, stock not reversed doc=%s", doc.id)
        return
    if settings.reduce_stock_on != activity.value:
        return
    _add_back(db, doc, activity, stock_lines(doc.items), settings)


def _add_back(db: Session, doc, activity: ActivityType,
              lines: Iterable[Tuple[str, Decimal]],
              settings: InventorySettings) -> None:
    for product_id, qty in lines:
        try:
            apply_stock_change(
                db,
                doc.owner_id,
                doc.business_id,
                product_id,
                qty,
                activity_type=activity,
                reference_id=doc.id,
                reference_number=doc.voucher_number,
                remark=REVERSAL_REMARK,
                settings=settings,
            )
        except Exception:
            # left for ledger reconciliation
            logger.exception("stock reversal failed doc=%s product=%s qty=%s",
                             doc.id, product_id, qty)
