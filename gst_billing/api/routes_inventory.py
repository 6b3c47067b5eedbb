# FILE: gst_billing/api/routes_inventory.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from gst_billing.api.deps import get_db, require_business
from gst_billing.core.config import settings as app_settings
from gst_billing.crud import crud_business, crud_inventory
from gst_billing.models.business import Business
from gst_billing.models.product import Product
from gst_billing.models.stock_movement import ActivityType
from gst_billing.schemas.inventory import (
    InventorySettingsOut,
    InventorySettingsUpdate,
    ProductCreate,
    ProductOut,
    StockAdjustIn,
    StockMovementOut,
    StockMovementPage,
)
from gst_billing.services.inventory import (
    InventorySettings,
    apply_stock_change,
    compute_stock_value,
    normalize_inventory_settings,
)
from gst_billing.utils.resp import ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/business/{business_id}", tags=["Inventory"])


def _product_out(product: Product, settings: InventorySettings) -> ProductOut:
    out = ProductOut.model_validate(product)
    if product.maintain_stock:
        out.stock_value = compute_stock_value(product, settings)
    return out


def _get_product_or_404(db: Session, business: Business, product_id: str) -> Product:
    product = crud_inventory.get_product(db, business.owner_id, business.id, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# ============================================================
# Products
# ============================================================
@router.post("/products")
def create_product(
    payload: ProductCreate,
    business: Business = Depends(require_business),
    db: Session = Depends(get_db),
):
    fields = payload.model_dump(exclude={"opening_stock"})
    product = crud_inventory.create_product(db, business.owner_id, business.id, **fields)

    if payload.maintain_stock and payload.opening_stock > 0:
        product, _ = apply_stock_change(
            db,
            business.owner_id,
            business.id,
            product.id,
            payload.opening_stock,
            activity_type=ActivityType.ADJUSTMENT,
            remark="Opening stock",
        )

    settings = normalize_inventory_settings(business.inventory_settings)
    return ok(_product_out(product, settings), status_code=201)


@router.get("/products")
def list_products(
    business: Business = Depends(require_business),
    db: Session = Depends(get_db),
):
    settings = normalize_inventory_settings(business.inventory_settings)
    rows = crud_inventory.list_products(db, business.owner_id, business.id)
    return ok([_product_out(p, settings) for p in rows])


@router.get("/products/{product_id}")
def get_product(
    product_id: str,
    business: Business = Depends(require_business),
    db: Session = Depends(get_db),
):
    product = _get_product_or_404(db, business, product_id)
    settings = normalize_inventory_settings(business.inventory_settings)
    return ok(_product_out(product, settings))


# ============================================================
# Stock
# ============================================================
@router.post("/products/{product_id}/stock")
def adjust_stock(
    product_id: str,
    payload: StockAdjustIn,
    business: Business = Depends(require_business),
    db: Session = Depends(get_db),
):
    settings = normalize_inventory_settings(business.inventory_settings)
    product, movement = apply_stock_change(
        db,
        business.owner_id,
        business.id,
        product_id,
        payload.quantity_change,
        activity_type=ActivityType.ADJUSTMENT,
        remark=payload.remark,
        settings=settings,
    )
    return ok({
        "message": "Stock updated successfully",
        "product": _product_out(product, settings),
        "movement": StockMovementOut.model_validate(movement),
    })


@router.get("/products/{product_id}/stock-movements")
def list_stock_movements(
    product_id: str,
    limit: Optional[int] = Query(None),
    next_token: Optional[str] = Query(None),
    business: Business = Depends(require_business),
    db: Session = Depends(get_db),
):
    _get_product_or_404(db, business, product_id)

    if limit is None:
        limit = app_settings.STOCK_MOVEMENT_PAGE_SIZE
    limit = min(max(limit, 1), app_settings.STOCK_MOVEMENT_MAX_PAGE_SIZE)

    rows, token = crud_inventory.list_stock_movements(
        db,
        business.owner_id,
        business.id,
        product_id,
        limit=limit,
        next_token=next_token,
    )
    page = StockMovementPage(
        stock_movements=[StockMovementOut.model_validate(m) for m in rows],
        count=len(rows),
        next_token=token,
    )
    return ok(page)


# ============================================================
# Inventory settings
# ============================================================
@router.get("/settings/inventory")
def get_inventory_settings(business: Business = Depends(require_business)):
    settings = normalize_inventory_settings(business.inventory_settings)
    return ok({"inventory_settings": InventorySettingsOut(**settings.as_dict())})


@router.put("/settings/inventory")
def update_inventory_settings(
    payload: InventorySettingsUpdate,
    business: Business = Depends(require_business),
    db: Session = Depends(get_db),
):
    current = normalize_inventory_settings(business.inventory_settings).as_dict()
    merged = {**current, **payload.model_dump(exclude_unset=True, exclude_none=True)}
    business = crud_business.save_inventory_settings(db, business, merged)
    logger.info("inventory settings updated business=%s %s", business.id, merged)

    settings = normalize_inventory_settings(business.inventory_settings)
    return ok({"inventory_settings": InventorySettingsOut(**settings.as_dict())})
