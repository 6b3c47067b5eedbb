# FILE: gst_billing/api/routes_business.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gst_billing.api.deps import current_owner_id, get_db, require_business
from gst_billing.crud import crud_business
from gst_billing.models.business import Business
from gst_billing.schemas.inventory import BusinessCreate, BusinessOut
from gst_billing.utils.resp import ok

router = APIRouter(prefix="/business", tags=["Business"])


@router.post("")
def create_business(
    payload: BusinessCreate,
    owner_id: str = Depends(current_owner_id),
    db: Session = Depends(get_db),
):
    business = crud_business.create_business(
        db,
        owner_id,
        name=payload.name,
        gstin=payload.gstin,
        state_code=payload.state_code,
    )
    return ok(BusinessOut.model_validate(business), status_code=201)


@router.get("")
def list_businesses(
    owner_id: str = Depends(current_owner_id),
    db: Session = Depends(get_db),
):
    rows = crud_business.list_businesses(db, owner_id)
    return ok([BusinessOut.model_validate(b) for b in rows])


@router.get("/{business_id}")
def get_business(business: Business = Depends(require_business)):
    return ok(BusinessOut.model_validate(business))
