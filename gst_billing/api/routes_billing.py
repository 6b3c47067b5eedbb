# FILE: gst_billing/api/routes_billing.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from gst_billing.api.deps import current_owner_id
from gst_billing.schemas.billing import TotalsIn
from gst_billing.services.billing_calc import compute_totals_for
from gst_billing.utils.resp import ok

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.post("/totals")
def preview_totals(payload: TotalsIn, owner_id: str = Depends(current_owner_id)):
    """Totals for an unsaved document (what the editor shows while typing)."""
    return ok(compute_totals_for(payload))
