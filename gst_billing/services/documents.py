# FILE: gst_billing/services/documents.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from gst_billing.crud import crud_documents
from gst_billing.models.document import BillingDocument, DocStatus, DocType
from gst_billing.models.stock_movement import ActivityType
from gst_billing.schemas.billing import TotalsIn
from gst_billing.schemas.documents import DocumentCreate, DocumentUpdate
from gst_billing.services.billing_calc import DocumentTotals, compute_totals_for
from gst_billing.services.inventory import (
    apply_document_stock_deductions,
    reverse_document_stock_deductions,
    stock_lines,
)
from gst_billing.services.voucher_index import (
    claim_voucher_number,
    release_voucher_number,
    update_voucher_number,
)

logger = logging.getLogger(__name__)

# document types whose lines move stock
STOCK_ACTIVITY: Dict[str, ActivityType] = {
    DocType.INVOICE.value: ActivityType.INVOICE,
    DocType.DELIVERY_CHALLAN.value: ActivityType.DELIVERY_CHALLAN,
}

_PAYLOAD_EXCLUDE = {"voucher_number", "status"}


# ============================================================
# Errors
# ============================================================
class DocumentError(RuntimeError):
    code = "DOCUMENT_ERROR"


class DocumentNotFound(DocumentError):
    code = "DOCUMENT_NOT_FOUND"

    def __init__(self, doc_type: str):
        super().__init__(f"{doc_type.replace('_', ' ').title()} not found")
        self.doc_type = doc_type


class DocumentLocked(DocumentError):
    code = "CANCELLED_DOCUMENT_EDIT_FORBIDDEN"

    def __init__(self):
        super().__init__("Cancelled documents cannot be edited")


@dataclass(frozen=True)
class StockView:
    """What the ledger sees of a document: drafts and cancelled documents hold no stock."""
    id: str
    owner_id: str
    business_id: str
    voucher_number: str
    status: str
    items: List[Any] = field(default_factory=list)

    @classmethod
    def of(cls, doc: BillingDocument, *, voucher_number: Optional[str] = None,
           status: Optional[str] = None,
           data: Optional[Dict[str, Any]] = None) -> "StockView":
        status = status or doc.status
        items = list((data if data is not None else doc.data or {}).get("items") or [])
        if status != DocStatus.SAVED.value:
            items = []
        return cls(
            id=doc.id,
            owner_id=doc.owner_id,
            business_id=doc.business_id,
            voucher_number=voucher_number or doc.voucher_number,
            status=status,
            items=items,
        )


def _doc_type(doc_type) -> str:
    return doc_type.value if isinstance(doc_type, DocType) else str(doc_type)


def document_totals(doc: BillingDocument) -> DocumentTotals:
    return compute_totals_for(TotalsIn.model_validate(doc.data or {}))


def get_document(db: Session, owner_id: str, business_id: str, doc_type,
                 document_id: str) -> BillingDocument:
    doc = crud_documents.get_document(db, owner_id, business_id, _doc_type(doc_type),
                                      document_id)
    if doc is None:
        raise DocumentNotFound(_doc_type(doc_type))
    return doc


def list_documents(db: Session, owner_id: str, business_id: str, doc_type, *,
                   status: Optional[str] = None, limit: int = 100,
                   offset: int = 0) -> List[BillingDocument]:
    return crud_documents.list_documents(db, owner_id, business_id, _doc_type(doc_type),
                                         status=status, limit=limit, offset=offset)


def create_document(db: Session, owner_id: str, business_id: str, doc_type,
                    payload: DocumentCreate) -> BillingDocument:
    """claim number -> write document -> deduct stock; each step undone if a later one fails."""
    doc_type = _doc_type(doc_type)
    document_id = str(uuid.uuid4())

    number = claim_voucher_number(db, owner_id, business_id, doc_type,
                                  payload.voucher_number, document_id)
    try:
        doc = crud_documents.create_document(
            db,
            document_id=document_id,
            owner_id=owner_id,
            business_id=business_id,
            doc_type=doc_type,
            voucher_number=number,
            status=payload.status,
            data=payload.model_dump(mode="json", exclude=_PAYLOAD_EXCLUDE),
        )
    except Exception:
        _release_quietly(db, owner_id, business_id, doc_type, number)
        raise

    activity = STOCK_ACTIVITY.get(doc_type)
    if activity is not None:
        try:
            apply_document_stock_deductions(db, StockView.of(doc), activity)
        except Exception:
            _delete_quietly(db, doc)
            _release_quietly(db, owner_id, business_id, doc_type, number)
            raise

    logger.info("created %s %s id=%s", doc_type, number, document_id)
    return doc


def update_document(db: Session, owner_id: str, business_id: str, doc_type,
                    document_id: str, payload: DocumentUpdate) -> BillingDocument:
    doc_type = _doc_type(doc_type)
    doc = get_document(db, owner_id, business_id, doc_type, document_id)
    if doc.status == DocStatus.CANCELLED.value:
        raise DocumentLocked()

    changes = payload.model_dump(mode="json", exclude_unset=True)
    requested_number = changes.pop("voucher_number", None)
    new_status = changes.pop("status", None) or doc.status
    new_data = {**(doc.data or {}), **changes}

    old_number = doc.voucher_number
    new_number = old_number
    if requested_number is not None:
        new_number = update_voucher_number(db, owner_id, business_id, doc_type,
                                           old_number, requested_number, document_id)

    old_view = StockView.of(doc)
    new_view = StockView.of(doc, voucher_number=new_number, status=new_status,
                            data=new_data)
    activity = STOCK_ACTIVITY.get(doc_type)
    resync = (activity is not None
              and stock_lines(old_view.items) != stock_lines(new_view.items))

    try:
        if resync:
            reverse_document_stock_deductions(db, old_view, activity)
            try:
                apply_document_stock_deductions(db, new_view, activity)
            except Exception:
                # put the previous deductions back before surfacing the error
                _reapply_quietly(db, old_view, activity)
                raise
        try:
            doc = crud_documents.update_document(db, doc, voucher_number=new_number,
                                                 status=new_status, data=new_data)
        except Exception:
            if resync:
                reverse_document_stock_deductions(db, new_view, activity)
                _reapply_quietly(db, old_view, activity)
            raise
    except Exception:
        if new_number != old_number:
            _restore_number_quietly(db, owner_id, business_id, doc_type,
                                    new_number, old_number, document_id)
        raise

    return doc


def delete_document(db: Session, owner_id: str, business_id: str, doc_type,
                    document_id: str) -> None:
    """Deletion is never blocked by the voucher index or the ledger."""
    doc_type = _doc_type(doc_type)
    doc = get_document(db, owner_id, business_id, doc_type, document_id)
    view = StockView.of(doc)

    crud_documents.delete_document(db, doc)
    _release_quietly(db, owner_id, business_id, doc_type, view.voucher_number)

    activity = STOCK_ACTIVITY.get(doc_type)
    if activity is not None:
        reverse_document_stock_deductions(db, view, activity)
    logger.info("deleted %s %s id=%s", doc_type, view.voucher_number, document_id)


# ------------------------------------------------------------
# best-effort compensations
# ------------------------------------------------------------
def _release_quietly(db: Session, owner_id: str, business_id: str, doc_type: str,
                     number: str) -> None:
    try:
        release_voucher_number(db, owner_id, business_id, doc_type, number)
    except Exception:
        logger.exception("voucher release failed doc_type=%s number=%s", doc_type, number)


def _delete_quietly(db: Session, doc: BillingDocument) -> None:
    try:
        crud_documents.delete_document(db, doc)
    except Exception:
        logger.exception("could not remove document after failed stock deduction doc=%s",
                         doc.id)


def _reapply_quietly(db: Session, view: StockView, activity: ActivityType) -> None:
    try:
        apply_document_stock_deductions(db, view, activity)
    except Exception:
        logger.exception("could not restore stock deductions doc=%s", view.id)


def _restore_number_quietly(db: Session, owner_id: str, business_id: str,
                            doc_type: str, new_number: str, old_number: str,
                            document_id: str) -> None:
    try:
        update_voucher_number(db, owner_id, business_id, doc_type, new_number,
                              old_number, document_id)
    except Exception:
        logger.exception("could not restore voucher number %s -> %s doc=%s",
                         new_number, old_number, document_id)
