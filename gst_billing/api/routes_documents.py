# FILE: gst_billing/api/routes_documents.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from gst_billing.api.deps import get_db, require_business
from gst_billing.core.config import settings
from gst_billing.models.business import Business
from gst_billing.models.document import BillingDocument, DocType
from gst_billing.schemas.documents import DocStatusLit, DocumentCreate, DocumentOut, DocumentUpdate
from gst_billing.services import documents as doc_service
from gst_billing.utils.resp import ok

# url segment -> document type
DOCUMENT_PATHS = {
    "invoices": DocType.INVOICE,
    "quotations": DocType.QUOTATION,
    "sales-debit-notes": DocType.SALES_DEBIT_NOTE,
    "delivery-challans": DocType.DELIVERY_CHALLAN,
    "payment-receipts": DocType.PAYMENT_RECEIPT,
}


def _document_out(doc: BillingDocument) -> DocumentOut:
    out = DocumentOut.model_validate(doc)
    if doc.doc_type != DocType.PAYMENT_RECEIPT.value:
        totals = doc_service.document_totals(doc)
        out.totals = {
            "items": totals.items,
            "additional_charges": totals.additional_charges,
            "summary": totals.summary,
        }
    return out


def build_document_router(path: str, doc_type: DocType) -> APIRouter:
    router = APIRouter(prefix=f"/business/{{business_id}}/{path}",
                       tags=[f"Documents - {path}"])

    @router.post("")
    def create_document(
        payload: DocumentCreate,
        business: Business = Depends(require_business),
        db: Session = Depends(get_db),
    ):
        doc = doc_service.create_document(db, business.owner_id, business.id, doc_type,
                                          payload)
        return ok(_document_out(doc), status_code=201)

    @router.get("")
    def list_documents(
        status: Optional[DocStatusLit] = Query(None),
        limit: int = Query(settings.DOCUMENT_PAGE_SIZE, ge=1, le=100),
        offset: int = Query(0, ge=0),
        business: Business = Depends(require_business),
        db: Session = Depends(get_db),
    ):
        rows = doc_service.list_documents(db, business.owner_id, business.id, doc_type,
                                          status=status, limit=limit, offset=offset)
        return ok({"documents": [_document_out(d) for d in rows], "count": len(rows)})

    @router.get("/{document_id}")
    def get_document(
        document_id: str,
        business: Business = Depends(require_business),
        db: Session = Depends(get_db),
    ):
        doc = doc_service.get_document(db, business.owner_id, business.id, doc_type,
                                       document_id)
        return ok(_document_out(doc))

    @router.put("/{document_id}")
    def update_document(
        document_id: str,
        payload: DocumentUpdate,
        business: Business = Depends(require_business),
        db: Session = Depends(get_db),
    ):
        doc = doc_service.update_document(db, business.owner_id, business.id, doc_type,
                                          document_id, payload)
        return ok(_document_out(doc))

    @router.delete("/{document_id}", status_code=204)
    def delete_document(
        document_id: str,
        business: Business = Depends(require_business),
        db: Session = Depends(get_db),
    ):
        doc_service.delete_document(db, business.owner_id, business.id, doc_type,
                                    document_id)
        return Response(status_code=204)

    return router


routers = [build_document_router(path, doc_type) for path, doc_type in DOCUMENT_PATHS.items()]
