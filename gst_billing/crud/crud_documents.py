# FILE: gst_billing/crud/crud_documents.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from gst_billing.models.document import BillingDocument


def create_document(db: Session, *, document_id: str, owner_id: str,
                    business_id: str, doc_type: str, voucher_number: str,
                    status: str, data: Dict[str, Any]) -> BillingDocument:
    doc = BillingDocument(
        id=document_id,
        owner_id=owner_id,
        business_id=business_id,
        doc_type=doc_type,
        voucher_number=voucher_number,
        status=status,
        data=data,
    )
    db.add(doc)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(doc)
    return doc


def get_document(db: Session, owner_id: str, business_id: str, doc_type: str,
                 document_id: str) -> Optional[BillingDocument]:
    return (db.query(BillingDocument).filter(
        BillingDocument.owner_id == owner_id,
        BillingDocument.business_id == business_id,
        BillingDocument.doc_type == doc_type,
        BillingDocument.id == document_id,
    ).first())


def list_documents(db: Session, owner_id: str, business_id: str, doc_type: str,
                   *, status: Optional[str] = None, limit: int = 100,
                   offset: int = 0) -> List[BillingDocument]:
    q = db.query(BillingDocument).filter(
        BillingDocument.owner_id == owner_id,
        BillingDocument.business_id == business_id,
        BillingDocument.doc_type == doc_type,
    )
    if status:
        q = q.filter(BillingDocument.status == status)
    return (q.order_by(BillingDocument.created_at.desc(),
                       BillingDocument.id.asc()).offset(offset).limit(limit).all())


def update_document(db: Session, doc: BillingDocument, *, voucher_number: str,
                    status: str, data: Dict[str, Any]) -> BillingDocument:
    doc.voucher_number = voucher_number
    doc.status = status
    # JSON column: new dict so the change is tracked
    doc.data = dict(data)
    db.add(doc)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(doc)
    return doc


def delete_document(db: Session, doc: BillingDocument) -> None:
    db.delete(doc)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
