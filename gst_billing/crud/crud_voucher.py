# FILE: gst_billing/crud/crud_voucher.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gst_billing.models.voucher_index import VoucherIndex


def insert_voucher_if_absent(
    db: Session,
    *,
    owner_id: str,
    business_id: str,
    doc_type: str,
    voucher_number: str,
    claimed_at: datetime,
    document_id: Optional[str] = None,
) -> bool:
    """
    Atomic conditional insert backed by the composite primary key.
    Returns False when the key already exists; the claim is committed otherwise.
    """
    stmt = insert(VoucherIndex).values(
        owner_id=owner_id,
        business_id=business_id,
        doc_type=doc_type,
        voucher_number=voucher_number,
        document_id=document_id,
        claimed_at=claimed_at,
    )
    try:
        db.execute(stmt)
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def get_voucher(db: Session, owner_id: str, business_id: str, doc_type: str,
                voucher_number: str) -> Optional[VoucherIndex]:
    return db.get(VoucherIndex, (owner_id, business_id, doc_type, voucher_number))


def delete_voucher(db: Session, owner_id: str, business_id: str, doc_type: str,
                   voucher_number: str) -> None:
    """Idempotent: deleting an absent key is not an error."""
    db.execute(
        delete(VoucherIndex).where(
            VoucherIndex.owner_id == owner_id,
            VoucherIndex.business_id == business_id,
            VoucherIndex.doc_type == doc_type,
            VoucherIndex.voucher_number == voucher_number,
        ))
    db.commit()
