# FILE: gst_billing/services/voucher_index.py
"""
Voucher number uniqueness per (owner, business, document type).

Claim before the document is written; the caller owns the compensating
release if its own write fails:

    claim_voucher_number(...)
    try:
        write document
    except Exception:
        release_voucher_number(...)
        raise
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from gst_billing.crud import crud_voucher
from gst_billing.models.document import DocType
from gst_billing.utils.timezone import now_utc

logger = logging.getLogger(__name__)


# ============================================================
# Errors
# ============================================================
class VoucherError(RuntimeError):
    code = "VOUCHER_ERROR"


class VoucherNumberRequired(VoucherError):
    code = "VOUCHER_NUMBER_REQUIRED"

    def __init__(self, message: str = "Voucher number is required"):
        super().__init__(message)


class VoucherNumberTaken(VoucherError):
    code = "VOUCHER_NUMBER_TAKEN"

    def __init__(self, voucher_number: str, doc_type: str):
        super().__init__("Voucher number already in use")
        self.voucher_number = voucher_number
        self.doc_type = doc_type


def _doc_type(doc_type) -> str:
    return doc_type.value if isinstance(doc_type, DocType) else str(doc_type)


def normalize_voucher_number(voucher_number) -> str:
    # trimmed, case-sensitive
    if not isinstance(voucher_number, str):
        return ""
    return voucher_number.strip()


def claim_voucher_number(
    db: Session,
    owner_id: str,
    business_id: str,
    doc_type: DocType | str,
    voucher_number: str,
    document_id: Optional[str] = None,
) -> str:
    """Returns the normalized number that is now held."""
    normalized = normalize_voucher_number(voucher_number)
    if not normalized:
        raise VoucherNumberRequired()

    claimed = crud_voucher.insert_voucher_if_absent(
        db,
        owner_id=owner_id,
        business_id=business_id,
        doc_type=_doc_type(doc_type),
        voucher_number=normalized,
        document_id=document_id,
        claimed_at=now_utc(),
    )
    if not claimed:
        raise VoucherNumberTaken(normalized, _doc_type(doc_type))
    return normalized


def release_voucher_number(
    db: Session,
    owner_id: str,
    business_id: str,
    doc_type: DocType | str,
    voucher_number: str,
) -> None:
    crud_voucher.delete_voucher(
        db,
        owner_id,
        business_id,
        _doc_type(doc_type),
        normalize_voucher_number(voucher_number),
    )


def update_voucher_number(
    db: Session,
    owner_id: str,
    business_id: str,
    doc_type: DocType | str,
    old_number: str,
    new_number: str,
    document_id: Optional[str] = None,
) -> str:
    """
    Claim the new number first so a collision leaves the old claim untouched,
    then release the old one (best effort). For a short window both numbers
    are held by the same document.
    """
    old_norm = normalize_voucher_number(old_number)
    new_norm = normalize_voucher_number(new_number)
    if old_norm == new_norm:
        return new_norm

    claim_voucher_number(db, owner_id, business_id, doc_type, new_norm, document_id)
    try:
        release_voucher_number(db, owner_id, business_id, doc_type, old_norm)
    except Exception:
        logger.exception("release of old voucher number failed doc_type=%s number=%s",
                         _doc_type(doc_type), old_norm)
    return new_norm
