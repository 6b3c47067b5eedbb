import pytest

from gst_billing.crud import crud_voucher
from gst_billing.models.document import DocType
from gst_billing.services import voucher_index
from gst_billing.services.voucher_index import (
    VoucherNumberRequired,
    VoucherNumberTaken,
    claim_voucher_number,
    normalize_voucher_number,
    release_voucher_number,
    update_voucher_number,
)

from conftest import OWNER_ID

BIZ = "biz-1"


def _held(db, number, doc_type=DocType.INVOICE.value, owner=OWNER_ID, biz=BIZ):
    db.expire_all()
    return crud_voucher.get_voucher(db, owner, biz, doc_type, number) is not None


def test_normalize_trims_only():
    assert normalize_voucher_number("  INV-001 ") == "INV-001"
    assert normalize_voucher_number("inv-001") == "inv-001"
    assert normalize_voucher_number(None) == ""
    assert normalize_voucher_number(42) == ""


def test_claim_then_duplicate_is_taken(db):
    assert claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, " INV-001 ") == "INV-001"
    with pytest.raises(VoucherNumberTaken) as info:
        claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001")
    assert info.value.voucher_number == "INV-001"
    assert info.value.code == "VOUCHER_NUMBER_TAKEN"


def test_session_usable_after_collision(db):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001")
    with pytest.raises(VoucherNumberTaken):
        claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001")
    assert claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-002") == "INV-002"


@pytest.mark.parametrize("number", ["", "   ", None])
def test_claim_requires_number(db, number):
    with pytest.raises(VoucherNumberRequired):
        claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, number)


def test_numbers_are_scoped(db):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "001")
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.QUOTATION, "001")
    claim_voucher_number(db, OWNER_ID, "biz-2", DocType.INVOICE, "001")
    claim_voucher_number(db, "user-2", BIZ, DocType.INVOICE, "001")
    # case-sensitive
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "inv-1")
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-1")


def test_release_allows_reclaim(db):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001", "doc-1")
    release_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001")
    assert not _held(db, "INV-001")
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001", "doc-2")
    assert _held(db, "INV-001")


def test_release_is_idempotent(db):
    release_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "never-claimed")
    release_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "never-claimed")


def test_update_same_number_is_noop(db):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001")
    assert update_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE,
                                 "INV-001", " INV-001 ") == "INV-001"
    assert _held(db, "INV-001")


def test_update_moves_claim(db):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001", "doc-1")
    assert update_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE,
                                 "INV-001", "INV-009", "doc-1") == "INV-009"
    assert _held(db, "INV-009")
    assert not _held(db, "INV-001")


def test_update_collision_keeps_old_claim(db):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001", "doc-1")
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-002", "doc-2")
    with pytest.raises(VoucherNumberTaken):
        update_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001", "INV-002",
                              "doc-1")
    assert _held(db, "INV-001")
    assert crud_voucher.get_voucher(db, OWNER_ID, BIZ, DocType.INVOICE.value,
                                    "INV-002").document_id == "doc-2"


def test_update_release_failure_is_swallowed(db, monkeypatch):
    claim_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE, "INV-001")

    def broken(*a, **kw):
        raise RuntimeError("store down")

    monkeypatch.setattr(voucher_index, "release_voucher_number", broken)
    assert update_voucher_number(db, OWNER_ID, BIZ, DocType.INVOICE,
                                 "INV-001", "INV-002") == "INV-002"
    # both held until reconciliation
    assert _held(db, "INV-001")
    assert _held(db, "INV-002")
