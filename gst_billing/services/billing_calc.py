# FILE: gst_billing/services/billing_calc.py
"""
Line, charge and document totals for GST billing documents.

Everything here is pure: no session, no persisted state. Totals are derived
from the raw line items on every read and are never stored.

Rounding order matters for matching printed documents: each line and charge
is money-rounded on its own, and the summary is the sum of those rounded
parts (never a re-rounding of raw sums).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from gst_billing.schemas.billing import AdditionalChargeIn, LineItemIn, TcsInfoIn
from gst_billing.services.billing_math import (
    D,
    ZERO,
    money2,
    percent_of,
    split_tax,
)


@dataclass(frozen=True)
class LineTotals:
    base_amount: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    gst_percent: Decimal
    gst_amount: Decimal
    line_total: Decimal
    # display only, not part of line_total or the summary
    cess_amount: Decimal = ZERO


@dataclass(frozen=True)
class ChargeTotals:
    taxable_amount: Decimal
    gst_percent: Decimal
    gst_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class TotalsSummary:
    total_item_base: Decimal
    total_item_discount: Decimal
    total_item_taxable: Decimal
    total_item_gst: Decimal
    total_item_amount: Decimal
    total_charge_taxable: Decimal
    total_charge_gst: Decimal
    total_charge_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    tcs_amount: Decimal
    grand_total: Decimal
    table_total: Decimal
    total_quantity: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    items: List[LineTotals] = field(default_factory=list)
    additional_charges: List[ChargeTotals] = field(default_factory=list)
    summary: Optional[TotalsSummary] = None


def line_discount(item: LineItemIn, base_amount: Decimal) -> Decimal:
    if item.discount_type == "percentage":
        pct = item.discount_percent or item.discount_value
        discount = percent_of(base_amount, pct)
    elif item.discount_type == "flat":
        discount = D(item.discount_value)
    else:
        discount = ZERO
    # cannot discount below zero
    return min(discount, base_amount)


def _rounded_parts(gross, taxable_amount, gst_amount, tax_inclusive):
    """
    Rounded (taxable, gst). Inclusive amounts keep the gross exact: gst is
    the rounded gross less the rounded net, so taxable + gst == gross.
    """
    taxable = money2(taxable_amount)
    if tax_inclusive:
        return taxable, money2(gross) - taxable
    return taxable, money2(gst_amount)


def calculate_line_cess(item: LineItemIn, taxable_amount) -> Decimal:
    """Percentage: % of taxable. Fixed / Per Unit: rupees per quantity."""
    if item.cess_type == "Percentage":
        return money2(percent_of(taxable_amount, item.cess_value))
    return money2(D(item.cess_value) * D(item.quantity))


def calculate_line_item_totals(item: LineItemIn) -> LineTotals:
    raw_base = D(item.quantity) * D(item.unit_price)
    base_amount = money2(raw_base)
    discount_amount = money2(line_discount(item, raw_base))

    gross = base_amount - discount_amount
    taxable_amount, gst_amount = split_tax(gross, item.gst_percent, item.tax_inclusive)
    taxable, gst = _rounded_parts(gross, taxable_amount, gst_amount, item.tax_inclusive)

    return LineTotals(
        base_amount=base_amount,
        discount_amount=discount_amount,
        taxable_amount=taxable,
        gst_percent=D(item.gst_percent),
        gst_amount=gst,
        line_total=taxable + gst,
        cess_amount=calculate_line_cess(item, taxable_amount),
    )


def calculate_additional_charge_totals(charge: AdditionalChargeIn) -> ChargeTotals:
    taxable_amount, gst_amount = split_tax(
        charge.amount,
        charge.gst_percent,
        charge.is_tax_inclusive,
    )
    taxable, gst = _rounded_parts(charge.amount, taxable_amount, gst_amount,
                                  charge.is_tax_inclusive)
    return ChargeTotals(
        taxable_amount=taxable,
        gst_percent=D(charge.gst_percent),
        gst_amount=gst,
        total=taxable + gst,
    )


def calculate_tcs(tcs: Optional[TcsInfoIn], taxable_amount: Decimal,
                  tax_amount: Decimal) -> Decimal:
    if tcs is None:
        return ZERO
    if tcs.basis == "taxableAmount":
        base = taxable_amount
    else:
        base = taxable_amount + tax_amount
    return money2(percent_of(base, tcs.percentage))


def compute_document_totals(
    items: Iterable[LineItemIn],
    additional_charges: Iterable[AdditionalChargeIn] = (),
    tcs: Optional[TcsInfoIn] = None,
) -> DocumentTotals:
    """
    Aggregates line and charge totals into a document summary.

    grand_total = taxable_amount + tax_amount + tcs_amount. Line cess,
    global discount and round-off are carried on the document but are not
    part of this summary.
    """
    line_totals: List[LineTotals] = []
    total_item_base = ZERO
    total_item_discount = ZERO
    total_item_taxable = ZERO
    total_item_gst = ZERO
    total_item_amount = ZERO
    total_quantity = ZERO

    for item in items:
        t = calculate_line_item_totals(item)
        line_totals.append(t)
        total_item_base += t.base_amount
        total_item_discount += t.discount_amount
        total_item_taxable += t.taxable_amount
        total_item_gst += t.gst_amount
        total_item_amount += t.line_total
        total_quantity += D(item.quantity)

    charge_totals: List[ChargeTotals] = []
    total_charge_taxable = ZERO
    total_charge_gst = ZERO
    total_charge_amount = ZERO

    for charge in additional_charges:
        t = calculate_additional_charge_totals(charge)
        charge_totals.append(t)
        total_charge_taxable += t.taxable_amount
        total_charge_gst += t.gst_amount
        total_charge_amount += t.total

    taxable_amount = money2(total_item_taxable + total_charge_taxable)
    tax_amount = money2(total_item_gst + total_charge_gst)
    tcs_amount = calculate_tcs(tcs, taxable_amount, tax_amount)

    summary = TotalsSummary(
        total_item_base=money2(total_item_base),
        total_item_discount=money2(total_item_discount),
        total_item_taxable=money2(total_item_taxable),
        total_item_gst=money2(total_item_gst),
        total_item_amount=money2(total_item_amount),
        total_charge_taxable=money2(total_charge_taxable),
        total_charge_gst=money2(total_charge_gst),
        total_charge_amount=money2(total_charge_amount),
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        tcs_amount=tcs_amount,
        grand_total=money2(taxable_amount + tax_amount + tcs_amount),
        table_total=money2(total_item_amount + total_charge_amount),
        total_quantity=total_quantity,
    )
    return DocumentTotals(
        items=line_totals,
        additional_charges=charge_totals,
        summary=summary,
    )


def compute_totals_for(payload) -> DocumentTotals:
    """Totals for anything shaped like TotalsIn (preview bodies, stored documents)."""
    return compute_document_totals(
        payload.items,
        payload.additional_charges,
        payload.tcs_info,
    )
