# gst_billing/services/billing_math.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


def D(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    try:
        return Decimal(str(x or 0))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO


def money2(x) -> Decimal:
    return D(x).quantize(_CENT, rounding=ROUND_HALF_UP)


def percent_of(amount, percent) -> Decimal:
    return D(amount) * D(percent) / HUNDRED


def split_tax(amount, gst_percent, tax_inclusive: bool) -> tuple[Decimal, Decimal]:
    """
    Returns (taxable, gst) for an amount.
    Inclusive amounts are back-calculated: taxable = amount / (1 + gst/100).
    """
    amount = D(amount)
    gst_percent = D(gst_percent)
    if tax_inclusive and gst_percent > 0:
        net = amount / (1 + gst_percent / HUNDRED)
        return net, amount - net
    return amount, percent_of(amount, gst_percent)
