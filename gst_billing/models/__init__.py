# gst_billing/models/__init__.py
from .business import Business
from .product import Product
from .stock_movement import StockMovement, ActivityType
from .voucher_index import VoucherIndex
from .document import BillingDocument, DocType, DocStatus

__all__ = [
    "Business",
    "Product",
    "StockMovement",
    "ActivityType",
    "VoucherIndex",
    "BillingDocument",
    "DocType",
    "DocStatus",
]
