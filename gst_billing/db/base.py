# gst_billing/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """All billing tables (businesses, products, ledger, documents) inherit from this."""
    pass
