# FILE: gst_billing/utils/timezone.py
from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Returns a *naive* datetime representing UTC time.
    DateTime columns are naive, so the tzinfo is dropped after conversion.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
