# gst_billing/api/deps.py
from __future__ import annotations

from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException, Path
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from gst_billing.core.config import settings
from gst_billing.crud import crud_business
from gst_billing.db.session import SessionLocal
from gst_billing.models.business import Business


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_token(raw_token: str) -> dict:
    try:
        return jwt.decode(raw_token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


def current_owner_id(authorization: Optional[str] = Header(default=None)) -> str:
    """Owner (user) id from the `sub` claim of the bearer token."""
    raw = _extract_bearer(authorization)
    if not raw:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload = _decode_token(raw)
    sub = payload.get("sub") or payload.get("userId")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token")
    return str(sub)


def require_business(
    business_id: str = Path(...),
    owner_id: str = Depends(current_owner_id),
    db: Session = Depends(get_db),
) -> Business:
    business = crud_business.get_business(db, owner_id, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")
    return business
