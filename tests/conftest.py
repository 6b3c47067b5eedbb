import os

# must be set before gst_billing.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gst_billing import models  # noqa: F401
from gst_billing.api.deps import get_db
from gst_billing.core.config import settings
from gst_billing.crud import crud_business, crud_inventory
from gst_billing.db.base import Base
from gst_billing.main import app

OWNER_ID = "user-1"


def get_auth_headers(owner_id: str = OWNER_ID) -> dict[str, str]:
    token = jwt.encode({"sub": owner_id}, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def business(db):
    return crud_business.create_business(db, OWNER_ID, name="Acme Traders",
                                         gstin="27abcde1234f1z5")


@pytest.fixture()
def make_product(db, business):
    def _make(current_stock=0, maintain_stock=True, **fields):
        fields.setdefault("name", "Widget")
        fields.setdefault("purchase_price", 50)
        fields.setdefault("sales_price", 80)
        return crud_inventory.create_product(
            db,
            OWNER_ID,
            business.id,
            maintain_stock=maintain_stock,
            current_stock=current_stock,
            **fields,
        )

    return _make
