# gst_billing/api/router.py
from fastapi import APIRouter
from gst_billing.api import (
    routes_business,
    routes_inventory,
    routes_billing,
    routes_documents,
)

api_router = APIRouter()

api_router.include_router(routes_business.router)
api_router.include_router(routes_inventory.router)
api_router.include_router(routes_billing.router)
for _r in routes_documents.routers:
    api_router.include_router(_r)
