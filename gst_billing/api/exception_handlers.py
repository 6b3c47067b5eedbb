# FILE: gst_billing/api/exception_handlers.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gst_billing.crud.crud_inventory import InvalidCursor
from gst_billing.services.documents import DocumentError, DocumentLocked, DocumentNotFound
from gst_billing.services.inventory import (
    InsufficientStock,
    InventoryError,
    ProductNotFound,
)
from gst_billing.services.voucher_index import VoucherError, VoucherNumberTaken
from gst_billing.utils.resp import err

logger = logging.getLogger(__name__)


def _inventory_status(exc: InventoryError) -> int:
    if isinstance(exc, ProductNotFound):
        return 404
    return 400


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # exc.detail can be str/dict/list
        msg = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return err(msg=msg, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # ctx may hold the raised ValueError itself
        errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
        first = errors[0].get("msg") if errors else "Validation error"
        return err(msg=first, status_code=422, code="VALIDATION_FAILED",
                   details={"errors": errors})

    @app.exception_handler(InventoryError)
    async def inventory_exception_handler(request: Request, exc: InventoryError) -> JSONResponse:
        details = None
        if isinstance(exc, InsufficientStock):
            details = {
                "product_id": exc.product_id,
                "current_stock": exc.current_stock,
                "requested_change": exc.requested_change,
            }
        return err(msg=str(exc), status_code=_inventory_status(exc), code=exc.code,
                   details=details)

    @app.exception_handler(VoucherError)
    async def voucher_exception_handler(request: Request, exc: VoucherError) -> JSONResponse:
        if isinstance(exc, VoucherNumberTaken):
            return err(msg=str(exc), status_code=409, code=exc.code,
                       details={"field": "voucher_number"})
        return err(msg=str(exc), status_code=400, code=exc.code)

    @app.exception_handler(DocumentError)
    async def document_exception_handler(request: Request, exc: DocumentError) -> JSONResponse:
        status_code = 400
        if isinstance(exc, DocumentNotFound):
            status_code = 404
        elif isinstance(exc, DocumentLocked):
            status_code = 403
        return err(msg=str(exc), status_code=status_code, code=exc.code)

    @app.exception_handler(InvalidCursor)
    async def cursor_exception_handler(request: Request, exc: InvalidCursor) -> JSONResponse:
        return err(msg=str(exc), status_code=400, code="INVALID_QUERY")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return err(msg="Internal server error", status_code=500)
