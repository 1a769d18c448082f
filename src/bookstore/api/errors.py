"""
bookstore.api.errors

Exception handlers mapping failures to `{"error": message}` responses.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from bookstore.errors import BookstoreError
from bookstore.observability.logging import get_logger

log = get_logger(__name__)


async def _bookstore_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, BookstoreError)
    if exc.status_code >= 500:
        log.error("request.failed", error=exc.message, kind=type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"error": "; ".join(parts)})


async def _http_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the log; clients only see the generic body.
    log.exception("request.unhandled", path=request.url.path, kind=type(exc).__name__)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "internal error"}
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookstoreError, _bookstore_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)
