"""Exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Domain errors keep the
application interactive: each one becomes a JSON response and is logged,
nothing is re-raised to the server.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gymdesk.core.errors import GymDeskError

logger = logging.getLogger("gymdesk.errors")

_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "NOT_FOUND": 404,
    "CAPACITY_EXCEEDED": 409,
    "ALREADY_BOOKED": 409,
    "REFERENTIAL_CONFLICT": 409,
    "ACCOUNT_ALREADY_LINKED": 409,
    "VERSION_CONFLICT": 409,
    "NOT_ASSOCIATED": 404,
    "PARTIAL_CASCADE_FAILURE": 502,
    "STORE_UNAVAILABLE": 503,
    "EMAIL_IN_USE": 409,
    "INVALID_EMAIL": 400,
    "WEAK_PASSWORD": 400,
    "INVALID_CREDENTIALS": 401,
    "METHOD_DISABLED": 403,
}


def _gymdesk_exception_handler(request: Request, exc: GymDeskError) -> JSONResponse:
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.error_code, exc.details)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.error_code)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is on."""
    logger.exception("Unhandled exception: %s", exc)
    debug = getattr(request.app.state, "settings", None) is not None and request.app.state.settings.debug
    detail: Any = str(exc) if debug else "Internal server error"
    return JSONResponse(status_code=500, content={"error": "INTERNAL_ERROR", "message": detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GymDeskError, _gymdesk_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
