"""
Exception handlers translating domain errors into HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from planvault.core.exceptions import (
    ApplicationException,
    DuplicateException,
    ValidationException,
)

logger = logging.getLogger(__name__)

STATUS_BY_EXCEPTION = (
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (DuplicateException, status.HTTP_400_BAD_REQUEST),
)


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"field": _field_name(err["loc"]), "message": err["msg"]} for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": errors},
    )


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            content = {"detail": exc.message}
            if isinstance(exc, ValidationException) and exc.details:
                content["errors"] = [exc.details]
            return JSONResponse(status_code=status_code, content=content)
    logger.error("Unhandled application error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
