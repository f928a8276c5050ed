"""
Application-wide exception handlers.

Every error leaves the API as {"success": false, "message": ...}; validation
errors also list the offending fields (camelCase, as sent by the client).
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _error_fields(errors: list) -> list:
    """Turn pydantic error locations into a de-duplicated list of field names."""
    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    return fields


def validation_error_response(errors: list) -> JSONResponse:
    fields = _error_fields(errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": f"Missing or invalid fields: {', '.join(fields)}",
            "fields": fields,
            "errors": [error.get("msg") for error in errors],
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return validation_error_response(exc.errors())


async def pydantic_validation_handler(request: Request, exc: ValidationError):
    # raised when a route validates a form/JSON payload by hand
    return validation_error_response(exc.errors())


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
