"""
Global Exception Handlers

Registers exception handlers that render every API failure as an
ErrorResponse body, with log severity following the status code.
"""

import logging
import traceback
from typing import Iterable, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError

from api.models.errors import ErrorResponse, ValidationErrorResponse, ValidationErrorItem

logger = logging.getLogger(__name__)


def add_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered")


def _render(status_code: int, body: ErrorResponse, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump()),
        headers=headers,
    )


def _validation_items(errors: Iterable[dict]) -> List[ValidationErrorItem]:
    return [
        ValidationErrorItem(
            loc=[str(loc_item) for loc_item in error["loc"]],
            msg=error["msg"],
            type=error["type"]
        )
        for error in errors
    ]


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle HTTP exceptions, including rate-limit rejections.

    Headers on the exception (e.g. Retry-After) are passed through.
    """
    log_exception(request, exc, exc.status_code)

    error_response = ErrorResponse(
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
        details=getattr(exc, "details", None),
    )
    return _render(exc.status_code, error_response, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body validation errors with field-level detail."""
    log_exception(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY)

    error_response = ValidationErrorResponse(
        message="Request validation error",
        error_code="VALIDATION_ERROR",
        validation_errors=_validation_items(exc.errors()),
    )
    return _render(status.HTTP_422_UNPROCESSABLE_ENTITY, error_response)


async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle model validation errors raised while building responses."""
    log_exception(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY)

    error_response = ValidationErrorResponse(
        message="Data validation error",
        error_code="VALIDATION_ERROR",
        validation_errors=_validation_items(exc.errors()),
    )
    return _render(status.HTTP_422_UNPROCESSABLE_ENTITY, error_response)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with a sanitized response."""
    log_exception(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, include_traceback=True)

    error_response = ErrorResponse(
        message="An unexpected error occurred",
        error_code="INTERNAL_SERVER_ERROR",
        details={"type": exc.__class__.__name__},
    )
    return _render(status.HTTP_500_INTERNAL_SERVER_ERROR, error_response)


def log_exception(
    request: Request,
    exc: Exception,
    status_code: int,
    include_traceback: bool = False
) -> None:
    """
    Log an exception with request context at a severity matching the status.

    Args:
        request: Request that caused exception
        exc: Exception instance
        status_code: HTTP status code
        include_traceback: Whether to include full traceback
    """
    if status_code >= 500:
        log_level = logging.ERROR
    elif status_code >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    error_details = {
        "status_code": status_code,
        "error_type": exc.__class__.__name__,
        "error_message": str(exc),
        "client_host": request.client.host if request.client else "unknown"
    }
    if include_traceback:
        error_details["traceback"] = traceback.format_exc()

    logger.log(
        log_level,
        f"Exception during request to {request.method} {request.url.path}",
        extra={"error_details": error_details}
    )
