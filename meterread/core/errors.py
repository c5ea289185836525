"""Meter Reader — Error Taxonomy & JSON Error Handlers.

Every user-visible failure is rendered as
``{"error_code": ..., "error_description": ...}`` where the description is a
string, or a field -> messages map for validation failures.
"""

from typing import Any, Dict, Iterable, List, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from meterread.core.logging import get_logger

logger = get_logger("errors")

INTERNAL_ERROR_DESCRIPTION = "Server Internal Error."

FieldErrors = Dict[str, List[str]]


class MeterReadError(Exception):
    """Base for all errors that map onto an HTTP error response."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, description: Union[str, FieldErrors]):
        self.description = description
        super().__init__(str(description))


class InvalidDataError(MeterReadError):
    """Field-level validation failure."""

    status_code = 400
    error_code = "INVALID_DATA"

    def __init__(self, description: FieldErrors):
        super().__init__(description)


class InvalidTypeError(MeterReadError):
    status_code = 400
    error_code = "INVALID_TYPE"


class DuplicateReportError(MeterReadError):
    """A reading already exists for the billing period."""

    status_code = 409
    error_code = "DOUBLE_REPORT"


class ConfirmationDuplicateError(MeterReadError):
    status_code = 409
    error_code = "CONFIRMATION_DUPLICATE"


class MeasureNotFoundError(MeterReadError):
    status_code = 404
    error_code = "MEASURE_NOT_FOUND"


class MeasuresNotFoundError(MeterReadError):
    status_code = 404
    error_code = "MEASURES_NOT_FOUND"


class InternalError(MeterReadError):
    """Failure the client cannot fix. Details are logged, not returned."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(INTERNAL_ERROR_DESCRIPTION)


class RecognitionError(InternalError):
    """The reading recognizer failed, timed out or is not configured."""


class StoreError(InternalError):
    """The measurement store raised a database error."""


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> FieldErrors:
    """Group pydantic error dicts into a field path -> messages map.

    Only the first message per field is kept so each violated field reports
    exactly one problem.
    """
    details: FieldErrors = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        path = ".".join(loc) or "body"
        if path not in details:
            details[path] = [error.get("msg", "Invalid value")]
    return details


def error_response(status_code: int, error_code: str, description: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": error_code, "error_description": description},
    )


async def meterread_error_handler(request: Request, exc: MeterReadError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(
            f"{type(exc).__name__}: {exc.detail}",
            extra={
                "endpoint": request.url.path,
                "status_code": exc.status_code,
                "error_code": exc.error_code,
            },
        )
    else:
        logger.info(
            f"Request rejected: {exc.error_code}",
            extra={
                "endpoint": request.url.path,
                "status_code": exc.status_code,
                "error_code": exc.error_code,
            },
        )
    return error_response(exc.status_code, exc.error_code, exc.description)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return await meterread_error_handler(
        request, InvalidDataError(format_validation_errors(exc.errors()))
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled error: {exc}",
        extra={"endpoint": request.url.path, "status_code": 500},
    )
    return error_response(500, "INTERNAL_ERROR", INTERNAL_ERROR_DESCRIPTION)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MeterReadError, meterread_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
