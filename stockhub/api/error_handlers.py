"""Error Handlers — map exceptions escaping the routes to the JSON error envelope.

Invariants:
    - StockhubError → its own http_status and to_response() body
    - RequestValidationError → 400 VALIDATION_ERROR with one detail per failing field
    - Any other exception → 500 INTERNAL_ERROR without internals

Design Decisions:
    - Log level follows the status: 4xx are client mistakes (WARNING), 5xx are ours (ERROR)
    - Stock/exchange ids from the error context travel as log extras
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stockhub.core.errors import ErrorCategory, ErrorSeverity, StockhubError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register domain, validation and catch-all handlers on the app."""
    app.add_exception_handler(StockhubError, handle_stockhub_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_stockhub_error(request: Request, exc: StockhubError) -> JSONResponse:
    logger.log(
        logging.ERROR if exc.http_status >= 500 else logging.WARNING,
        "%s on %s: %s", exc.code, request.url.path, exc.message,
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "stock_id": exc.context.stock_id,
            "exchange_id": exc.context.exchange_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [_field_detail(e) for e in exc.errors()]
    logger.warning(
        "Invalid request on %s: %s", request.url.path,
        ", ".join(d["field"] for d in details),
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled %s on %s", type(exc).__name__, request.url.path,
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _field_detail(error: dict) -> dict:
    # loc starts with the source ("body", "query", "path")
    return {
        "field": ".".join(str(part) for part in error["loc"]),
        "message": error["msg"],
        "type": error["type"],
    }


def _envelope(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }
