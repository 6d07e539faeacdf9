"""API exception classes and handlers."""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config.logging import get_logger
from ..exceptions import (
    CatalystWatchError,
    InvalidConfigurationError,
    MalformedSeriesError,
    PriceUnavailableError,
    ReferenceStoreError,
)
from .models.responses import ErrorResponse

logger = get_logger(__name__)

# Domain errors surfaced through the API and the status they map to
DOMAIN_STATUS_CODES = {
    MalformedSeriesError: 422,
    InvalidConfigurationError: 422,
    PriceUnavailableError: 503,
    ReferenceStoreError: 503,
}


class APIException(Exception):
    """Base exception for errors raised by route handlers."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.request_id = request_id


class ValidationException(APIException):
    """Exception for validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, str]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=422,
            details={"field_errors": field_errors or {}},
            request_id=request_id,
        )


def _error_json(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    error = {"type": error_type, "message": message, "status_code": status_code}
    if details:
        error["details"] = details

    response = ErrorResponse(
        success=False,
        error=error,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=response.model_dump())


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handle exceptions raised by route handlers."""
    logger.warning(
        "API exception occurred",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return _error_json(request, exc.status_code, type(exc).__name__, exc.message, exc.details)


async def domain_exception_handler(
    request: Request, exc: CatalystWatchError
) -> JSONResponse:
    """Map domain errors onto HTTP status codes."""
    status_code = next(
        (code for cls, code in DOMAIN_STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    logger.warning(
        "Domain error occurred",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=status_code,
        path=request.url.path,
    )
    return _error_json(request, status_code, type(exc).__name__, exc.message, exc.details)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    field_errors = {
        ".".join(str(loc) for loc in error["loc"]): error["msg"] for error in exc.errors()
    }
    logger.warning(
        "Validation error occurred", field_errors=field_errors, path=request.url.path
    )
    return _error_json(
        request,
        422,
        "ValidationError",
        "Request validation failed",
        {"field_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return _error_json(request, exc.status_code, "HTTPException", str(exc.detail))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        exc_info=True,
    )
    # Don't expose internal error details
    return _error_json(request, 500, "InternalServerError", "An unexpected error occurred")


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(CatalystWatchError, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
