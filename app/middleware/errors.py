"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from starlette.types import ASGIApp

from app.address.errors import AddressServiceError
from app.core.logging import get_logger

logger = get_logger()

# Map exception types to status codes (None means use exception's status_code)
ErrorMapping = dict[type[Exception], int | None]


def _correlation_id(request: Request) -> str | None:
    correlation_id = getattr(request.state, "correlation_id", None)
    return str(correlation_id) if correlation_id is not None else None


def create_error_response(
    request: Request,
    error_type: str,
    detail: str,
    status_code: int,
) -> JSONResponse:
    """Log an error and build the JSON error body.

    Args:
        request: The request that failed
        error_type: Exception class name
        detail: Human-readable error message
        status_code: HTTP status code to return

    Returns:
        JSON response with error details
    """
    correlation_id = _correlation_id(request)
    logger.error(
        "request_error",
        error_type=error_type,
        error_message=detail,
        status_code=status_code,
        path=request.url.path,
        method=request.method,
        correlation_id=correlation_id,
    )
    response = JSONResponse(
        status_code=status_code,
        content={
            "error": error_type,
            "message": detail,
            "status_code": status_code,
            "correlation_id": correlation_id if correlation_id else "unknown",
        },
    )
    if correlation_id:
        response.headers["X-Request-ID"] = correlation_id
    return response


async def not_found_response(request: Request) -> Response:
    """Plain-text 404 for unknown paths and methods."""
    return PlainTextResponse("Not Found", status_code=HTTP_404_NOT_FOUND)


async def handle_http_exception(request: Request, exc: Exception) -> Response:
    """Handle HTTP exceptions raised by routing or endpoints."""
    assert isinstance(exc, StarletteHTTPException)
    if exc.status_code in (HTTP_404_NOT_FOUND, HTTP_405_METHOD_NOT_ALLOWED):
        return await not_found_response(request)
    return create_error_response(
        request, "HTTPException", str(exc.detail), exc.status_code
    )


async def handle_validation_error(request: Request, exc: Exception) -> Response:
    """Report malformed request input as a 400."""
    assert isinstance(exc, RequestValidationError)
    errors = exc.errors()
    detail = (
        "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
            for error in errors
        )
        or "Invalid request"
    )
    return create_error_response(
        request, "ValidationError", detail, HTTP_400_BAD_REQUEST
    )


async def handle_address_service_error(request: Request, exc: Exception) -> Response:
    """Report upstream geocoding failures with the error's status code."""
    assert isinstance(exc, AddressServiceError)
    return create_error_response(
        request, exc.__class__.__name__, str(exc), exc.status_code
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the application's exception handlers.

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(AddressServiceError, handle_address_service_error)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware turning unhandled exceptions into JSON error responses."""

    def __init__(self, app: ASGIApp) -> None:
        """
        Initialize middleware with error mappings.

        Args:
        ----
            app: The ASGI application
        """
        super().__init__(app)
        self.error_mapping: ErrorMapping = {
            RequestValidationError: HTTP_400_BAD_REQUEST,
            AddressServiceError: None,  # Use its own status_code
        }

    def _get_error_detail(self, exc: Exception) -> tuple[str, int]:
        """Get error detail and status code from exception."""
        if isinstance(exc, StarletteHTTPException):
            return str(exc.detail), exc.status_code

        status_code: int | None = None
        for error_type, mapped_status in self.error_mapping.items():
            if isinstance(exc, error_type):
                status_code = mapped_status
                break
        if status_code is None:
            status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)

        detail = str(exc.args[0] if exc.args else exc.__class__.__name__)
        return detail, status_code

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and handle errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except Exception as exc:
            detail, status_code = self._get_error_detail(exc)
            return create_error_response(
                request, exc.__class__.__name__, detail, status_code
            )
