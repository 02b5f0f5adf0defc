"""Request ID middleware tying log lines to a single request."""

import re
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars, clear_contextvars

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied IDs are echoed into logs and headers, so keep them tame
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$")


def is_valid_request_id(value: str | None) -> bool:
    """Check whether a client-supplied request ID can be reused."""
    return bool(value) and _REQUEST_ID_PATTERN.match(value or "") is not None


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Middleware assigning a request ID to every request.

    The ID is taken from the ``X-Request-ID`` header when it is well formed,
    otherwise a UUID4 is generated. It is stored on ``request.state``, bound
    into the structlog context and echoed on the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        """
        Initialize middleware.

        Args:
        ----
            app: The ASGI application
            header_name: Header carrying the request ID
        """
        super().__init__(app)
        self.header_name = header_name

    def _get_correlation_id(self, request: Request) -> str:
        header_value = request.headers.get(self.header_name)
        if header_value and is_valid_request_id(header_value):
            return header_value
        return str(uuid.uuid4())

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Bind the request ID for the duration of the request.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The downstream response carrying the request ID header
        """
        clear_contextvars()
        correlation_id = self._get_correlation_id(request)
        bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
        finally:
            clear_contextvars()

        response.headers[self.header_name] = correlation_id
        return response
