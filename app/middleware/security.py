"""Security headers middleware."""

from collections.abc import Mapping

from fastapi import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.types import ASGIApp

DEFAULT_SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}

# Only meaningful when the client reached us over TLS
HSTS_HEADER = ("Strict-Transport-Security", "max-age=31536000")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response without overriding handlers."""

    def __init__(
        self, app: ASGIApp, headers: Mapping[str, str] | None = None
    ) -> None:
        """
        Initialize middleware.

        Args:
        ----
            app: The ASGI application
            headers: Headers to add, replacing the defaults
        """
        super().__init__(app)
        self.security_headers = dict(
            DEFAULT_SECURITY_HEADERS if headers is None else headers
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        for header_name, header_value in self.security_headers.items():
            response.headers.setdefault(header_name, header_value)

        forwarded_proto = request.headers.get("X-Forwarded-Proto", "")
        if request.url.scheme == "https" or forwarded_proto == "https":
            response.headers.setdefault(*HSTS_HEADER)

        return response
