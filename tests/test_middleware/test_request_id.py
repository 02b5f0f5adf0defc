"""Request ID middleware tests."""

from collections.abc import AsyncGenerator
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient
from pytest import fixture, mark
from pytest_asyncio import fixture as asyncio_fixture
from structlog.contextvars import get_contextvars

from app.middleware.correlation import CorrelationMiddleware, is_valid_request_id


@fixture
def correlation_app() -> FastAPI:
    """Get test application with correlation ID middleware."""
    app = FastAPI()

    @app.get("/test")
    async def test_endpoint(request: Request) -> JSONResponse:
        """Return the request ID and bound log context."""
        return JSONResponse(
            {
                "correlation_id": request.state.correlation_id,
                "context": get_contextvars(),
            }
        )

    app.add_middleware(CorrelationMiddleware)
    return app


@asyncio_fixture
async def correlation_client(
    correlation_app: FastAPI,
) -> AsyncGenerator[AsyncClient, None]:
    """Get test client for correlation tests."""
    transport = ASGITransport(app=correlation_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@mark.asyncio
async def test_generates_request_id(correlation_client: AsyncClient) -> None:
    """A UUID is generated when the client sends none."""
    response = await correlation_client.get("/test")

    request_id = response.headers["X-Request-ID"]
    assert UUID(request_id).version == 4
    assert response.json()["correlation_id"] == request_id


@mark.asyncio
async def test_reuses_valid_client_request_id(correlation_client: AsyncClient) -> None:
    """A well-formed client request ID is kept."""
    response = await correlation_client.get(
        "/test", headers={"X-Request-ID": "mobile-app.42"}
    )

    assert response.headers["X-Request-ID"] == "mobile-app.42"
    assert response.json()["correlation_id"] == "mobile-app.42"


@mark.asyncio
async def test_replaces_malformed_request_id(correlation_client: AsyncClient) -> None:
    """Unsafe client request IDs are replaced."""
    response = await correlation_client.get(
        "/test", headers={"X-Request-ID": "bad id\"; drop"}
    )

    assert response.headers["X-Request-ID"] != "bad id\"; drop"
    UUID(response.headers["X-Request-ID"])


@mark.asyncio
async def test_binds_log_context(correlation_client: AsyncClient) -> None:
    """The request ID, method and path are bound for logging."""
    response = await correlation_client.get(
        "/test", headers={"X-Request-ID": "test-ctx"}
    )

    context = response.json()["context"]
    assert context["correlation_id"] == "test-ctx"
    assert context["method"] == "GET"
    assert context["path"] == "/test"


@mark.parametrize(
    "value,expected",
    [
        ("3f2b8c1e-7a4d-4e8f-9b0a-1c2d3e4f5a6b", True),
        ("test-123", True),
        ("", False),
        (None, False),
        ("-leading-dash", False),
        ("x" * 65, False),
        ("has space", False),
    ],
)
def test_is_valid_request_id(value: str | None, expected: bool) -> None:
    """Only short tokens of safe characters are accepted."""
    assert is_valid_request_id(value) is expected
