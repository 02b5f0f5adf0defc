"""Tests for application startup and shutdown events."""

from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

from app.address.corrector import CorrectorAdapter
from app.address.types import CorrectionResult
from app.core.config import Settings
from app.core.events import AppStateDict, create_lifespan, create_services
from app.core.geocoding import GeocodingService
from app.llm.providers.cloudflare import CloudflareProvider
from app.llm.providers.openai import OpenAIProvider


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        OPENROUTER_API_KEY="test-key",
        STATS_HISTORY_SIZE=20,
        STATS_RECENT_COUNT=5,
        ADDRESS_REGION="Ghana",
    )


def test_create_services(settings: Settings) -> None:
    """Services are wired from settings."""
    services = create_services(settings)

    assert isinstance(services.provider, OpenAIProvider)
    assert isinstance(services.geocoder, GeocodingService)
    assert isinstance(services.corrector, CorrectorAdapter)
    assert services.corrector.stats is services.stats
    assert services.corrector.region == "Ghana"
    assert services.stats.history_size == 20
    assert services.stats.recent_count == 5


def test_create_services_cloudflare() -> None:
    """The Cloudflare provider is selected by name."""
    settings = Settings(
        _env_file=None,
        LLM_PROVIDER="cloudflare",
        CLOUDFLARE_ACCOUNT_ID="acct",
        CLOUDFLARE_API_TOKEN="token",
    )
    assert isinstance(create_services(settings).provider, CloudflareProvider)


@pytest.mark.asyncio
async def test_health_check_reports_components(services: AppStateDict) -> None:
    """Health lists provider, model, geocoder and history length."""
    health = await services.health_check()

    assert health["status"] == "healthy"
    assert health["components"]["llm"] == {
        "provider": "MockProvider",
        "model": "test-model",
    }
    assert health["components"]["geocoder"]["endpoint"].endswith("/search")
    assert health["components"]["stats"] == {"history_length": 0}


@pytest.mark.asyncio
async def test_health_check_counts_recorded_history(services: AppStateDict) -> None:
    """The stats component reports entries held, not the configured capacity."""
    services.stats.record("Alen Avenue", CorrectionResult.fallback("Alen Avenue"))
    services.stats.record("Yaba", CorrectionResult.fallback("Yaba"))

    health = await services.health_check()

    assert health["components"]["stats"] == {"history_length": 2}


@pytest.mark.asyncio
async def test_lifespan_creates_services(settings: Settings) -> None:
    """Startup stores the services on the application state."""
    app = FastAPI()
    lifespan = create_lifespan(settings)

    with patch("app.core.events.configure_logging") as mock_configure:
        async with lifespan(app):
            assert isinstance(app.state.services, AppStateDict)

    mock_configure.assert_called_once_with(
        level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS
    )


@pytest.mark.asyncio
async def test_lifespan_keeps_preinstalled_services(
    settings: Settings, services: AppStateDict
) -> None:
    """Services installed before startup are not replaced."""
    app = FastAPI()
    app.state.services = services

    with patch("app.core.events.configure_logging"):
        async with create_lifespan(settings)(app):
            assert app.state.services is services


@pytest.mark.asyncio
async def test_lifespan_closes_provider(
    settings: Settings, services: AppStateDict
) -> None:
    """Shutdown closes providers that hold a client."""
    provider: Any = services.provider
    provider.aclose = AsyncMock()
    app = FastAPI()
    app.state.services = services

    with patch("app.core.events.configure_logging"):
        async with create_lifespan(settings)(app):
            provider.aclose.assert_not_called()

    provider.aclose.assert_awaited_once()
