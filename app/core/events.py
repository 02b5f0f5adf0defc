"""Application startup and shutdown events."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from app.address.corrector import CorrectorAdapter
from app.address.stats import StatsTracker
from app.core.config import Settings, settings as default_settings
from app.core.geocoding import GeocodingService
from app.core.logging import configure_logging
from app.llm.providers.base import BaseLLMProvider
from app.llm.providers.factory import create_provider

logger: logging.Logger = logging.getLogger("app.core.events")


class AppStateDict:
    """Services shared by every request, with health check capabilities."""

    def __init__(
        self,
        provider: BaseLLMProvider[Any, Any],
        geocoder: GeocodingService,
        stats: StatsTracker,
        corrector: CorrectorAdapter,
    ) -> None:
        """Initialize state."""
        self.provider = provider
        self.geocoder = geocoder
        self.stats = stats
        self.corrector = corrector

    async def health_check(self) -> dict[str, Any]:
        """Report the configuration of each component.

        Returns:
            Dict containing health status of all components
        """
        return {
            "status": "healthy",
            "components": {
                "llm": {
                    "provider": self.provider.__class__.__name__,
                    "model": self.provider.model_name,
                },
                "geocoder": {"endpoint": self.geocoder.search_endpoint},
                "stats": {"history_length": len(self.stats)},
            },
        }


def create_services(settings: Settings) -> AppStateDict:
    """Build the provider, geocoder, stats tracker and corrector.

    Args:
        settings: Application settings

    Returns:
        Services container stored on ``app.state.services``
    """
    provider = create_provider(settings)
    stats = StatsTracker(
        history_size=settings.STATS_HISTORY_SIZE,
        recent_count=settings.STATS_RECENT_COUNT,
    )
    corrector = CorrectorAdapter(
        provider,
        stats,
        region=settings.ADDRESS_REGION,
        timeout=settings.LLM_TIMEOUT,
        temperature=settings.LLM_TEMPERATURE,
    )
    return AppStateDict(
        provider=provider,
        geocoder=GeocodingService(settings),
        stats=stats,
        corrector=corrector,
    )


def create_lifespan(
    settings: Settings | None = None,
) -> Callable[[FastAPI], Any]:
    """Create the application lifespan handler.

    Args:
        settings: Application settings (defaults to the global settings)

    Returns:
        Lifespan context manager factory for FastAPI
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)

        services = getattr(app.state, "services", None)
        if services is None:
            services = create_services(settings)
            app.state.services = services

        logger.info(
            "Application startup complete - "
            f"LLM Provider: {settings.LLM_PROVIDER}, "
            f"Model: {services.provider.model_name}, "
            f"Geocoder: {services.geocoder.search_endpoint}"
        )

        try:
            yield
        finally:
            aclose = getattr(services.provider, "aclose", None)
            if aclose is not None:
                logger.info("Closing LLM provider client...")
                await aclose()
            logger.info("Application shutdown complete")

    return lifespan
