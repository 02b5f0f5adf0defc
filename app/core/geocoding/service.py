"""Nominatim geocoding service for address search.

This module provides the geocoding capability used by the query cascade:
- Free-text search against a configured Nominatim endpoint
- Rate limiting to respect the provider's usage policy
- Per-request timeouts on the provider call
- Search URLs clients can open themselves
"""

import asyncio
from typing import Any
from urllib.parse import urlencode

from geopy.exc import GeocoderParseError, GeocoderServiceError, GeocoderTimedOut
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from app.address.errors import GeocoderTransportError, ResponseParseError
from app.core.config import Settings, settings as default_settings
from app.core.logging import get_logger

logger = get_logger().bind(module="geocoding_service")

SEARCH_PATH = "/search"


class GeocodingService:
    """Nominatim search with rate limiting and timeouts."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the geocoding service from settings.

        Args:
            settings: Application settings (defaults to the global settings)
        """
        settings = settings or default_settings
        self.domain = settings.NOMINATIM_DOMAIN.rstrip("/")
        self.scheme = settings.NOMINATIM_SCHEME
        self.timeout = settings.GEOCODING_TIMEOUT
        self.rate_limit = settings.NOMINATIM_RATE_LIMIT
        self.result_limit = settings.NOMINATIM_RESULT_LIMIT

        self.nominatim = Nominatim(
            user_agent=settings.NOMINATIM_USER_AGENT,
            timeout=self.timeout,
            domain=self.domain,
            scheme=self.scheme,
        )

        # Errors must reach the caller, so no retries and no swallowing
        self.nominatim_geocode = RateLimiter(
            self.nominatim.geocode,
            min_delay_seconds=self.rate_limit,
            max_retries=0,
            swallow_exceptions=False,
        )

        logger.info(
            "Nominatim geocoder initialized",
            domain=self.domain,
            rate_limit=self.rate_limit,
        )

    @property
    def search_endpoint(self) -> str:
        """Base URL of the search endpoint."""
        return f"{self.scheme}://{self.domain}{SEARCH_PATH}"

    def build_search_url(self, query: str) -> str:
        """Build the JSON search URL for a free-text query.

        Args:
            query: Free-text query

        Returns:
            Search URL with ``q`` and ``format=json`` parameters
        """
        return f"{self.search_endpoint}?{urlencode({'q': query, 'format': 'json'})}"

    def _search_sync(self, query: str) -> list[dict[str, Any]]:
        """Blocking search returning raw Nominatim records."""
        locations = self.nominatim_geocode(
            query, exactly_one=False, limit=self.result_limit
        )
        return [location.raw for location in locations or []]

    async def search(self, query: str) -> list[dict[str, Any]]:
        """Search for a free-text query.

        Args:
            query: Free-text query

        Returns:
            Raw match records in provider order; empty for a blank query

        Raises:
            ResponseParseError: If the provider body is not valid JSON
            GeocoderTransportError: If the provider fails or times out
        """
        if not query or not query.strip():
            logger.warning("Empty query provided for geocoding")
            return []

        # Only the HTTP call is timed; waiting in the rate limiter is not
        try:
            results = await asyncio.to_thread(self._search_sync, query)
        except GeocoderParseError as e:
            logger.error("geocoding_parse_failed", query=query[:100], error=str(e))
            raise ResponseParseError(
                f"Geocoding response is not valid JSON: {str(e)[:200]}", query=query
            ) from e
        except GeocoderTimedOut as e:
            logger.error("geocoding_timed_out", query=query[:100])
            raise GeocoderTransportError(
                f"Geocoding request timed out after {self.timeout}s", query=query
            ) from e
        except GeocoderServiceError as e:
            logger.error("geocoding_failed", query=query[:100], error=str(e))
            raise GeocoderTransportError(
                f"Geocoding request failed: {e}", query=query
            ) from e

        logger.debug("geocoding_succeeded", query=query[:100], count=len(results))
        return results
