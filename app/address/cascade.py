"""Primary and fallback geocoding queries for a formatted address."""

from collections.abc import Awaitable, Callable
from typing import Any

from app.address.types import CascadeResult, FormattedAddress
from app.core.logging import get_logger
from app.core.metrics import GEOCODE_QUERIES_TOTAL

logger = get_logger().bind(module="address_cascade")

GeocodeFn = Callable[[str], Awaitable[list[dict[str, Any]]]]

# Fewer primary results than this triggers the fallback queries
MIN_PRIMARY_RESULTS = 2


def fallback_queries(formatted: FormattedAddress) -> list[tuple[str, str]]:
    """Fallback queries in priority order as (category, query) pairs.

    The local-government-only query is deliberately not part of the cascade.
    """
    alternatives = formatted.alternative_queries
    queries: list[tuple[str, str]] = []
    if alternatives.town_only:
        queries.append(("town", alternatives.town_only))
    if alternatives.neighbourhood_only:
        queries.append(("neighborhood", alternatives.neighbourhood_only))
    return queries


async def resolve(
    formatted: FormattedAddress,
    geocode: GeocodeFn,
    min_results: int = MIN_PRIMARY_RESULTS,
) -> CascadeResult:
    """Run the primary query and, if it under-delivers, the fallbacks.

    Geocoding errors propagate unchanged.

    Args:
        formatted: Decomposed address with its derived queries
        geocode: Coroutine returning the match list for a query
        min_results: Primary result count below which fallbacks run

    Returns:
        CascadeResult with primary results and any fallback results
    """
    GEOCODE_QUERIES_TOTAL.labels(category="primary").inc()
    results = await geocode(formatted.formatted_query)
    logger.info(
        "primary_query_resolved",
        query=formatted.formatted_query,
        result_count=len(results),
    )

    if len(results) >= min_results:
        return CascadeResult(results=results)

    alternative_results: dict[str, list[dict[str, Any]]] = {}
    for category, query in fallback_queries(formatted):
        GEOCODE_QUERIES_TOTAL.labels(category=category).inc()
        matches = await geocode(query)
        logger.info(
            "fallback_query_resolved",
            category=category,
            query=query,
            result_count=len(matches),
        )
        if matches:
            alternative_results[category] = matches

    return CascadeResult(
        results=results,
        alternative_results=alternative_results or None,
    )
