"""API v1 router module."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette import status

from app.address.cascade import resolve
from app.address.decomposer import decompose
from app.address.types import CorrectionResult, FormattedAddress
from app.api.v1.models import (
    FormatAddressRequest,
    FormatAddressResponse,
    HealthResponse,
    SearchResponse,
    StatsResponse,
)
from app.core.events import AppStateDict
from app.core.logging import get_logger

logger = get_logger().bind(module="address_api")

router = APIRouter(default_response_class=JSONResponse)


def get_services(request: Request) -> AppStateDict:
    """Services created at startup."""
    services: AppStateDict = request.app.state.services
    return services


def _correction_fields(
    original: str, correction: CorrectionResult, formatted: FormattedAddress
) -> dict[str, Any]:
    return {
        "original": original,
        "corrected": correction.corrected_address,
        "corrections": correction.corrections,
        "confidence": correction.confidence,
        "formatted": formatted,
    }


@router.post(
    "/format-address",
    response_model=FormatAddressResponse,
    response_model_exclude_none=True,
)
async def format_address(
    body: FormatAddressRequest,
    services: AppStateDict = Depends(get_services),
) -> FormatAddressResponse:
    """
    Correct and decompose an address without geocoding it.

    Returns the formatted address with the primary search URL and one URL
    per available single-component alternative.
    """
    if body.address is None or not body.address.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Address is required",
        )

    correction = await services.corrector.correct(body.address)
    formatted = decompose(correction.corrected_address)
    geocoder = services.geocoder

    alternatives = formatted.alternative_queries.model_dump(
        by_alias=True, exclude_none=True
    )
    return FormatAddressResponse(
        **_correction_fields(body.address, correction, formatted),
        nominatim_url=geocoder.build_search_url(formatted.formatted_query),
        alternative_urls={
            key: geocoder.build_search_url(query)
            for key, query in alternatives.items()
        },
    )


@router.get(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
)
async def search_address(
    q: str | None = Query(default=None, description="Raw address text"),
    services: AppStateDict = Depends(get_services),
) -> SearchResponse:
    """
    Correct, decompose and geocode an address.

    Fallback queries run only when the primary query returns fewer than
    two matches.
    """
    if q is None or not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter 'q' is required",
        )

    correction = await services.corrector.correct(q)
    formatted = decompose(correction.corrected_address)
    cascade = await resolve(formatted, services.geocoder.search)

    logger.info(
        "search_completed",
        result_count=len(cascade.results),
        fallback_categories=sorted(cascade.alternative_results or {}),
    )
    return SearchResponse(
        **_correction_fields(q, correction, formatted),
        results=cascade.results,
        alternative_results=cascade.alternative_results,
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(services: AppStateDict = Depends(get_services)) -> StatsResponse:
    """Correction counters and the most recent processed addresses."""
    snapshot = services.stats.snapshot()
    return StatsResponse(
        stats=snapshot.stats, recent_addresses=snapshot.recent_addresses
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    services: AppStateDict = Depends(get_services),
) -> HealthResponse:
    """Report service configuration."""
    return HealthResponse(**await services.health_check())
