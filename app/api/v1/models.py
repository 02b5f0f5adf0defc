"""Request and response models for the address endpoints."""

from typing import Any

from pydantic import Field

from app.address.types import (
    CamelModel,
    CorrectionCounters,
    FormattedAddress,
    HistoryEntry,
)


class FormatAddressRequest(CamelModel):
    """Body of ``POST /format-address``."""

    address: str | None = Field(default=None, description="Raw address text")


class CorrectedAddressResponse(CamelModel):
    """Fields shared by every response that ran a correction."""

    original: str
    corrected: str
    corrections: list[str] = Field(default_factory=list)
    confidence: float
    formatted: FormattedAddress


class FormatAddressResponse(CorrectedAddressResponse):
    """Corrected address plus ready-made search URLs."""

    nominatim_url: str
    alternative_urls: dict[str, str] = Field(default_factory=dict)


class SearchResponse(CorrectedAddressResponse):
    """Corrected address plus geocoding matches."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    alternative_results: dict[str, list[dict[str, Any]]] | None = None


class StatsResponse(CamelModel):
    """Counters plus the most recent history entries."""

    stats: CorrectionCounters
    recent_addresses: list[HistoryEntry] = Field(default_factory=list)


class HealthResponse(CamelModel):
    """Service configuration summary."""

    status: str
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)
