"""Address correction, decomposition and fallback search.

This package provides:
- Correction of free-text addresses through an LLM provider
- Deterministic decomposition into positional components
- The primary/fallback geocoding query cascade
- Process-wide correction statistics
"""

from app.address.cascade import resolve
from app.address.corrector import CorrectorAdapter, parse_correction
from app.address.decomposer import decompose
from app.address.errors import (
    AddressServiceError,
    GeocoderTransportError,
    ResponseParseError,
)
from app.address.stats import StatsTracker
from app.address.types import (
    CascadeResult,
    CorrectionResult,
    FormattedAddress,
    StatsSnapshot,
)

__all__ = [
    "AddressServiceError",
    "CascadeResult",
    "CorrectionResult",
    "CorrectorAdapter",
    "FormattedAddress",
    "GeocoderTransportError",
    "ResponseParseError",
    "StatsSnapshot",
    "StatsTracker",
    "decompose",
    "parse_correction",
    "resolve",
]
