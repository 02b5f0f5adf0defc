"""Geocoding for the address search pipeline.

This package provides the Nominatim-backed geocoding service the query
cascade uses to look up formatted and fallback queries.
"""

from app.core.geocoding.service import GeocodingService

__all__ = [
    "GeocodingService",
]
