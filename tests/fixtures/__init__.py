"""Test fixture package for address-resolver.

Contains fixtures for:
- Fake geocoding and mocked LLM services
- FastAPI test application and clients
"""

from .api import FakeGeocoder

__all__ = [
    "FakeGeocoder",
]
