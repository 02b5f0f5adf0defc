"""Exceptions raised by the address resolution pipeline."""

from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR


class AddressServiceError(Exception):
    """Base class for errors surfaced to the request boundary."""

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query


class GeocoderTransportError(AddressServiceError):
    """Geocoding provider was unreachable, timed out or answered with an error."""


class ResponseParseError(AddressServiceError):
    """Geocoding provider answered with a body that is not valid JSON."""
