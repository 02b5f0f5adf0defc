"""Prometheus metrics shared across the application."""

from prometheus_client import Counter

REQUESTS_TOTAL = Counter(
    "app_http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "path"],
)

RESPONSES_TOTAL = Counter(
    "app_http_responses_total",
    "Total number of HTTP responses",
    labelnames=["status_code"],
)

CORRECTIONS_TOTAL = Counter(
    "app_address_corrections_total",
    "Address correction calls by outcome",
    labelnames=["outcome"],
)

GEOCODE_QUERIES_TOTAL = Counter(
    "app_geocode_queries_total",
    "Geocoding queries issued by the cascade, by query category",
    labelnames=["category"],
)
