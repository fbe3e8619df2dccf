# zodika/utils/metrics.py
"""
Process-wide Prometheus metrics.

Defined once at import; prometheus_client refuses duplicate registration, so
anything that needs a metric imports it from here.
"""
from __future__ import annotations

from typing import Final, Iterable

from prometheus_client import Counter, Gauge, Histogram

MET_REQUESTS: Final = Counter("zodika_api_requests_total", "API requests", ["route"])
REQ_LATENCY: Final = Histogram("zodika_request_seconds", "API request latency", ["route"])
MET_MISSING_TEXT: Final = Counter(
    "zodika_missing_text_total", "Report slots rendered without interpretive text", ["aspect"]
)
MET_REPORTS: Final = Counter("zodika_reports_total", "Reports built", ["parsed_ok"])
GAUGE_APP_UP: Final = Gauge("zodika_app_up", "1 if app is running")


def seed(routes: Iterable[str], aspects: Iterable[str]) -> None:
    """Touch label sets so series exist before the first request."""
    for route in routes:
        MET_REQUESTS.labels(route=route).inc(0)
        REQ_LATENCY.labels(route=route).observe(0.0)
    for a in aspects:
        MET_MISSING_TEXT.labels(aspect=a).inc(0)
    for ok in ("true", "false"):
        MET_REPORTS.labels(parsed_ok=ok).inc(0)
    GAUGE_APP_UP.set(1.0)
