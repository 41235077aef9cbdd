"""Prometheus metrics for the seal service."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNT = Counter(
    "trolleyseal_http_requests_total",
    "HTTP requests handled, by route template and status",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "trolleyseal_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0),
)

ERROR_COUNTER = Counter(
    "trolleyseal_http_internal_errors_total",
    "Requests that ended in a 5xx response",
    ("method", "route"),
)

CHANGE_STREAMS = Gauge(
    "trolleyseal_change_streams_open",
    "WebSocket change streams currently connected",
)

REMOTE_FAILURES = Counter(
    "trolleyseal_remote_failures_total",
    "Remote store calls that failed or timed out",
    ("direction",),
)

LOGIN_COUNTER = Counter(
    "trolleyseal_logins_total",
    "Successful logins",
)

SEALS_ADDED = Counter(
    "trolleyseal_seal_scans_added_total",
    "Seal scans persisted, by equipment kind",
    ("equipment",),
)

SEALS_REMOVED = Counter(
    "trolleyseal_seal_scans_removed_total",
    "Seal scans deleted before finalisation",
)

REPORTS_PRINTED = Counter(
    "trolleyseal_reports_printed_total",
    "Flights moved to printed after the print dialog closed",
)

ACCOUNT_REQUESTS = Counter(
    "trolleyseal_account_requests_total",
    "Account requests received, by outcome",
    ("outcome",),
)


def observe_request(method: str, route: str, status_code: int, duration_seconds: float) -> None:
    """Record one finished HTTP request."""

    method = method or "UNKNOWN"
    route = route or "unknown"
    REQUEST_COUNT.labels(method=method, route=route, status=str(status_code)).inc()
    REQUEST_LATENCY.labels(method=method, route=route).observe(max(duration_seconds, 0.0))
    if status_code >= 500:
        ERROR_COUNTER.labels(method=method, route=route).inc()


def increment_login() -> None:
    LOGIN_COUNTER.inc()


def increment_seal_added(equipment: str) -> None:
    SEALS_ADDED.labels(equipment=equipment).inc()


def increment_seal_removed() -> None:
    SEALS_REMOVED.inc()


def increment_report_printed() -> None:
    REPORTS_PRINTED.inc()


def increment_remote_failure(direction: str) -> None:
    """``direction`` is ``read`` or ``write``."""

    REMOTE_FAILURES.labels(direction=direction).inc()


def increment_account_request(outcome: str) -> None:
    ACCOUNT_REQUESTS.labels(outcome=outcome).inc()
