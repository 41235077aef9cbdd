"""Telemetry helpers and metrics."""

from .metrics import (
    ACCOUNT_REQUESTS,
    CHANGE_STREAMS,
    ERROR_COUNTER,
    LOGIN_COUNTER,
    REMOTE_FAILURES,
    REPORTS_PRINTED,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SEALS_ADDED,
    SEALS_REMOVED,
    increment_account_request,
    increment_login,
    increment_remote_failure,
    increment_report_printed,
    increment_seal_added,
    increment_seal_removed,
    observe_request,
)

__all__ = [
    "ACCOUNT_REQUESTS",
    "CHANGE_STREAMS",
    "ERROR_COUNTER",
    "LOGIN_COUNTER",
    "REMOTE_FAILURES",
    "REPORTS_PRINTED",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SEALS_ADDED",
    "SEALS_REMOVED",
    "increment_account_request",
    "increment_login",
    "increment_remote_failure",
    "increment_report_printed",
    "increment_seal_added",
    "increment_seal_removed",
    "observe_request",
]
