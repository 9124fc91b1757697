"""Observability helpers."""

from realtime_inspector.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_log_processed,
    record_parser_failure,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_log_processed",
    "record_parser_failure",
]
