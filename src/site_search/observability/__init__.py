"""Observability module for logging, metrics and tracing."""

from site_search.observability.context import get_trace_context, set_trace_context, trace_context
from site_search.observability.logging import JsonFormatter, configure_logging
from site_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_TERM_COUNT,
    SEARCH_LATENCY,
    SEARCH_QUERIES,
    get_metrics,
    record_query_outcome,
    track_latency,
)
from site_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_TERM_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_QUERIES",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "record_query_outcome",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
