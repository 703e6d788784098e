"""Prometheus metrics for search latency and index size."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_LATENCY = Histogram(
    "search_latency_seconds",
    "Search query latency",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

SEARCH_QUERIES = Counter(
    "search_queries_total",
    "Search queries by outcome",
    ["outcome"],
)

INDEX_DOC_COUNT = Gauge(
    "index_document_count",
    "Documents in the most recently built index",
)

INDEX_TERM_COUNT = Gauge(
    "index_term_count",
    "Distinct terms in the most recently built index",
)


@contextmanager
def track_latency(histogram: Histogram) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.observe(time.perf_counter() - start)


def record_query_outcome(result_count: int) -> None:
    SEARCH_QUERIES.labels(outcome="hit" if result_count else "empty").inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()
