"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from content_hub.observability.context import get_trace_context, set_trace_context, trace_context
from content_hub.observability.logging import JsonFormatter, configure_logging
from content_hub.observability.metrics import (
    CACHE_EVENTS,
    CACHE_REBUILD_LATENCY,
    DOCUMENTS_SKIPPED,
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from content_hub.observability.tracing import TraceContextMiddleware, create_span, get_tracer, init_tracing


__all__ = [
    "CACHE_EVENTS",
    "CACHE_REBUILD_LATENCY",
    "DOCUMENTS_SKIPPED",
    "INDEX_DOC_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
