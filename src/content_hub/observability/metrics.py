"""Prometheus metrics bridged to OpenTelemetry instruments."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(
    service_name: str = "content-hub",
    resource_attributes: dict[str, str] | None = None,
) -> MeterProvider:
    """Initialize OpenTelemetry metrics."""
    provider = _meter_holder.get("provider")
    if isinstance(provider, MeterProvider):
        return provider

    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    resource = Resource.create(attributes)
    provider = MeterProvider(resource=resource)
    otel_metrics.set_meter_provider(provider)
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = otel_metrics.get_meter(__name__)
    return provider


def _get_meter():
    meter = _meter_holder.get("meter")
    if meter is None:
        init_metrics()
        meter = _meter_holder.get("meter")
    return meter


def _label_key(labels: dict[str, str]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(labels.items()))


class _BoundMetric:
    def __init__(self, wrapper: MetricBridge, labels: dict[str, str]) -> None:
        self._wrapper = wrapper
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._wrapper.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._wrapper.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._wrapper.set(self._labels, value)


class MetricBridge:
    """Bridge Prometheus metrics to OTel instruments."""

    def __init__(
        self,
        prom_metric: Counter | Histogram | Gauge,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument = None
        self._last_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _ensure_otel_instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = _get_meter()
        if self._otel_kind == "counter":
            self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "histogram":
            self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "gauge":
            self._otel_instrument = meter.create_up_down_counter(self._otel_name, description=self._otel_description)
        else:
            raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        otel = self._ensure_otel_instrument()
        otel.add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        otel = self._ensure_otel_instrument()
        otel.record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).set(value)
        otel = self._ensure_otel_instrument()
        key = _label_key(labels)
        last = self._last_values.get(key, 0.0)
        delta = value - last
        if delta:
            otel.add(delta, labels)
        self._last_values[key] = value


_SEARCH_LATENCY_PROM = Histogram(
    "content_search_latency_seconds",
    "Search query latency",
    ["outcome"],
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

_SEARCH_REQUESTS_PROM = Counter(
    "content_search_requests_total",
    "Search queries by outcome",
    ["outcome"],
)

_INDEX_DOC_COUNT_PROM = Gauge(
    "content_index_document_count",
    "Entries in the loaded or last built search index",
    ["source"],
)

_CACHE_EVENTS_PROM = Counter(
    "content_cache_events_total",
    "Content cache lookups by subtree and result",
    ["subtree", "result"],
)

_CACHE_REBUILD_LATENCY_PROM = Histogram(
    "content_cache_rebuild_seconds",
    "Time spent rebuilding a cached content collection",
    ["subtree"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

_DOCUMENTS_SKIPPED_PROM = Counter(
    "content_documents_skipped_total",
    "Content files skipped because they could not be parsed",
    ["reason"],
)

SEARCH_LATENCY = MetricBridge(
    _SEARCH_LATENCY_PROM,
    otel_name="content_search_latency_seconds",
    otel_description="Search query latency",
    otel_kind="histogram",
)

SEARCH_REQUESTS = MetricBridge(
    _SEARCH_REQUESTS_PROM,
    otel_name="content_search_requests_total",
    otel_description="Search queries by outcome",
    otel_kind="counter",
)

INDEX_DOC_COUNT = MetricBridge(
    _INDEX_DOC_COUNT_PROM,
    otel_name="content_index_document_count",
    otel_description="Entries in the loaded or last built search index",
    otel_kind="gauge",
)

CACHE_EVENTS = MetricBridge(
    _CACHE_EVENTS_PROM,
    otel_name="content_cache_events_total",
    otel_description="Content cache lookups by subtree and result",
    otel_kind="counter",
)

CACHE_REBUILD_LATENCY = MetricBridge(
    _CACHE_REBUILD_LATENCY_PROM,
    otel_name="content_cache_rebuild_seconds",
    otel_description="Time spent rebuilding a cached content collection",
    otel_kind="histogram",
)

DOCUMENTS_SKIPPED = MetricBridge(
    _DOCUMENTS_SKIPPED_PROM,
    otel_name="content_documents_skipped_total",
    otel_description="Content files skipped because they could not be parsed",
    otel_kind="counter",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
