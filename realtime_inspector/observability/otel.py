"""OpenTelemetry + Prometheus fallback wiring for the inspector service."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI

from realtime_inspector import config

logger = logging.getLogger("realtime_inspector.observability")


_initialized = False
_enabled = False
_tracer: Any | None = None
_trace_provider: Any | None = None
_meter_provider: Any | None = None
_fastapi_instrumentor: Any | None = None

_processed_counter: Any | None = None
_processing_latency_hist: Any | None = None
_events_counter: Any | None = None
_parser_failure_counter: Any | None = None

_prom_enabled = False
_prom_processed_counter: Any | None = None
_prom_processing_latency_hist: Any | None = None
_prom_events_counter: Any | None = None
_prom_parser_failure_counter: Any | None = None


def _normalize_otlp_endpoint(base_endpoint: str, signal_path: str) -> str:
    endpoint = (base_endpoint or "").strip()
    if not endpoint:
        return ""
    if endpoint.endswith(signal_path):
        return endpoint
    if endpoint.endswith("/"):
        endpoint = endpoint[:-1]
    if endpoint.endswith("/v1"):
        return f"{endpoint}{signal_path[3:]}"
    return f"{endpoint}{signal_path}"


def _labels(**values: str) -> dict[str, str]:
    return {key: (value or "").strip() or "unknown" for key, value in values.items()}


def initialize(app: FastAPI | None = None) -> None:
    global _initialized, _enabled, _tracer, _trace_provider, _meter_provider, _fastapi_instrumentor
    global _processed_counter, _processing_latency_hist, _events_counter, _parser_failure_counter
    global _prom_enabled
    global _prom_processed_counter, _prom_processing_latency_hist, _prom_events_counter, _prom_parser_failure_counter

    if _initialized:
        if _enabled and app and _fastapi_instrumentor:
            _fastapi_instrumentor.instrument_app(app)
        return

    _initialized = True

    if not config.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled (REALTIME_INSPECTOR_OTEL_ENABLED=false)")
        return

    try:
        from opentelemetry import metrics, trace
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
        from opentelemetry.sdk.metrics import MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError as exc:
        logger.warning("OpenTelemetry dependencies unavailable: %s", exc)
        return

    traces_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/traces")
    metrics_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/metrics")
    service_name = config.OTEL_SERVICE_NAME or "realtime-inspector"

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "realtime-inspector",
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=traces_endpoint or None)))
    trace.set_tracer_provider(trace_provider)
    tracer = trace.get_tracer("realtime_inspector")

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=metrics_endpoint or None)
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    meter = metrics.get_meter("realtime_inspector")

    _processed_counter = meter.create_counter(
        "realtime_inspector_logs_processed_total",
        unit="1",
        description="Count of log reconstruction runs",
    )
    _processing_latency_hist = meter.create_histogram(
        "realtime_inspector_processing_latency_ms",
        unit="ms",
        description="Latency of log reconstruction runs",
    )
    _events_counter = meter.create_counter(
        "realtime_inspector_events_total",
        unit="1",
        description="Parsed log events fed into reconstruction",
    )
    _parser_failure_counter = meter.create_counter(
        "realtime_inspector_parser_failures_total",
        unit="1",
        description="Count of rejected log lines",
    )

    _trace_provider = trace_provider
    _meter_provider = meter_provider
    _tracer = tracer
    _fastapi_instrumentor = FastAPIInstrumentor()
    _enabled = True

    if app:
        _fastapi_instrumentor.instrument_app(app)

    if config.PROM_PORT > 0:
        try:
            from prometheus_client import Counter, Histogram, start_http_server

            start_http_server(config.PROM_PORT)
            _prom_enabled = True
            _prom_processed_counter = Counter(
                "realtime_inspector_logs_processed_total",
                "Count of log reconstruction runs",
                ["origin"],
            )
            _prom_processing_latency_hist = Histogram(
                "realtime_inspector_processing_latency_ms",
                "Latency of log reconstruction runs",
                ["origin"],
            )
            _prom_events_counter = Counter(
                "realtime_inspector_events_total",
                "Parsed log events fed into reconstruction",
                ["origin"],
            )
            _prom_parser_failure_counter = Counter(
                "realtime_inspector_parser_failures_total",
                "Count of rejected log lines",
                ["reason"],
            )
            logger.info("Prometheus fallback metrics server listening on port %s", config.PROM_PORT)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Prometheus fallback not started: %s", exc)
            _prom_enabled = False

    logger.info(
        "OpenTelemetry initialized (service=%s endpoint=%s)",
        service_name,
        config.OTEL_ENDPOINT,
    )


def shutdown(app: FastAPI | None = None) -> None:
    global _enabled
    if not _initialized:
        return
    try:
        if app and _fastapi_instrumentor:
            _fastapi_instrumentor.uninstrument_app(app)
    except Exception:
        logger.debug("FastAPI uninstrumentation failed", exc_info=True)
    try:
        if _meter_provider is not None:
            _meter_provider.shutdown()
    except Exception:
        logger.debug("Meter provider shutdown failed", exc_info=True)
    try:
        if _trace_provider is not None:
            _trace_provider.shutdown()
    except Exception:
        logger.debug("Trace provider shutdown failed", exc_info=True)
    _enabled = False


@contextmanager
def start_span(name: str, attributes: dict[str, Any] | None = None):
    if not _enabled or _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)
        yield span


def record_log_processed(origin: str, event_count: int, duration_ms: float) -> None:
    labels = _labels(origin=origin)
    safe_count = max(0, int(event_count))
    if _enabled and _processed_counter is not None:
        _processed_counter.add(1, labels)
    if _enabled and _processing_latency_hist is not None:
        _processing_latency_hist.record(max(0.0, float(duration_ms)), labels)
    if _enabled and _events_counter is not None and safe_count:
        _events_counter.add(safe_count, labels)
    if _prom_enabled and _prom_processed_counter is not None:
        _prom_processed_counter.labels(**labels).inc()
    if _prom_enabled and _prom_processing_latency_hist is not None:
        _prom_processing_latency_hist.labels(**labels).observe(max(0.0, float(duration_ms)))
    if _prom_enabled and _prom_events_counter is not None and safe_count:
        _prom_events_counter.labels(**labels).inc(safe_count)


def record_parser_failure(reason: str, count: int = 1) -> None:
    safe_count = max(0, int(count))
    if safe_count == 0:
        return
    labels = _labels(reason=reason)
    if _enabled and _parser_failure_counter is not None:
        _parser_failure_counter.add(safe_count, labels)
    if _prom_enabled and _prom_parser_failure_counter is not None:
        _prom_parser_failure_counter.labels(**labels).inc(safe_count)
