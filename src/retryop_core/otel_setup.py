from __future__ import annotations

import os
from typing import Optional

# The SDK and exporters are an optional extra; without them every init_* call
# below is a no-op and retryop-core keeps working untraced.
try:
    from opentelemetry import trace, metrics
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

    _OTEL_AVAILABLE = True
except ImportError:  # pragma: no cover - graceful fallback when OTEL is missing
    _OTEL_AVAILABLE = False

    TracerProvider = object  # type: ignore[assignment,misc]
    MeterProvider = object  # type: ignore[assignment,misc]


_tracer_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None

_EXPORTERS = ("http", "grpc")


def _normalize_exporter(exporter: str) -> str:
    exporter = exporter.lower()
    if exporter not in _EXPORTERS:
        raise ValueError(f"exporter must be one of {_EXPORTERS}, got {exporter!r}")
    return exporter


def _build_resource(service_name: str) -> "Resource":
    from . import __version__

    return Resource.create(
        {
            "service.name": service_name,
            "service.version": os.getenv("RETRYOP_SERVICE_VERSION", __version__),
        }
    )


def _span_exporter(exporter: str):
    # Import only the transport that was asked for; each lives in its own package.
    if exporter == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    return OTLPSpanExporter()


def _metric_exporter(exporter: str):
    if exporter == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
    else:
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
    return OTLPMetricExporter()


def init_tracer(service_name: str = "retryop-core", exporter: str = "http") -> None:
    """
    Install a global TracerProvider exporting spans over OTLP.

    :param service_name: logical service name (appears in Jaeger, Tempo, etc.)
    :param exporter: "http" (default) or "grpc"
    """
    global _tracer_provider

    exporter = _normalize_exporter(exporter)
    if not _OTEL_AVAILABLE or _tracer_provider is not None:
        return

    provider = TracerProvider(resource=_build_resource(service_name))
    provider.add_span_processor(BatchSpanProcessor(_span_exporter(exporter)))
    trace.set_tracer_provider(provider)
    _tracer_provider = provider


def init_metrics(service_name: str = "retryop-core", exporter: str = "http") -> None:
    """Install a global MeterProvider with a periodic OTLP reader."""
    global _meter_provider

    exporter = _normalize_exporter(exporter)
    if not _OTEL_AVAILABLE or _meter_provider is not None:
        return

    reader = PeriodicExportingMetricReader(_metric_exporter(exporter))
    provider = MeterProvider(resource=_build_resource(service_name), metric_readers=[reader])
    metrics.set_meter_provider(provider)
    _meter_provider = provider


def init_telemetry(service_name: str = "retryop-core", exporter: str = "http") -> None:
    init_tracer(service_name=service_name, exporter=exporter)
    init_metrics(service_name=service_name, exporter=exporter)


def shutdown() -> None:
    """Flush and drop the providers installed by this module (no-op otherwise)."""
    global _tracer_provider, _meter_provider

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
    if _meter_provider is not None:
        _meter_provider.shutdown()
        _meter_provider = None
