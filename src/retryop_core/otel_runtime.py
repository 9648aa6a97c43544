from __future__ import annotations

import inspect
import time
from typing import Any, Dict, Optional, Tuple

from .cancel import CancelToken
from .core import RetryConfig, execute
from .settings import env_flag
from .types import Operation, PreAttemptFn


# --- Helpers for env flags ----------------------------------------------------


def _otel_enabled(explicit: Optional[bool]) -> bool:
    if explicit is not None:
        return explicit
    return env_flag("RETRYOP_OTEL_ENABLED")


def _metrics_enabled() -> bool:
    return env_flag("RETRYOP_OTEL_METRICS_ENABLED")


# --- Metrics plumbing (lazy / optional) --------------------------------------

try:
    from opentelemetry import metrics as _otel_metrics  # type: ignore[attr-defined]
except ImportError:  # pragma: no cover - OTEL not installed
    _otel_metrics = None  # type: ignore[assignment]

_ops_counter = None
_attempts_counter = None
_retries_counter = None
_duration_histogram = None
_metrics_instruments_ready = False


def _ensure_metrics() -> None:
    """
    Lazily create metric instruments if metrics are enabled and OTEL is available.
    Safe to call multiple times.
    """
    global _ops_counter, _attempts_counter, _retries_counter, _duration_histogram
    global _metrics_instruments_ready

    if _metrics_instruments_ready or not _metrics_enabled() or _otel_metrics is None:
        return

    meter = _otel_metrics.get_meter(__name__)

    _ops_counter = meter.create_counter(
        "retryop_operations_total",
        description="Total number of retried operations (one per execute call).",
    )
    _attempts_counter = meter.create_counter(
        "retryop_attempts_total",
        description="Total number of attempts, first tries included.",
    )
    _retries_counter = meter.create_counter(
        "retryop_retries_total",
        description="Total number of retries scheduled after a failed attempt.",
    )
    _duration_histogram = meter.create_histogram(
        "retryop_operation_duration_seconds",
        description="Latency of whole retry sequences, delays included.",
        unit="s",
    )

    _metrics_instruments_ready = True


# --- Traced execution ---------------------------------------------------------


async def execute_traced_optional(
    operation: Operation,
    config: Optional[RetryConfig] = None,
    *,
    args: Tuple[Any, ...] = (),
    kwargs: Optional[Dict[str, Any]] = None,
    retry_on: Tuple[type[BaseException], ...] = (Exception,),
    raises: bool = True,
    default: Any = None,
    pre_attempt: Optional[PreAttemptFn] = None,
    attempt_timeout_s: Optional[float] = None,
    cancel_token: Optional[CancelToken] = None,
    # tracing knobs (all optional)
    otel_enabled: Optional[bool] = None,  # None -> read env RETRYOP_OTEL_ENABLED
    span_name: str = "retryop.operation",
    base_attrs: Optional[Dict[str, Any]] = None,
    http_method: Optional[str] = None,
    http_url: Optional[str] = None,  # strip credentials/query upstream if needed
) -> Any:
    """
    Execute with tracing *if* OpenTelemetry is installed and enabled.
    Otherwise, falls back to plain `execute()` with zero overhead.

    When RETRYOP_OTEL_METRICS_ENABLED=1 (and OTEL metrics are available),
    this also emits:
      - retryop_operations_total
      - retryop_attempts_total
      - retryop_retries_total
      - retryop_operation_duration_seconds
    """
    config = config or RetryConfig()
    plain = dict(
        args=args,
        kwargs=kwargs,
        retry_on=retry_on,
        raises=raises,
        default=default,
        attempt_timeout_s=attempt_timeout_s,
        cancel_token=cancel_token,
    )

    if not _otel_enabled(otel_enabled):
        return await execute(operation, config, pre_attempt=pre_attempt, **plain)

    # Lazy import so this module stays importable without otel deps
    try:
        from opentelemetry import trace
        from opentelemetry.trace import SpanKind, Status, StatusCode
    except ImportError:
        return await execute(operation, config, pre_attempt=pre_attempt, **plain)

    tracer = trace.get_tracer(__name__)

    _ensure_metrics()
    metrics_active = _metrics_instruments_ready and _metrics_enabled()

    attrs = {
        "http.request.method": http_method,
        "url.full": http_url,
        "retryop.max_retries": config.max_retries,
        "retryop.base_delay": config.base_delay,
        "retryop.max_delay": config.max_delay,
        "retryop.jitter": config.jitter,
        "retryop.attempt_timeout_s": attempt_timeout_s,
    }
    if base_attrs:
        attrs.update({k: v for k, v in base_attrs.items() if v is not None})

    metric_attrs_base = {
        "http.request.method": http_method or "unknown",
        "retryop.span": span_name,
    }

    def set_attrs(span, d):
        for k, v in d.items():
            if v is not None:
                span.set_attribute(k, v)

    counts = {"attempts": 0, "retries": 0}
    start = time.perf_counter()

    def record_operation(outcome: str) -> None:
        if metrics_active and _ops_counter is not None and _duration_histogram is not None:
            metric_attrs = {**metric_attrs_base, "retryop.outcome": outcome}
            _ops_counter.add(1, attributes=metric_attrs)
            _duration_histogram.record(time.perf_counter() - start, attributes=metric_attrs)

    with tracer.start_as_current_span(span_name, kind=SpanKind.CLIENT) as root:
        set_attrs(root, attrs)
        orig_pre = pre_attempt
        orig_on_retry = config.on_retry

        async def pre():
            counts["attempts"] += 1
            if metrics_active and _attempts_counter is not None:
                _attempts_counter.add(1, attributes=metric_attrs_base)
            root.add_event("retryop.attempt", {"retryop.attempt.number": counts["attempts"]})
            if orig_pre:
                await orig_pre()

        async def on_retry(attempt: int, error: BaseException):
            counts["retries"] += 1
            if metrics_active and _retries_counter is not None:
                _retries_counter.add(1, attributes=metric_attrs_base)
            root.add_event(
                "retryop.retry",
                {
                    "retryop.retry.number": attempt,
                    "exception.type": type(error).__name__,
                    "exception.message": str(error),
                },
            )
            if orig_on_retry is not None:
                res = orig_on_retry(attempt, error)
                if inspect.isawaitable(res):
                    await res

        try:
            result = await execute(
                operation,
                config.with_overrides(on_retry=on_retry),
                pre_attempt=pre,
                **plain,
            )
        except BaseException as exc:
            root.record_exception(exc)
            root.set_attribute("retryop.outcome", "error")
            root.set_attribute("retryop.attempts", counts["attempts"])
            root.set_status(Status(StatusCode.ERROR))
            record_operation("error")
            raise

        root.set_attribute("retryop.outcome", "success")
        root.set_attribute("retryop.attempts", counts["attempts"])
        record_operation("success")
        return result
