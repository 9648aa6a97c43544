import asyncio
import os
import random

from retryop_core.core import RetryConfig
from retryop_core.otel_setup import init_telemetry, shutdown
from retryop_core.otel_runtime import execute_traced_optional

# Enable tracing / metrics via env (can still be disabled by user)
os.environ.setdefault("RETRYOP_OTEL_ENABLED", "1")
os.environ.setdefault("RETRYOP_OTEL_METRICS_ENABLED", "1")

# Defaults for local collector
os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "http://127.0.0.1:4318")


async def flaky_request(ctx: dict) -> dict:
    """
    Stand-in for a REST call:
    - fails randomly with ConnectionError (to trigger retries)
    - sleeps a bit to generate non-zero latency
    """
    if random.random() < ctx["fail_prob"]:
        raise ConnectionError("connection reset by peer (smoke demo)")

    await asyncio.sleep(random.uniform(0.02, 0.15))
    return {"status": "ok"}


async def main() -> None:
    #   RETRYOP_OTEL_EXPORTER=http  (default)
    #   RETRYOP_OTEL_EXPORTER=grpc
    exporter = os.getenv("RETRYOP_OTEL_EXPORTER", "http").lower()
    if exporter not in ("http", "grpc"):
        print(f"[retryop] Unknown RETRYOP_OTEL_EXPORTER={exporter!r}, falling back to 'http'")
        exporter = "http"

    init_telemetry(service_name="retryop-otel-smoke", exporter=exporter)

    n_ops = int(os.getenv("RETRYOP_SMOKE_OPS", "50"))
    fail_prob = float(os.getenv("RETRYOP_SMOKE_FAIL_PROB", "0.5"))
    print(f"[retryop] running smoke: n_ops={n_ops}, fail_prob={fail_prob}, exporter={exporter}")

    config = RetryConfig(max_retries=2, base_delay=0.05, max_delay=0.1)

    for i in range(n_ops):
        ctx = {"fail_prob": fail_prob}
        try:
            result = await execute_traced_optional(
                lambda: flaky_request(ctx),
                config,
                retry_on=(ConnectionError,),
                otel_enabled=True,
                span_name="retryop.smoke",
                http_method="GET",
                http_url="http://example.invalid/profiles",
                base_attrs={"retryop.demo_op_index": i},
            )
            print(f"[retryop] op #{i} -> {result}")
        except ConnectionError as exc:
            print(f"[retryop] op #{i} failed after retries: {exc!r}")

    shutdown()
    print("[retryop] smoke run complete")


if __name__ == "__main__":
    asyncio.run(main())
