from .cancel import CancelToken
from .core import execute, retry_request, RetryConfig
from .errors import RetryCancelledError

__all__ = ["execute", "retry_request", "RetryConfig", "CancelToken", "RetryCancelledError"]

# Optional: expose OTEL-integrated helper if available.
try:
    from .otel_runtime import execute_traced_optional  # noqa: F401

    __all__.append("execute_traced_optional")
except ImportError:  # pragma: no cover - OTEL deps missing/broken
    # Core execute/RetryConfig remain fully usable.
    pass

__version__ = "1.0.0"
