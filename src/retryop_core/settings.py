from __future__ import annotations
import os
from typing import Any, Callable, Dict

from .core import RetryConfig

_TRUTHY = {"1", "true", "yes", "on"}

# env suffix -> (RetryConfig field, parser)
_FIELDS: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "MAX_RETRIES": ("max_retries", int),
    "BASE_DELAY": ("base_delay", float),
    "MAX_DELAY": ("max_delay", float),
    "JITTER": ("jitter", lambda v: v.strip().lower()),
}


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


def config_from_env(prefix: str = "RETRYOP_", **overrides: Any) -> RetryConfig:
    """
    Build a RetryConfig from ``<prefix>MAX_RETRIES``, ``<prefix>BASE_DELAY``,
    ``<prefix>MAX_DELAY`` and ``<prefix>JITTER``.

    Unset variables keep the dataclass defaults; keyword overrides win over
    the environment (callbacks such as ``on_retry`` can only come from there).
    """
    values: Dict[str, Any] = {}
    for suffix, (field, parse) in _FIELDS.items():
        var = f"{prefix}{suffix}"
        raw = os.getenv(var)
        if raw is None or raw.strip() == "":
            continue
        try:
            values[field] = parse(raw)
        except ValueError as exc:
            raise ValueError(f"invalid value for {var}: {raw!r}") from exc
    values.update(overrides)
    return RetryConfig(**values)
