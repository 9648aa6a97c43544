from __future__ import annotations
import pytest
from retryop_core.settings import config_from_env, env_flag


def test_defaults_when_env_unset(monkeypatch):
    for k in ("MAX_RETRIES", "BASE_DELAY", "MAX_DELAY", "JITTER"):
        monkeypatch.delenv(f"RETRYOP_{k}", raising=False)
    c = config_from_env()
    assert (c.max_retries, c.base_delay, c.max_delay, c.jitter) == (3, 1.0, 10.0, "none")


def test_reads_prefixed_env(monkeypatch):
    monkeypatch.setenv("API_MAX_RETRIES", "5")
    monkeypatch.setenv("API_BASE_DELAY", "0.25")
    monkeypatch.setenv("API_MAX_DELAY", "4")
    monkeypatch.setenv("API_JITTER", " FULL ")
    c = config_from_env("API_")
    assert (c.max_retries, c.base_delay, c.max_delay, c.jitter) == (5, 0.25, 4.0, "full")


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("RETRYOP_MAX_RETRIES", "9")
    hook = lambda n, e: None  # noqa: E731
    c = config_from_env(max_retries=1, on_retry=hook)
    assert c.max_retries == 1
    assert c.on_retry is hook


def test_malformed_value_names_variable(monkeypatch):
    monkeypatch.setenv("RETRYOP_MAX_RETRIES", "three")
    with pytest.raises(ValueError, match="RETRYOP_MAX_RETRIES"):
        config_from_env()


@pytest.mark.parametrize(
    "raw,expected", [("1", True), ("yes", True), ("On", True), ("0", False), ("", False)]
)
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("RETRYOP_FLAG", raw)
    assert env_flag("RETRYOP_FLAG") is expected
