"""Engine parameters and service settings.

Each indicator engine takes its parameters through a small frozen
dataclass that validates itself on construction, so an invalid period
fails loudly before any computation starts.  Service-level settings come
from the environment.
"""
from __future__ import annotations

import logging
import numbers
import os
from dataclasses import dataclass
from typing import Optional


def _check_period(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class EmaConfig:
    period: int

    def __post_init__(self):
        _check_period("period", self.period)


@dataclass(frozen=True)
class RsiConfig:
    period: int = 14

    def __post_init__(self):
        _check_period("period", self.period)


@dataclass(frozen=True)
class MacdConfig:
    fast: int = 12
    slow: int = 26
    signal: int = 9

    def __post_init__(self):
        _check_period("fast", self.fast)
        _check_period("slow", self.slow)
        _check_period("signal", self.signal)
        if self.fast >= self.slow:
            raise ValueError(
                f"fast period ({self.fast}) must be shorter than slow period ({self.slow})"
            )


@dataclass(frozen=True)
class StochasticConfig:
    k_period: int = 14

    def __post_init__(self):
        _check_period("k_period", self.k_period)


@dataclass(frozen=True)
class IndicatorConfigs:
    """Bundle of per-engine configs used when composing several panels."""

    rsi: RsiConfig = RsiConfig()
    macd: MacdConfig = MacdConfig()
    stochastic: StochasticConfig = StochasticConfig()


# ──────────────────────────────────────────────────────────────────────────────
# Env helpers (strip quotes/whitespace so .env "KEY=value " doesn’t break things)
# ──────────────────────────────────────────────────────────────────────────────

def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1].strip()
    return v or default


@dataclass(frozen=True)
class Settings:
    chart_api_base_url: str = "http://localhost:8080"
    chart_api_timeout_secs: float = 10.0
    chart_api_max_retries: int = 3
    chart_api_backoff_base_secs: float = 0.5
    cache_stale_secs: float = 60.0
    log_level: str = "INFO"


def get_logger(name: str) -> logging.Logger:
    """Named logger with a stream handler attached once, level from env."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        _h = logging.StreamHandler()
        _h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        logger.addHandler(_h)
    logger.setLevel((_env("INDICATOR_LOG_LEVEL", "INFO") or "INFO").upper())
    return logger


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings(
        chart_api_base_url=(_env("CHART_API_BASE_URL", "http://localhost:8080") or "").rstrip("/"),
        chart_api_timeout_secs=float(_env("CHART_API_TIMEOUT_SECS", "10") or "10"),
        chart_api_max_retries=int(_env("CHART_API_MAX_RETRIES", "3") or "3"),
        chart_api_backoff_base_secs=float(_env("CHART_API_BACKOFF_BASE_SECS", "0.5") or "0.5"),
        cache_stale_secs=float(_env("CHART_CACHE_STALE_SECS", "60") or "60"),
        log_level=(_env("INDICATOR_LOG_LEVEL", "INFO") or "INFO").upper(),
    )
