import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../services/indicator_engine_py')))

from chart_indicators.config import (
    EmaConfig,
    MacdConfig,
    RsiConfig,
    Settings,
    StochasticConfig,
    load_settings,
)


def test_defaults():
    assert RsiConfig().period == 14
    assert MacdConfig() == MacdConfig(12, 26, 9)
    assert StochasticConfig().k_period == 14


@pytest.mark.parametrize("value", [0, -1, 2.5, True, "14"])
def test_invalid_periods_raise(value):
    with pytest.raises(ValueError):
        RsiConfig(value)
    with pytest.raises(ValueError):
        EmaConfig(value)


def test_numpy_integers_are_accepted():
    assert StochasticConfig(np.int64(5)).k_period == 5


def test_macd_requires_fast_shorter_than_slow():
    with pytest.raises(ValueError, match="shorter"):
        MacdConfig(fast=26, slow=12)


def test_load_settings_defaults(monkeypatch):
    for name in (
        "CHART_API_BASE_URL",
        "CHART_API_TIMEOUT_SECS",
        "CHART_API_MAX_RETRIES",
        "CHART_API_BACKOFF_BASE_SECS",
        "CHART_CACHE_STALE_SECS",
        "INDICATOR_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == Settings()


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("CHART_API_BASE_URL", ' "https://charts.example.com/" ')
    monkeypatch.setenv("CHART_API_MAX_RETRIES", "5")
    monkeypatch.setenv("CHART_CACHE_STALE_SECS", "120")
    monkeypatch.setenv("INDICATOR_LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.chart_api_base_url == "https://charts.example.com"
    assert settings.chart_api_max_retries == 5
    assert settings.cache_stale_secs == 120.0
    assert settings.log_level == "DEBUG"
