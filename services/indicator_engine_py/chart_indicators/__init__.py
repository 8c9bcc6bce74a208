"""Technical indicator engine for chart panels.

This package turns sequences of OHLC price bars into indicator series
(EMA, RSI, MACD, Stochastic %K), composes them into multi-panel chart
payloads, and provides the collaborators that feed it: sample data
generators, a remote chart API client and a caching repository.  The
indicator functions are side‑effect free and deterministic when given
the same inputs.
"""

from .models import (
    PriceBar,
    IndicatorPoint,
    IndicatorSeries,
    MacdResult,
    ChartInterval,
    IndicatorType,
    ChartData,
    PatternAnalysis,
)
from .config import (
    EmaConfig,
    RsiConfig,
    MacdConfig,
    StochasticConfig,
    IndicatorConfigs,
    Settings,
    load_settings,
)
from .indicators import ema, rsi, macd, macd_line, stochastic_k, volume, compute
from .frames import bars_from_frame, bars_to_frame, series_to_pandas, macd_to_frame
from .panels import (
    IndicatorOptions,
    IndicatorPanel,
    MultiPanelData,
    DEFAULT_SELECTION,
    toggle_indicator,
    build_panel,
    build_multi_panel,
    multi_panel_to_dict,
)
from .chart_client import ChartApiClient, ChartApiError
from .repository import ChartRepository, ChartDataUnavailable

__all__ = [
    "PriceBar",
    "IndicatorPoint",
    "IndicatorSeries",
    "MacdResult",
    "ChartInterval",
    "IndicatorType",
    "ChartData",
    "PatternAnalysis",
    "EmaConfig",
    "RsiConfig",
    "MacdConfig",
    "StochasticConfig",
    "IndicatorConfigs",
    "Settings",
    "load_settings",
    "ema",
    "rsi",
    "macd",
    "macd_line",
    "stochastic_k",
    "volume",
    "compute",
    "bars_from_frame",
    "bars_to_frame",
    "series_to_pandas",
    "macd_to_frame",
    "IndicatorOptions",
    "IndicatorPanel",
    "MultiPanelData",
    "DEFAULT_SELECTION",
    "toggle_indicator",
    "build_panel",
    "build_multi_panel",
    "multi_panel_to_dict",
    "ChartApiClient",
    "ChartApiError",
    "ChartRepository",
    "ChartDataUnavailable",
]
