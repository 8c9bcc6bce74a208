"""Technical indicator engines: EMA, RSI, MACD and Stochastic %K.

Every engine is a pure function over a sequence of ``PriceBar`` (or plain
prices for EMA) and returns a freshly built list.  Too little input is
not an error: the result is simply empty.  Degenerate denominators are
handled per engine (RSI skips the point, %K reports the midpoint) and
never produce NaN or raise.  Only invalid parameters raise ``ValueError``.

Smoothing is done with pandas' ``ewm(adjust=False)``, which is exactly the
recursive form ``y[t] = a * x[t] + (1 - a) * y[t-1]`` once the first
element has been replaced by the simple-average seed.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import EmaConfig, IndicatorConfigs, MacdConfig, RsiConfig, StochasticConfig
from .models import IndicatorPoint, IndicatorSeries, IndicatorType, MacdResult, PriceBar

logger = logging.getLogger("indicators")


def _seeded(values: Sequence[float], period: int) -> pd.Series:
    """Replace the first ``period`` values by their mean, keep the rest."""
    seed = float(np.mean(values[:period]))
    return pd.Series([seed, *values[period:]], dtype=float)


def ema(prices: Sequence[float], period: int) -> List[float]:
    """
    Exponential moving average seeded with the simple average of the
    first ``period`` prices.  Returns ``len(prices) - period + 1`` values,
    or an empty list when there are fewer than ``period`` prices.
    """
    EmaConfig(period)
    values = [float(p) for p in prices]
    if len(values) < period:
        logger.debug("ema(%s): %s prices, not enough data", period, len(values))
        return []
    return _seeded(values, period).ewm(span=period, adjust=False).mean().tolist()


def rsi(bars: Sequence[PriceBar], period: int = 14) -> IndicatorSeries:
    """
    Relative Strength Index with Wilder's smoothing.

    The averages are seeded with the mean gain/loss of the first
    ``period`` close-to-close changes.  Change ``i`` belongs to bar
    ``i + 1``, so the value computed before folding in change ``i`` is
    stamped with ``bars[i + 1].timestamp``.  Steps where the average loss
    is zero produce no point at all.

    The smoothing runs through ``ewm(alpha=1/period)``, i.e.
    ``(1 - a) * prev + a * x`` rather than ``(prev * (period - 1) + x) / period``.
    The two agree to about 1e-12, not bit for bit.
    """
    RsiConfig(period)
    if len(bars) < period + 1:
        logger.debug("rsi(%s): %s bars, not enough data", period, len(bars))
        return []

    closes = pd.Series([bar.close for bar in bars], dtype=float)
    delta = closes.diff().iloc[1:].tolist()
    gains = [max(change, 0.0) for change in delta]
    losses = [max(-change, 0.0) for change in delta]

    # Wilder's smoothing is an EMA with alpha = 1 / period.  The last
    # smoothed value is the update after the final change and is unused.
    avg_gain = _seeded(gains, period).ewm(alpha=1.0 / period, adjust=False).mean().iloc[:-1]
    avg_loss = _seeded(losses, period).ewm(alpha=1.0 / period, adjust=False).mean().iloc[:-1]

    points: IndicatorSeries = []
    for offset, (gain, loss) in enumerate(zip(avg_gain, avg_loss)):
        if loss == 0:
            continue
        rs = gain / loss
        value = 100.0 - 100.0 / (1.0 + rs)
        points.append(IndicatorPoint(bars[period + offset + 1].timestamp, value))
    return points


# ──────────────────────────────────────────────────────────────────────────────
# MACD index alignment
#
# ema(closes, p)[k] belongs to bar k + p - 1.  The MACD line pairs the
# two EMA series with the offsets below, and the signal line and
# histogram are mapped back to bars through the warm-up consumed by the
# slow EMA followed by the signal EMA.
# ──────────────────────────────────────────────────────────────────────────────

def fast_ema_index(bar_index: int, fast: int, slow: int) -> int:
    """Position in the fast EMA paired with ``bar_index`` on the MACD line."""
    return bar_index - (slow - fast)


def slow_ema_index(bar_index: int, slow: int) -> int:
    """Position in the slow EMA paired with ``bar_index`` on the MACD line."""
    return bar_index - (slow - 1)


def signal_bar_index(signal_index: int, slow: int, signal: int) -> int:
    """Bar whose timestamp stamps signal-line point ``signal_index``."""
    return signal_index + slow + signal - 2


def histogram_macd_index(signal_index: int, signal: int) -> int:
    """MACD-line point that histogram point ``signal_index`` subtracts from."""
    return signal_index + signal - 1


def macd(
    bars: Sequence[PriceBar], fast: int = 12, slow: int = 26, signal: int = 9
) -> MacdResult:
    """
    Moving Average Convergence Divergence.

    Returns the MACD line (one point per bar from ``slow - 1`` on), its
    signal line (EMA of the MACD values) and the histogram (MACD minus
    signal).  Fewer than ``slow`` bars gives an empty result.
    """
    MacdConfig(fast, slow, signal)
    if len(bars) < slow:
        logger.debug("macd(%s,%s,%s): %s bars, not enough data", fast, slow, signal, len(bars))
        return MacdResult.empty()

    closes = [bar.close for bar in bars]
    fast_ema = ema(closes, fast)
    slow_ema = ema(closes, slow)

    macd_points: IndicatorSeries = []
    for i in range(slow - 1, len(bars)):
        fi = fast_ema_index(i, fast, slow)
        if fi >= len(fast_ema):
            # only reachable when 2 * fast > slow + 1
            break
        value = fast_ema[fi] - slow_ema[slow_ema_index(i, slow)]
        macd_points.append(IndicatorPoint(bars[i].timestamp, value))

    signal_values = ema([p.value for p in macd_points], signal)
    signal_points = [
        IndicatorPoint(bars[signal_bar_index(j, slow, signal)].timestamp, value)
        for j, value in enumerate(signal_values)
    ]

    histogram: IndicatorSeries = []
    for j, sig in enumerate(signal_points):
        mi = histogram_macd_index(j, signal)
        if mi >= len(macd_points):
            break
        histogram.append(IndicatorPoint(sig.timestamp, macd_points[mi].value - sig.value))

    return MacdResult(macd_points, signal_points, histogram)


def macd_line(
    bars: Sequence[PriceBar], fast: int = 12, slow: int = 26, signal: int = 9
) -> IndicatorSeries:
    """MACD line only, for callers that do not plot the signal/histogram."""
    return macd(bars, fast, slow, signal).macd_line


def stochastic_k(bars: Sequence[PriceBar], k_period: int = 14) -> IndicatorSeries:
    """
    Stochastic oscillator %K: where the close sits within the high/low
    range of the trailing ``k_period`` bars, in percent.  A flat window
    (highest == lowest) reports the midpoint, 50.0.
    """
    StochasticConfig(k_period)
    if len(bars) < k_period:
        logger.debug("stochastic_k(%s): %s bars, not enough data", k_period, len(bars))
        return []

    frame = pd.DataFrame(
        {
            "high": [bar.high for bar in bars],
            "low": [bar.low for bar in bars],
            "close": [bar.close for bar in bars],
        },
        dtype=float,
    )
    highest = frame["high"].rolling(window=k_period, min_periods=k_period).max()
    lowest = frame["low"].rolling(window=k_period, min_periods=k_period).min()
    flat = highest == lowest
    k_percent = 100.0 * (frame["close"] - lowest) / (highest - lowest).where(~flat)
    k_percent = k_percent.mask(flat, 50.0)

    return [
        IndicatorPoint(bars[i].timestamp, float(k_percent.iloc[i]))
        for i in range(k_period - 1, len(bars))
    ]


def volume(bars: Sequence[PriceBar]) -> IndicatorSeries:
    """Bar volumes as a series, one point per bar."""
    return [IndicatorPoint(bar.timestamp, float(bar.volume)) for bar in bars]


def compute(
    bars: Sequence[PriceBar],
    indicator: IndicatorType,
    configs: Optional[IndicatorConfigs] = None,
) -> Union[IndicatorSeries, MacdResult]:
    """Run the engine behind ``indicator`` with parameters from ``configs``."""
    configs = configs or IndicatorConfigs()
    if indicator is IndicatorType.RSI:
        return rsi(bars, configs.rsi.period)
    if indicator is IndicatorType.MACD:
        return macd(bars, configs.macd.fast, configs.macd.slow, configs.macd.signal)
    if indicator is IndicatorType.STOCHASTIC:
        return stochastic_k(bars, configs.stochastic.k_period)
    if indicator is IndicatorType.VOLUME:
        return volume(bars)
    raise ValueError(f"unsupported indicator {indicator!r}")
