import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../services/indicator_engine_py')))

from chart_indicators.indicators import (
    ema,
    fast_ema_index,
    histogram_macd_index,
    macd,
    macd_line,
    signal_bar_index,
    slow_ema_index,
)
from chart_indicators.models import MacdResult, PriceBar
from chart_indicators.sample_data import generate_sample_candlestick_data


def _bars(closes):
    return [PriceBar(timestamp=i, open=c, high=c, low=c, close=c) for i, c in enumerate(closes)]


def test_alignment_helpers_with_default_periods():
    # first MACD point sits on bar slow - 1
    assert fast_ema_index(25, fast=12, slow=26) == 11
    assert slow_ema_index(25, slow=26) == 0
    assert signal_bar_index(0, slow=26, signal=9) == 33
    assert histogram_macd_index(0, signal=9) == 8


def test_macd_constant_prices_are_zero():
    result = macd(_bars([100.0] * 27))
    assert len(result.macd_line) == 2
    assert all(p.value == pytest.approx(0.0, abs=1e-12) for p in result.macd_line)


def test_macd_insufficient_data_is_empty():
    result = macd(_bars([1.0] * 25))
    assert result == MacdResult.empty()
    assert result.is_empty


def test_macd_line_pairs_ema_series_by_offsets():
    bars = generate_sample_candlestick_data(40, seed=21)
    closes = [b.close for b in bars]
    fast_ema = ema(closes, 12)
    slow_ema = ema(closes, 26)

    line = macd(bars).macd_line
    assert [p.timestamp for p in line] == [b.timestamp for b in bars[25:]]
    for k, point in enumerate(line):
        i = 25 + k
        assert point.value == fast_ema[i - 14] - slow_ema[i - 25]


def test_macd_signal_and_histogram_alignment():
    bars = generate_sample_candlestick_data(40, seed=21)
    result = macd(bars)
    assert len(result.macd_line) == 15
    assert len(result.signal_line) == 15 - 9 + 1
    assert [p.timestamp for p in result.signal_line] == [b.timestamp for b in bars[33:]]

    expected_signal = ema([p.value for p in result.macd_line], 9)
    assert [p.value for p in result.signal_line] == expected_signal

    assert [p.timestamp for p in result.histogram] == [p.timestamp for p in result.signal_line]
    for j, hist in enumerate(result.histogram):
        assert hist.value == result.macd_line[j + 8].value - result.signal_line[j].value
        # histogram and the MACD point it uses share a bar
        assert result.macd_line[j + 8].timestamp == hist.timestamp


def test_macd_without_enough_points_for_signal():
    result = macd(_bars([float(x) for x in range(30)]))
    assert len(result.macd_line) == 5
    assert result.signal_line == []
    assert result.histogram == []


def test_macd_line_helper_matches_full_result():
    bars = generate_sample_candlestick_data(60, seed=4)
    assert macd_line(bars) == macd(bars).macd_line


def test_macd_close_fast_and_slow_periods_do_not_overrun():
    bars = _bars([float(x % 7) for x in range(50)])
    result = macd(bars, fast=20, slow=26, signal=3)
    # the fast EMA runs out after bar 36
    assert [p.timestamp for p in result.macd_line] == list(range(25, 37))
    assert len(result.signal_line) == 10
    assert len(result.histogram) == 10


def test_macd_is_deterministic():
    bars = generate_sample_candlestick_data(100, seed=8)
    assert macd(bars) == macd(bars)


@pytest.mark.parametrize(
    "fast,slow,signal",
    [(26, 12, 9), (12, 12, 9), (0, 26, 9), (12, 26, 0)],
)
def test_macd_rejects_invalid_periods(fast, slow, signal):
    with pytest.raises(ValueError):
        macd(_bars([1.0] * 40), fast, slow, signal)
