import os
import sys

import pytest

# add indicator_engine_py to sys.path for tests
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../services/indicator_engine_py')))

from chart_indicators.indicators import compute, ema, rsi, stochastic_k, volume
from chart_indicators.models import IndicatorPoint, IndicatorType, PriceBar
from chart_indicators.sample_data import generate_sample_candlestick_data


def _bars(closes, highs=None, lows=None):
    highs = highs or closes
    lows = lows or closes
    return [
        PriceBar(timestamp=i, open=c, high=h, low=lo, close=c)
        for i, (c, h, lo) in enumerate(zip(closes, highs, lows))
    ]


# ----------------------------------------------------------------------
# EMA
# ----------------------------------------------------------------------

def test_ema_seeds_with_simple_average():
    assert ema([10, 20, 30, 40, 50], 3) == pytest.approx([20.0, 30.0, 40.0])


def test_ema_output_length():
    assert len(ema(list(range(1, 31)), 12)) == 30 - 12 + 1


def test_ema_period_equal_to_length_returns_seed_only():
    assert ema([2, 4, 6], 3) == pytest.approx([4.0])


def test_ema_insufficient_data_is_empty():
    assert ema([1, 2], 3) == []
    assert ema([], 1) == []


def test_ema_recurrence_matches_manual_computation():
    prices = [22.27, 22.19, 22.08, 22.17, 22.18, 22.13, 22.23, 22.43]
    alpha = 2 / (5 + 1)
    expected = [sum(prices[:5]) / 5]
    for x in prices[5:]:
        expected.append(alpha * x + (1 - alpha) * expected[-1])
    assert ema(prices, 5) == pytest.approx(expected)


@pytest.mark.parametrize("period", [0, -3])
def test_ema_rejects_non_positive_period(period):
    with pytest.raises(ValueError):
        ema([1, 2, 3], period)


# ----------------------------------------------------------------------
# RSI
# ----------------------------------------------------------------------

def test_rsi_values_and_alignment():
    # changes +1 -1 +1 -1 -> seeds 0.5/0.5, then Wilder updates
    bars = _bars([1.0, 2.0, 1.0, 2.0, 1.0])
    points = rsi(bars, period=2)
    assert [p.timestamp for p in points] == [3, 4]
    assert [p.value for p in points] == pytest.approx([50.0, 75.0])


def test_rsi_skips_points_while_average_loss_is_zero():
    # first step has no losses yet; the update after it introduces one
    bars = _bars([10.0, 11.0, 12.0, 11.0, 12.0])
    points = rsi(bars, period=2)
    assert points == [IndicatorPoint(4, pytest.approx(50.0))]


def test_rsi_monotonic_rise_emits_nothing():
    bars = _bars([float(x) for x in range(1, 40)])
    assert rsi(bars, period=14) == []


def test_rsi_monotonic_fall_is_zero():
    bars = _bars([float(x) for x in range(40, 0, -1)])
    points = rsi(bars, period=14)
    assert len(points) == 40 - 14 - 1
    assert all(p.value == pytest.approx(0.0) for p in points)


def test_rsi_insufficient_data_is_empty():
    assert rsi(_bars([1.0] * 14), period=14) == []
    # exactly period + 1 bars: seeds only, nothing emitted
    assert rsi(_bars([1.0, 2.0, 1.0]), period=2) == []


def test_rsi_stays_within_bounds():
    bars = generate_sample_candlestick_data(200, seed=7)
    values = [p.value for p in rsi(bars)]
    assert values
    assert all(0.0 <= v <= 100.0 for v in values)


def test_rsi_rejects_non_positive_period():
    with pytest.raises(ValueError):
        rsi(_bars([1.0, 2.0]), period=0)


# ----------------------------------------------------------------------
# Stochastic %K
# ----------------------------------------------------------------------

def test_stochastic_k_position_in_range():
    bars = _bars(
        closes=[9.0, 11.0, 10.0, 12.0],
        highs=[10.0, 12.0, 11.0, 13.0],
        lows=[8.0, 9.0, 7.0, 10.0],
    )
    points = stochastic_k(bars, k_period=3)
    assert [p.timestamp for p in points] == [2, 3]
    assert [p.value for p in points] == pytest.approx([60.0, 500.0 / 6.0])


def test_stochastic_k_flat_range_is_midpoint():
    bars = _bars([100.0] * 14)
    points = stochastic_k(bars, k_period=14)
    assert len(points) == 1
    assert points[0].value == 50.0


def test_stochastic_k_insufficient_data_is_empty():
    assert stochastic_k(_bars([1.0] * 13), k_period=14) == []


def test_stochastic_k_output_length():
    bars = generate_sample_candlestick_data(60, seed=3)
    assert len(stochastic_k(bars, 14)) == 60 - 14 + 1


# ----------------------------------------------------------------------
# Shared properties
# ----------------------------------------------------------------------

def test_engines_are_deterministic():
    bars = generate_sample_candlestick_data(120, seed=11)
    assert rsi(bars) == rsi(bars)
    assert stochastic_k(bars) == stochastic_k(bars)
    closes = [b.close for b in bars]
    assert ema(closes, 10) == ema(closes, 10)


def test_output_timestamps_come_from_input():
    bars = generate_sample_candlestick_data(80, seed=5)
    stamps = {b.timestamp for b in bars}
    for points in (rsi(bars), stochastic_k(bars), volume(bars)):
        assert points
        assert all(p.timestamp in stamps for p in points)


def test_engines_do_not_modify_input():
    bars = generate_sample_candlestick_data(50, seed=2)
    before = list(bars)
    rsi(bars)
    stochastic_k(bars)
    assert bars == before


def test_volume_series_follows_bars():
    bars = [PriceBar("2024-01-01", 1, 2, 0.5, 1.5, 1000.0), PriceBar("2024-01-02", 1, 2, 0.5, 1.5, 2000.0)]
    assert volume(bars) == [IndicatorPoint("2024-01-01", 1000.0), IndicatorPoint("2024-01-02", 2000.0)]


def test_compute_dispatches_by_type():
    bars = generate_sample_candlestick_data(60, seed=9)
    assert compute(bars, IndicatorType.RSI) == rsi(bars, 14)
    assert compute(bars, IndicatorType.STOCHASTIC) == stochastic_k(bars, 14)
    assert compute(bars, IndicatorType.VOLUME) == volume(bars)
