"""
Sample price data for demos, previews and tests.

The generators are random walks driven by numpy's ``default_rng``; pass a
``seed`` (and an ``end`` date) to get the same data on every call.
Daily points are labelled ``YYYY-MM-DD`` and end the day before ``end``.
"""
from __future__ import annotations

import asyncio
import datetime as dt
from typing import AsyncIterator, List, Optional

import numpy as np

from .models import IndicatorPoint, IndicatorSeries, PriceBar

MIN_PRICE = 0.1


def _day_labels(count: int, end: Optional[dt.date]) -> List[str]:
    end = end or dt.date.today()
    start = end - dt.timedelta(days=count)
    return [(start + dt.timedelta(days=i)).isoformat() for i in range(count)]


def generate_sample_line_data(
    count: int = 50, seed: Optional[int] = None, end: Optional[dt.date] = None
) -> IndicatorSeries:
    """Random walk starting at 100 with steps in [-5, 5), floored at 0.1."""
    rng = np.random.default_rng(seed)
    points: IndicatorSeries = []
    last_value = 100.0
    for label in _day_labels(count, end):
        last_value += float(rng.uniform(-5.0, 5.0))
        points.append(IndicatorPoint(label, max(last_value, MIN_PRICE)))
    return points


def generate_sample_candlestick_data(
    count: int = 50, seed: Optional[int] = None, end: Optional[dt.date] = None
) -> List[PriceBar]:
    """
    Daily OHLCV bars.  Each open gaps up to 2 away from the previous
    close, the close moves up to 5 from the open, and the wicks extend up
    to 3 beyond the body.  Prices are floored at 0.1.
    """
    rng = np.random.default_rng(seed)
    bars: List[PriceBar] = []
    last_close = 100.0
    for label in _day_labels(count, end):
        open_ = last_close + float(rng.uniform(-2.0, 2.0))
        close = open_ + float(rng.uniform(-5.0, 5.0))
        high = max(open_, close) + float(rng.uniform(0.0, 3.0))
        low = min(open_, close) - float(rng.uniform(0.0, 3.0))
        bars.append(
            PriceBar(
                timestamp=label,
                open=max(open_, MIN_PRICE),
                high=max(high, MIN_PRICE),
                low=max(low, MIN_PRICE),
                close=max(close, MIN_PRICE),
                volume=float(rng.uniform(100_000.0, 1_000_000.0)),
            )
        )
        last_close = close
    return bars


async def generate_realtime_data(
    initial_value: float = 100.0,
    interval_secs: float = 1.0,
    seed: Optional[int] = None,
    limit: Optional[int] = None,
    start: Optional[dt.datetime] = None,
) -> AsyncIterator[IndicatorPoint]:
    """
    Yield a tick every ``interval_secs`` seconds, moving up to 2 per tick.
    Runs forever unless ``limit`` is given.
    """
    rng = np.random.default_rng(seed)
    current = initial_value
    ts = start or dt.datetime.now(dt.timezone.utc).replace(microsecond=0)
    emitted = 0
    while limit is None or emitted < limit:
        await asyncio.sleep(interval_secs)
        current = max(current + float(rng.uniform(-2.0, 2.0)), MIN_PRICE)
        yield IndicatorPoint(ts.strftime("%Y-%m-%d %H:%M:%S"), current)
        ts += dt.timedelta(seconds=1)
        emitted += 1


# Fixed fifteen-day fixtures
SAMPLE_STOCK_BARS: List[PriceBar] = [
    PriceBar("2024-01-01", 150.0, 155.0, 148.0, 152.0, 1250000.0),
    PriceBar("2024-01-02", 152.0, 158.0, 151.0, 156.0, 1350000.0),
    PriceBar("2024-01-03", 156.0, 159.0, 154.0, 157.0, 980000.0),
    PriceBar("2024-01-04", 157.0, 162.0, 155.0, 160.0, 1420000.0),
    PriceBar("2024-01-05", 160.0, 165.0, 158.0, 163.0, 1680000.0),
    PriceBar("2024-01-06", 163.0, 166.0, 161.0, 164.0, 1530000.0),
    PriceBar("2024-01-07", 164.0, 168.0, 162.0, 167.0, 1790000.0),
    PriceBar("2024-01-08", 167.0, 170.0, 165.0, 169.0, 1920000.0),
    PriceBar("2024-01-09", 169.0, 172.0, 167.0, 171.0, 1810000.0),
    PriceBar("2024-01-10", 171.0, 174.0, 169.0, 173.0, 2050000.0),
    PriceBar("2024-01-11", 173.0, 176.0, 171.0, 175.0, 2230000.0),
    PriceBar("2024-01-12", 175.0, 178.0, 173.0, 177.0, 2170000.0),
    PriceBar("2024-01-13", 177.0, 180.0, 175.0, 179.0, 2380000.0),
    PriceBar("2024-01-14", 179.0, 182.0, 177.0, 181.0, 2290000.0),
    PriceBar("2024-01-15", 181.0, 184.0, 179.0, 183.0, 2460000.0),
]

SAMPLE_CRYPTO_LINE: IndicatorSeries = [
    IndicatorPoint("2024-01-01", 42000.0),
    IndicatorPoint("2024-01-02", 43500.0),
    IndicatorPoint("2024-01-03", 41800.0),
    IndicatorPoint("2024-01-04", 44200.0),
    IndicatorPoint("2024-01-05", 46800.0),
    IndicatorPoint("2024-01-06", 45300.0),
    IndicatorPoint("2024-01-07", 47900.0),
    IndicatorPoint("2024-01-08", 49200.0),
    IndicatorPoint("2024-01-09", 48100.0),
    IndicatorPoint("2024-01-10", 50500.0),
    IndicatorPoint("2024-01-11", 52300.0),
    IndicatorPoint("2024-01-12", 51700.0),
    IndicatorPoint("2024-01-13", 53800.0),
    IndicatorPoint("2024-01-14", 52900.0),
    IndicatorPoint("2024-01-15", 54600.0),
]

SAMPLE_VOLUME_LINE: IndicatorSeries = [
    IndicatorPoint(bar.timestamp, bar.volume) for bar in SAMPLE_STOCK_BARS
]
