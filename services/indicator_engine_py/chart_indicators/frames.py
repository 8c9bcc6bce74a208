"""Bridge between pandas OHLC frames and the engine data model.

Data providers hand around DataFrames indexed by timestamp with
``open/high/low/close`` (and usually ``volume``) columns.  These helpers
convert such frames to ``PriceBar`` lists and turn engine output back
into pandas objects.
"""
from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from .models import IndicatorSeries, MacdResult, PriceBar

_OHLC = ["open", "high", "low", "close"]


def bars_from_frame(df: pd.DataFrame) -> list[PriceBar]:
    """Convert an OHLC(V) DataFrame into bars, using the index as timestamps."""
    missing = [c for c in _OHLC if c not in df.columns]
    if missing:
        raise ValueError(f"frame is missing columns: {', '.join(missing)}")
    volumes = df["volume"] if "volume" in df.columns else pd.Series(0.0, index=df.index)
    return [
        PriceBar(
            timestamp=row.Index,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(vol),
        )
        for row, vol in zip(df[_OHLC].itertuples(), volumes)
    ]


def bars_to_frame(bars: Sequence[PriceBar]) -> pd.DataFrame:
    """Inverse of :func:`bars_from_frame`."""
    df = pd.DataFrame(
        {
            "open": [b.open for b in bars],
            "high": [b.high for b in bars],
            "low": [b.low for b in bars],
            "close": [b.close for b in bars],
            "volume": [b.volume for b in bars],
        },
        index=pd.Index([b.timestamp for b in bars], name="date"),
        dtype=float,
    )
    return df


def series_to_pandas(points: IndicatorSeries, name: Optional[str] = None) -> pd.Series:
    return pd.Series(
        [p.value for p in points],
        index=pd.Index([p.timestamp for p in points], name="date"),
        name=name,
        dtype=float,
    )


def macd_to_frame(result: MacdResult) -> pd.DataFrame:
    """
    Lay the three MACD sub-series side by side on the MACD line's
    timestamps.  Signal and histogram are NaN until their warm-up ends.
    """
    macd = series_to_pandas(result.macd_line, "macd")
    signal = series_to_pandas(result.signal_line, "macd_signal").reindex(macd.index)
    diff = series_to_pandas(result.histogram, "macd_diff").reindex(macd.index)
    return pd.DataFrame({"macd": macd, "macd_signal": signal, "macd_diff": diff})
