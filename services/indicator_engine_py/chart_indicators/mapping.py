"""
Map remote chart payloads onto the engine data model.

The chart API speaks camelCase JSON with epoch-millisecond candle
timestamps; chart front-ends label points with ``YYYY-MM-DD`` strings.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Mapping, Sequence

from .models import ChartData, ChartInterval, IndicatorPoint, IndicatorSeries, PatternAnalysis, PriceBar

_CANDLE_FIELDS = ("timestamp", "open", "high", "low", "close")


def format_chart_time(timestamp_ms: int) -> str:
    """Epoch milliseconds -> ``YYYY-MM-DD`` (UTC)."""
    return dt.datetime.fromtimestamp(timestamp_ms / 1000, tz=dt.timezone.utc).strftime("%Y-%m-%d")


def candle_to_bar(candle: Mapping[str, Any], date_labels: bool = False) -> PriceBar:
    missing = [f for f in _CANDLE_FIELDS if f not in candle]
    if missing:
        raise ValueError(f"candle is missing fields: {', '.join(missing)}")
    try:
        ts = int(candle["timestamp"])
        return PriceBar(
            timestamp=format_chart_time(ts) if date_labels else ts,
            open=float(candle["open"]),
            high=float(candle["high"]),
            low=float(candle["low"]),
            close=float(candle["close"]),
            volume=float(candle.get("volume", 0) or 0),
        )
    except TypeError as e:
        # JSON null in a numeric field
        raise ValueError(f"malformed candle: {e}") from e


def chart_data_from_dto(payload: Mapping[str, Any]) -> ChartData:
    try:
        stock_id = str(payload["stockId"])
        interval = ChartInterval.from_str(str(payload["interval"]))
        candles = payload["candles"]
    except KeyError as e:
        raise ValueError(f"chart payload is missing {e.args[0]!r}") from None
    if not isinstance(candles, list):
        raise ValueError("chart payload 'candles' must be a list")
    return ChartData(stock_id=stock_id, interval=interval, bars=[candle_to_bar(c) for c in candles])


def pattern_analysis_from_dto(payload: Mapping[str, Any]) -> PatternAnalysis:
    try:
        return PatternAnalysis(
            stock_id=str(payload["stockId"]),
            pattern_type=str(payload["patternType"]),
            confidence=float(payload["confidence"]),
            description=str(payload["description"]),
            analyzed_at=dt.datetime.fromisoformat(str(payload["analyzedAt"])),
        )
    except KeyError as e:
        raise ValueError(f"pattern analysis payload is missing {e.args[0]!r}") from None
    except TypeError as e:
        raise ValueError(f"malformed pattern analysis payload: {e}") from e


def close_line(bars: Sequence[PriceBar]) -> IndicatorSeries:
    """Close prices as a line series."""
    return [IndicatorPoint(bar.timestamp, bar.close) for bar in bars]


def point_to_dict(point: IndicatorPoint) -> Dict[str, Any]:
    return {"time": point.timestamp, "value": point.value}


def bar_to_dict(bar: PriceBar) -> Dict[str, Any]:
    return {
        "time": bar.timestamp,
        "open": bar.open,
        "high": bar.high,
        "low": bar.low,
        "close": bar.close,
        "volume": bar.volume,
    }
