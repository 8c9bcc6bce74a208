"""Data models shared by the indicator engines and their collaborators.

Everything here is immutable.  A ``PriceBar`` is supplied by a data
provider (sample generator, remote API, DataFrame), the engines read it
and produce fresh lists of ``IndicatorPoint``.  Timestamps are opaque
labels: they are copied to outputs for alignment and never used in any
numeric computation.
"""
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class PriceBar:
    """One sampled interval of market data.

    The usual ``low <= min(open, close) <= max(open, close) <= high``
    relationship is assumed, not checked.
    """

    timestamp: Any
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class IndicatorPoint:
    timestamp: Any
    value: float


IndicatorSeries = List[IndicatorPoint]


@dataclass(frozen=True)
class MacdResult:
    """MACD line plus the optional signal line and histogram."""

    macd_line: IndicatorSeries = field(default_factory=list)
    signal_line: IndicatorSeries = field(default_factory=list)
    histogram: IndicatorSeries = field(default_factory=list)

    @classmethod
    def empty(cls) -> "MacdResult":
        return cls([], [], [])

    @property
    def is_empty(self) -> bool:
        return not (self.macd_line or self.signal_line or self.histogram)


class ChartInterval(enum.Enum):
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def from_str(cls, value: str) -> "ChartInterval":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown chart interval {value!r}") from None

    @property
    def api_value(self) -> str:
        """Lowercase name used in API query strings."""
        return self.name.lower()


class IndicatorType(enum.Enum):
    RSI = "rsi"
    MACD = "macd"
    VOLUME = "volume"
    STOCHASTIC = "stochastic"

    @classmethod
    def from_str(cls, value: str) -> "IndicatorType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown indicator {value!r}") from None


@dataclass(frozen=True)
class ChartData:
    stock_id: str
    interval: ChartInterval
    bars: List[PriceBar]

    @property
    def latest_timestamp(self) -> Optional[Any]:
        if not self.bars:
            return None
        return max(bar.timestamp for bar in self.bars)


@dataclass(frozen=True)
class PatternAnalysis:
    stock_id: str
    pattern_type: str
    confidence: float
    description: str
    analyzed_at: dt.datetime
