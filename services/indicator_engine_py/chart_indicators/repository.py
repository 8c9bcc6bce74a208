"""
Chart repository: remote chart API in front, in-memory cache behind.

Fresh cached charts are served without a request.  A chart counts as
fresh while its newest candle is younger than ``stale_after_secs``.
When the API fails, whatever is cached is returned instead, however old.
"""
from __future__ import annotations

import time
from typing import AbstractSet, Callable, Dict, Optional, Tuple

import httpx

from .chart_client import ChartApiClient, ChartApiError
from .config import IndicatorConfigs, get_logger
from .models import ChartData, ChartInterval, IndicatorType
from .panels import DEFAULT_SELECTION, MultiPanelData, build_multi_panel

logger = get_logger("chart_repository")


class ChartDataUnavailable(RuntimeError):
    """Neither the API nor the cache could provide the chart."""


class ChartRepository:
    def __init__(
        self,
        client: ChartApiClient,
        stale_after_secs: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.stale_after_secs = stale_after_secs
        self._clock = clock
        self._cache: Dict[Tuple[str, ChartInterval], ChartData] = {}

    def get_cached_chart_data(self, stock_id: str, interval: ChartInterval) -> Optional[ChartData]:
        chart = self._cache.get((stock_id, interval))
        if chart is None or not chart.bars:
            return None
        return chart

    def cache_chart_data(self, chart: ChartData) -> None:
        # replaces the previous entry
        self._cache[(chart.stock_id, chart.interval)] = chart

    def clear(self) -> None:
        self._cache.clear()

    def is_stale(self, chart: ChartData) -> bool:
        latest = chart.latest_timestamp
        if not isinstance(latest, int):
            return True
        now_ms = self._clock() * 1000
        return now_ms - latest > self.stale_after_secs * 1000

    async def get_chart_data(self, stock_id: str, interval: ChartInterval) -> ChartData:
        cached = self.get_cached_chart_data(stock_id, interval)
        if cached is not None and not self.is_stale(cached):
            return cached

        try:
            chart = await self.client.get_chart_data(stock_id, interval)
        except (ChartApiError, httpx.HTTPError, ValueError) as e:
            if cached is not None:
                logger.warning("chart fetch for %s@%s failed (%s); serving cached data", stock_id, interval.api_value, e)
                return cached
            raise ChartDataUnavailable(f"no chart data for {stock_id}@{interval.api_value}: {e}") from e

        self.cache_chart_data(chart)
        return chart

    async def get_indicator_panels(
        self,
        stock_id: str,
        interval: ChartInterval,
        selected: AbstractSet[IndicatorType] = DEFAULT_SELECTION,
        configs: Optional[IndicatorConfigs] = None,
    ) -> MultiPanelData:
        chart = await self.get_chart_data(stock_id, interval)
        return build_multi_panel(chart.bars, selected, configs)
