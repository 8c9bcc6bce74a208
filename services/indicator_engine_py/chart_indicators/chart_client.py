# chart_indicators/chart_client.py
"""Async client for the remote chart API.

Two endpoints are used:

* ``GET /api/charts/{stockId}?interval=<minute|hour|day|week|month>``
  returns ``{stockId, interval, candles: [{timestamp, open, high, low,
  close, volume}]}`` with epoch-millisecond timestamps;
* ``GET /api/charts/{stockId}/pattern-analysis`` returns the detected
  chart pattern for a stock.

429 and 5xx responses are retried with exponential backoff.  Anything
else >= 400 raises :class:`ChartApiError` immediately.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from .config import Settings, get_logger, load_settings
from .mapping import chart_data_from_dto, pattern_analysis_from_dto
from .models import ChartData, ChartInterval, PatternAnalysis

logger = get_logger("chart_client")


class ChartApiError(RuntimeError):
    """HTTP failure talking to the chart API."""

    def __init__(self, status: int, message: str):
        super().__init__(f"chart API error {status}: {message}")
        self.status = status
        self.message = message


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class ChartApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ChartApiClient":
        settings = settings or load_settings()
        return cls(
            settings.chart_api_base_url,
            timeout=settings.chart_api_timeout_secs,
            max_retries=settings.chart_api_max_retries,
            backoff_base=settings.chart_api_backoff_base_secs,
        )

    async def __aenter__(self) -> "ChartApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        for attempt in range(1, self.max_retries + 1):
            resp = await self._client.get(path, params=params)
            status = resp.status_code

            if status == 429 or 500 <= status < 600:
                msg = _error_message(resp)
                if attempt == self.max_retries:
                    raise ChartApiError(status, msg or "rate limited/temporary error")
                delay = self.backoff_base * (2 ** (attempt - 1))
                logger.warning("chart API %s on attempt %s: %s (backoff %.2fs)", status, attempt, msg or "retrying", delay)
                await asyncio.sleep(delay)
                continue

            if status >= 400:
                raise ChartApiError(status, _error_message(resp))

            return resp.json()

        raise ChartApiError(0, "request failed after retries")

    async def get_chart_data(self, stock_id: str, interval: ChartInterval) -> ChartData:
        payload = await self._get_json(f"/api/charts/{stock_id}", params={"interval": interval.api_value})
        chart = chart_data_from_dto(payload)
        logger.debug("fetched %s candles for %s@%s", len(chart.bars), stock_id, interval.api_value)
        return chart

    async def get_pattern_analysis(self, stock_id: str) -> PatternAnalysis:
        payload = await self._get_json(f"/api/charts/{stock_id}/pattern-analysis")
        return pattern_analysis_from_dto(payload)
