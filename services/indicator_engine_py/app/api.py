"""
FastAPI application exposing indicator computation and multi-panel
chart payloads.  Indicators are computed per request; the only state is
the chart repository's in-memory candle cache.
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Union

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from chart_indicators import (
    ChartApiClient,
    ChartDataUnavailable,
    ChartInterval,
    ChartRepository,
    IndicatorConfigs,
    IndicatorType,
    MacdConfig,
    PriceBar,
    RsiConfig,
    StochasticConfig,
    build_multi_panel,
    compute,
    load_settings,
    multi_panel_to_dict,
)
from chart_indicators.chart_client import ChartApiError
from chart_indicators.mapping import bar_to_dict, point_to_dict
from chart_indicators.models import MacdResult
from chart_indicators.panels import DEFAULT_SELECTION, macd_to_dict
from chart_indicators.sample_data import generate_sample_candlestick_data

logger = logging.getLogger("indicator_api")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await close_repository()


app = FastAPI(title="Chart Indicator API", lifespan=lifespan)


# ----------------------------------------------------------------------
# Models
# ----------------------------------------------------------------------
class BarModel(BaseModel):
    time: Union[int, str]
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def to_bar(self) -> PriceBar:
        return PriceBar(self.time, self.open, self.high, self.low, self.close, self.volume)


class IndicatorRequest(BaseModel):
    bars: List[BarModel]
    indicators: List[str] = Field(
        ..., description="Indicators: rsi, macd, stochastic, volume"
    )
    rsi_period: int = Field(14, gt=0)
    macd_fast: int = Field(12, gt=0)
    macd_slow: int = Field(26, gt=0)
    macd_signal: int = Field(9, gt=0)
    stochastic_period: int = Field(14, gt=0)

    @field_validator("indicators")
    @classmethod
    def _validate_indicators(cls, v):
        if not v:
            raise ValueError("no indicators requested")
        return v

    @field_validator("macd_slow")
    @classmethod
    def _validate_macd_periods(cls, v, info):
        fast = info.data.get("macd_fast")
        if fast is not None and fast >= v:
            raise ValueError("macd_slow must be greater than macd_fast")
        return v

    def configs(self) -> IndicatorConfigs:
        return IndicatorConfigs(
            rsi=RsiConfig(self.rsi_period),
            macd=MacdConfig(self.macd_fast, self.macd_slow, self.macd_signal),
            stochastic=StochasticConfig(self.stochastic_period),
        )


def _parse_indicators(names: Optional[List[str]]) -> frozenset:
    if not names:
        return DEFAULT_SELECTION
    try:
        return frozenset(IndicatorType.from_str(n) for n in names)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))


def _parse_interval(value: str) -> ChartInterval:
    try:
        return ChartInterval.from_str(value)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))


_repository: Optional[ChartRepository] = None


def get_repository() -> ChartRepository:
    global _repository
    if _repository is None:
        settings = load_settings()
        _repository = ChartRepository(
            ChartApiClient.from_settings(settings),
            stale_after_secs=settings.cache_stale_secs,
        )
    return _repository


async def close_repository() -> None:
    """Close the chart API client behind the shared repository, if one was built."""
    global _repository
    if _repository is not None:
        await _repository.client.aclose()
        _repository = None


# ----------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------
@app.post("/indicators/compute")
async def compute_indicators(req: IndicatorRequest):
    bars = [b.to_bar() for b in req.bars]
    configs = req.configs()
    result: Dict[str, Any] = {}
    for name in req.indicators:
        key = name.lower()
        try:
            indicator = IndicatorType.from_str(key)
        except ValueError:
            raise HTTPException(400, detail=f"Unknown indicator {name}")
        data = compute(bars, indicator, configs)
        if isinstance(data, MacdResult):
            result[key] = macd_to_dict(data)
        else:
            result[key] = [point_to_dict(p) for p in data]
    return result


@app.get("/samples/candles")
async def sample_candles(
    count: int = Query(50, gt=0, le=5000),
    seed: Optional[int] = Query(None),
):
    """Return generated daily candles."""
    return [bar_to_dict(b) for b in generate_sample_candlestick_data(count, seed=seed)]


@app.get("/samples/multi-panel")
async def sample_multi_panel(
    count: int = Query(200, gt=0, le=5000),
    seed: Optional[int] = Query(None),
    indicators: Optional[List[str]] = Query(None, description="rsi, macd, volume, stochastic"),
):
    selected = _parse_indicators(indicators)
    bars = generate_sample_candlestick_data(count, seed=seed)
    return multi_panel_to_dict(build_multi_panel(bars, selected))


@app.get("/charts/{stock_id}/panels")
async def chart_panels(
    stock_id: str,
    interval: str = Query("day", description="minute, hour, day, week, month"),
    indicators: Optional[List[str]] = Query(None),
    repo: ChartRepository = Depends(get_repository),
):
    """
    Fetch a chart through the repository (falling back to cached candles
    when the chart API is down) and compose its indicator panels.
    """
    chart_interval = _parse_interval(interval)
    selected = _parse_indicators(indicators)
    try:
        data = await repo.get_indicator_panels(stock_id, chart_interval, selected)
    except ChartDataUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception:
        logger.exception("Unhandled error in /charts/%s/panels", stock_id)
        raise HTTPException(status_code=500, detail="Internal server error")
    return multi_panel_to_dict(data)


@app.get("/charts/{stock_id}/pattern-analysis")
async def pattern_analysis(
    stock_id: str,
    repo: ChartRepository = Depends(get_repository),
):
    try:
        analysis = await repo.client.get_pattern_analysis(stock_id)
    except ChartApiError as e:
        status = 404 if e.status == 404 else 502
        raise HTTPException(status_code=status, detail=str(e))
    except (httpx.HTTPError, ValueError) as e:
        raise HTTPException(status_code=502, detail=f"pattern analysis unavailable for {stock_id}: {e}")
    except Exception:
        logger.exception("Unhandled error in /charts/%s/pattern-analysis", stock_id)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {
        "stockId": analysis.stock_id,
        "patternType": analysis.pattern_type,
        "confidence": analysis.confidence,
        "description": analysis.description,
        "analyzedAt": analysis.analyzed_at.isoformat(),
    }
