"""
Compose a price series and its indicator panels into one payload.

A multi-panel chart shows the candles on top and one panel per selected
indicator below, always in the order RSI, MACD, Volume, Stochastic.
Selection is an immutable set; toggling returns a new one.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Any, Dict, FrozenSet, List, Optional, Sequence, Union

from . import indicators
from .config import IndicatorConfigs
from .mapping import bar_to_dict, point_to_dict
from .models import IndicatorSeries, IndicatorType, MacdResult, PriceBar

PANEL_ORDER = (
    IndicatorType.RSI,
    IndicatorType.MACD,
    IndicatorType.VOLUME,
    IndicatorType.STOCHASTIC,
)

DEFAULT_SELECTION: FrozenSet[IndicatorType] = frozenset({IndicatorType.RSI, IndicatorType.MACD})


@dataclass(frozen=True)
class IndicatorOptions:
    color: str = "#2962FF"
    line_width: int = 2
    height: int = 150
    visible: bool = True
    precision: int = 2


@dataclass(frozen=True)
class IndicatorPanel:
    type: IndicatorType
    name: str
    data: Union[IndicatorSeries, MacdResult]
    options: IndicatorOptions = IndicatorOptions()


@dataclass(frozen=True)
class MultiPanelData:
    price_data: List[PriceBar]
    indicators: List[IndicatorPanel] = field(default_factory=list)


_PANEL_OPTIONS = {
    IndicatorType.RSI: IndicatorOptions(color="#9C27B0", line_width=2, height=150),
    IndicatorType.MACD: IndicatorOptions(color="#2196F3", line_width=2, height=150),
    IndicatorType.VOLUME: IndicatorOptions(color="#FF9800", line_width=1, height=120),
    IndicatorType.STOCHASTIC: IndicatorOptions(color="#4CAF50", line_width=2, height=150),
}


def panel_name(indicator: IndicatorType, configs: IndicatorConfigs) -> str:
    if indicator is IndicatorType.RSI:
        return f"RSI ({configs.rsi.period})"
    if indicator is IndicatorType.MACD:
        m = configs.macd
        return f"MACD ({m.fast},{m.slow},{m.signal})"
    if indicator is IndicatorType.VOLUME:
        return "Volume"
    return "Stochastic %K"


def toggle_indicator(
    selected: AbstractSet[IndicatorType], indicator: IndicatorType
) -> FrozenSet[IndicatorType]:
    if indicator in selected:
        return frozenset(selected - {indicator})
    return frozenset(selected | {indicator})


def build_panel(
    bars: Sequence[PriceBar],
    indicator: IndicatorType,
    configs: Optional[IndicatorConfigs] = None,
) -> IndicatorPanel:
    configs = configs or IndicatorConfigs()
    return IndicatorPanel(
        type=indicator,
        name=panel_name(indicator, configs),
        data=indicators.compute(bars, indicator, configs),
        options=_PANEL_OPTIONS[indicator],
    )


def build_multi_panel(
    bars: Sequence[PriceBar],
    selected: AbstractSet[IndicatorType] = DEFAULT_SELECTION,
    configs: Optional[IndicatorConfigs] = None,
) -> MultiPanelData:
    configs = configs or IndicatorConfigs()
    panels = [build_panel(bars, ind, configs) for ind in PANEL_ORDER if ind in selected]
    return MultiPanelData(price_data=list(bars), indicators=panels)


# ----------------------------------------------------------------------
# Serialisation (camelCase, as the chart front-end reads it)
# ----------------------------------------------------------------------

def _series_dict(points: IndicatorSeries) -> List[Dict[str, Any]]:
    return [point_to_dict(p) for p in points]


def macd_to_dict(result: MacdResult) -> Dict[str, Any]:
    return {
        "macd": _series_dict(result.macd_line),
        "signal": _series_dict(result.signal_line),
        "histogram": _series_dict(result.histogram),
    }


def panel_to_dict(panel: IndicatorPanel) -> Dict[str, Any]:
    if isinstance(panel.data, MacdResult):
        data: Any = macd_to_dict(panel.data)
    else:
        data = _series_dict(panel.data)
    opts = panel.options
    return {
        "type": panel.type.name,
        "name": panel.name,
        "data": data,
        "options": {
            "color": opts.color,
            "lineWidth": opts.line_width,
            "height": opts.height,
            "visible": opts.visible,
            "precision": opts.precision,
        },
    }


def multi_panel_to_dict(data: MultiPanelData) -> Dict[str, Any]:
    return {
        "priceData": [bar_to_dict(b) for b in data.price_data],
        "indicators": [panel_to_dict(p) for p in data.indicators],
    }
