"""Universe pre-filter applied before signal evaluation.

A symbol passes when:
  - it has at least rs_period bars
  - last close is within [min_price, max_price]
  - average turnover (close * volume) over the last turnover_period bars >= min_avg_turnover
  - relative strength (close change over the last rs_period bars) >= min_relative_strength
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import numpy as np

from .bars import BarSeries, to_bar_series
from .config import EngineConfig
from .errors import StructuralInputError


def avg_turnover(series: BarSeries, period: int) -> float:
    recent = series.tail(period)
    if len(recent) == 0:
        return 0.0
    turnover = recent.closes * np.nan_to_num(recent.volumes, nan=0.0)
    return float(np.mean(turnover))


def relative_strength(series: BarSeries, period: int) -> float:
    """Fractional close change over the last `period` bars (0.05 = +5%)."""
    if period <= 0 or len(series) < period:
        return 0.0
    start = float(series.closes[-period])
    end = float(series.closes[-1])
    if start == 0:
        return 0.0
    return (end - start) / start


def passes_filters(series: BarSeries, cfg: EngineConfig) -> bool:
    if len(series) < cfg.rs_period:
        return False
    last_close = series.last.close
    if last_close < cfg.min_price or last_close > cfg.max_price:
        return False
    return (
        avg_turnover(series, cfg.turnover_period) >= cfg.min_avg_turnover
        and relative_strength(series, cfg.rs_period) >= cfg.min_relative_strength
    )


def screen_universe(universe: Dict[str, Any], cfg: EngineConfig) -> List[str]:
    """Symbols passing the pre-filter, in input order. Structurally broken entries are skipped."""
    out: List[str] = []
    for symbol, raw in universe.items():
        try:
            series = to_bar_series(raw, symbol=symbol)
        except StructuralInputError as exc:
            logging.warning("Skipping %s: %s", symbol, exc)
            continue
        if passes_filters(series, cfg):
            out.append(symbol)
    logging.info("screen_universe: %s/%s symbols passed", len(out), len(universe))
    return out
