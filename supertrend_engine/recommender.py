from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .bars import BarSeries
from .config import EngineConfig
from .indicators import Direction, SupertrendState, rolling_sma, supertrend_for
from .risk import Side, apply_slippage, size_position


class Signal(str, Enum):
    BUY_PENDING = "BUY_PENDING"
    SELL_PENDING = "SELL_PENDING"
    NO_TRADE = "NO_TRADE"
    NO_DATA = "NO_DATA"


class Trend(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    RANGE = "RANGE"


@dataclass(frozen=True)
class Recommendation:
    signal: Signal
    trend: Optional[Trend] = None
    entry_price: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    quantity: Optional[int] = None
    commission: Optional[float] = None
    atr: Optional[float] = None

    @property
    def actionable(self) -> bool:
        return self.signal in (Signal.BUY_PENDING, Signal.SELL_PENDING)

    def to_dict(self) -> Dict[str, Any]:
        out = {k: v for k, v in asdict(self).items() if v is not None}
        out["signal"] = self.signal.value
        if self.trend is not None:
            out["trend"] = self.trend.value
        return out


NO_DATA = Recommendation(signal=Signal.NO_DATA)
NO_TRADE = Recommendation(signal=Signal.NO_TRADE, trend=Trend.RANGE)


def _missing(x: Optional[float]) -> bool:
    return x is None or math.isnan(x)


def build_plan(side: Side, close: float, state: SupertrendState, cfg: EngineConfig) -> Recommendation:
    """Entry/stop/target/size for a confirmed flip, derived from the latest close.

    Stop is the Supertrend line unless it is missing or on the wrong side of entry,
    in which case it falls back to entry -/+ stop_atr_mult * ATR.
    """
    atr = state.atr or 0.0
    entry = apply_slippage(close, side, cfg)
    stop = state.supertrend

    if side is Side.BUY:
        if _missing(stop) or stop >= entry:
            stop = entry - cfg.stop_atr_mult * atr
        target = entry + cfg.target_atr_mult * atr
        trend, signal = Trend.UP, Signal.BUY_PENDING
    else:
        if _missing(stop) or stop <= entry:
            stop = entry + cfg.stop_atr_mult * atr
        target = entry - cfg.target_atr_mult * atr
        trend, signal = Trend.DOWN, Signal.SELL_PENDING

    size = size_position(entry, stop, cfg)
    return Recommendation(
        signal=signal,
        trend=trend,
        entry_price=entry,
        stop_loss=stop,
        take_profit=target,
        quantity=size.quantity,
        commission=size.commission,
        atr=atr,
    )


def analyze_series(series: BarSeries, cfg: Optional[EngineConfig] = None) -> Recommendation:
    """Evaluate the latest bar: Supertrend flip confirmed by the SMA trend filter.

      - BUY  when direction flips down -> up and close > SMA
      - SELL when direction flips up -> down and close < SMA
      - otherwise NO_TRADE (trend RANGE)

    Not enough history, or undefined indicator values on the last two bars, yields NO_DATA.
    """
    cfg = cfg or EngineConfig()
    n = len(series) - 1
    if n < cfg.min_required_index:
        return NO_DATA

    closes = series.closes
    sma = rolling_sma(closes, cfg.sma_filter_period)
    states = supertrend_for(series, atr_period=cfg.super_atr_period, multiplier=cfg.super_multiplier)

    last_state = states[n]
    prev_state = states[n - 1]
    if not last_state.defined or not prev_state.defined:
        return NO_DATA

    sma_last = float(sma[n])
    if math.isnan(sma_last):
        return NO_DATA

    close = float(closes[n])
    flipped_to_up = prev_state.direction is Direction.DOWN and last_state.direction is Direction.UP
    flipped_to_down = prev_state.direction is Direction.UP and last_state.direction is Direction.DOWN

    if flipped_to_up and close > sma_last:
        return build_plan(Side.BUY, close, last_state, cfg)
    if flipped_to_down and close < sma_last:
        return build_plan(Side.SELL, close, last_state, cfg)
    return NO_TRADE
