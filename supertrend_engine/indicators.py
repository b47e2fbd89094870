from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from .bars import BarSeries


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    NONE = "none"


@dataclass(frozen=True)
class SupertrendState:
    """Supertrend state for one bar. All numeric fields are None until ATR is seeded."""

    supertrend: Optional[float] = None
    direction: Direction = Direction.NONE
    atr: Optional[float] = None
    upper: Optional[float] = None
    lower: Optional[float] = None

    @property
    def defined(self) -> bool:
        return self.direction is not Direction.NONE


@dataclass(frozen=True)
class SRZones:
    support: float
    resistance: float


def rolling_sma(values: Sequence[float], period: int) -> np.ndarray:
    """Simple moving average aligned to each index (NaN until enough bars)."""
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    out = np.full(n, np.nan)
    if n < period or period <= 0:
        return out
    windows = np.lib.stride_tricks.sliding_window_view(arr, period)
    out[period - 1 :] = windows.mean(axis=1)
    return out


def true_range(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]) -> np.ndarray:
    """True Range per bar.

      TR = max(high-low, abs(high-prev_close), abs(low-prev_close))

    The first bar uses its own close as prev_close, so TR[0] = high[0]-low[0].
    """
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    c = np.asarray(closes, dtype=float)
    if len(c) == 0:
        return np.zeros(0, dtype=float)
    prev_close = np.concatenate(([c[0]], c[:-1]))
    return np.maximum(h - l, np.maximum(np.abs(h - prev_close), np.abs(l - prev_close)))


def atr_wilder(tr: Sequence[float], period: int) -> np.ndarray:
    """ATR with Wilder smoothing over a True Range array.

    - NaN for i < period-1
    - seed at i = period-1: mean(TR[0..period-1])
    - ATR[i] = (ATR[i-1]*(period-1) + TR[i]) / period afterwards
    """
    t = np.asarray(tr, dtype=float)
    n = len(t)
    out = np.full(n, np.nan)
    if n < period or period <= 0:
        return out

    prev = float(np.sum(t[:period])) / period
    out[period - 1] = prev
    for i in range(period, n):
        prev = (prev * (period - 1) + float(t[i])) / period
        out[i] = prev
    return out


def supertrend(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    atr_period: int = 10,
    multiplier: float = 3.0,
) -> List[SupertrendState]:
    """Supertrend states aligned 1:1 with the input bars.

    Single forward pass carrying the previous final bands, direction and value.

    Bands ratchet against the trend:
      - upper resets to the basic band only if it tightens or the previous close broke above it
      - lower resets to the basic band only if it tightens or the previous close broke below it

    Direction uses the previous close against the current final bands:
      - was up:   prev_close <= upper -> down (value=upper), else up (value=lower)
      - was down: prev_close >= lower -> up (value=upper), else down (value=lower)

    Note:
      - A flip to up reports the upper band as its value; stop-loss logic downstream
        falls back to an ATR stop when that value sits on the wrong side of entry.
    """
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    c = np.asarray(closes, dtype=float)
    n = len(c)
    if n == 0:
        return []

    atr = atr_wilder(true_range(h, l, c), atr_period)

    out: List[SupertrendState] = []
    prev_upper: Optional[float] = None
    prev_lower: Optional[float] = None
    prev_value: Optional[float] = None
    prev_direction = Direction.NONE

    for i in range(n):
        atr_v = float(atr[i])
        if math.isnan(atr_v):
            out.append(SupertrendState())
            continue

        hl2 = (float(h[i]) + float(l[i])) / 2.0
        basic_upper = hl2 + multiplier * atr_v
        basic_lower = hl2 - multiplier * atr_v

        final_upper = basic_upper
        final_lower = basic_lower
        if prev_upper is not None:
            prev_close = float(c[i - 1])
            if not (basic_upper < prev_upper or prev_close > prev_upper):
                final_upper = prev_upper
            if not (basic_lower > prev_lower or prev_close < prev_lower):
                final_lower = prev_lower

        if prev_value is None:
            direction = Direction.UP if float(c[i]) > hl2 else Direction.DOWN
            value = final_lower if direction is Direction.UP else final_upper
        elif prev_direction is Direction.UP:
            if float(c[i - 1]) <= final_upper:
                direction, value = Direction.DOWN, final_upper
            else:
                direction, value = Direction.UP, final_lower
        else:
            if float(c[i - 1]) >= final_lower:
                direction, value = Direction.UP, final_upper
            else:
                direction, value = Direction.DOWN, final_lower

        out.append(SupertrendState(supertrend=value, direction=direction, atr=atr_v, upper=final_upper, lower=final_lower))

        prev_upper = final_upper
        prev_lower = final_lower
        prev_value = value
        prev_direction = direction

    return out


def supertrend_for(series: BarSeries, atr_period: int = 10, multiplier: float = 3.0) -> List[SupertrendState]:
    return supertrend(series.highs, series.lows, series.closes, atr_period=atr_period, multiplier=multiplier)


def find_sr_zones(series: BarSeries, lookback: int = 30) -> Optional[SRZones]:
    """Support/resistance from swing points in the trailing `lookback` bars.

    Swing high: high above both neighbours. Swing low: low below both neighbours.
    The two bars at each edge of the window are not candidates.
    Falls back to the window's min low / max high when no swing point exists.
    """
    recent = series.tail(lookback)
    if len(recent) == 0:
        return None

    h = recent.highs
    l = recent.lows
    swing_highs: List[float] = []
    swing_lows: List[float] = []
    for i in range(2, len(recent) - 2):
        if h[i] > h[i - 1] and h[i] > h[i + 1]:
            swing_highs.append(float(h[i]))
        if l[i] < l[i - 1] and l[i] < l[i + 1]:
            swing_lows.append(float(l[i]))

    support = min(swing_lows) if swing_lows else float(np.min(l))
    resistance = max(swing_highs) if swing_highs else float(np.max(h))
    return SRZones(support=support, resistance=resistance)
