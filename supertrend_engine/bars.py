from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .errors import StructuralInputError

PRICE_FIELDS = ("open", "high", "low", "close")


def _to_float(val: Any) -> Optional[float]:
    if val is None or isinstance(val, bool):
        return None
    text = str(val).strip()
    if not text:
        return None
    try:
        out = float(text)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def _to_volume(val: Any) -> Optional[float]:
    v = _to_float(val)
    if v is None or v < 0:
        return None
    return v


@dataclass(frozen=True)
class Bar:
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


def parse_bar(row: Any) -> Optional[Bar]:
    """Parse one raw row into a Bar, or None if the row cannot be read or any of
    open/high/low/close is not finite.

    Accepted shapes:
      - mapping with open/high/low/close[/volume] keys
      - candle array [timestamp, open, high, low, close, volume?]
    """
    if isinstance(row, Mapping):
        o, h, l, c = (_to_float(row.get(k)) for k in PRICE_FIELDS)
        vol = row.get("volume")
    elif isinstance(row, (list, tuple)) and len(row) >= 5:
        o, h, l, c = (_to_float(x) for x in row[1:5])
        vol = row[5] if len(row) > 5 else None
    else:
        return None

    if o is None or h is None or l is None or c is None:
        return None
    return Bar(open=o, high=h, low=l, close=c, volume=_to_volume(vol))


@dataclass(frozen=True)
class BarSeries:
    """Chronological (oldest first), immutable sequence of valid bars for one symbol."""

    bars: Tuple[Bar, ...] = ()
    symbol: Optional[str] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.bars)

    def __getitem__(self, i: int) -> Bar:
        return self.bars[i]

    def __iter__(self):
        return iter(self.bars)

    @property
    def last(self) -> Bar:
        return self.bars[-1]

    def _column(self, name: str) -> np.ndarray:
        arr = np.asarray([getattr(b, name) for b in self.bars], dtype=float)
        arr.setflags(write=False)
        return arr

    @cached_property
    def opens(self) -> np.ndarray:
        return self._column("open")

    @cached_property
    def highs(self) -> np.ndarray:
        return self._column("high")

    @cached_property
    def lows(self) -> np.ndarray:
        return self._column("low")

    @cached_property
    def closes(self) -> np.ndarray:
        return self._column("close")

    @cached_property
    def volumes(self) -> np.ndarray:
        """Volumes with missing values as NaN."""
        arr = np.asarray([np.nan if b.volume is None else b.volume for b in self.bars], dtype=float)
        arr.setflags(write=False)
        return arr

    def tail(self, n: int) -> "BarSeries":
        if n <= 0:
            return BarSeries((), symbol=self.symbol)
        return BarSeries(self.bars[-n:], symbol=self.symbol)

    @classmethod
    def from_records(cls, rows: Any, symbol: Optional[str] = None) -> "BarSeries":
        """Build a series from raw rows, dropping rows whose OHLC fails to parse.

        Raises StructuralInputError when `rows` is not a sequence of rows.
        """
        if rows is None:
            return cls((), symbol=symbol)
        if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
            raise StructuralInputError(
                f"expected a sequence of bars, got {type(rows).__name__}",
                details={"symbol": symbol},
            )

        bars: List[Bar] = []
        dropped = 0
        for row in rows:
            bar = parse_bar(row)
            if bar is None:
                dropped += 1
                continue
            bars.append(bar)
        if dropped:
            logging.debug("bar series %s: dropped %s invalid rows", symbol, dropped)
        return cls(tuple(bars), symbol=symbol)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, symbol: Optional[str] = None) -> "BarSeries":
        """Build a series from a DataFrame with open/high/low/close[/volume] columns (row order kept)."""
        if not isinstance(df, pd.DataFrame):
            raise StructuralInputError(f"expected a DataFrame, got {type(df).__name__}", details={"symbol": symbol})
        missing = [c for c in PRICE_FIELDS if c not in df.columns]
        if missing:
            raise StructuralInputError(f"missing columns: {missing}", details={"symbol": symbol})

        prices = df[list(PRICE_FIELDS)].apply(pd.to_numeric, errors="coerce")
        ok = np.isfinite(prices.to_numpy(dtype=float)).all(axis=1)
        if "volume" in df.columns:
            vol = pd.to_numeric(df["volume"], errors="coerce")
        else:
            vol = pd.Series(np.nan, index=df.index)

        bars: List[Bar] = []
        for (o, h, l, c), v, keep in zip(prices.itertuples(index=False, name=None), vol, ok):
            if not keep:
                continue
            volume = float(v) if pd.notna(v) and math.isfinite(v) and v >= 0 else None
            bars.append(Bar(open=float(o), high=float(h), low=float(l), close=float(c), volume=volume))
        dropped = len(df) - len(bars)
        if dropped:
            logging.debug("bar series %s: dropped %s invalid rows", symbol, dropped)
        return cls(tuple(bars), symbol=symbol)


# Batch input variants. The caller decides the shape; nothing is sniffed.

@dataclass(frozen=True)
class SingleSeries:
    """Whole input is one symbol."""

    name: str
    rows: Any


@dataclass(frozen=True)
class SeriesBySymbol:
    """Mapping of symbol -> raw rows (or an already built BarSeries / DataFrame)."""

    series: Dict[str, Any]


Dataset = Union[SingleSeries, SeriesBySymbol]


def to_bar_series(raw: Any, symbol: Optional[str] = None) -> BarSeries:
    if isinstance(raw, BarSeries):
        return raw if symbol is None else BarSeries(raw.bars, symbol=symbol)
    if isinstance(raw, pd.DataFrame):
        return BarSeries.from_frame(raw, symbol=symbol)
    return BarSeries.from_records(raw, symbol=symbol)
