from __future__ import annotations

import os
from dataclasses import dataclass

def _env_float(key: str, default: float) -> float:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default

def _env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default

@dataclass(frozen=True)
class EngineConfig:
    # Supertrend (widely used defaults: ATR 10-14, multiplier 3)
    super_atr_period: int = _env_int("ST_SUPER_ATR_PERIOD", 10)
    super_multiplier: float = _env_float("ST_SUPER_MULTIPLIER", 3.0)

    # Higher-timeframe trend filter
    sma_filter_period: int = _env_int("ST_SMA_FILTER_PERIOD", 50)

    # Bracket distances in ATR multiples
    stop_atr_mult: float = _env_float("ST_STOP_ATR_MULT", 1.5)
    target_atr_mult: float = _env_float("ST_TARGET_ATR_MULT", 3.0)

    # Account / costs
    account_size: float = _env_float("ST_ACCOUNT_SIZE", 100000.0)
    risk_per_trade_pct: float = _env_float("ST_RISK_PER_TRADE_PCT", 0.005)  # 0.5% of account
    commission_per_trade: float = _env_float("ST_COMMISSION_PER_TRADE", 0.0005)  # 0.05% of notional
    slippage_pct: float = _env_float("ST_SLIPPAGE_PCT", 0.0007)  # 0.07%

    # Batch runner: series shorter than this are reported as NO_DATA up front.
    # 0 means one bar past the evaluator minimum (min_required_index + 1).
    min_batch_bars: int = _env_int("ST_MIN_BATCH_BARS", 0)

    # Universe screener
    min_price: float = _env_float("ST_MIN_PRICE", 50.0)
    max_price: float = _env_float("ST_MAX_PRICE", 500.0)
    turnover_period: int = _env_int("ST_TURNOVER_PERIOD", 20)
    min_avg_turnover: float = _env_float("ST_MIN_AVG_TURNOVER", 500000.0)
    rs_period: int = _env_int("ST_RS_PERIOD", 20)
    min_relative_strength: float = _env_float("ST_MIN_RELATIVE_STRENGTH", 0.03)

    @property
    def min_required_index(self) -> int:
        """Smallest last-bar index at which a signal may be evaluated."""
        return max(self.super_atr_period + 2, self.sma_filter_period)

    @property
    def batch_min_bars(self) -> int:
        return self.min_batch_bars if self.min_batch_bars > 0 else self.min_required_index + 1
