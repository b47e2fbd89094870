from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .config import EngineConfig


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class PositionSize:
    quantity: int
    commission: float
    risk_amount: float
    risk_per_share: float


def apply_slippage(price: float, side: Side, cfg: EngineConfig) -> float:
    """Assumed fill price: worse than `price` by cfg.slippage_pct in the trade's direction."""
    slip = price * cfg.slippage_pct
    return price + slip if side is Side.BUY else price - slip


def position_size(entry_price: float, stop_loss_price: float, cfg: EngineConfig) -> int:
    """Shares such that hitting the stop loses at most account_size * risk_per_trade_pct.

    Returns 0 when risk per share is zero or not finite; callers must not size an order then.
    """
    risk_per_share = abs(entry_price - stop_loss_price)
    if not risk_per_share or not math.isfinite(risk_per_share):
        return 0
    risk_amount = cfg.account_size * cfg.risk_per_trade_pct
    return max(0, math.floor(risk_amount / risk_per_share))


def commission(entry_price: float, quantity: int, cfg: EngineConfig) -> float:
    return entry_price * quantity * cfg.commission_per_trade


def size_position(entry_price: float, stop_loss_price: float, cfg: EngineConfig) -> PositionSize:
    qty = position_size(entry_price, stop_loss_price, cfg)
    return PositionSize(
        quantity=qty,
        commission=commission(entry_price, qty, cfg),
        risk_amount=cfg.account_size * cfg.risk_per_trade_pct,
        risk_per_share=abs(entry_price - stop_loss_price),
    )
