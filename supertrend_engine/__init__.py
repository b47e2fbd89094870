"""Supertrend signal engine (daily or intraday bars, latest bar only).

Core idea:
- Supertrend(ATR 10, x3) direction flip on the latest bar is the trigger
- SMA50 confirms: BUY only above it, SELL only below it
- Entry = latest close with slippage
- Stop = Supertrend line, or entry -/+ 1.5 * ATR when the line is on the wrong side
- Take-profit = entry +/- 3 * ATR
- Size = fixed fraction of account risked per trade / risk per share
"""

__all__ = [
    "alerts",
    "bars",
    "batch",
    "config",
    "errors",
    "indicators",
    "recommender",
    "risk",
    "screener",
]
