from __future__ import annotations

import pytest


def make_trend_rows(count: int, start: float = 100.0, step: float = 0.05, volume: float = 10_000.0):
    """Steady trend with close 0.5 below the bar midpoint and a constant 2.0 true range.

    With these bars Supertrend starts DOWN at the first seeded index and alternates
    each bar after that, so odd indices (ATR 10) are UP and even indices DOWN.
    """
    rows = []
    for i in range(count):
        c = start + step * i
        rows.append({"open": c, "high": c + 1.5, "low": c - 0.5, "close": c, "volume": volume})
    return rows


@pytest.fixture
def trend_rows():
    return make_trend_rows
