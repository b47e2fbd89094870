"""Tests for SMA, True Range, Wilder ATR, Supertrend and S/R zones."""

from __future__ import annotations

import math

import numpy as np
import pytest

from supertrend_engine.bars import BarSeries
from supertrend_engine.indicators import (
    Direction,
    atr_wilder,
    find_sr_zones,
    rolling_sma,
    supertrend,
    supertrend_for,
    true_range,
)


def _flat(count: int, price: float = 100.0):
    return [{"open": price, "high": price + 1.0, "low": price - 1.0, "close": price} for _ in range(count)]


def test_sma_example() -> None:
    out = rolling_sma([1, 2, 3, 4, 5], 3)
    assert np.isnan(out[0]) and np.isnan(out[1])
    assert out[2:].tolist() == [2.0, 3.0, 4.0]


def test_sma_matches_window_mean() -> None:
    values = [3.0, 1.5, 4.0, 1.0, 5.5, 9.0, 2.0, 6.5]
    out = rolling_sma(values, 4)
    for i in range(len(values)):
        if i < 3:
            assert math.isnan(out[i])
        else:
            assert out[i] == pytest.approx(sum(values[i - 3 : i + 1]) / 4)


def test_sma_period_longer_than_input_is_all_nan() -> None:
    out = rolling_sma([1.0, 2.0], 5)
    assert len(out) == 2
    assert np.isnan(out).all()


def test_true_range_first_bar_is_high_minus_low() -> None:
    tr = true_range([10.0, 15.0, 11.0], [8.0, 12.0, 7.0], [9.0, 14.0, 8.0])
    assert tr[0] == 2.0
    # gap up: |high - prev_close| dominates
    assert tr[1] == 6.0
    # |low - prev_close| dominates
    assert tr[2] == 7.0


def test_true_range_empty() -> None:
    assert len(true_range([], [], [])) == 0


def test_atr_constant_true_range() -> None:
    out = atr_wilder([2, 2, 2, 2, 2], 3)
    assert np.isnan(out[0]) and np.isnan(out[1])
    assert out[2:].tolist() == [2.0, 2.0, 2.0]


def test_atr_seed_then_wilder_recurrence() -> None:
    out = atr_wilder([1.0, 2.0, 3.0, 4.0, 5.0], 3)
    assert out[2] == pytest.approx(2.0)
    assert out[3] == pytest.approx((2.0 * 2 + 4.0) / 3)
    assert out[4] == pytest.approx((out[3] * 2 + 5.0) / 3)


def test_atr_too_short_is_all_nan() -> None:
    assert np.isnan(atr_wilder([1.0, 2.0], 3)).all()


def test_supertrend_undefined_until_atr_seeded() -> None:
    series = BarSeries.from_records(_flat(15))
    states = supertrend_for(series, atr_period=10, multiplier=3.0)
    assert len(states) == 15
    for st in states[:9]:
        assert not st.defined
        assert st.supertrend is None and st.atr is None and st.upper is None and st.lower is None
    assert all(st.defined for st in states[9:])


def test_supertrend_flat_bars() -> None:
    series = BarSeries.from_records(_flat(12))
    states = supertrend_for(series, atr_period=10, multiplier=3.0)

    first = states[9]
    assert first.atr == pytest.approx(2.0)
    assert first.upper == pytest.approx(106.0)
    assert first.lower == pytest.approx(94.0)
    # close == hl2 -> starts down on the upper band
    assert first.direction is Direction.DOWN
    assert first.supertrend == pytest.approx(106.0)

    # flip to up carries the upper band as its value
    assert states[10].direction is Direction.UP
    assert states[10].supertrend == pytest.approx(106.0)
    assert states[11].direction is Direction.DOWN


def test_supertrend_stays_down_below_lower_band() -> None:
    rows = _flat(10) + [{"open": 199.0, "high": 200.0, "low": 198.0, "close": 199.0}]
    series = BarSeries.from_records(rows)
    states = supertrend_for(series, atr_period=10, multiplier=3.0)

    gap = states[10]
    assert gap.atr == pytest.approx((2.0 * 9 + 100.0) / 10)
    # lower band jumped above the previous close: no flip, value follows the lower band
    assert gap.lower == pytest.approx(199.0 - 3.0 * gap.atr)
    assert gap.direction is Direction.DOWN
    assert gap.supertrend == gap.lower
    # upper band did not loosen
    assert gap.upper == pytest.approx(106.0)


def test_supertrend_band_ratchet(trend_rows) -> None:
    series = BarSeries.from_records(trend_rows(40))
    states = [st for st in supertrend_for(series) if st.defined]
    assert len(states) == 31
    for prev, cur in zip(states, states[1:]):
        assert cur.lower >= prev.lower
        assert cur.upper <= prev.upper


def test_supertrend_alternates_for_steady_trend(trend_rows) -> None:
    series = BarSeries.from_records(trend_rows(20))
    states = supertrend_for(series)
    for i in range(9, 20):
        expected = Direction.UP if i % 2 else Direction.DOWN
        assert states[i].direction is expected


def test_supertrend_is_idempotent(trend_rows) -> None:
    series = BarSeries.from_records(trend_rows(70, step=0.3))
    a = supertrend_for(series, atr_period=10, multiplier=3.0)
    b = supertrend_for(series, atr_period=10, multiplier=3.0)
    assert a == b
    sma_a = rolling_sma(series.closes, 50)
    sma_b = rolling_sma(series.closes, 50)
    assert np.array_equal(sma_a, sma_b, equal_nan=True)


def test_supertrend_empty_input() -> None:
    assert supertrend([], [], []) == []


def test_find_sr_zones_swing_points() -> None:
    highs = [10, 11, 15, 11, 10, 12, 18, 12, 11, 10]
    lows = [8, 7, 9, 5, 8, 9, 10, 6, 9, 9]
    rows = [{"open": h - 1, "high": h, "low": l, "close": h - 1} for h, l in zip(highs, lows)]
    zones = find_sr_zones(BarSeries.from_records(rows), lookback=30)
    assert zones.resistance == 18.0
    assert zones.support == 5.0


def test_find_sr_zones_falls_back_to_window_extremes(trend_rows) -> None:
    series = BarSeries.from_records(trend_rows(50))
    zones = find_sr_zones(series, lookback=30)
    recent = series.tail(30)
    assert zones.support == pytest.approx(float(recent.lows.min()))
    assert zones.resistance == pytest.approx(float(recent.highs.max()))


def test_find_sr_zones_empty() -> None:
    assert find_sr_zones(BarSeries(), lookback=30) is None
