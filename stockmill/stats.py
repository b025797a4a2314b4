"""Volatility and relative-strength statistics over price history."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .record import ObStat

_RSI_WINDOW = 14


def _divide(numerator: float, denominator: float) -> float:
    """Floating-point division that yields inf or nan instead of raising."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def _return(stat: ObStat) -> float:
    return _divide(stat.close - stat.open, stat.open)


def calculate_volatility(stats: Sequence[ObStat]) -> float:
    """Mean deviation of per-tick returns from their average."""
    n = len(stats)
    if n < 2:
        return float(n)
    returns = [_return(s) for s in stats]
    average = sum(returns) / n
    return sum(r - average for r in returns) / (n - 1)


def calculate_rsi(stats: Sequence[ObStat]) -> float:
    """Relative strength index over the most recent fourteen ticks."""
    window = stats[-_RSI_WINDOW:]
    gain = loss = 0.0
    gains = losses = 0
    for stat in window:
        change = stat.open - stat.close
        if math.copysign(1.0, change) > 0:
            gain += change
            gains += 1
        else:
            loss -= change
            losses += 1
    relative_strength = _divide(_divide(gain, gains), _divide(loss, losses))
    return _divide(100.0, 1.0 + relative_strength)


@dataclass
class Stats:
    """Statistics derived from a stock's history matrix."""

    minute_volatility: float = 0.0
    hour_volatility: float = 0.0
    day_volatility: float = 0.0
    month_volatility: float = 0.0
    rsi: float = 0.0

    def update_stats(self, history_matrix: Sequence[Sequence[ObStat]]) -> None:
        """Recompute every statistic from second/minute/hour/day series."""
        self.minute_volatility = calculate_volatility(history_matrix[0])
        self.hour_volatility = calculate_volatility(history_matrix[1])
        self.day_volatility = calculate_volatility(history_matrix[2])
        self.month_volatility = calculate_volatility(history_matrix[3])
        self.rsi = calculate_rsi(history_matrix[3])