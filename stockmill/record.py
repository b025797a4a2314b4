"""Price history kept at second, minute, hour and day resolution."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from itertools import groupby
from typing import Iterable, List, Tuple

from .clock import Granularity, which_second
from .order import Transaction

logger = logging.getLogger(__name__)

_F64_MAX = sys.float_info.max

_INDEX = {
    Granularity.SECOND: 0,
    Granularity.MINUTE: 1,
    Granularity.HOUR: 2,
    Granularity.DAY: 3,
}

_NEXT = {
    Granularity.SECOND: Granularity.MINUTE,
    Granularity.MINUTE: Granularity.HOUR,
    Granularity.HOUR: Granularity.DAY,
}


def granularity_index(granularity: Granularity) -> int:
    """Position of a granularity's series in a history matrix."""
    try:
        return _INDEX[granularity]
    except KeyError:
        raise ValueError(f"no history is kept at granularity {granularity!r}") from None


def next_granularity(granularity: Granularity) -> Granularity:
    """The next coarser granularity, or INSTANT past DAY."""
    return _NEXT.get(granularity, Granularity.INSTANT)


def granularity_max_measurements(granularity: Granularity) -> int:
    """How many measurements of a granularity fit in one of the next coarser."""
    return int(next_granularity(granularity)) // int(granularity)


@dataclass(frozen=True)
class ObStat:
    """Open/high/low/close summary of trading over one tick."""

    tick: int = 0
    granularity: Granularity = Granularity.INSTANT
    volume: int = 0
    high: float = -_F64_MAX
    low: float = _F64_MAX
    open: float = 0.0
    close: float = 0.0


def _downgrade_granularity(
    measurements: List[ObStat], granularity: Granularity
) -> Tuple[List[ObStat], List[ObStat]]:
    """Fold complete slices of measurements into the next coarser granularity.

    Consumed measurements are removed from the list. Returns the new coarse
    measurements and the last slice that was folded.
    """
    target: List[ObStat] = []
    subject: List[ObStat] = []
    if not measurements:
        return target, subject

    slice_size = granularity_max_measurements(granularity)
    last_tick_in_slice = measurements[0].tick + slice_size - 1
    last_tick = measurements[-1].tick
    total = len(measurements)
    start = 0

    while start < total and last_tick >= last_tick_in_slice:
        end = next(
            (pos for pos in range(start, total) if measurements[pos].tick > last_tick_in_slice),
            total,
        )
        subject = measurements[start:end]
        start = end
        if not subject:
            logger.warning(
                "no measurements at %d, likely the acceleration parameter is too high "
                "for this system",
                int(granularity),
            )
            del measurements[:start]
            return [], []

        first = subject[0]
        target.append(
            ObStat(
                granularity=next_granularity(granularity),
                tick=first.tick // slice_size,
                volume=sum(m.volume for m in subject),
                high=max(m.high for m in subject),
                low=min(m.low for m in subject),
                open=first.open,
                close=subject[-1].close,
            )
        )
        last_tick_in_slice += slice_size

    del measurements[:start]
    return target, subject


def _empty_series() -> List[List[ObStat]]:
    return [[] for _ in _INDEX]


@dataclass
class HistoryBuffer:
    """Live and settled history series, one per granularity."""

    live_data: List[List[ObStat]] = field(default_factory=_empty_series)
    historic_data: List[List[ObStat]] = field(default_factory=_empty_series)

    def process_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Summarise transactions into per-second measurements."""
        for second, group in groupby(transactions, key=lambda t: which_second(t.timestamp)):
            batch = list(group)
            prices = [t.price for t in batch]
            self.live_data[0].append(
                ObStat(
                    granularity=Granularity.SECOND,
                    tick=second,
                    volume=sum(t.volume for t in batch),
                    high=max(prices),
                    low=min(prices),
                    open=prices[0],
                    close=prices[-1],
                )
            )

    def compress(self) -> None:
        """Roll complete slices of each series up into the next coarser one."""
        for current, coarser in zip(self.live_data, self.live_data[1:]):
            if not current:
                continue
            granularity = current[0].granularity
            compressed, uncompressed = _downgrade_granularity(current, granularity)
            coarser.extend(compressed)
            if uncompressed:
                self.historic_data[granularity_index(granularity)] = uncompressed

        self.historic_data[3] = list(self.live_data[3])