"""Simulated market clock with an accelerated notion of time."""

import time
from enum import IntEnum

# Simulated nanoseconds that pass per real nanosecond: 3600 means every
# real second stands for one market hour.
ACCELERATION_PARAMETER = 3600.0

# Wall-clock instant (in nanoseconds) at which the market opened.
MARKET_EPOCH = time.time_ns()


class Granularity(IntEnum):
    """Length of a market time unit, in real nanoseconds."""

    INSTANT = 0
    SECOND = int(1e9 / ACCELERATION_PARAMETER)
    MINUTE = int(60.0 * 1e9 / ACCELERATION_PARAMETER)
    HOUR = int((60.0 * 60.0 * 1e9) / ACCELERATION_PARAMETER)
    DAY = int((24.0 * 60.0 * 60.0 * 1e9) / ACCELERATION_PARAMETER)


def market_now() -> int:
    """Nanoseconds elapsed since the market opened."""
    return time.time_ns() - MARKET_EPOCH


def which_second(timestamp: int) -> int:
    """Market second that a market timestamp falls into."""
    if timestamp < 0:
        raise ValueError(f"timestamp precedes the market epoch: {timestamp}")
    return int(timestamp // Granularity.SECOND)


def current_second() -> int:
    """Market second the market is in right now."""
    return which_second(market_now())