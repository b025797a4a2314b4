"""Background agents that trade on the market and keep its books in order."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, List, Optional

from .market import Market
from .order import Stock

# Highest number of times per second an agent acts.
TICKRATE = 10000.0

# Chaotic trend generator.
ACTION_ITERATIONS = 500
TREND_VOLUME_MULTIPLIER = 50

# Market maker: trailing limit orders either side of the price.
NUM_TRAIL_LEVELS = 50
TRAIL_LEVEL_GAPS = 0.01
MAKER_VOLUME_MULTIPLIER = 10.0
TRAIL_GRADIENT = 0.001
MAKER_ORDER_LIFETIME = 100
STD = 1.0

TickFunction = Callable[[Market, Stock], object]


class LorenzGenerator:
    """A damped walk along the Lorenz attractor, used as a source of market trend."""

    SIGMA = 10.0
    RHO = 28.0
    BETA = 8.0 / 3.0
    DAMPING = 10e2

    def __init__(self, x: float = 1.0, y: float = 1.0, z: float = 1.0) -> None:
        self.x = x
        self.y = y
        self.z = z
        self._lock = threading.Lock()

    def _derivatives(self) -> tuple:
        dx = self.SIGMA * (self.y - self.x)
        dy = self.x * (self.RHO - self.z) - self.y
        dz = self.x * self.y - self.BETA * self.z
        return dx, dy, dz

    def step(self) -> float:
        """Advance the attractor one damped step and return its y-velocity there."""
        with self._lock:
            dx, dy, dz = self._derivatives()
            self.x += dx / self.DAMPING
            self.y += dy / self.DAMPING
            self.z += dz / self.DAMPING
            _, velocity, _ = self._derivatives()
        return velocity


_SHARED_GENERATOR = LorenzGenerator()


def probability_density(distance_from_mean: float, variance: float = STD * STD) -> float:
    """Reciprocal of the normal density at a distance from the mean."""
    coefficient = 1.0 / math.sqrt(2.0 * math.pi * variance)
    exponent = math.exp(-0.5 * (distance_from_mean ** 2 / variance))
    return 1.0 / (coefficient * exponent)


def generate_trend(
    market: Market, stock: Stock, generator: Optional[LorenzGenerator] = None
) -> None:
    """Place a burst of market orders whose side and size follow the trend."""
    generator = generator if generator is not None else _SHARED_GENERATOR
    for _ in range(ACTION_ITERATIONS):
        trend = generator.step()
        size = int(abs(trend)) * TREND_VOLUME_MULTIPLIER
        if trend > 0.0:
            market.buy(stock, size)
        else:
            market.sell(stock, size)


def straddle(market: Market, stock: Stock) -> None:
    """Quote short-lived limit orders on both sides of the current price."""
    price = market.get_price(stock)
    for level in range(1, NUM_TRAIL_LEVELS + 1):
        volume = probability_density(level * TRAIL_GRADIENT)
        trade_volume = int(volume * MAKER_VOLUME_MULTIPLIER)
        offset = level * TRAIL_LEVEL_GAPS
        market.sell(stock, trade_volume, price + offset, MAKER_ORDER_LIFETIME)
        market.buy(stock, trade_volume, price - offset, MAKER_ORDER_LIFETIME)


def dispatch(
    func: TickFunction,
    market: Market,
    stock: Stock,
    tickrate: float,
    stop_event: threading.Event,
) -> threading.Thread:
    """Run func(market, stock) at most tickrate times a second on a daemon thread."""
    if tickrate <= 0:
        raise ValueError(f"tickrate must be positive, got {tickrate}")
    interval = 1.0 / tickrate

    def run() -> None:
        last_tick = time.monotonic()
        while not stop_event.is_set():
            func(market, stock)
            remaining = last_tick + interval - time.monotonic()
            if remaining > 0 and stop_event.wait(remaining):
                break
            last_tick += interval

    name = getattr(func, "__name__", "agent")
    thread = threading.Thread(target=run, name=f"{name}-{stock.value}", daemon=True)
    thread.start()
    return thread


def make_market(
    market: Market, stock: Stock, stop_event: Optional[threading.Event] = None
) -> List[threading.Thread]:
    """Start every agent that keeps a stock trading; returns their threads."""
    stop_event = stop_event if stop_event is not None else threading.Event()
    schedule = [
        (generate_trend, TICKRATE),
        (straddle, TICKRATE),
        (Market.find_trades, TICKRATE),
        (Market.clean_books, TICKRATE / 100.0),
        (Market.report_transactions, TICKRATE / 10.0),
        (Market.update_stats, TICKRATE / 10.0),
    ]
    return [dispatch(func, market, stock, rate, stop_event) for func, rate in schedule]