"""Orders, order statuses and executed transactions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Stock(Enum):
    """Tradable instruments."""

    AAPL = "AAPL"
    GOOGL = "GOOGL"
    MSFT = "MSFT"


class OrderType(Enum):
    """Side of an order."""

    BUY = "buy"
    SELL = "sell"


class OrderState(Enum):
    """Lifecycle state of an order."""

    PENDING = "pending"
    PARTIALLY_FILLED = "partially_filled"
    EXECUTED = "executed"


@dataclass(frozen=True)
class OrderStatus:
    """State of an order; executed orders carry their average fill price."""

    state: OrderState
    price: Optional[float] = None


def _compare(left: float, right: float) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    if left == right:
        return 0
    raise ValueError(f"cannot order prices {left!r} and {right!r}")


@dataclass(eq=False)
class Order:
    """A buy or sell order; a price of None makes it a market order.

    Orders compare by execution priority: the greater order is matched first.
    """

    order_type: OrderType
    stock: Stock
    amount: int
    time: int
    price: Optional[float] = None
    lifetime_nanos: Optional[int] = None
    order_id: Optional[int] = None

    def is_market(self) -> bool:
        return self.price is None

    def _priority(self, other: Order) -> int:
        if self.is_market() and other.is_market():
            if self.order_type is OrderType.BUY:
                return _compare(self.time, other.time)
            return _compare(other.time, self.time)
        if self.is_market():
            return 1
        if other.is_market():
            return -1
        if self.order_type is OrderType.BUY:
            by_price = _compare(self.price, other.price)
        else:
            by_price = _compare(other.price, self.price)
        if by_price:
            return by_price
        return _compare(other.time, self.time)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return self._priority(other) < 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return self._priority(other) > 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return self._priority(other) <= 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return self._priority(other) >= 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        if self.is_market() != other.is_market():
            return False
        return self.price == other.price and self.time == other.time


@dataclass(frozen=True)
class Transaction:
    """A trade executed between a bid and an ask."""

    price: float = 0.0
    volume: int = 0
    timestamp: int = 0
    buy_id: Optional[int] = None
    sell_id: Optional[int] = None
    transaction_id: Optional[int] = None