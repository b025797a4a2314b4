"""Price-time priority order book for a single stock."""

from __future__ import annotations

import heapq
import time
from typing import List, Optional

from .clock import market_now
from .order import Order, OrderType, Stock, Transaction
from .record import ObStat


class _Ranked:
    """Heap entry that puts the highest-priority order at the top of a min-heap."""

    __slots__ = ("order",)

    def __init__(self, order: Order) -> None:
        self.order = order

    def __lt__(self, other: _Ranked) -> bool:
        return self.order > other.order


class OrderBook:
    """Bids and asks for one stock, with the trades matched between them."""

    def __init__(self, stock: Stock) -> None:
        self.stock = stock
        self.price = 0.0
        self.stats = ObStat()
        self.transaction_record: List[Transaction] = []
        self._bids: List[_Ranked] = []
        self._asks: List[_Ranked] = []

    def process_order(self, order: Order) -> None:
        """Queue an order on its side of the book."""
        side = self._bids if order.order_type is OrderType.BUY else self._asks
        heapq.heappush(side, _Ranked(order))

    def find_trade(self) -> None:
        """Match the best bid against the best ask until no trade is possible."""
        while self._bids and self._asks:
            buy = heapq.heappop(self._bids).order
            sell = heapq.heappop(self._asks).order

            if not buy.is_market() and not sell.is_market():
                if buy.price < sell.price:
                    heapq.heappush(self._bids, _Ranked(buy))
                    heapq.heappush(self._asks, _Ranked(sell))
                    return
                self.price = sell.price
            elif buy.is_market() and not sell.is_market():
                self.price = sell.price
            elif sell.is_market() and not buy.is_market():
                self.price = buy.price
            # Two market orders trade at the last traded price.

            trade_size = min(buy.amount, sell.amount)
            if buy.amount > trade_size:
                buy.amount -= trade_size
                heapq.heappush(self._bids, _Ranked(buy))
            elif sell.amount > trade_size:
                sell.amount -= trade_size
                heapq.heappush(self._asks, _Ranked(sell))

            self.transaction_record.append(
                Transaction(
                    price=self.price,
                    volume=trade_size,
                    timestamp=market_now(),
                    buy_id=buy.order_id,
                    sell_id=sell.order_id,
                )
            )

    def clean_book(self) -> None:
        """Drop every order whose lifetime has run out against the wall clock."""
        now = time.time_ns()

        def alive(entry: _Ranked) -> bool:
            order = entry.order
            if order.lifetime_nanos is None:
                return True
            return order.lifetime_nanos + order.time > now

        self._bids = [entry for entry in self._bids if alive(entry)]
        self._asks = [entry for entry in self._asks if alive(entry)]
        heapq.heapify(self._bids)
        heapq.heapify(self._asks)

    def is_pending_ask(self, order_id: int) -> bool:
        return any(entry.order.order_id == order_id for entry in self._asks)

    def is_pending_bid(self, order_id: int) -> bool:
        return any(entry.order.order_id == order_id for entry in self._bids)

    def top_ask(self) -> Optional[Order]:
        """The ask that would be matched next, if any."""
        return self._asks[0].order if self._asks else None

    def top_bid(self) -> Optional[Order]:
        """The bid that would be matched next, if any."""
        return self._bids[0].order if self._bids else None

    def pending_asks(self) -> List[Order]:
        """Resting asks, best first."""
        return [entry.order for entry in sorted(self._asks)]

    def pending_bids(self) -> List[Order]:
        """Resting bids, best first."""
        return [entry.order for entry in sorted(self._bids)]