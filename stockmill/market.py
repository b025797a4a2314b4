"""Market holding an order book and price history for every listed stock."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

from .book import OrderBook
from .clock import Granularity, market_now, which_second
from .dto import StockHistoryDTO
from .order import Order, OrderState, OrderStatus, OrderType, Stock, Transaction
from .record import HistoryBuffer, granularity_index
from .stats import Stats

RECENT_TRANSACTIONS = 100


@dataclass
class StockRecord:
    """Everything the market tracks for one stock."""

    stock: Stock
    order_book: OrderBook = field(init=False)
    history: HistoryBuffer = field(default_factory=HistoryBuffer)
    stats: Stats = field(default_factory=Stats)
    recent_transactions: Deque[Transaction] = field(
        default_factory=lambda: deque(maxlen=RECENT_TRANSACTIONS)
    )
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def __post_init__(self) -> None:
        self.order_book = OrderBook(self.stock)

    def update_stats(self) -> None:
        self.stats.update_stats(self.history.historic_data)

    def report_transactions(self) -> None:
        """Remember trades that involved an identified order, for status polling."""
        self.recent_transactions.extend(
            t
            for t in self.order_book.transaction_record
            if t.buy_id is not None or t.sell_id is not None
        )


class Market:
    """A set of listed stocks and the operations traders perform on them."""

    def __init__(self) -> None:
        self._records: Dict[Stock, StockRecord] = {}
        self._lock = threading.Lock()

    def record(self, stock: Stock) -> StockRecord:
        """The record of a listed stock; raises KeyError if it is not listed."""
        with self._lock:
            try:
                return self._records[stock]
            except KeyError:
                raise KeyError(f"stock {stock.value} is not listed") from None

    def ipo(self, stock: Stock, amount: int, price: float, order_id: Optional[int] = None) -> None:
        """List a stock afresh and offer its initial shares for sale."""
        with self._lock:
            self._records[stock] = StockRecord(stock)
        self._place_order(stock, amount, OrderType.SELL, price, None, order_id)

    def buy(
        self,
        stock: Stock,
        amount: int,
        price: Optional[float] = None,
        lifetime: Optional[int] = None,
        order_id: Optional[int] = None,
    ) -> None:
        self._place_order(stock, amount, OrderType.BUY, price, lifetime, order_id)

    def sell(
        self,
        stock: Stock,
        amount: int,
        price: Optional[float] = None,
        lifetime: Optional[int] = None,
        order_id: Optional[int] = None,
    ) -> None:
        self._place_order(stock, amount, OrderType.SELL, price, lifetime, order_id)

    def _place_order(
        self,
        stock: Stock,
        amount: int,
        order_type: OrderType,
        price: Optional[float],
        lifetime: Optional[int],
        order_id: Optional[int],
    ) -> None:
        if amount <= 0:
            return
        order = Order(
            order_type=order_type,
            stock=stock,
            amount=amount,
            time=market_now(),
            price=price,
            lifetime_nanos=lifetime,
            order_id=order_id,
        )
        record = self.record(stock)
        with record.lock:
            record.order_book.process_order(order)

    def clean_books(self, stock: Stock) -> None:
        record = self.record(stock)
        with record.lock:
            record.order_book.clean_book()

    def find_trades(self, stock: Stock) -> None:
        record = self.record(stock)
        with record.lock:
            record.order_book.find_trade()

    def report_transactions(self, stock: Stock) -> List[Transaction]:
        """Move trades from completed market seconds into the price history."""
        record = self.record(stock)
        with record.lock:
            record.report_transactions()
            transactions = record.order_book.transaction_record
            if not transactions:
                return []

            boundary = which_second(transactions[-1].timestamp) * int(Granularity.SECOND)
            index = next(
                (pos for pos, t in enumerate(transactions) if t.timestamp > boundary),
                len(transactions),
            )
            whole_seconds = transactions[:index]
            del transactions[:index]

            record.history.process_transactions(whole_seconds)
            record.history.compress()
            return whole_seconds

    def get_order_status(self, stock: Stock, order_id: int, order_type: OrderType) -> OrderStatus:
        """Whether an identified order is pending, partly filled or executed."""
        record = self.record(stock)
        with record.lock:
            if order_type is OrderType.SELL:
                fills = [t.price for t in record.recent_transactions if t.sell_id == order_id]
                pending = record.order_book.is_pending_ask(order_id)
            else:
                fills = [t.price for t in record.recent_transactions if t.buy_id == order_id]
                pending = record.order_book.is_pending_bid(order_id)

        if fills and not pending:
            return OrderStatus(OrderState.EXECUTED, sum(fills) / len(fills))
        if fills:
            return OrderStatus(OrderState.PARTIALLY_FILLED)
        if pending:
            return OrderStatus(OrderState.PENDING)
        raise LookupError(f"no {order_type.value} order {order_id} for {stock.value}")

    def update_stats(self, stock: Stock) -> None:
        record = self.record(stock)
        with record.lock:
            record.update_stats()

    def get_price(self, stock: Stock) -> float:
        record = self.record(stock)
        with record.lock:
            return record.order_book.price

    def get_stock_history(
        self, stock: Stock, granularity: Granularity, count: int
    ) -> List[StockHistoryDTO]:
        """The most recent `count` settled measurements at a granularity."""
        series_index = granularity_index(granularity)
        record = self.record(stock)
        with record.lock:
            series = record.history.historic_data[series_index]
            recent = series[max(0, len(series) - count):]
            return [StockHistoryDTO.from_stat(stat) for stat in recent]