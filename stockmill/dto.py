"""Request and response payloads exchanged over the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .clock import Granularity
from .order import Stock
from .record import ObStat

STOCKMAP: Mapping[str, Stock] = MappingProxyType(
    {
        "MSFT": Stock.MSFT,
        "AAPL": Stock.AAPL,
        "three": Stock.GOOGL,
    }
)


class UnknownStockError(KeyError):
    """Raised when a request names a stock that is not traded."""


def lookup_stock(name: str) -> Stock:
    """The stock a request name refers to."""
    try:
        return STOCKMAP[name]
    except (KeyError, TypeError):
        raise UnknownStockError(name) from None


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("payload must be an object")
    return data


def _field(data: Mapping[str, Any], name: str) -> Any:
    try:
        return data[name]
    except KeyError:
        raise ValueError(f"missing field {name!r}") from None


def _string(data: Mapping[str, Any], name: str) -> str:
    value = _field(data, name)
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _unsigned(data: Mapping[str, Any], name: str) -> int:
    value = _field(data, name)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field {name!r} must be a non-negative integer")
    return value


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {name!r} must be a number")
    return float(value)


def _granularity(data: Mapping[str, Any], name: str) -> Granularity:
    value = _field(data, name)
    if isinstance(value, Granularity):
        return value
    if isinstance(value, str):
        try:
            return Granularity[value]
        except KeyError:
            pass
    raise ValueError(f"field {name!r} must name a granularity")


@dataclass(frozen=True)
class OrderDTO:
    stock_name: str
    amount: int
    price: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> OrderDTO:
        data = _as_mapping(data)
        price = data.get("price")
        return cls(
            stock_name=_string(data, "stock_name"),
            amount=_unsigned(data, "amount"),
            price=None if price is None else _number(price, "price"),
        )


@dataclass(frozen=True)
class IpoDTO:
    stock_name: str
    amount: int
    price: float

    @classmethod
    def from_dict(cls, data: Any) -> IpoDTO:
        data = _as_mapping(data)
        return cls(
            stock_name=_string(data, "stock_name"),
            amount=_unsigned(data, "amount"),
            price=_number(_field(data, "price"), "price"),
        )


@dataclass(frozen=True)
class StockQuery:
    stock_name: str

    @classmethod
    def from_dict(cls, data: Any) -> StockQuery:
        return cls(stock_name=_string(_as_mapping(data), "stock_name"))


@dataclass(frozen=True)
class PriceHistoryDTO:
    stock_name: str
    granularity: Granularity
    count: int

    @classmethod
    def from_dict(cls, data: Any) -> PriceHistoryDTO:
        data = _as_mapping(data)
        return cls(
            stock_name=_string(data, "stock_name"),
            granularity=_granularity(data, "granularity"),
            count=_unsigned(data, "count"),
        )


@dataclass(frozen=True)
class PriceDTO:
    price: float
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"price": self.price, "timestamp": self.timestamp}


@dataclass(frozen=True)
class StockHistoryDTO:
    tick: int
    granularity: Granularity
    volume: int
    high: float
    low: float
    open: float
    close: float

    @classmethod
    def from_stat(cls, stat: ObStat) -> StockHistoryDTO:
        return cls(
            tick=stat.tick,
            granularity=stat.granularity,
            volume=stat.volume,
            high=stat.high,
            low=stat.low,
            open=stat.open,
            close=stat.close,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "granularity": self.granularity.name,
            "volume": self.volume,
            "high": self.high,
            "low": self.low,
            "open": self.open,
            "close": self.close,
        }