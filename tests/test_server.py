import json

import pytest

from stockmill.clock import Granularity
from stockmill.dto import UnknownStockError
from stockmill.market import Market
from stockmill.order import OrderType, Stock
from stockmill.record import ObStat
from stockmill.server import (
    create_app,
    handle_ipo,
    handle_order,
    handle_price,
    handle_stock_history,
)


@pytest.fixture
def market():
    return Market()


def _stat(tick):
    return ObStat(
        tick=tick,
        granularity=Granularity.SECOND,
        volume=7,
        high=2.0,
        low=1.0,
        open=1.5,
        close=1.75,
    )


def test_handle_buy_order_market_price(market):
    ipo = handle_ipo(market, {"stock_name": "MSFT", "amount": 10, "price": 10.0})
    resp = handle_order(market, {"stock_name": "MSFT", "amount": 10, "price": None}, OrderType.SELL)
    assert ipo.status_code == 200
    assert resp.status_code == 200


def test_handle_order_reports_price_before_trades(market):
    market.ipo(Stock.MSFT, 5, 10.0)
    resp = handle_order(market, {"stock_name": "MSFT", "amount": 5}, OrderType.BUY)
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "0"
    assert market.record(Stock.MSFT).order_book.top_bid().amount == 5


def test_handle_order_reports_traded_price(market):
    market.ipo(Stock.MSFT, 5, 10.0)
    market.buy(Stock.MSFT, 5)
    market.find_trades(Stock.MSFT)
    resp = handle_order(market, {"stock_name": "MSFT", "amount": 1}, OrderType.SELL)
    assert resp.get_data(as_text=True) == "10"


def test_handle_order_reports_fractional_price(market):
    market.ipo(Stock.AAPL, 5, 10.5)
    market.buy(Stock.AAPL, 5)
    market.find_trades(Stock.AAPL)
    resp = handle_order(market, {"stock_name": "AAPL", "amount": 1, "price": 11.0}, OrderType.BUY)
    assert resp.get_data(as_text=True) == "10.5"


def test_handle_order_unknown_stock(market):
    resp = handle_order(market, {"stock_name": "NOPE", "amount": 1}, OrderType.BUY)
    assert resp.status_code == 404
    assert resp.get_data(as_text=True) == "Stock not found"


def test_handle_order_rejects_bad_payload(market):
    resp = handle_order(market, {"stock_name": "MSFT", "amount": -1}, OrderType.BUY)
    assert resp.status_code == 400


def test_handle_ipo_unknown_stock_raises(market):
    with pytest.raises(UnknownStockError):
        handle_ipo(market, {"stock_name": "NOPE", "amount": 1, "price": 1.0})


def test_handle_ipo_places_initial_ask(market):
    resp = handle_ipo(market, {"stock_name": "three", "amount": 4, "price": 2.5})
    ask = market.record(Stock.GOOGL).order_book.top_ask()
    assert resp.status_code == 200
    assert resp.get_data() == b""
    assert (ask.amount, ask.price) == (4, 2.5)


def test_handle_price_returns_json_text(market):
    market.ipo(Stock.MSFT, 1, 10.0)
    resp = handle_price(market, {"stock_name": "MSFT"})
    body = json.loads(resp.get_data(as_text=True))
    assert resp.mimetype == "text/plain"
    assert body["price"] == 0.0
    assert body["timestamp"] > 0


def test_handle_price_missing_query(market):
    assert handle_price(market, {}).status_code == 400


def test_handle_stock_history_empty(market):
    market.ipo(Stock.MSFT, 1, 10.0)
    resp = handle_stock_history(market, {"stock_name": "MSFT", "granularity": "SECOND", "count": 5})
    assert resp.status_code == 200
    assert json.loads(resp.get_data(as_text=True)) == []


def test_handle_stock_history_returns_latest(market):
    market.ipo(Stock.MSFT, 1, 10.0)
    market.record(Stock.MSFT).history.historic_data[0].extend(_stat(t) for t in (1, 2, 3))
    resp = handle_stock_history(market, {"stock_name": "MSFT", "granularity": "SECOND", "count": 2})
    body = json.loads(resp.get_data(as_text=True))
    assert [entry["tick"] for entry in body] == [2, 3]
    assert body[0] == {
        "tick": 2,
        "granularity": "SECOND",
        "volume": 7,
        "high": 2.0,
        "low": 1.0,
        "open": 1.5,
        "close": 1.75,
    }


def test_handle_stock_history_unknown_stock(market):
    resp = handle_stock_history(market, {"stock_name": "NOPE", "granularity": "SECOND", "count": 1})
    assert resp.status_code == 404


def test_app_routes(market):
    client = create_app(market).test_client()
    assert client.post("/ipo", json={"stock_name": "MSFT", "amount": 3, "price": 10.0}).status_code == 200
    buy = client.post("/buy", json={"stock_name": "MSFT", "amount": 3})
    assert buy.status_code == 200
    market.find_trades(Stock.MSFT)
    sell = client.post("/sell", json={"stock_name": "MSFT", "amount": 1, "price": 12.0})
    assert sell.get_data(as_text=True) == "10"
    price = json.loads(client.get("/price?stock_name=MSFT").get_data(as_text=True))
    assert price["price"] == 10.0
    history = client.get(
        "/stock_history", json={"stock_name": "MSFT", "granularity": "MINUTE", "count": 3}
    )
    assert json.loads(history.get_data(as_text=True)) == []


def test_app_rejects_missing_body(market):
    client = create_app(market).test_client()
    assert client.post("/buy").status_code == 400


def test_app_cors_header_only_for_allowed_origin(market):
    client = create_app(market).test_client()
    market.ipo(Stock.MSFT, 1, 10.0)
    allowed = client.get("/price?stock_name=MSFT", headers={"Origin": "http://localhost:*"})
    other = client.get("/price?stock_name=MSFT", headers={"Origin": "http://localhost:3000"})
    assert allowed.headers.get("Access-Control-Allow-Origin") == "http://localhost:*"
    assert "Access-Control-Allow-Origin" not in other.headers