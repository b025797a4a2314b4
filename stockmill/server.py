"""HTTP API for placing orders and reading prices and history."""

from __future__ import annotations

import argparse
import json
import math
import threading
import time
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from flask import Flask, Response, request

from .agents import make_market
from .dto import (
    IpoDTO,
    OrderDTO,
    PriceDTO,
    PriceHistoryDTO,
    StockQuery,
    UnknownStockError,
    lookup_stock,
)
from .market import Market
from .order import OrderType, Stock

ALLOWED_ORIGINS = frozenset({"http://localhost:*"})
DEFAULT_STOCKS = (Stock.MSFT,)
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


def _format_price(value: float) -> str:
    """Render a price the shortest way, without a trailing '.0' or exponent."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _text(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def _not_found() -> Response:
    return _text("Stock not found", 404)


def _bad_request(error: Exception) -> Response:
    return _text(str(error), 400)


def handle_order(market: Market, payload: Any, order_type: OrderType) -> Response:
    """Place a buy or sell order and answer with the current price."""
    try:
        dto = OrderDTO.from_dict(payload)
    except ValueError as exc:
        return _bad_request(exc)
    try:
        stock = lookup_stock(dto.stock_name)
    except UnknownStockError:
        return _not_found()
    if order_type is OrderType.BUY:
        market.buy(stock, dto.amount, dto.price)
    else:
        market.sell(stock, dto.amount, dto.price)
    return _text(_format_price(market.get_price(stock)))


def handle_stock_history(market: Market, payload: Any) -> Response:
    """Answer with the most recent settled history at a granularity."""
    try:
        dto = PriceHistoryDTO.from_dict(payload)
    except ValueError as exc:
        return _bad_request(exc)
    try:
        stock = lookup_stock(dto.stock_name)
    except UnknownStockError:
        return _not_found()
    history = market.get_stock_history(stock, dto.granularity, dto.count)
    body = json.dumps([entry.to_dict() for entry in history])
    return Response(body, status=200, mimetype="application/json")


def handle_ipo(market: Market, payload: Any) -> Response:
    """List a stock and offer its initial shares; unknown names raise."""
    try:
        dto = IpoDTO.from_dict(payload)
    except ValueError as exc:
        return _bad_request(exc)
    stock = lookup_stock(dto.stock_name)
    market.ipo(stock, dto.amount, dto.price)
    return Response(status=200)


def handle_price(market: Market, params: Mapping[str, Any]) -> Response:
    """Answer with the current price and the wall-clock time in milliseconds."""
    try:
        query = StockQuery.from_dict(params)
    except ValueError as exc:
        return _bad_request(exc)
    stock = lookup_stock(query.stock_name)
    result = PriceDTO(price=market.get_price(stock), timestamp=time.time_ns() // 1_000_000)
    return _text(json.dumps(result.to_dict()))


def create_app(market: Market) -> Flask:
    """A Flask application serving the API over a market."""
    app = Flask(__name__)

    @app.post("/buy")
    def buy() -> Response:
        return handle_order(market, request.get_json(silent=True), OrderType.BUY)

    @app.post("/sell")
    def sell() -> Response:
        return handle_order(market, request.get_json(silent=True), OrderType.SELL)

    @app.post("/ipo")
    def ipo() -> Response:
        return handle_ipo(market, request.get_json(silent=True))

    @app.get("/price")
    def price() -> Response:
        return handle_price(market, request.args.to_dict())

    @app.get("/stock_history")
    def stock_history() -> Response:
        return handle_stock_history(market, request.get_json(silent=True))

    @app.after_request
    def allow_origin(response: Response) -> Response:
        origin = request.headers.get("Origin")
        if origin in ALLOWED_ORIGINS:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        return response

    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """List the default stocks, start their agents and serve the API."""
    parser = argparse.ArgumentParser(prog="stockmill", description="Run the simulated stock market.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    market = Market()
    stop = threading.Event()
    for stock in DEFAULT_STOCKS:
        market.ipo(stock, 1, 10.0)
        make_market(market, stock, stop)
    try:
        create_app(market).run(host=args.host, port=args.port)
    finally:
        stop.set()
    return 0