# stockmill

A small simulated stock market. Each listed stock has an order book that
matches buy and sell orders (market or limit) by price-time priority. It
keeps a record of the trades it makes and rolls them up into candles per
second, per minute, per hour and per day. Background agents keep the
market moving. A chaotic trend generator, a damped walk along the Lorenz
attractor, places market orders. A market maker places short-lived limit
orders on both sides of the current price.

Market time runs accelerated: every real second stands for an hour of
simulated trading (`stockmill.clock.ACCELERATION_PARAMETER = 3600`).

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running the server

```
stockmill [--host HOST] [--port PORT]
```

The command lists `MSFT` with 1 share offered at 10.0 and starts the market
agents for it. It then serves the HTTP API, by default on
`127.0.0.1:8080`. When the server stops, the agents stop too.

### Endpoints

| Method | Path             | Body / query                                                        | Reply                                   |
|--------|------------------|---------------------------------------------------------------------|-----------------------------------------|
| POST   | `/buy`           | JSON `{"stock_name": "MSFT", "amount": 10, "price": null}`          | current price as plain text, e.g. `10`  |
| POST   | `/sell`          | JSON `{"stock_name": "MSFT", "amount": 10, "price": 10.5}`          | current price as plain text             |
| POST   | `/ipo`           | JSON `{"stock_name": "AAPL", "amount": 100, "price": 10.0}`         | empty 200                               |
| GET    | `/price`         | query `?stock_name=MSFT`                                            | `{"price": ..., "timestamp": ...}` as text/plain |
| GET    | `/stock_history` | JSON `{"stock_name": "MSFT", "granularity": "SECOND", "count": 60}` | JSON list of candles                    |

- A `price` of `null`, or no `price` at all, places a market order. A
  number places a limit order. Orders with an `amount` of 0 are ignored.
- Prices in plain-text replies are written in their shortest form, with
  no trailing `.0` (`10`, `10.5`).
- The `timestamp` from `/price` is wall-clock time in milliseconds.
- Known stock names are `MSFT`, `AAPL` and `three` (the last one names
  GOOGL). An unknown name gets a 404 `Stock not found` from `/buy`, `/sell`
  and `/stock_history`. On `/ipo` and `/price` it is an error, and the
  server answers 500.
- A stock has to be listed through `/ipo` before it can be traded or
  priced. Using a known name that is not listed is also answered with 500.
- A payload that is missing fields or has fields of the wrong type gets
  a 400.
- `granularity` is one of `SECOND`, `MINUTE`, `HOUR` or `DAY`. `count` caps
  how many of the most recent settled candles come back. Each candle carries
  `tick`, `granularity`, `volume`, `high`, `low`, `open` and `close`.
- A cross-origin request with an `Origin` header of exactly
  `http://localhost:*` has that origin echoed back in
  `Access-Control-Allow-Origin`.

## Using it as a library

```python
from stockmill.market import Market
from stockmill.order import Stock

market = Market()
market.ipo(Stock.AAPL, 100, 10.0, None)
market.buy(Stock.AAPL, 10, None, None, None)
market.find_trades(Stock.AAPL)
print(market.get_price(Stock.AAPL))  # 10.0
```

The main pieces:

- `stockmill.market.Market`
  - `ipo`, `buy` and `sell` queue orders. `buy` and `sell` also take an
    optional limit price, a lifetime in nanoseconds and an order id.
  - `find_trades` matches the books.
  - `clean_books` drops expired orders.
  - `report_transactions` moves trades from completed market seconds into
    the candle history and returns them.
  - `update_stats` recomputes volatility and RSI.
  - `get_price` returns the last traded price.
  - `get_stock_history` returns the most recent settled candles at a
    `Granularity`.
  - `get_order_status` reports an identified order as `PENDING`,
    `PARTIALLY_FILLED` or `EXECUTED` (with its average fill price). It
    raises `LookupError` for an order it knows nothing of.
  - `record` returns a stock's `StockRecord` and raises `KeyError` if the
    stock is not listed.
- `stockmill.book.OrderBook`: the order book for one stock. `top_bid`,
  `top_ask`, `pending_bids` and `pending_asks` show the resting orders,
  best first.
- `stockmill.order`: `Stock`, `OrderType`, `Order`, `Transaction`,
  `OrderStatus` and `OrderState`. Orders compare by execution priority:
  the greater order is matched first.
- `stockmill.record`: `HistoryBuffer` and `ObStat`, the candle history
  and how it is compressed from seconds up to days.
- `stockmill.stats`: `Stats`, `calculate_volatility` and `calculate_rsi`.
- `stockmill.clock`: `Granularity`, `market_now`, `which_second` and
  `current_second`.
- `stockmill.agents`:
  - `make_market(market, stock, stop_event)` starts every background agent
    for one stock on daemon threads and returns them. They run until the
    event is set.
  - `dispatch` runs any `func(market, stock)` at a given tick rate.
  - `generate_trend` and `straddle` are the trading agents.
- `stockmill.server`: `create_app(market)` builds the Flask application
  around any `Market`. `main` is the `stockmill` command.

## What it does not do

- All market state lives in memory. Nothing is saved, and a restart
  starts a fresh market.
- The HTTP API takes no order ids. Order status is only available through
  `Market.get_order_status` in the library.
- The statistics kept by `update_stats` are not served over HTTP.