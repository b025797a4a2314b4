"""A simulated stock market with order books, candle history, trading agents and an HTTP API."""

__version__ = "0.1.0"