"""Thin synchronous wrapper over :mod:`yfinance`.

The resolvers only need three capabilities: a free-text search returning
candidate quotes, the quote currency of a symbol and, as a slower fallback,
the currency from the symbol's summary info. Keeping them behind one small
class lets tests substitute a stub without touching the network.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias

import yfinance as yf

DEFAULT_MAX_RESULTS = 10

Quote: TypeAlias = Mapping[str, Any]
"""One search candidate as returned by Yahoo (``symbol``, ``quoteType``,
``exchange``, ``longname``, ``shortname`` and sometimes ``currency``)."""


class YahooClient:
    def __init__(self, *, max_results: int = DEFAULT_MAX_RESULTS) -> None:
        self.max_results = max_results

    def search(self, query: str) -> list[Quote]:
        res = yf.Search(query, max_results=self.max_results, news_count=0)
        return list(res.quotes or [])

    def quote_currency(self, symbol: str) -> str | None:
        currency = getattr(yf.Ticker(symbol).fast_info, "currency", None)
        return str(currency) if currency else None

    def summary_currency(self, symbol: str) -> str | None:
        info = yf.Ticker(symbol).info or {}
        currency = info.get("currency")
        return str(currency) if currency else None


__all__ = ["DEFAULT_MAX_RESULTS", "Quote", "YahooClient"]
