"""Ticker resolvers backed by Yahoo Finance search.

- ``YahooISINResolver`` searches by ISIN only.
- ``YahooNameResolver`` searches by instrument name with share-class aware
  ranking.
- ``YahooFullResolver`` tries the ISIN search, then the name search.

Network calls go through :class:`~broker_parser.yahoo_client.YahooClient` on a
worker thread. Every failure is logged and reported as a miss.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence

from ..logging_setup import get_logger
from ..models import TickerResolution
from ..yahoo_client import Quote, YahooClient

_logger = get_logger("broker_parser.resolvers.yahoo")

SECURITY_QUOTE_TYPES = frozenset({"EQUITY", "ETF", "MUTUALFUND"})
PREFERRED_EXCHANGES = frozenset({"NMS", "NYQ", "NGM"})

_CLASS_SUFFIX_RES = (
    re.compile(r"\s+Class\s+([A-Z])$", re.IGNORECASE),
    re.compile(r"\s+([A-Z])$"),
)

# Companies whose share classes list under unrelated symbols.
_CLASS_SYMBOLS: dict[str, dict[str, str]] = {
    "alphabet": {"A": "GOOGL", "C": "GOOG"},
}
_NAME_REWRITES = {"alphabet": "Alphabet Inc"}
_SPECIAL_CASE_CURRENCY = "USD"

_MISS = TickerResolution(ticker=None)


def _is_security(q: Quote) -> bool:
    return q.get("quoteType") in SECURITY_QUOTE_TYPES


def _display_name(q: Quote) -> str:
    return str(q.get("longname") or q.get("shortname") or "")


def split_share_class(name: str) -> tuple[str, str | None]:
    """Split ``"Alphabet Class C"`` / ``"Alphabet C"`` into ``("Alphabet", "C")``."""

    for rx in _CLASS_SUFFIX_RES:
        m = rx.search(name)
        if m:
            return name[: m.start()].strip(), m.group(1).upper()
    return name.strip(), None


class _YahooResolverBase:
    name = "Yahoo"

    def __init__(self, client: YahooClient | None = None) -> None:
        self._client = client or YahooClient()

    async def _search(self, query: str) -> list[Quote]:
        return await asyncio.to_thread(self._client.search, query)

    async def _currency_for(self, symbol: str) -> str | None:
        """Quote currency, else the summary currency; ``None`` on any failure."""

        try:
            currency = await asyncio.to_thread(self._client.quote_currency, symbol)
            if not currency:
                currency = await asyncio.to_thread(self._client.summary_currency, symbol)
        except Exception:
            _logger.debug("currency lookup failed symbol=%s", symbol, exc_info=True)
            return None
        return currency or None

    async def _finish(self, quote: Quote, currency: str | None = None) -> TickerResolution:
        symbol = str(quote.get("symbol") or "")
        if not symbol:
            return _MISS
        currency = currency or quote.get("currency") or None
        if not currency:
            currency = await self._currency_for(symbol)
        return TickerResolution(ticker=symbol, currency=currency)


class YahooISINResolver(_YahooResolverBase):
    """Resolve by ISIN search. Does not fall back to the name."""

    name = "Yahoo ISIN"

    async def resolve(self, isin: str, name: str) -> TickerResolution:
        if not isin:
            return _MISS
        try:
            quotes = await self._search(isin)
            if not quotes:
                return _MISS
            match = next((q for q in quotes if _is_security(q)), quotes[0])
            return await self._finish(match)
        except Exception:
            _logger.warning("Yahoo ISIN search failed isin=%s name=%s", isin, name, exc_info=True)
            return _MISS


class YahooNameResolver(_YahooResolverBase):
    """Resolve by instrument name.

    A trailing share-class marker (``"... Class B"`` or ``"... B"``) is removed
    before searching and kept as a tie-break. Candidates are ranked:

    1. a known class-specific symbol (e.g. Alphabet A/C),
    2. securities on a preferred US exchange whose display name starts with
       the searched name, shortest name first,
    3. the first security on a preferred exchange,
    4. the first security anywhere in the results,
    5. the first result.
    """

    name = "Yahoo Name"

    async def resolve(self, isin: str, name: str) -> TickerResolution:
        if not name or not name.strip():
            return _MISS

        clean, share_class = split_share_class(name)
        clean = _NAME_REWRITES.get(clean.lower(), clean)

        try:
            quotes = await self._search(clean)
            if not quotes:
                return _MISS
            quote, currency = self._pick(quotes, clean, share_class)
            return await self._finish(quote, currency)
        except Exception:
            _logger.warning("Yahoo name search failed name=%s", name, exc_info=True)
            return _MISS

    def _pick(
        self, quotes: Sequence[Quote], clean: str, share_class: str | None
    ) -> tuple[Quote, str | None]:
        lowered = clean.lower()
        preferred = [
            q for q in quotes if q.get("exchange") in PREFERRED_EXCHANGES and _is_security(q)
        ]

        if preferred:
            if share_class:
                for company, symbols in _CLASS_SYMBOLS.items():
                    wanted = symbols.get(share_class)
                    if company in lowered and wanted:
                        hit = next((q for q in preferred if q.get("symbol") == wanted), None)
                        if hit is not None:
                            return hit, hit.get("currency") or _SPECIAL_CASE_CURRENCY

            prefixed = [q for q in preferred if _display_name(q).lower().startswith(lowered)]
            if prefixed:
                return min(prefixed, key=lambda q: len(_display_name(q))), None
            return preferred[0], None

        any_security = next((q for q in quotes if _is_security(q)), None)
        if any_security is not None:
            return any_security, None
        return quotes[0], None


class YahooFullResolver(_YahooResolverBase):
    """ISIN search first, then name search, as a single chain entry."""

    name = "Yahoo Full"

    def __init__(self, client: YahooClient | None = None) -> None:
        super().__init__(client)
        self._isin = YahooISINResolver(self._client)
        self._name = YahooNameResolver(self._client)

    async def resolve(self, isin: str, name: str) -> TickerResolution:
        res = await self._isin.resolve(isin, name)
        if res.ticker:
            return res
        return await self._name.resolve(isin, name)


__all__ = [
    "PREFERRED_EXCHANGES",
    "SECURITY_QUOTE_TYPES",
    "YahooFullResolver",
    "YahooISINResolver",
    "YahooNameResolver",
    "split_share_class",
]
