"""Ticker enrichment for parsed transactions.

``enrich_transactions`` walks a batch in order and, for each transaction that
still needs a ticker, consults the cache and then the resolver chain keyed by
the transaction's identity (ISIN, else symbol). Resolver failures are logged
and treated as "no match"; they never abort the batch.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol, runtime_checkable

from .logging_setup import get_logger
from .models import ParsedTransaction, TickerResolution

_logger = get_logger("broker_parser.enricher")


@runtime_checkable
class TickerResolver(Protocol):
    """Looks up a ticker from an ISIN and/or a free-text instrument name.

    Implementations return ``TickerResolution(ticker=None)`` on a miss and
    should not raise.
    """

    name: str

    async def resolve(self, isin: str, name: str) -> TickerResolution: ...


@runtime_checkable
class TickerCache(Protocol):
    async def get(self, key: str) -> TickerResolution | None: ...

    async def set(self, key: str, value: TickerResolution) -> None: ...


class MemoryTickerCache:
    """Process-local :class:`TickerCache` backed by a dict."""

    def __init__(self) -> None:
        self._table: dict[str, TickerResolution] = {}

    async def get(self, key: str) -> TickerResolution | None:
        return self._table.get(key)

    async def set(self, key: str, value: TickerResolution) -> None:
        self._table[key] = value


async def _run_resolvers(
    resolvers: Sequence[TickerResolver],
    tx: ParsedTransaction,
    key: str,
    *,
    stop_on_first_match: bool,
) -> TickerResolution | None:
    found: TickerResolution | None = None
    for resolver in resolvers:
        try:
            res = await resolver.resolve(tx.isin or "", tx.symbol)
        except Exception:
            _logger.warning("resolver %s failed for %s", resolver.name, key, exc_info=True)
            continue
        if res is None or not res.ticker:
            continue
        if found is None:
            found = res
        if stop_on_first_match:
            break
    return found


async def enrich_transactions(
    transactions: Sequence[ParsedTransaction],
    *,
    resolvers: Sequence[TickerResolver],
    cache: TickerCache | None = None,
    skip_if_present: bool = True,
    stop_on_first_match: bool = True,
) -> list[ParsedTransaction]:
    """Return ``transactions`` with ``ticker`` filled where it could be resolved.

    Parameters
    ----------
    resolvers:
        Tried in order; earlier resolvers take priority.
    cache:
        Consulted before any resolver. Only newly resolved, non-null results
        are written back.
    skip_if_present:
        Leave transactions that already carry a ticker untouched.
    stop_on_first_match:
        Stop the chain at the first resolver that returns a ticker. When
        ``False`` every resolver still runs but the first match is kept.

    Output order matches input order; transactions are processed one at a time.
    """

    enriched: list[ParsedTransaction] = []
    for tx in transactions:
        if skip_if_present and tx.ticker:
            enriched.append(tx)
            continue

        key = tx.identity_key
        if not key:
            enriched.append(tx)
            continue

        resolution: TickerResolution | None = None
        if cache is not None:
            cached = await cache.get(key)
            if cached is not None and cached.ticker:
                resolution = cached

        if resolution is None:
            resolution = await _run_resolvers(
                resolvers, tx, key, stop_on_first_match=stop_on_first_match
            )
            if resolution is not None and cache is not None:
                await cache.set(key, resolution)

        if resolution is not None and resolution.ticker:
            tx = replace(tx, ticker=resolution.ticker)
        enriched.append(tx)

    resolved = sum(1 for t in enriched if t.ticker)
    _logger.debug("enrichment done total=%d with_ticker=%d", len(enriched), resolved)
    return enriched


__all__ = [
    "MemoryTickerCache",
    "TickerCache",
    "TickerResolver",
    "enrich_transactions",
]
