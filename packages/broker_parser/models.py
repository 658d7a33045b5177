"""Data models for ``broker_parser``.

Two kinds of models live here:

- Plain frozen dataclasses for in-process records produced by the broker
  parsers and consumed by the enricher and exporters (``ParsedTransaction``,
  ``AccountSummary``, ``ExportResult``).
- Pydantic DTOs for values that cross a JSON boundary (the ticker cache file
  and resolver results), validated strictly on load.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as Date
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, RootModel

# ---------------------------------------------------------------------------
# Transaction classification
# ---------------------------------------------------------------------------

TransactionType: TypeAlias = Literal[
    "BUY", "SELL", "DIVIDEND", "DEPOSIT", "WITHDRAW", "INTEREST", "TAX", "OTHER"
]
"""Closed classification set for normalized transaction types."""

BrokerFormat: TypeAlias = str
"""A registered parser name (``"Avanza"``, ``"Nordnet"``) or ``"Auto"``."""

AUTO_FORMAT: BrokerFormat = "Auto"


# ---------------------------------------------------------------------------
# Canonical transaction
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """A single broker transaction projected onto the canonical shape.

    ``quantity`` and ``fee`` are magnitudes; direction lives in ``type`` only.
    ``total`` keeps the broker's own sign convention (negative for cash out on
    both supported brokers). ``currency`` is the account/settlement currency
    and ``native_currency``/``native_price`` describe the instrument's own
    trading currency. ``exchange_rate`` converts native to account currency.

    Instances are immutable; the enricher returns copies with ``ticker`` set
    via :func:`dataclasses.replace`.
    """

    date: Date | None
    type: TransactionType
    symbol: str
    quantity: float = 0.0
    price: float = 0.0
    currency: str = ""
    fee: float = 0.0
    total: float = 0.0
    original_source: str | None = None
    ticker: str | None = None
    account_id: str | None = None
    account_currency: str | None = None
    price_in_account_currency: float | None = None
    native_price: float | None = None
    native_currency: str | None = None
    isin: str | None = None
    exchange_rate: float = 1.0

    @property
    def identity_key(self) -> str:
        """Key used for cache lookups: ISIN when present, else the symbol."""

        return self.isin or self.symbol or ""


@dataclass(frozen=True, slots=True)
class AccountSummary:
    """Count of parseable transactions per distinct broker account."""

    id: str
    name: str
    count: int


@dataclass(frozen=True, slots=True)
class ExportResult:
    filename: str
    content: str
    mime_type: str


# ---------------------------------------------------------------------------
# Ticker resolution DTOs (cache file + resolver results)
# ---------------------------------------------------------------------------


class TickerResolution(BaseModel):
    """Outcome of one resolution attempt.

    ``ticker`` is ``None`` when no resolver matched. ``currency`` is the
    instrument's trading currency when the resolver could determine it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    ticker: str | None
    currency: str | None = None


class TickerCacheFile(RootModel[dict[str, TickerResolution]]):
    """On-disk schema of the ticker cache: ``{identity_key: {ticker, currency}}``."""


__all__ = [
    "AUTO_FORMAT",
    "AccountSummary",
    "BrokerFormat",
    "ExportResult",
    "ParsedTransaction",
    "TickerCacheFile",
    "TickerResolution",
    "TransactionType",
]
