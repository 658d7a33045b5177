"""Broker CSV rows → :class:`ParsedTransaction` dispatch.

Rows come from :func:`broker_parser.ingest.utils.read_csv_rows` (header-keyed
``dict[str, str]``). Each row is projected by exactly one adapter: the named
one when a format is given, else the first registered adapter whose
``can_parse`` accepts the row. Rows no adapter accepts, or whose projection
lacks a symbol or a valid date, are dropped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .ingest.adapters import AvanzaParser, BrokerParser, NordnetParser
from .logging_setup import get_logger
from .models import AUTO_FORMAT, AccountSummary, BrokerFormat, ParsedTransaction

_logger = get_logger("broker_parser.normalizers")

# Registration order is the auto-detection order.
_PARSERS: dict[str, BrokerParser] = {
    p.name: p for p in (AvanzaParser(), NordnetParser())
}


def get_parsers() -> dict[str, BrokerParser]:
    """Return the registered adapters keyed by name, in detection order."""

    return dict(_PARSERS)


def _select(row: Mapping[str, str], fmt: BrokerFormat) -> BrokerParser | None:
    if fmt == AUTO_FORMAT:
        return next((p for p in _PARSERS.values() if p.can_parse(row)), None)
    parser = _PARSERS.get(fmt)
    if parser is None or not parser.can_parse(row):
        return None
    return parser


def parse_transaction(
    row: Mapping[str, str], fmt: BrokerFormat = AUTO_FORMAT
) -> ParsedTransaction | None:
    """Project one raw row; ``None`` when it is not a usable transaction."""

    parser = _select(row, fmt)
    if parser is None:
        return None
    tx = parser.parse(row)
    if tx is None or not tx.symbol or tx.date is None:
        _logger.debug("row dropped parser=%s", parser.name)
        return None
    return tx


def parse_transactions(
    rows: Iterable[Mapping[str, str]], fmt: BrokerFormat = AUTO_FORMAT
) -> list[ParsedTransaction]:
    """Project every row, keeping input order and skipping unusable rows."""

    out: list[ParsedTransaction] = []
    for row in rows:
        tx = parse_transaction(row, fmt)
        if tx is not None:
            out.append(tx)
    return out


def identify_accounts(rows: Iterable[Mapping[str, str]]) -> list[AccountSummary]:
    """Count parseable transactions per account id, in first-seen order.

    Rows are auto-detected. Transactions without an account id are ignored.
    """

    counts: dict[str, int] = {}
    for row in rows:
        tx = parse_transaction(row)
        if tx is None or not tx.account_id:
            continue
        counts[tx.account_id] = counts.get(tx.account_id, 0) + 1
    return [AccountSummary(id=k, name=k, count=n) for k, n in counts.items()]


__all__ = ["get_parsers", "identify_accounts", "parse_transaction", "parse_transactions"]
