"""Public API and batch orchestration for the ``broker_parser`` package.

The building blocks live in their own modules (``normalizers``, ``enricher``,
``resolvers``, ``cache``, ``exporters``) and are re-exported here as one stable
import surface. The helpers below compose them into the file → parse →
enrich → export pipeline used by the CLI.
"""

from __future__ import annotations

from collections.abc import Sequence
from os import PathLike

from .cache import LocalFileTickerCache  # noqa: F401  (re-export)
from .enricher import (  # noqa: F401  (re-export)
    MemoryTickerCache,
    TickerCache,
    TickerResolver,
    enrich_transactions,
)
from .exporters import YahooFinanceExporter, get_exporter
from .ingest.utils import load_rows_from_csv, normalize_type, parse_number  # noqa: F401
from .logging_setup import get_logger
from .models import AUTO_FORMAT, BrokerFormat, ExportResult, ParsedTransaction
from .normalizers import (  # noqa: F401  (re-export)
    get_parsers,
    identify_accounts,
    parse_transaction,
    parse_transactions,
)
from .resolvers import (
    FileTickerResolver,
    YahooFullResolver,  # noqa: F401  (re-export)
    YahooISINResolver,
    YahooNameResolver,
)
from .yahoo_client import YahooClient

_logger = get_logger("broker_parser.api")


class NoTransactionsError(ValueError):
    """Raised when not a single row of an export could be parsed."""


def load_transactions(
    csv_path: str | PathLike[str], fmt: BrokerFormat = AUTO_FORMAT
) -> list[ParsedTransaction]:
    """Read a broker export and return its parseable transactions.

    Raises ``NoTransactionsError`` when no row is usable, ``csv.Error`` when the
    file has no header row and ``OSError`` for unreadable files.
    """

    rows = load_rows_from_csv(csv_path)
    transactions = parse_transactions(rows, fmt)
    _logger.debug(
        "parsed transactions=%d rows=%d format=%s path=%s",
        len(transactions),
        len(rows),
        fmt,
        csv_path,
    )
    if not transactions:
        raise NoTransactionsError(f"no transactions could be parsed from {csv_path}")
    return transactions


def build_resolvers(
    *,
    ticker_file: str | PathLike[str] | None = None,
    yahoo: bool = True,
    yahoo_isin: bool = False,
    yahoo_name: bool = False,
    client: YahooClient | None = None,
) -> list[TickerResolver]:
    """Assemble the resolver chain in priority order.

    The mapping file comes first when given, then Yahoo ISIN search, then
    Yahoo name search. ``yahoo`` enables both Yahoo resolvers; ``yahoo_isin``
    and ``yahoo_name`` enable one each when ``yahoo`` is off.
    """

    resolvers: list[TickerResolver] = []
    if ticker_file is not None:
        resolvers.append(FileTickerResolver(ticker_file))
    if yahoo or yahoo_isin or yahoo_name:
        client = client or YahooClient()
    if yahoo or yahoo_isin:
        resolvers.append(YahooISINResolver(client))
    if yahoo or yahoo_name:
        resolvers.append(YahooNameResolver(client))
    return resolvers


def export_transactions(
    transactions: Sequence[ParsedTransaction], exporter: str = "yahoo"
) -> ExportResult:
    """Serialize with the exporter registered under ``exporter``.

    Raises ``ValueError`` for an unknown exporter name.
    """

    return get_exporter(exporter).export(list(transactions))


__all__ = [
    "FileTickerResolver",
    "LocalFileTickerCache",
    "MemoryTickerCache",
    "NoTransactionsError",
    "YahooFinanceExporter",
    "YahooFullResolver",
    "YahooISINResolver",
    "YahooNameResolver",
    "build_resolvers",
    "enrich_transactions",
    "export_transactions",
    "get_parsers",
    "identify_accounts",
    "load_transactions",
    "parse_transaction",
    "parse_transactions",
]
