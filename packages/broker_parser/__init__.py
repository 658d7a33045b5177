"""Public interface for the ``broker_parser`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    FileTickerResolver,
    LocalFileTickerCache,
    MemoryTickerCache,
    NoTransactionsError,
    YahooFinanceExporter,
    YahooFullResolver,
    YahooISINResolver,
    YahooNameResolver,
    build_resolvers,
    enrich_transactions,
    export_transactions,
    get_parsers,
    identify_accounts,
    load_transactions,
    parse_transaction,
    parse_transactions,
)
from .enricher import TickerCache, TickerResolver
from .ingest.adapters import BrokerParser
from .ingest.utils import normalize_type, parse_number
from .models import (
    AUTO_FORMAT,
    AccountSummary,
    BrokerFormat,
    ExportResult,
    ParsedTransaction,
    TickerResolution,
    TransactionType,
)

__all__ = [
    # API
    "build_resolvers",
    "enrich_transactions",
    "export_transactions",
    "get_parsers",
    "identify_accounts",
    "load_transactions",
    "normalize_type",
    "parse_number",
    "parse_transaction",
    "parse_transactions",
    # Components
    "BrokerParser",
    "FileTickerResolver",
    "LocalFileTickerCache",
    "MemoryTickerCache",
    "TickerCache",
    "TickerResolver",
    "YahooFinanceExporter",
    "YahooFullResolver",
    "YahooISINResolver",
    "YahooNameResolver",
    # Models / types
    "AUTO_FORMAT",
    "AccountSummary",
    "BrokerFormat",
    "ExportResult",
    "NoTransactionsError",
    "ParsedTransaction",
    "TickerResolution",
    "TransactionType",
]
