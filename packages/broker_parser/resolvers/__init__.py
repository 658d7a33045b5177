"""Ticker resolvers usable in an enrichment chain."""

from .file import FileTickerResolver
from .yahoo import YahooFullResolver, YahooISINResolver, YahooNameResolver

__all__ = [
    "FileTickerResolver",
    "YahooFullResolver",
    "YahooISINResolver",
    "YahooNameResolver",
]
