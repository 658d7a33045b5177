"""Ticker resolver backed by a user-maintained mapping file.

Accepted shapes:

- JSON object ``{"<isin or name>": "<ticker>", ...}``
- JSON array ``[{"isin": ..., "name": ..., "ticker": ...}, ...]``; each entry
  is keyed by its ISIN, else its name
- CSV/TSV with ``isin``, ``name`` and ``ticker`` columns (header names are
  matched case-insensitively; the delimiter is detected)

Later entries overwrite earlier ones with the same key. A missing or
malformed file yields an empty mapping and a logged warning.
"""

from __future__ import annotations

import csv
import json
from os import PathLike
from pathlib import Path
from typing import Any

from ..ingest.utils import decode_csv_bytes, first_non_empty, get_ci, read_csv_rows
from ..logging_setup import get_logger
from ..models import TickerResolution

_logger = get_logger("broker_parser.resolvers.file")

_TABULAR_SUFFIXES = {".csv", ".tsv"}


def _from_json(data: Any) -> dict[str, str]:
    mappings: dict[str, str] = {}
    if isinstance(data, list):
        for item in data:
            if not isinstance(item, dict):
                continue
            key = first_non_empty([_as_text(item.get("isin")), _as_text(item.get("name"))])
            ticker = _as_text(item.get("ticker"))
            if key and ticker and ticker.strip():
                mappings[key] = ticker.strip()
    elif isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, str) and value.strip():
                mappings[str(key)] = value.strip()
    else:
        raise ValueError(f"unsupported JSON root type: {type(data).__name__}")
    return mappings


def _as_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _from_rows(rows: list[dict[str, str]]) -> dict[str, str]:
    mappings: dict[str, str] = {}
    for row in rows:
        key = first_non_empty([get_ci(row, "isin"), get_ci(row, "name")])
        ticker = (get_ci(row, "ticker") or "").strip()
        if key and ticker:
            mappings[key] = ticker
    return mappings


def load_mappings(path: str | PathLike[str]) -> dict[str, str]:
    """Read ``path`` into a key→ticker mapping; empty on any problem."""

    p = Path(path)
    if not p.exists():
        _logger.warning("ticker file not found path=%s", p)
        return {}

    suffix = p.suffix.lower()
    try:
        if suffix == ".json":
            return _from_json(json.loads(p.read_text(encoding="utf-8-sig")))
        if suffix in _TABULAR_SUFFIXES:
            return _from_rows(read_csv_rows(decode_csv_bytes(p.read_bytes())))
    except (OSError, UnicodeDecodeError, ValueError, csv.Error):
        # json.JSONDecodeError is a ValueError
        _logger.error("could not parse ticker file path=%s", p, exc_info=True)
        return {}

    _logger.warning("unsupported ticker file type path=%s", p)
    return {}


class FileTickerResolver:
    """Look up tickers by ISIN, then by name, in a static mapping file."""

    name = "File"

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        self._mappings = load_mappings(self.path)
        _logger.debug("ticker file loaded entries=%d path=%s", len(self._mappings), self.path)

    def __len__(self) -> int:
        return len(self._mappings)

    async def resolve(self, isin: str, name: str) -> TickerResolution:
        ticker = (isin and self._mappings.get(isin)) or (name and self._mappings.get(name)) or None
        return TickerResolution(ticker=ticker)


__all__ = ["FileTickerResolver", "load_mappings"]
