"""Ingest helpers shared by the broker adapters and the CLI.

- Number and transaction-type normalization for Swedish broker exports
  (``parse_number``, ``normalize_type``).
- Small field helpers (date coercion, case-insensitive header lookup).
- CSV loading into ``dict[str, str]`` rows. Header labels that repeat within
  one export (Nordnet emits ``Valuta`` three times) are aliased by occurrence
  order as ``Valuta``, ``Valuta_1``, ``Valuta_2`` so every column stays
  addressable by position.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Mapping, Sequence
from datetime import date
from io import StringIO
from os import PathLike
from pathlib import Path

from ..models import TransactionType

# ---------------------------------------------------------------------------
# Numbers and transaction types
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(raw: str | float | int | None) -> float:
    """Parse a decimal-comma, space-grouped number such as ``"1 234,50"``.

    Numbers pass through unchanged. ``None`` and empty strings yield ``0``.
    All whitespace (including non-breaking spaces) is removed and the first
    comma becomes the decimal point. Only the leading numeric part is used;
    text without one yields ``0``.
    """

    if isinstance(raw, int | float) and not isinstance(raw, bool):
        return float(raw)
    if not raw:
        return 0.0
    s = _WHITESPACE_RE.sub("", str(raw)).replace(",", ".", 1)
    m = _LEADING_FLOAT_RE.match(s)
    if m is None:
        return 0.0
    return float(m.group(0))


# Table order is the tie-break: the first category with a matching keyword wins.
# Mergers and forced cancellations (FUSION/MAKULERING) close a position and
# count as SELL; the yield tax AVKASTNINGSSKATT is booked with INTEREST.
TYPE_KEYWORDS: tuple[tuple[TransactionType, tuple[str, ...]], ...] = (
    ("BUY", ("KÖP", "KÖPT", "BUY", "INBOKNING")),
    (
        "SELL",
        (
            "SÄLJ",
            "SÅLT",
            "SELL",
            "INLÖSEN",
            "REDEMPTION",
            "UTBOKNING",
            "FUSION",
            "MERGER",
            "MAKULERING",
        ),
    ),
    ("DIVIDEND", ("UTDELNING", "DIVIDEND")),
    ("DEPOSIT", ("INSÄTTNING", "DEPOSIT", "INS. KREDIT", "REALTIDSINSÄTTNING")),
    ("WITHDRAW", ("UTTAG", "WITHDRAW")),
    ("INTEREST", ("RÄNTA", "INTEREST", "AVKASTNINGSSKATT")),
    ("TAX", ("SKATT", "TAX")),
)


def normalize_type(raw: str | None) -> TransactionType:
    """Classify a free-text transaction label into the closed type set.

    Matching is case-insensitive substring containment over
    :data:`TYPE_KEYWORDS`; unknown or empty labels map to ``"OTHER"``.
    """

    if not raw:
        return "OTHER"
    label = str(raw).upper()
    for category, keywords in TYPE_KEYWORDS:
        if any(k in label for k in keywords):
            return category
    return "OTHER"


def resolve_exchange_rate(
    raw_rate: float,
    *,
    account_currency: str,
    native_currency: str,
    price: float,
    price_in_account_currency: float | None,
) -> float:
    """Return the native→account rate for a row.

    An explicit broker rate wins. Otherwise the rate is ``1`` when both
    currencies match, else it is implied by the unit price paid in account
    currency over the native unit price. ``1`` when nothing is derivable.
    """

    if raw_rate:
        return raw_rate
    if account_currency == native_currency:
        return 1.0
    if price and price_in_account_currency:
        return price_in_account_currency / price
    return 1.0


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def to_date(raw: str | None) -> date | None:
    """Parse an ISO calendar date, ignoring any time part; ``None`` when invalid."""

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    first = s.split()[0].split("T", 1)[0]
    try:
        return date.fromisoformat(first)
    except ValueError:
        return None


def first_non_empty(values: Sequence[str | None]) -> str | None:
    for v in values:
        if v is None:
            continue
        t = v.strip()
        if t:
            return t
    return None


def get_ci(row: Mapping[str, str], name: str) -> str | None:
    """Return the value of the first header equal to ``name`` ignoring case/whitespace."""

    wanted = name.strip().upper()
    for key, value in row.items():
        if key.strip().upper() == wanted:
            return value
    return None


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------

_DELIMITERS = (",", ";", "\t")


def dedupe_headers(headers: Sequence[str]) -> list[str]:
    """Alias repeated header labels by occurrence: ``X``, ``X_1``, ``X_2``."""

    seen: dict[str, int] = {}
    out: list[str] = []
    for h in headers:
        label = h.strip()
        n = seen.get(label, 0)
        seen[label] = n + 1
        out.append(label if n == 0 else f"{label}_{n}")
    return out


def _sniff_delimiter(header_line: str) -> str:
    counts = {d: header_line.count(d) for d in _DELIMITERS}
    best = max(_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] > 0 else ","


def read_csv_rows(csv_text: str, *, delimiter: str | None = None) -> list[dict[str, str]]:
    """Tokenize CSV text into header-keyed rows.

    The delimiter is detected from the first non-blank line among ``,``, ``;`` and tab
    unless given. Blank lines are skipped, short rows are padded with empty
    strings and cells beyond the header are dropped.

    Raises ``csv.Error`` when the text has no header row.
    """

    text = csv_text.lstrip("\ufeff")
    if delimiter is None:
        delimiter = _sniff_delimiter(next((ln for ln in text.splitlines() if ln.strip()), ""))

    with StringIO(text, newline="") as f:
        reader = csv.reader(f, delimiter=delimiter)
        header: list[str] | None = None
        rows: list[dict[str, str]] = []
        for cells in reader:
            if not any(c.strip() for c in cells):
                continue
            if header is None:
                header = dedupe_headers(cells)
                continue
            padded = list(cells) + [""] * (len(header) - len(cells))
            rows.append(dict(zip(header, padded, strict=False)))

    if header is None:
        raise csv.Error("CSV appears to have no header row")
    return rows


def decode_csv_bytes(data: bytes) -> str:
    """Decode broker export bytes: UTF-16 when a UTF-16 BOM is present, else UTF-8."""

    if data.startswith((b"\xff\xfe", b"\xfe\xff")):
        return data.decode("utf-16")
    return data.decode("utf-8-sig")


def load_rows_from_csv(csv_path: str | PathLike[str]) -> list[dict[str, str]]:
    """Read a broker CSV export from disk and return header-keyed rows."""

    return read_csv_rows(decode_csv_bytes(Path(csv_path).read_bytes()))


__all__ = [
    "TYPE_KEYWORDS",
    "decode_csv_bytes",
    "dedupe_headers",
    "first_non_empty",
    "get_ci",
    "load_rows_from_csv",
    "normalize_type",
    "parse_number",
    "read_csv_rows",
    "resolve_exchange_rate",
    "to_date",
]
