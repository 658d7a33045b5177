"""Yahoo Finance portfolio import CSV.

Columns: ``Symbol, Trade Date, Purchase Price, Quantity, Commission, Comment``.
Only BUY and SELL transactions are exported; SELL quantities are negative and
trade dates use ``YYYYMMDD``.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..models import ExportResult, ParsedTransaction

HEADERS = ("Symbol", "Trade Date", "Purchase Price", "Quantity", "Commission", "Comment")
FILENAME = "yahoo_finance_import.csv"
MIME_TYPE = "text/csv"
DEFAULT_SOURCE = "Broker"


def _escape(value: str) -> str:
    if "," in value or '"' in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def _fmt_quantity(q: float) -> str:
    # Whole quantities without a trailing ".0"
    q = float(q)
    return str(int(q)) if q.is_integer() else repr(q)


class YahooFinanceExporter:
    name = "Yahoo Finance"

    def export(self, transactions: Iterable[ParsedTransaction]) -> ExportResult:
        lines = [",".join(HEADERS)]
        for t in transactions:
            if t.type not in ("BUY", "SELL") or t.date is None:
                continue
            qty = -abs(t.quantity) if t.type == "SELL" else abs(t.quantity)
            lines.append(
                ",".join(
                    [
                        _escape(t.ticker or t.symbol),
                        t.date.strftime("%Y%m%d"),
                        f"{t.price or 0.0:.4f}",
                        _fmt_quantity(qty),
                        f"{t.fee or 0.0:.4f}",
                        _escape(f"Imported from {t.original_source or DEFAULT_SOURCE}"),
                    ]
                )
            )
        return ExportResult(filename=FILENAME, content="\n".join(lines), mime_type=MIME_TYPE)


__all__ = ["FILENAME", "HEADERS", "MIME_TYPE", "YahooFinanceExporter"]
