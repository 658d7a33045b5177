"""Serializers from parsed transactions to third-party import formats."""

from __future__ import annotations

from typing import Protocol

from ..models import ExportResult, ParsedTransaction
from .yahoo import YahooFinanceExporter


class PortfolioExporter(Protocol):
    name: str

    def export(self, transactions: list[ParsedTransaction]) -> ExportResult: ...


EXPORTERS: dict[str, PortfolioExporter] = {"yahoo": YahooFinanceExporter()}


def get_exporter(key: str) -> PortfolioExporter:
    """Return the exporter registered under ``key`` (case-insensitive)."""

    try:
        return EXPORTERS[key.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown exporter: {key!r}") from None


__all__ = ["EXPORTERS", "PortfolioExporter", "YahooFinanceExporter", "get_exporter"]
