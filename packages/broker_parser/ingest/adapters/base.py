"""Capability interface shared by all broker adapters."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from ...models import ParsedTransaction


@runtime_checkable
class BrokerParser(Protocol):
    """Detects and projects one broker's CSV rows onto :class:`ParsedTransaction`.

    ``can_parse`` must only look at which fields the row carries; it is what
    the dispatcher uses for auto-detection, so the required field sets of the
    registered adapters must not overlap.
    """

    name: str

    def can_parse(self, row: Mapping[str, str]) -> bool: ...

    def parse(self, row: Mapping[str, str]) -> ParsedTransaction | None: ...
