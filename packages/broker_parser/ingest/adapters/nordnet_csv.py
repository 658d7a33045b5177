"""Adapter for Nordnet transaction exports.

Headers (tab-separated, UTF-16 as exported; abridged):
Id, Bokföringsdag, Affärsdag, Likviddag, Depå, Transaktionstyp, Värdepapper,
ISIN, Antal, Kurs, Ränta, Total Avgift, Valuta, Belopp, Valuta, Inköpsvärde,
Valuta, Resultat, Växlingskurs, Transaktionstext

Conventions
-----------
- ``Valuta`` repeats. After header aliasing the first occurrence (``Valuta``)
  belongs to the fee, ``Valuta_1`` to ``Belopp`` (account currency) and
  ``Valuta_2`` to ``Inköpsvärde`` (the instrument's currency).
- ``Belopp`` is negative for cash out and already includes the fee, so the
  unit price in account currency adds the fee back for BUY and removes it for
  everything else before dividing by the quantity.
- ``Transaktionsdag`` is preferred over ``Bokföringsdag`` when present.
"""

from __future__ import annotations

from collections.abc import Mapping

from ...models import ParsedTransaction
from ..utils import (
    first_non_empty,
    get_ci,
    normalize_type,
    parse_number,
    resolve_exchange_rate,
    to_date,
)

DEFAULT_CURRENCY = "SEK"


def _instrument(row: Mapping[str, str]) -> str | None:
    return first_non_empty([row.get("Instrument"), row.get("Värdepapper")])


class NordnetParser:
    name = "Nordnet"

    def can_parse(self, row: Mapping[str, str]) -> bool:
        return bool(
            (row.get("Transaktionstyp") or "").strip()
            and _instrument(row)
            and (row.get("Bokföringsdag") or "").strip()
        )

    def parse(self, row: Mapping[str, str]) -> ParsedTransaction | None:
        qty = parse_number(row.get("Antal"))
        total = parse_number(row.get("Belopp"))
        fee = parse_number(first_non_empty([row.get("Total Avgift"), row.get("Courtage")]))
        price = parse_number(row.get("Kurs"))
        tx_type = normalize_type(row.get("Transaktionstyp"))

        account_currency = (
            first_non_empty([row.get("Valuta_1"), row.get("Valuta")]) or DEFAULT_CURRENCY
        )
        native_currency = (
            first_non_empty([row.get("Valuta_2"), row.get("Valuta")]) or DEFAULT_CURRENCY
        )

        if qty != 0 and total != 0:
            price_in_account = abs((total + (fee if tx_type == "BUY" else -fee)) / qty)
        else:
            price_in_account = 0.0

        return ParsedTransaction(
            date=to_date(first_non_empty([row.get("Transaktionsdag"), row.get("Bokföringsdag")])),
            type=tx_type,
            symbol=_instrument(row) or "",
            quantity=abs(qty),
            price=price,
            currency=account_currency,
            fee=fee,
            total=total,
            original_source=self.name,
            account_id=first_non_empty([row.get("Depå"), row.get("Konto"), row.get("Kontonummer")]),
            account_currency=account_currency,
            price_in_account_currency=price_in_account,
            native_price=price,
            native_currency=native_currency,
            isin=(get_ci(row, "ISIN") or "").strip() or None,
            exchange_rate=resolve_exchange_rate(
                parse_number(row.get("Växlingskurs")),
                account_currency=account_currency,
                native_currency=native_currency,
                price=price,
                price_in_account_currency=price_in_account,
            ),
        )


__all__ = ["NordnetParser"]
