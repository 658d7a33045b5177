"""Adapter for Avanza transaction exports.

Headers (semicolon-separated, as exported):
Datum, Konto, Typ av transaktion, Värdepapper/beskrivning, Antal, Kurs,
Belopp, Transaktionsvaluta, Courtage, Valutakurs, Instrumentvaluta, ISIN,
Resultat

Older exports name the instrument column ``Värdepapper``.

Conventions
-----------
- ``Antal`` is signed (negative for outflows); the canonical quantity is its
  absolute value.
- ``Byte`` (fund switch) rows carry no direction in their label. A positive
  ``Antal`` is the incoming leg (BUY), a negative one the outgoing leg (SELL).
- ``Transaktionsvaluta`` is the account currency (``SEK`` when absent),
  ``Instrumentvaluta`` the instrument's own currency.
- ``Belopp`` already includes courtage, so the price paid per unit in account
  currency is ``|Belopp / Antal|``.
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

DEFAULT_ACCOUNT_CURRENCY = "SEK"
SWITCH_LABEL = "byte"


def _instrument(row: Mapping[str, str]) -> str | None:
    return first_non_empty([row.get("Värdepapper/beskrivning"), row.get("Värdepapper")])


class AvanzaParser:
    name = "Avanza"

    def can_parse(self, row: Mapping[str, str]) -> bool:
        return bool((row.get("Typ av transaktion") or "").strip() and _instrument(row))

    def parse(self, row: Mapping[str, str]) -> ParsedTransaction | None:
        qty = parse_number(row.get("Antal"))
        total = parse_number(row.get("Belopp"))
        fee = parse_number(row.get("Courtage"))
        price = parse_number(row.get("Kurs"))

        raw_type = (row.get("Typ av transaktion") or "").strip()
        tx_type = normalize_type(raw_type)
        if raw_type.lower() == SWITCH_LABEL:
            if qty > 0:
                tx_type = "BUY"
            elif qty < 0:
                tx_type = "SELL"

        account_currency = (row.get("Transaktionsvaluta") or "").strip() or DEFAULT_ACCOUNT_CURRENCY
        native_currency = (row.get("Instrumentvaluta") or "").strip() or account_currency

        price_in_account = abs(total / qty) if qty != 0 and total != 0 else price

        isin = (get_ci(row, "ISIN") or "").strip() or None

        return ParsedTransaction(
            date=to_date(row.get("Datum")),
            type=tx_type,
            symbol=_instrument(row) or "",
            quantity=abs(qty),
            price=price,
            currency=account_currency,
            fee=fee,
            total=total,
            original_source=self.name,
            account_id=(row.get("Konto") or "").strip() or None,
            account_currency=account_currency,
            price_in_account_currency=price_in_account,
            native_price=price,
            native_currency=native_currency,
            isin=isin,
            exchange_rate=resolve_exchange_rate(
                parse_number(row.get("Valutakurs")),
                account_currency=account_currency,
                native_currency=native_currency,
                price=price,
                price_in_account_currency=price_in_account,
            ),
        )


__all__ = ["AvanzaParser"]
