import csv
from datetime import date

import pytest

from broker_parser.ingest.utils import (
    dedupe_headers,
    get_ci,
    load_rows_from_csv,
    normalize_type,
    parse_number,
    read_csv_rows,
    resolve_exchange_rate,
    to_date,
)


# ---- parse_number --------------------------------------------------------------


def test_parse_number_decimal_comma_and_space_grouping():
    assert parse_number("1 234,50") == 1234.50
    assert parse_number("-19 750,25") == -19750.25
    # Non-breaking space as thousands separator
    assert parse_number("1\u00a0000,5") == 1000.5


def test_parse_number_empty_inputs_are_zero():
    assert parse_number(None) == 0
    assert parse_number("") == 0
    assert parse_number("   ") == 0


def test_parse_number_is_idempotent_on_numbers():
    assert parse_number(12.5) == 12.5
    assert parse_number(parse_number("3,25")) == 3.25
    assert parse_number(7) == 7.0


def test_parse_number_uses_leading_numeric_part_only():
    assert parse_number("12,5 SEK") == 12.5
    assert parse_number("abc") == 0


# ---- normalize_type ------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("KÖPT", "BUY"),
        ("köpt", "BUY"),
        ("Köp", "BUY"),
        ("Buy", "BUY"),
        ("Sälj", "SELL"),
        ("SÅLT", "SELL"),
        ("Inlösen likvid", "SELL"),
        ("FUSION UTBOKNING", "SELL"),
        ("Makulering", "SELL"),
        ("Utdelning", "DIVIDEND"),
        ("Insättning", "DEPOSIT"),
        ("Realtidsinsättning", "DEPOSIT"),
        ("Uttag", "WITHDRAW"),
        ("Ränta", "INTEREST"),
        ("Avkastningsskatt", "INTEREST"),
        ("Utländsk källskatt", "TAX"),
        ("Byte", "OTHER"),
        ("", "OTHER"),
        (None, "OTHER"),
    ],
)
def test_normalize_type_keywords(raw, expected):
    assert normalize_type(raw) == expected


def test_normalize_type_first_category_in_table_order_wins():
    # Contains both a BUY and a SELL keyword; BUY is listed first.
    assert normalize_type("KÖP/SÄLJ") == "BUY"


# ---- exchange rate -------------------------------------------------------------


def test_resolve_exchange_rate_prefers_explicit_rate():
    assert (
        resolve_exchange_rate(
            10.5, account_currency="SEK", native_currency="USD", price=1, price_in_account_currency=9
        )
        == 10.5
    )


def test_resolve_exchange_rate_same_currency_is_one():
    assert (
        resolve_exchange_rate(
            0, account_currency="SEK", native_currency="SEK", price=2, price_in_account_currency=5
        )
        == 1.0
    )


def test_resolve_exchange_rate_implied_from_account_price():
    rate = resolve_exchange_rate(
        0, account_currency="SEK", native_currency="USD", price=100, price_in_account_currency=1050
    )
    assert rate == pytest.approx(10.5)


def test_resolve_exchange_rate_without_data_is_one():
    assert (
        resolve_exchange_rate(
            0, account_currency="SEK", native_currency="USD", price=0, price_in_account_currency=0
        )
        == 1.0
    )


# ---- field helpers -------------------------------------------------------------


def test_to_date_accepts_iso_with_time_and_rejects_garbage():
    assert to_date("2024-01-15") == date(2024, 1, 15)
    assert to_date("2024-01-15T10:00:00") == date(2024, 1, 15)
    assert to_date(" 2024-01-15 10:00 ") == date(2024, 1, 15)
    assert to_date("2024-13-01") is None
    assert to_date("not-a-date") is None
    assert to_date("") is None
    assert to_date(None) is None


def test_get_ci_ignores_case_and_surrounding_whitespace():
    row = {" Isin ": "SE0000115446", "Name": "Volvo B"}
    assert get_ci(row, "ISIN") == "SE0000115446"
    assert get_ci(row, "name") == "Volvo B"
    assert get_ci(row, "ticker") is None


# ---- CSV loading ---------------------------------------------------------------


def test_dedupe_headers_aliases_by_occurrence():
    assert dedupe_headers(["Valuta", "Belopp", "Valuta", "Valuta"]) == [
        "Valuta",
        "Belopp",
        "Valuta_1",
        "Valuta_2",
    ]


def test_read_csv_rows_sniffs_delimiter_and_pads_short_rows():
    text = "Datum;Konto;Belopp\n\n2024-01-01;ISK;1 000,00\n2024-01-02;ISK\n"
    rows = read_csv_rows(text)
    assert rows == [
        {"Datum": "2024-01-01", "Konto": "ISK", "Belopp": "1 000,00"},
        {"Datum": "2024-01-02", "Konto": "ISK", "Belopp": ""},
    ]


def test_read_csv_rows_sniffs_past_leading_blank_lines():
    text = "\n  \nDatum;Konto;Typ av transaktion\n2024-01-15;ISK 1234;Köp\n"
    assert read_csv_rows(text) == [
        {"Datum": "2024-01-15", "Konto": "ISK 1234", "Typ av transaktion": "Köp"}
    ]

    tabbed = "\r\nBokföringsdag\tTransaktionstyp\n2024-05-02\tKÖPT\n"
    assert read_csv_rows(tabbed) == [{"Bokföringsdag": "2024-05-02", "Transaktionstyp": "KÖPT"}]


def test_read_csv_rows_handles_quoted_commas_and_bom():
    text = '\ufeffname,ticker\n"Alphabet, Class A",GOOGL\n'
    assert read_csv_rows(text) == [{"name": "Alphabet, Class A", "ticker": "GOOGL"}]


def test_read_csv_rows_without_header_raises():
    with pytest.raises(csv.Error):
        read_csv_rows("\n\n")


def test_load_rows_from_csv_decodes_utf16(tmp_path):
    p = tmp_path / "nordnet.csv"
    p.write_bytes("Valuta\tBelopp\tValuta\nSEK\t-10,00\tUSD\n".encode("utf-16"))
    assert load_rows_from_csv(p) == [{"Valuta": "SEK", "Belopp": "-10,00", "Valuta_1": "USD"}]
