import asyncio

import pytest

from broker_parser.models import TickerResolution
from broker_parser.resolvers.yahoo import (
    YahooFullResolver,
    YahooISINResolver,
    YahooNameResolver,
    split_share_class,
)
from tests.helpers.yahoo_stub import YahooClientStub, quote


def _resolve(resolver, isin, name) -> TickerResolution:
    return asyncio.run(resolver.resolve(isin, name))


# ---- ISIN search ---------------------------------------------------------------


def test_isin_prefers_security_quote_and_keeps_its_currency():
    stub = YahooClientStub(
        {
            "US0378331005": [
                quote("AAPL.OPT", quote_type="OPTION"),
                quote("AAPL", currency="USD"),
            ]
        }
    )
    res = _resolve(YahooISINResolver(stub), "US0378331005", "Apple Inc")
    assert res == TickerResolution(ticker="AAPL", currency="USD")
    assert stub.searched() == ["US0378331005"]


def test_isin_falls_back_to_first_quote_and_backfills_currency():
    stub = YahooClientStub(
        {"SE0000115446": [quote("VOLV-B.FUT", quote_type="FUTURE")]},
        quote_currencies={"VOLV-B.FUT": "SEK"},
    )
    res = _resolve(YahooISINResolver(stub), "SE0000115446", "Volvo B")
    assert res == TickerResolution(ticker="VOLV-B.FUT", currency="SEK")


def test_currency_backfill_uses_summary_when_quote_has_none():
    stub = YahooClientStub(
        {"SE0011527613": [quote("0P0000J24W.ST", quote_type="MUTUALFUND")]},
        summary_currencies={"0P0000J24W.ST": "SEK"},
    )
    res = _resolve(YahooISINResolver(stub), "SE0011527613", "Avanza Global")
    assert res.currency == "SEK"
    assert ("quote_currency", "0P0000J24W.ST") in stub.calls
    assert ("summary_currency", "0P0000J24W.ST") in stub.calls


def test_currency_lookup_failure_keeps_ticker():
    stub = YahooClientStub({"US5949181045": [quote("MSFT")]}, fail_on=["MSFT"])
    res = _resolve(YahooISINResolver(stub), "US5949181045", "Microsoft")
    assert res == TickerResolution(ticker="MSFT", currency=None)


def test_isin_resolver_does_not_search_by_name():
    stub = YahooClientStub({"Apple Inc": [quote("AAPL")]})
    assert _resolve(YahooISINResolver(stub), "", "Apple Inc").ticker is None
    assert _resolve(YahooISINResolver(stub), "US0000000000", "Apple Inc").ticker is None
    assert stub.searched() == ["US0000000000"]


def test_isin_search_failure_is_a_miss():
    stub = YahooClientStub(fail_on=["US0378331005"])
    assert _resolve(YahooISINResolver(stub), "US0378331005", "Apple Inc").ticker is None


# ---- name search ---------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Alphabet Class C", ("Alphabet", "C")),
        ("Alphabet class a", ("Alphabet", "A")),
        ("Alphabet C", ("Alphabet", "C")),
        ("Investor B", ("Investor", "B")),
        ("Microsoft", ("Microsoft", None)),
        ("Volvo b", ("Volvo b", None)),
    ],
)
def test_split_share_class(raw, expected):
    assert split_share_class(raw) == expected


def _alphabet_quotes():
    return [
        quote("GOOGL", longname="Alphabet Inc.", currency="USD"),
        quote("GOOG", longname="Alphabet Inc.", currency="USD"),
        quote("ABEA.DE", exchange="GER", longname="Alphabet Inc."),
    ]


@pytest.mark.parametrize(("name", "ticker"), [("Alphabet Class C", "GOOG"), ("Alphabet A", "GOOGL")])
def test_alphabet_share_class_special_case(name, ticker):
    stub = YahooClientStub({"Alphabet Inc": _alphabet_quotes()})
    res = _resolve(YahooNameResolver(stub), "", name)
    assert res == TickerResolution(ticker=ticker, currency="USD")
    assert stub.searched() == ["Alphabet Inc"]


def test_alphabet_special_case_defaults_currency_to_usd():
    stub = YahooClientStub(
        {"Alphabet Inc": [quote("GOOGL", longname="Alphabet Inc."), quote("GOOG", longname="Alphabet Inc.")]}
    )
    res = _resolve(YahooNameResolver(stub), "", "Alphabet C")
    assert res == TickerResolution(ticker="GOOG", currency="USD")
    assert ("quote_currency", "GOOG") not in stub.calls


def test_prefix_match_on_preferred_exchange_shortest_name_wins():
    stub = YahooClientStub(
        {
            "Microsoft": [
                quote("MSF.DE", exchange="GER", longname="Microsoft Corporation"),
                quote("MSFTX", longname="Microsoft Corporation Extended Holdings"),
                quote("XYZ", longname="Other Corp"),
                quote("MSFT", shortname="Microsoft Corp", currency="USD"),
            ]
        }
    )
    res = _resolve(YahooNameResolver(stub), "", "Microsoft")
    assert res == TickerResolution(ticker="MSFT", currency="USD")


def test_first_preferred_exchange_candidate_without_prefix_match():
    stub = YahooClientStub(
        {
            "Investor": [
                quote("INVE-B.ST", exchange="STO", longname="Investor AB ser. B"),
                quote("IVSBF", exchange="NGM", quote_type="ETF", longname="Something else"),
                quote("IVSXF", exchange="NYQ", longname="Another"),
            ]
        },
        quote_currencies={"IVSBF": "USD"},
    )
    res = _resolve(YahooNameResolver(stub), "", "Investor B")
    assert res == TickerResolution(ticker="IVSBF", currency="USD")


def test_first_security_anywhere_when_no_preferred_exchange():
    stub = YahooClientStub(
        {
            "Volvo": [
                quote("VOLV.IDX", exchange="STO", quote_type="INDEX"),
                quote("VOLV-B.ST", exchange="STO", currency="SEK"),
            ]
        }
    )
    assert _resolve(YahooNameResolver(stub), "", "Volvo").ticker == "VOLV-B.ST"


def test_first_result_as_last_resort():
    stub = YahooClientStub(
        {"Gold": [quote("GC=F", exchange="CMX", quote_type="FUTURE", currency="USD")]}
    )
    assert _resolve(YahooNameResolver(stub), "", "Gold") == TickerResolution(
        ticker="GC=F", currency="USD"
    )


def test_name_resolver_misses():
    stub = YahooClientStub(fail_on=["Broken"])
    r = YahooNameResolver(stub)
    assert _resolve(r, "", "").ticker is None
    assert _resolve(r, "", "Nothing Found").ticker is None
    assert _resolve(r, "", "Broken").ticker is None
    assert stub.searched() == ["Nothing Found", "Broken"]


# ---- combined ------------------------------------------------------------------


def test_full_resolver_uses_isin_first_then_name():
    stub = YahooClientStub(
        {
            "US5949181045": [quote("MSFT", currency="USD")],
            "Volvo B": [],
            "Volvo": [quote("VOLV-B.ST", exchange="STO", currency="SEK")],
        }
    )
    r = YahooFullResolver(stub)
    assert _resolve(r, "US5949181045", "Microsoft").ticker == "MSFT"
    assert _resolve(r, "SE0000115446", "Volvo B").ticker == "VOLV-B.ST"
    assert stub.searched() == ["US5949181045", "SE0000115446", "Volvo"]
