# ruff: noqa: I001
"""CLI for the ``broker_parser`` package.

This module exposes callable command handlers (``cmd_export``,
``cmd_accounts``) and a Typer-based console interface. Environment variables
(``BROKER_PARSER_CACHE_PATH``, ``BROKER_PARSER_LOG_LEVEL``) are loaded from a
local ``.env`` using ``python-dotenv`` before delegating to command logic.
Business logic lives in ``broker_parser.api`` and related modules.
"""

from __future__ import annotations

import asyncio
import csv
import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .logging_setup import configure_logging, level_from_verbosity
from .models import AUTO_FORMAT

DEFAULT_CACHE_PATH = ".ticker-cache.json"


def _default_cache_path() -> Path:
    """Cache file from ``BROKER_PARSER_CACHE_PATH``, else ``./.ticker-cache.json``."""

    raw = os.getenv("BROKER_PARSER_CACHE_PATH")
    if raw and raw.strip():
        return Path(raw.strip()).expanduser()
    return Path(DEFAULT_CACHE_PATH)


def _load(csv_path: str, fmt: str):
    """Parse ``csv_path``; print an error and return ``None`` on failure."""

    from .api import NoTransactionsError, load_transactions

    try:
        return load_transactions(csv_path, fmt)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except (csv.Error, UnicodeDecodeError) as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
    except NoTransactionsError:
        print("Error: No transactions could be parsed from the file.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Unexpected failure reading '{csv_path}': {e}", file=sys.stderr)
    return None


def cmd_export(
    csv_path: str,
    *,
    fmt: str = AUTO_FORMAT,
    exporter: str = "yahoo",
    output: str | None = None,
    yahoo: bool = True,
    yahoo_isin: bool = False,
    yahoo_name: bool = False,
    ticker_file: str | None = None,
    cache_path: str | None = None,
    use_cache: bool = True,
) -> int:
    """Convert a broker export into an import file for another service.

    Behavior
    --------
    - Parses ``csv_path`` with the given broker format (auto-detected by default).
    - Resolves tickers through the mapping file, Yahoo ISIN search and Yahoo
      name search, in that order, consulting the ticker cache first.
    - Writes the exporter's output to ``output`` (default: the exporter's file
      name in the current directory).

    Errors are written to stderr and the function returns a non-zero exit
    status. The ticker cache is flushed before returning in every case.
    """

    from .api import LocalFileTickerCache, build_resolvers, enrich_transactions
    from .exporters import get_exporter

    try:
        export_with = get_exporter(exporter)
    except ValueError:
        print(f'Error: Unknown exporter "{exporter}"', file=sys.stderr)
        return 1

    transactions = _load(csv_path, fmt)
    if transactions is None:
        return 1
    print(f"Successfully parsed {len(transactions)} transactions.")

    resolvers = build_resolvers(
        ticker_file=Path(ticker_file).resolve() if ticker_file else None,
        yahoo=yahoo,
        yahoo_isin=yahoo_isin,
        yahoo_name=yahoo_name,
    )

    if resolvers:
        print(f"Resolving tickers using: {', '.join(r.name for r in resolvers)}...")
        cache = (
            LocalFileTickerCache(Path(cache_path) if cache_path else _default_cache_path())
            if use_cache
            else None
        )
        try:
            transactions = asyncio.run(
                enrich_transactions(transactions, resolvers=resolvers, cache=cache)
            )
        except Exception as e:
            print(f"Error: ticker resolution failed: {e}", file=sys.stderr)
            return 1
        finally:
            if cache is not None:
                cache.flush()
        resolved = sum(1 for t in transactions if t.ticker)
        print(f"Resolved tickers for {resolved}/{len(transactions)} transactions.")

    result = export_with.export(transactions)
    out_path = Path(output) if output else Path.cwd() / result.filename
    try:
        out_path.write_text(result.content, encoding="utf-8")
    except OSError as e:
        print(f"Error: could not write '{out_path}': {e}", file=sys.stderr)
        return 1

    print(f"Success! Exported to {out_path}")
    return 0


def cmd_accounts(csv_path: str) -> int:
    """Print one ``"<account id>\\t<transaction count>"`` line per account."""

    from .api import identify_accounts, load_rows_from_csv

    try:
        rows = load_rows_from_csv(csv_path)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except (csv.Error, UnicodeDecodeError) as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Unexpected failure reading '{csv_path}': {e}", file=sys.stderr)
        return 1

    accounts = identify_accounts(rows)
    if not accounts:
        print("Error: No accounts found in the file.", file=sys.stderr)
        return 1
    for acc in accounts:
        print(f"{acc.id}\t{acc.count}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Parse broker transaction CSVs (Avanza, Nordnet) and export to other formats.",
)

# Module-level argument object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_FILE_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,
    help="Path to the broker CSV file",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


@app.command("export")
def export_cmd(
    file: Annotated[Path, CSV_FILE_ARGUMENT],
    *,
    fmt: str = typer.Option(
        AUTO_FORMAT, "--format", "-f", help="Broker format (Auto, Avanza, Nordnet)."
    ),
    exporter: str = typer.Option("yahoo", "--exporter", "-e", help="Exporter to use (yahoo)."),
    output: str | None = typer.Option(None, "--output", "-o", help="Output file path."),
    yahoo: bool = typer.Option(
        True, "--yahoo/--no-yahoo", help="Use Yahoo Finance (ISIN + name) ticker resolution."
    ),
    yahoo_isin: bool = typer.Option(False, "--yahoo-isin", help="Use Yahoo ISIN search."),
    yahoo_name: bool = typer.Option(False, "--yahoo-name", help="Use Yahoo name search."),
    ticker_file: str | None = typer.Option(
        None, "--ticker-file", help="JSON or CSV file mapping ISIN/name to ticker."
    ),
    cache: str | None = typer.Option(
        None,
        "--cache",
        help="Ticker cache file (falls back to BROKER_PARSER_CACHE_PATH, then .ticker-cache.json).",
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the ticker cache."),
) -> None:
    """Export a broker CSV to another format."""

    code = cmd_export(
        str(file),
        fmt=fmt,
        exporter=exporter,
        output=output,
        yahoo=yahoo,
        yahoo_isin=yahoo_isin,
        yahoo_name=yahoo_name,
        ticker_file=ticker_file,
        cache_path=cache,
        use_cache=not no_cache,
    )
    if code:
        raise typer.Exit(code)


@app.command("accounts")
def accounts_cmd(file: Annotated[Path, CSV_FILE_ARGUMENT]) -> None:
    """List the accounts found in a broker CSV with their transaction counts."""

    code = cmd_accounts(str(file))
    if code:
        raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="More log output (-v info, -vv debug)."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors."),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(level_from_verbosity(verbose, quiet=quiet))

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
