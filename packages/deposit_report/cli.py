# ruff: noqa: I001
"""CLI for the ``deposit_report`` package.

Command handlers (``cmd_*``) return process exit codes and can be called
directly; the Typer app wraps them. Environment variables (notably
``DATABASE_URL``) are loaded from a local ``.env`` using ``python-dotenv``
before any command runs. Business logic lives in ``deposit_report.api`` and
the stage modules.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import DepositReportError
from .logging_setup import configure_logging


def _print_error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _emit_report(report, *, as_json: bool) -> None:
    from .report import format_report, report_to_dict

    if as_json:
        typer.echo(json.dumps(report_to_dict(report), indent=2))
        return
    for line in format_report(report):
        typer.echo(line)


def cmd_run(
    transaction_paths: Sequence[str | Path],
    *,
    directory_path: str | Path | None = None,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Ingest the given exports, then print the deposit report.

    Nothing is printed to stdout when any stage fails; the error goes to stderr
    and the return value is ``1``.
    """

    from .api import run_deposit_report
    from .directory import load_directory
    from .ingest import load_transactions_from_json

    try:
        directory = load_directory(directory_path)
        records = load_transactions_from_json(transaction_paths)
        report = run_deposit_report(records, directory, database_url=database_url)
    except DepositReportError as e:
        _print_error(str(e))
        return 1

    _emit_report(report, as_json=as_json)
    return 0


def cmd_ingest(
    transaction_paths: Sequence[str | Path],
    *,
    database_url: str | None = None,
) -> int:
    """Replace the stored dataset with the given exports and print counts."""

    from .api import require_database_url
    from .ingest import load_transactions_from_json
    from .ingestion import ingest_records

    try:
        url = require_database_url(database_url)
        records = load_transactions_from_json(transaction_paths)
        result = ingest_records(records, database_url=url)
    except DepositReportError as e:
        _print_error(str(e))
        return 1

    typer.echo(
        f"Ingested {result.written} transaction(s) "
        f"({result.received} received, {result.removed} stale removed)"
    )
    return 0


def cmd_report(
    *,
    directory_path: str | Path | None = None,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Print the deposit report for the dataset already in the store."""

    from .api import build_report
    from .directory import load_directory

    try:
        directory = load_directory(directory_path)
        report = build_report(directory, database_url=database_url)
    except DepositReportError as e:
        _print_error(str(e))
        return 1

    _emit_report(report, as_json=as_json)
    return 0


def cmd_init_db(*, database_url: str | None = None) -> int:
    """Create the ``wallet_transactions`` table when it does not exist."""

    from sqlalchemy.exc import SQLAlchemyError

    from db.client import create_schema
    from .api import require_database_url

    try:
        url = require_database_url(database_url)
        create_schema(database_url=url)
    except DepositReportError as e:
        _print_error(str(e))
        return 1
    except SQLAlchemyError as e:
        _print_error(f"schema creation failed: {e}")
        return 1

    typer.echo("Schema is up to date")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Ingest wallet transaction exports and report valid deposits per known "
        "customer. Loads DATABASE_URL from a local .env before running."
    ),
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Defaults live on the parameters, as Annotated options require.
TRANSACTIONS_OPTION: OptionInfo = typer.Option(
    "--transactions",
    "-t",
    help="Wallet export JSON with a 'transactions' array. Repeat for several files.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the loader reports missing files as configuration errors
)
DIRECTORY_OPTION: OptionInfo = typer.Option(
    "--directory",
    help=(
        "Known-customer directory JSON (defaults to DEPOSIT_REPORT_DIRECTORY, "
        "then the bundled seed)."
    ),
    dir_okay=False,
    file_okay=True,
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
JSON_OPTION: OptionInfo = typer.Option(
    "--json", help="Print the report as JSON instead of text lines."
)


@app.command("run")
def run_cmd(
    transactions: Annotated[list[Path], TRANSACTIONS_OPTION],
    directory: Annotated[Path | None, DIRECTORY_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    as_json: Annotated[bool, JSON_OPTION] = False,
) -> None:
    """Ingest exports (full replace) and print the deposit report."""

    raise typer.Exit(
        cmd_run(
            transactions,
            directory_path=directory,
            database_url=database_url,
            as_json=as_json,
        )
    )


@app.command("ingest")
def ingest_cmd(
    transactions: Annotated[list[Path], TRANSACTIONS_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Replace the stored dataset with the given exports."""

    raise typer.Exit(cmd_ingest(transactions, database_url=database_url))


@app.command("report")
def report_cmd(
    directory: Annotated[Path | None, DIRECTORY_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    as_json: Annotated[bool, JSON_OPTION] = False,
) -> None:
    """Print the deposit report for the current store contents."""

    raise typer.Exit(
        cmd_report(directory_path=directory, database_url=database_url, as_json=as_json)
    )


@app.command("init-db")
def init_db_cmd(
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Create the database schema (local SQLite and development databases)."""

    raise typer.Exit(cmd_init_db(database_url=database_url))


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (defaults to DEPOSIT_REPORT_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m deposit_report.cli`
    app()
