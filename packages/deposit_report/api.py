"""Public API and pipeline orchestration for ``deposit_report``.

A run is strictly linear: ingest → aggregate → summarize. Each stage commits
(or reads) in its own short transaction and the first failure aborts the
run, so a caller either receives a complete report or a
:class:`~deposit_report.errors.DepositReportError` naming the failed stage.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from .aggregation import MIN_CONFIRMATIONS, VALID_CATEGORIES, aggregate_stored_deposits
from .errors import ConfigurationError
from .ingestion import ingest_records
from .logging_setup import get_logger
from .models import DepositSummaryReport, KnownCustomerDirectory, TransactionRecord
from .summarize import summarize

_logger = get_logger("deposit_report.api")


def require_database_url(database_url: str | None = None) -> str:
    """Return the explicit URL or ``DATABASE_URL``; a missing URL is a config error."""

    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        raise ConfigurationError(
            "config", "DATABASE_URL is not set and no database URL was provided"
        )
    return url


def build_report(
    directory: KnownCustomerDirectory,
    *,
    database_url: str | None = None,
    min_confirmations: int = MIN_CONFIRMATIONS,
    categories: Iterable[str] = VALID_CATEGORIES,
) -> DepositSummaryReport:
    """Aggregate whatever the store currently holds and summarize it."""

    url = require_database_url(database_url)
    aggregates = aggregate_stored_deposits(
        database_url=url, min_confirmations=min_confirmations, categories=categories
    )
    report = summarize(aggregates, directory)
    _logger.info(
        "summarize: %d known customer(s), %d unreferenced deposit(s), %d valid deposit(s) total",
        len(report.referenced),
        report.unreferenced.count,
        report.total_count,
    )
    return report


def run_deposit_report(
    records: Iterable[TransactionRecord],
    directory: KnownCustomerDirectory,
    *,
    database_url: str | None = None,
    min_confirmations: int = MIN_CONFIRMATIONS,
    categories: Iterable[str] = VALID_CATEGORIES,
) -> DepositSummaryReport:
    """Replace the stored dataset with ``records`` and report on it.

    Raises
    ------
    ConfigurationError
        No database URL is available.
    StoreUnavailable
        The store could not be reached during ingest or aggregation.
    WriteRejected
        The ingestion batch was refused; aggregation does not run.
    QueryFailure
        The grouped query failed; no report is produced.
    """

    url = require_database_url(database_url)
    result = ingest_records(records, database_url=url)
    _logger.info("ingest: %d record(s) received, %d stored", result.received, result.written)
    return build_report(
        directory,
        database_url=url,
        min_confirmations=min_confirmations,
        categories=categories,
    )


__all__ = ["build_report", "require_database_url", "run_deposit_report"]
