"""Deposit aggregator: per-address count and sum of valid deposits.

A transaction is a valid deposit when it has at least ``MIN_CONFIRMATIONS``
confirmations and its category is one of ``VALID_CATEGORIES``.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import QueryFailure, translate_db_error
from .logging_setup import get_logger
from .models import DepositAggregate
from .store import query_grouped

MIN_CONFIRMATIONS: int = 6
VALID_CATEGORIES: tuple[str, ...] = ("receive", "generate")

_STAGE = "aggregate"

_logger = get_logger("deposit_report.aggregation")


def aggregate_valid_deposits(
    session: Session,
    *,
    min_confirmations: int = MIN_CONFIRMATIONS,
    categories: Iterable[str] = VALID_CATEGORIES,
) -> list[DepositAggregate]:
    """Return one aggregate per address that received valid deposits.

    The order of the returned list is not part of the contract.
    """

    cats = tuple(categories)
    try:
        rows = query_grouped(session, min_confirmations=min_confirmations, categories=cats)
    except SQLAlchemyError as e:
        raise translate_db_error(e, stage=_STAGE, rejected=QueryFailure) from e

    aggregates = [DepositAggregate(address=a, count=c, sum=s) for a, c, s in rows]
    _logger.info(
        "aggregate: %d address(es) with valid deposits (confirmations>=%d, categories=%s)",
        len(aggregates),
        min_confirmations,
        ",".join(cats),
    )
    return aggregates


def aggregate_stored_deposits(
    *,
    database_url: str | None = None,
    min_confirmations: int = MIN_CONFIRMATIONS,
    categories: Iterable[str] = VALID_CATEGORIES,
) -> list[DepositAggregate]:
    """Run :func:`aggregate_valid_deposits` in a read-only session of its own."""

    from db.client import session_scope

    try:
        with session_scope(database_url=database_url) as session:
            return aggregate_valid_deposits(
                session, min_confirmations=min_confirmations, categories=categories
            )
    except SQLAlchemyError as e:
        raise translate_db_error(e, stage=_STAGE, rejected=QueryFailure) from e


__all__ = [
    "MIN_CONFIRMATIONS",
    "VALID_CATEGORIES",
    "aggregate_stored_deposits",
    "aggregate_valid_deposits",
]
