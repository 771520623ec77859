# ruff: noqa: I001
"""Record store adapter over the shared ``db`` library.

Two operations back the pipeline:

- :func:`replace_all` writes a full dataset as an ordered batch of upserts keyed
  by ``(txid, vout)`` and then removes rows that the batch did not touch.
- :func:`query_grouped` runs the grouped count/sum over rows matching the
  deposit validity predicate.

Amounts cross this boundary as integer counts of 1e-8 units, so the grouped
SUM never touches binary floating point.

Both run inside the caller's session; committing (or rolling back) is the
caller's job, which is what makes ``replace_all`` all-or-nothing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db.models.wallet import WalletTransaction
from .errors import ConfigurationError
from .models import TransactionRecord, from_base_units, to_base_units

# Rows per INSERT statement; keeps bound parameters well under SQLite's limit.
_UPSERT_CHUNK = 500

# Columns refreshed when a (txid, vout) already exists.
_UPDATABLE_COLUMNS: tuple[str, ...] = (
    "address",
    "category",
    "amount_sat",
    "confirmations",
    "account",
    "label",
    "blockhash",
    "blockindex",
    "blocktime",
    "time",
    "timereceived",
    "walletconflicts",
    "bip125_replaceable",
    "involves_watchonly",
    "ingest_batch",
)


def _insert_for(session: Session) -> Callable[..., Any]:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise ConfigurationError(
        "ingest", f"upsert is not supported for database dialect {dialect!r}"
    )


def _row_values(record: TransactionRecord, batch_id: str) -> dict[str, Any]:
    return {
        "txid": record.txid,
        "vout": record.vout,
        "address": record.address,
        "category": record.category,
        "amount_sat": to_base_units(record.amount),
        "confirmations": record.confirmations,
        "account": record.account,
        "label": record.label,
        "blockhash": record.blockhash,
        "blockindex": record.blockindex,
        "blocktime": record.blocktime,
        "time": record.time,
        "timereceived": record.timereceived,
        "walletconflicts": list(record.walletconflicts),
        "bip125_replaceable": record.bip125_replaceable,
        "involves_watchonly": record.involves_watchonly,
        "ingest_batch": batch_id,
    }


def replace_all(
    session: Session,
    records: Sequence[TransactionRecord],
    *,
    batch_id: str,
) -> int:
    """Make ``records`` the complete contents of ``wallet_transactions``.

    ``records`` must already be unique by ``(txid, vout)``; a single INSERT
    cannot touch the same conflict target twice. Returns the number of rows
    removed because they were absent from ``records``.
    """

    insert = _insert_for(session)
    now = func.current_timestamp()

    for start in range(0, len(records), _UPSERT_CHUNK):
        chunk = records[start : start + _UPSERT_CHUNK]
        stmt = insert(WalletTransaction).values([_row_values(r, batch_id) for r in chunk])
        set_: dict[str, Any] = {col: stmt.excluded[col] for col in _UPDATABLE_COLUMNS}
        set_["updated_at"] = now
        stmt = stmt.on_conflict_do_update(
            index_elements=[WalletTransaction.txid, WalletTransaction.vout],
            set_=set_,
        )
        session.execute(stmt)

    result = session.execute(
        delete(WalletTransaction).where(WalletTransaction.ingest_batch != batch_id)
    )
    return int(result.rowcount or 0)


def query_grouped(
    session: Session,
    *,
    min_confirmations: int,
    categories: Iterable[str],
) -> list[tuple[str, int, Decimal]]:
    """Return ``(address, count, sum)`` for rows passing the validity predicate."""

    stmt = (
        select(
            WalletTransaction.address,
            func.count().label("count"),
            func.sum(WalletTransaction.amount_sat).label("sum"),
        )
        .where(WalletTransaction.confirmations >= min_confirmations)
        .where(WalletTransaction.category.in_(list(categories)))
        .group_by(WalletTransaction.address)
        .order_by(WalletTransaction.address)
    )
    rows: list[tuple[str, int, Decimal]] = []
    for address, count, total in session.execute(stmt).all():
        # SUM over BIGINT is an int on SQLite and a NUMERIC (Decimal) on PostgreSQL.
        rows.append((address, int(count), from_base_units(total)))
    return rows


__all__ = ["query_grouped", "replace_all"]
