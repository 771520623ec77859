"""Ingestion engine: full-replace, idempotent writes of transaction records.

Public API:
    - :func:`dedupe_by_key`
    - :func:`ingest` (inside a caller-managed session)
    - :func:`ingest_records` (opens and commits its own session)
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import WriteRejected, translate_db_error
from .logging_setup import get_logger
from .models import IngestResult, TransactionRecord
from .store import replace_all

_STAGE = "ingest"

_logger = get_logger("deposit_report.ingestion")


def dedupe_by_key(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Collapse records sharing ``(txid, vout)``; the later record wins.

    Output order follows the first appearance of each key.
    """

    by_key: dict[tuple[str, int], TransactionRecord] = {}
    for record in records:
        by_key[record.key] = record
    return list(by_key.values())


def ingest(session: Session, records: Iterable[TransactionRecord]) -> IngestResult:
    """Replace the stored dataset with ``records`` within ``session``.

    Nothing is visible to other sessions until the caller commits; a rollback
    leaves the prior dataset untouched. Database failures are raised as
    :class:`~deposit_report.errors.StoreUnavailable` or
    :class:`~deposit_report.errors.WriteRejected`.
    """

    received = list(records)
    unique = dedupe_by_key(received)
    batch_id = uuid.uuid4().hex

    try:
        removed = replace_all(session, unique, batch_id=batch_id)
        session.flush()
    except SQLAlchemyError as e:
        raise translate_db_error(e, stage=_STAGE, rejected=WriteRejected) from e
    except ValueError as e:
        raise WriteRejected(_STAGE, str(e)) from e

    if len(unique) != len(received):
        _logger.info(
            "ingest: collapsed %d duplicate (txid, vout) record(s)",
            len(received) - len(unique),
        )
    _logger.info(
        "ingest: batch=%s wrote=%d removed_stale=%d", batch_id, len(unique), removed
    )
    return IngestResult(
        batch_id=batch_id, received=len(received), written=len(unique), removed=removed
    )


def ingest_records(
    records: Iterable[TransactionRecord],
    *,
    database_url: str | None = None,
) -> IngestResult:
    """Run :func:`ingest` in its own transaction and commit it.

    Connection failures raised while opening or committing the session are
    translated the same way as failures raised by the writes themselves.
    """

    from db.client import session_scope

    try:
        with session_scope(database_url=database_url) as session:
            return ingest(session, records)
    except SQLAlchemyError as e:
        raise translate_db_error(e, stage=_STAGE, rejected=WriteRejected) from e


__all__ = ["dedupe_by_key", "ingest", "ingest_records"]
