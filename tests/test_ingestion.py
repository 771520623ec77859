from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

import deposit_report.ingestion as ingestion_mod
from db.client import get_engine
from deposit_report.errors import ConfigurationError, StoreUnavailable, WriteRejected
from deposit_report.ingestion import dedupe_by_key, ingest_records

from tests.helpers.db import stored_rows
from tests.helpers.records import make_record


def _snapshot(db_url: str) -> dict[tuple[str, int], tuple]:
    return {
        key: (r.address, r.category, r.amount, r.confirmations)
        for key, r in stored_rows(db_url).items()
    }


def test_ingesting_same_records_twice_is_idempotent(db_url: str):
    records = [
        make_record("t1", 0, amount="1.25"),
        make_record("t1", 1, amount="0.5"),
        make_record("t2", 0, address="addr-b", category="generate", amount="3"),
    ]

    ingest_records(records, database_url=db_url)
    first = _snapshot(db_url)
    result = ingest_records(records, database_url=db_url)
    second = _snapshot(db_url)

    assert first == second
    assert len(second) == 3
    assert result.written == 3
    assert result.removed == 0


def test_reingesting_a_key_overwrites_instead_of_duplicating(db_url: str):
    ingest_records([make_record("t1", 0, confirmations=2, category="receive")], database_url=db_url)
    ingest_records(
        [make_record("t1", 0, confirmations=9, category="generate", amount="2")],
        database_url=db_url,
    )

    rows = stored_rows(db_url)
    assert list(rows) == [("t1", 0)]
    row = rows[("t1", 0)]
    assert row.confirmations == 9
    assert row.category == "generate"
    assert row.amount == Decimal("2")


def test_later_record_wins_within_one_batch(db_url: str):
    records = [
        make_record("t1", 0, confirmations=1, amount="1"),
        make_record("t2", 0),
        make_record("t1", 0, confirmations=7, amount="4"),
    ]

    result = ingest_records(records, database_url=db_url)

    rows = stored_rows(db_url)
    assert result.received == 3
    assert result.written == 2
    assert rows[("t1", 0)].confirmations == 7
    assert rows[("t1", 0)].amount == Decimal("4")


def test_dedupe_keeps_first_position_and_last_value():
    a1 = make_record("a", 0, amount="1")
    b = make_record("b", 0)
    a2 = make_record("a", 0, amount="2")

    assert dedupe_by_key([a1, b, a2]) == [a2, b]


def test_full_replace_removes_records_missing_from_new_batch(db_url: str):
    ingest_records([make_record("old", 0), make_record("keep", 0)], database_url=db_url)

    result = ingest_records([make_record("keep", 0), make_record("new", 3)], database_url=db_url)

    assert set(stored_rows(db_url)) == {("keep", 0), ("new", 3)}
    assert result.removed == 1


def test_empty_input_empties_the_store(db_url: str):
    ingest_records([make_record("t1", 0), make_record("t2", 0)], database_url=db_url)

    result = ingest_records([], database_url=db_url)

    assert stored_rows(db_url) == {}
    assert result.written == 0
    assert result.removed == 2


def test_passthrough_metadata_is_stored(db_url: str):
    record = make_record(
        "t1",
        4,
        account="",
        label="cold storage",
        blockhash="00ff",
        blockindex=3,
        blocktime=1627438475,
        time=1627438470,
        timereceived=1627438471,
        walletconflicts=("c1", "c2"),
        bip125_replaceable="no",
        involves_watchonly=True,
    )

    ingest_records([record], database_url=db_url)

    row = stored_rows(db_url)[("t1", 4)]
    assert row.label == "cold storage"
    assert row.blockindex == 3
    assert row.walletconflicts == ["c1", "c2"]
    assert row.bip125_replaceable == "no"
    assert row.involves_watchonly is True


def test_write_failure_raises_write_rejected_and_keeps_prior_dataset(
    db_url: str, monkeypatch: pytest.MonkeyPatch
):
    ingest_records([make_record("prior", 0), make_record("prior", 1)], database_url=db_url)
    before = _snapshot(db_url)
    real_replace_all = ingestion_mod.replace_all

    def _partial_then_fail(session, records, *, batch_id):
        # Write (and purge) for real, then fail before the batch can commit.
        real_replace_all(session, records[:1], batch_id=batch_id)
        session.flush()
        raise IntegrityError("INSERT INTO wallet_transactions", {}, Exception("constraint failed"))

    monkeypatch.setattr(ingestion_mod, "replace_all", _partial_then_fail)

    with pytest.raises(WriteRejected) as excinfo:
        ingest_records([make_record("next", 0), make_record("next", 1)], database_url=db_url)

    assert excinfo.value.stage == "ingest"
    assert "constraint failed" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, IntegrityError)
    assert _snapshot(db_url) == before


def test_unreachable_store_raises_store_unavailable(tmp_path: Path):
    # The parent directory does not exist, so SQLite cannot open the file.
    url = f"sqlite+pysqlite:///{tmp_path / 'missing' / 'deposits.db'}"

    with pytest.raises(StoreUnavailable) as excinfo:
        ingest_records([make_record()], database_url=url)

    assert excinfo.value.stage == "ingest"
    assert excinfo.value.kind == "store_unavailable"


def test_unsupported_dialect_is_a_configuration_error(
    db_url: str, monkeypatch: pytest.MonkeyPatch
):
    ingest_records([make_record("prior", 0)], database_url=db_url)
    before = _snapshot(db_url)
    monkeypatch.setattr(get_engine(database_url=db_url).dialect, "name", "mysql")

    with pytest.raises(ConfigurationError) as excinfo:
        ingest_records([make_record("next", 0)], database_url=db_url)

    monkeypatch.undo()
    assert excinfo.value.stage == "ingest"
    assert "mysql" in excinfo.value.message
    assert _snapshot(db_url) == before


def test_amount_finer_than_eight_places_is_rejected(db_url: str):
    with pytest.raises(WriteRejected, match="more than 8 fractional digits"):
        ingest_records([make_record(amount="0.000000001")], database_url=db_url)

    assert stored_rows(db_url) == {}
