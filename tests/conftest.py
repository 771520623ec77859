"""Pytest configuration for test isolation.

The ``db`` library caches one engine per process and refuses to rebind it to
a different URL, and the package logger keeps the stream it was configured
with. Each test here gets its own SQLite file, so both are reset after every
test. Environment variables the application reads are cleared so a developer's
shell (or ``.env``) cannot leak into assertions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from db.client import reset_engine
import deposit_report.logging_setup as logging_setup
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("DATABASE_URL", "DEPOSIT_REPORT_DIRECTORY", "DEPOSIT_REPORT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_engine()
    pkg_logger = logging.getLogger("deposit_report")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    logging_setup._handler = None


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """URL of a fresh SQLite database with the wallet schema created."""

    return bootstrap_sqlite_db(tmp_path / "deposits.db")


@pytest.fixture
def data_dir() -> Path:
    return Path(__file__).resolve().parent / "data"
