"""Process-wide engine and session handling for the wallet store.

One engine is bound per process, to the URL passed in or ``DATABASE_URL``.
Asking for a different URL afterwards is an error until :func:`reset_engine`
disposes the current one.

Usage
-----
from db.client import session_scope

with session_scope(database_url=url) as s:
    s.execute(...)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.wallet import Base

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None
_BOUND_URL: str | None = None


def _resolve_url(explicit: str | None) -> str:
    url = explicit or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("no database URL: pass one explicitly or set DATABASE_URL")
    return url


def get_engine(*, database_url: str | None = None) -> Engine:
    """Engine bound to ``database_url``; built on the first call."""

    global _ENGINE, _SESSION_MAKER, _BOUND_URL
    url = _resolve_url(database_url)
    if _ENGINE is not None:
        if url != _BOUND_URL:
            raise RuntimeError(
                f"engine is bound to another database URL; call reset_engine() before "
                f"switching to {url!r}"
            )
        return _ENGINE

    _ENGINE = create_engine(url, pool_pre_ping=True)
    _SESSION_MAKER = sessionmaker(bind=_ENGINE, expire_on_commit=False)
    _BOUND_URL = url
    return _ENGINE


def reset_engine() -> None:
    """Dispose the bound engine so the next call may target another URL."""

    global _ENGINE, _SESSION_MAKER, _BOUND_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None
    _BOUND_URL = None


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Yield a session that commits on normal exit and rolls back on any error."""

    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None
    session = _SESSION_MAKER()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_schema(*, database_url: str | None = None) -> None:
    """Create missing tables from the ORM metadata.

    Meant for local SQLite files and tests. Shared databases go through the
    Alembic migrations in ``libs/db/alembic``.
    """

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


__all__ = [
    "create_schema",
    "get_engine",
    "reset_engine",
    "session_scope",
]
