"""Failure taxonomy for a deposit report run.

Every error names the pipeline ``stage`` it came from (``load``,
``directory``, ``ingest``, ``aggregate``) and a stable ``kind`` so callers can
report ``<stage>/<kind>`` without inspecting messages. Database exceptions are
translated with :func:`translate_db_error` and chained as ``__cause__``.
"""

from __future__ import annotations

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError


class DepositReportError(Exception):
    """Base class for failures that abort a run without producing a report."""

    kind: str = "error"

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message

    def __str__(self) -> str:
        return f"[{self.stage}/{self.kind}] {self.message}"


class StoreUnavailable(DepositReportError):
    """The record store could not be reached (connection or transport)."""

    kind = "store_unavailable"


class WriteRejected(DepositReportError):
    """The store refused the ingestion batch."""

    kind = "write_rejected"


class QueryFailure(DepositReportError):
    """The grouped deposit query failed to execute."""

    kind = "query_failure"


class ConfigurationError(DepositReportError):
    """Input files or the customer directory are missing or malformed."""

    kind = "configuration_error"


# Connection-level failures; everything else raised by SQLAlchemy is treated as
# a rejection of the statement itself.
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError)


def translate_db_error(
    exc: SQLAlchemyError,
    *,
    stage: str,
    rejected: type[DepositReportError],
) -> DepositReportError:
    """Map a SQLAlchemy exception onto the taxonomy for ``stage``."""

    detail = str(getattr(exc, "orig", None) or exc).strip().splitlines()[0:1]
    message = detail[0] if detail else exc.__class__.__name__
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return StoreUnavailable(stage, f"record store unavailable: {message}")
    return rejected(stage, message)


__all__ = [
    "ConfigurationError",
    "DepositReportError",
    "QueryFailure",
    "StoreUnavailable",
    "WriteRejected",
    "translate_db_error",
]
