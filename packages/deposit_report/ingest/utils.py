"""Load transaction records from wallet JSON exports.

Files are decoded with ``parse_float=Decimal`` so amounts keep their exact
decimal text, validated against
:class:`~deposit_report.ingest.adapters.listsinceblock_json.WalletTransactionsFile`
and converted to :class:`~deposit_report.models.TransactionRecord`. Every
failure is reported as a ``ConfigurationError`` naming the offending file.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from decimal import Decimal
from os import PathLike
from pathlib import Path

from pydantic import ValidationError

from ..errors import ConfigurationError
from ..logging_setup import get_logger
from ..models import TransactionRecord
from .adapters.listsinceblock_json import WalletTransactionsFile, to_records

_STAGE = "load"

_logger = get_logger("deposit_report.ingest")


def _describe_validation_error(exc: ValidationError, *, limit: int = 5) -> str:
    parts: list[str] = []
    for err in exc.errors()[:limit]:
        loc = err.get("loc", ())
        where = ".".join(str(p) for p in loc) if loc else "<root>"
        parts.append(f"{where}: {err.get('msg', 'invalid value')}")
    more = exc.error_count() - limit
    if more > 0:
        parts.append(f"... and {more} more error(s)")
    return "; ".join(parts)


def load_transactions_file(path: str | PathLike[str]) -> list[TransactionRecord]:
    """Read one wallet export and return its records in file order."""

    p = Path(path)
    try:
        with p.open(encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
    except FileNotFoundError as e:
        raise ConfigurationError(_STAGE, f"transactions file not found: {p}") from e
    except PermissionError as e:
        raise ConfigurationError(_STAGE, f"permission denied: {p}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(_STAGE, f"{p}: not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigurationError(_STAGE, f"{p}: cannot read file: {e}") from e

    try:
        parsed = WalletTransactionsFile.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_STAGE, f"{p}: {_describe_validation_error(e)}") from e

    records = list(to_records(parsed.transactions))
    _logger.debug("load: %s -> %d record(s)", p, len(records))
    return records


def load_transactions_from_json(
    paths: Iterable[str | PathLike[str]],
) -> list[TransactionRecord]:
    """Concatenate the records of several exports in argument order."""

    records: list[TransactionRecord] = []
    n_files = 0
    for path in paths:
        records.extend(load_transactions_file(path))
        n_files += 1
    if n_files == 0:
        raise ConfigurationError(_STAGE, "no transactions files were given")
    _logger.info("load: %d record(s) from %d file(s)", len(records), n_files)
    return records


__all__ = ["load_transactions_file", "load_transactions_from_json"]
