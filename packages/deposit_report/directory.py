"""Known-customer directory loading.

The directory maps a receiving address to the customer's display name and is
passed explicitly to :func:`deposit_report.summarize.summarize`. Two JSON
layouts are accepted:

- an object: ``{"<address>": "<name>", ...}``
- a list: ``[{"address": "<address>", "name": "<name>"}, ...]``

Resolution order for the file: explicit ``path`` argument, then the
``DEPOSIT_REPORT_DIRECTORY`` environment variable, then the bundled seed
``ingest/seeds/known_customers.v1.json``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from os import PathLike
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError
from .logging_setup import get_logger

DIRECTORY_ENV = "DEPOSIT_REPORT_DIRECTORY"
DEFAULT_DIRECTORY_PATH = Path(__file__).resolve().parent / "ingest/seeds/known_customers.v1.json"

_STAGE = "directory"

_logger = get_logger("deposit_report.directory")


class DirectoryEntry(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    address: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1)]


def _reject_duplicate_keys(pairs: Sequence[tuple[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in pairs:
        if key in out:
            raise ValueError(f"duplicate key {key!r}")
        out[key] = value
    return out


def resolve_directory_path(path: str | PathLike[str] | None = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.getenv(DIRECTORY_ENV)
    if env_path and env_path.strip():
        return Path(env_path.strip())
    return DEFAULT_DIRECTORY_PATH


def build_directory(data: Any) -> dict[str, str]:
    """Validate decoded JSON and return an insertion-ordered address → name map."""

    if isinstance(data, dict):
        raw_entries: list[Any] = [{"address": k, "name": v} for k, v in data.items()]
    elif isinstance(data, list):
        raw_entries = data
    else:
        raise ConfigurationError(
            _STAGE, "directory must be a JSON object or a list of {address, name} objects"
        )

    directory: dict[str, str] = {}
    for i, raw in enumerate(raw_entries):
        try:
            entry = DirectoryEntry.model_validate(raw)
        except ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first.get("loc", ())) or "<entry>"
            raise ConfigurationError(
                _STAGE, f"entry #{i}: {where}: {first.get('msg', 'invalid value')}"
            ) from e
        if entry.address in directory:
            raise ConfigurationError(_STAGE, f"duplicate address {entry.address!r}")
        directory[entry.address] = entry.name
    return directory


def load_directory(path: str | PathLike[str] | None = None) -> dict[str, str]:
    """Load and validate the known-customer directory (see module docstring)."""

    p = resolve_directory_path(path)
    try:
        with p.open(encoding="utf-8") as f:
            data = json.load(f, object_pairs_hook=_reject_duplicate_keys)
    except FileNotFoundError as e:
        raise ConfigurationError(_STAGE, f"directory file not found: {p}") from e
    except ValueError as e:
        # JSONDecodeError is a ValueError, as are duplicate keys
        raise ConfigurationError(_STAGE, f"{p}: {e}") from e
    except OSError as e:
        raise ConfigurationError(_STAGE, f"{p}: cannot read file: {e}") from e

    directory = build_directory(data)
    _logger.info("directory: %d known customer address(es) from %s", len(directory), p)
    return directory


__all__ = [
    "DEFAULT_DIRECTORY_PATH",
    "DIRECTORY_ENV",
    "DirectoryEntry",
    "build_directory",
    "load_directory",
    "resolve_directory_path",
]
