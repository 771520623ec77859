from __future__ import annotations

import json
from pathlib import Path

import pytest

from deposit_report.directory import DIRECTORY_ENV, build_directory, load_directory
from deposit_report.errors import ConfigurationError


def test_bundled_seed_lists_known_customers_in_order():
    directory = load_directory()

    assert len(directory) == 7
    first_address, first_name = next(iter(directory.items()))
    assert first_address == "mvd6qFeVkqH6MNAS2Y2cLifbdaX5XUkbZJ"
    assert first_name == "Wesley Crusher"
    assert directory["mvcyJMiAcSXKAEsQxbW9TYZ369rsMG6rVV"] == "Spock"


def test_object_and_list_layouts_are_equivalent():
    as_object = build_directory({"a1": "Ann", "b2": "Bob"})
    as_list = build_directory(
        [{"address": "a1", "name": "Ann"}, {"address": "b2", "name": "Bob"}]
    )

    assert as_object == as_list == {"a1": "Ann", "b2": "Bob"}


def test_environment_variable_overrides_seed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "customers.json"
    path.write_text(json.dumps({"addr-z": "Zoe"}), encoding="utf-8")
    monkeypatch.setenv(DIRECTORY_ENV, str(path))

    assert load_directory() == {"addr-z": "Zoe"}


def test_explicit_path_wins_over_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    explicit = tmp_path / "explicit.json"
    explicit.write_text(json.dumps({"e": "Explicit"}), encoding="utf-8")
    monkeypatch.setenv(DIRECTORY_ENV, str(tmp_path / "does-not-exist.json"))

    assert load_directory(explicit) == {"e": "Explicit"}


def test_duplicate_object_keys_are_rejected(tmp_path: Path):
    path = tmp_path / "dup.json"
    path.write_text('{"a1": "Ann", "a1": "Another"}', encoding="utf-8")

    with pytest.raises(ConfigurationError, match="duplicate key"):
        load_directory(path)


def test_duplicate_list_addresses_are_rejected():
    with pytest.raises(ConfigurationError, match="duplicate address"):
        build_directory([{"address": "a1", "name": "Ann"}, {"address": "a1", "name": "Bob"}])


@pytest.mark.parametrize(
    "payload",
    [
        {"a1": 42},
        {"a1": "   "},
        [{"address": "a1"}],
        [{"address": "a1", "name": "Ann", "email": "ann@example.com"}],
        "a1=Ann",
    ],
)
def test_malformed_directory_is_a_configuration_error(payload):
    with pytest.raises(ConfigurationError) as excinfo:
        build_directory(payload)

    assert excinfo.value.stage == "directory"


def test_missing_directory_file_is_a_configuration_error(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_directory(tmp_path / "missing.json")
