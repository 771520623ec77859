from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from deposit_report.cli import app

from tests.helpers.db import stored_rows

runner = CliRunner()

# Keep stdout free of log lines; click < 8.2 mixes stderr into output.
_QUIET = ["--log-level", "WARNING"]


def _samples(data_dir: Path) -> list[str]:
    return [
        "-t",
        str(data_dir / "transactions-1.json"),
        "-t",
        str(data_dir / "transactions-2.json"),
    ]


def test_run_prints_report_lines(db_url: str, data_dir: Path):
    result = runner.invoke(app, [*_QUIET, "run", *_samples(data_dir), "--database-url", db_url])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "Deposited for Wesley Crusher: count=2 sum=1.75000000",
        "Deposited for Spock: count=1 sum=0.00000001",
        "Deposited without reference: count=2 sum=2.75000001",
        "Smallest valid deposit: 0.00000001",
        "Largest valid deposit: 2.00000001",
    ]


def test_run_json_output(db_url: str, data_dir: Path):
    result = runner.invoke(
        app, [*_QUIET, "run", *_samples(data_dir), "--database-url", db_url, "--json"]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [c["name"] for c in data["referenced"]] == ["Wesley Crusher", "Spock"]
    assert data["unreferenced"] == {"count": 2, "sum": "2.75000001"}


def test_run_with_custom_directory_reads_database_url_from_env(
    db_url: str, data_dir: Path, tmp_path: Path, monkeypatch
):
    directory = tmp_path / "customers.json"
    directory.write_text(
        json.dumps([{"address": "2MzUnknownDepositor22222222222222222", "name": "Quark"}]),
        encoding="utf-8",
    )
    monkeypatch.setenv("DATABASE_URL", db_url)

    result = runner.invoke(
        app, [*_QUIET, "run", *_samples(data_dir), "--directory", str(directory)]
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines()[0] == "Deposited for Quark: count=1 sum=2.00000001"


def test_ingest_then_report(db_url: str, data_dir: Path):
    ingested = runner.invoke(
        app, [*_QUIET, "ingest", *_samples(data_dir), "--database-url", db_url]
    )
    reported = runner.invoke(app, [*_QUIET, "report", "--database-url", db_url])

    assert ingested.exit_code == 0, ingested.output
    assert "Ingested 8 transaction(s) (9 received, 0 stale removed)" in ingested.stdout
    assert len(stored_rows(db_url)) == 8
    assert reported.exit_code == 0, reported.output
    assert "Largest valid deposit: 2.00000001" in reported.stdout


def test_report_on_empty_store_prints_no_data(db_url: str):
    result = runner.invoke(app, [*_QUIET, "report", "--database-url", db_url])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "Deposited without reference: count=0 sum=0.00000000",
        "Smallest valid deposit: no data",
        "Largest valid deposit: no data",
    ]


def test_init_db_creates_schema(tmp_path: Path):
    url = f"sqlite+pysqlite:///{tmp_path / 'fresh.db'}"

    result = runner.invoke(app, [*_QUIET, "init-db", "--database-url", url])

    assert result.exit_code == 0, result.output
    assert stored_rows(url) == {}


def test_missing_input_file_fails_without_report(db_url: str, tmp_path: Path):
    result = runner.invoke(
        app,
        [*_QUIET, "run", "-t", str(tmp_path / "missing.json"), "--database-url", db_url],
    )

    assert result.exit_code == 1
    assert "Error: [load/configuration_error]" in result.output
    assert "Deposited" not in result.output


def test_missing_database_url_fails(data_dir: Path):
    result = runner.invoke(app, [*_QUIET, "ingest", *_samples(data_dir)])

    assert result.exit_code == 1
    assert "DATABASE_URL" in result.output


def test_unreachable_store_fails_without_report(data_dir: Path, tmp_path: Path):
    url = f"sqlite+pysqlite:///{tmp_path / 'no-such-dir' / 'x.db'}"

    result = runner.invoke(app, [*_QUIET, "run", *_samples(data_dir), "--database-url", url])

    assert result.exit_code == 1
    assert "Error: [ingest/store_unavailable]" in result.output
    assert "Deposited" not in result.output
