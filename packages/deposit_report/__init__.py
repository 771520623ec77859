"""Public interface for the ``deposit_report`` package.

Re-exports the pipeline entry points, the pure summarizer and the public
models/errors. Database access is deferred to call time; importing the
package opens no connections.
"""

from .aggregation import aggregate_valid_deposits
from .api import build_report, run_deposit_report
from .directory import load_directory
from .errors import (
    ConfigurationError,
    DepositReportError,
    QueryFailure,
    StoreUnavailable,
    WriteRejected,
)
from .ingest import load_transactions_from_json
from .ingestion import ingest, ingest_records
from .models import (
    CustomerDeposit,
    DepositAggregate,
    DepositSummaryReport,
    IngestResult,
    TransactionRecord,
    UnreferencedTotal,
)
from .report import format_report, report_to_dict
from .summarize import summarize

__all__ = [
    # API
    "aggregate_valid_deposits",
    "build_report",
    "format_report",
    "ingest",
    "ingest_records",
    "load_directory",
    "load_transactions_from_json",
    "report_to_dict",
    "run_deposit_report",
    "summarize",
    # Models / types
    "CustomerDeposit",
    "DepositAggregate",
    "DepositSummaryReport",
    "IngestResult",
    "TransactionRecord",
    "UnreferencedTotal",
    # Errors
    "ConfigurationError",
    "DepositReportError",
    "QueryFailure",
    "StoreUnavailable",
    "WriteRejected",
]
