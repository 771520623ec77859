"""Human- and machine-readable renderings of a deposit summary report."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .models import AMOUNT_QUANTUM, DepositSummaryReport

NO_DATA = "no data"


def format_amount(value: Decimal | None) -> str | None:
    """Render ``value`` with exactly eight fractional digits (``None`` passes through)."""

    if value is None:
        return None
    return f"{value.quantize(AMOUNT_QUANTUM):f}"


def format_report(report: DepositSummaryReport) -> list[str]:
    """Return the report as printable lines, one per customer then totals."""

    lines = [
        f"Deposited for {cd.name}: count={cd.aggregate.count} "
        f"sum={format_amount(cd.aggregate.sum)}"
        for cd in report.referenced
    ]
    lines.append(
        f"Deposited without reference: count={report.unreferenced.count} "
        f"sum={format_amount(report.unreferenced.sum)}"
    )
    lines.append(f"Smallest valid deposit: {format_amount(report.min) or NO_DATA}")
    lines.append(f"Largest valid deposit: {format_amount(report.max) or NO_DATA}")
    return lines


def report_to_dict(report: DepositSummaryReport) -> dict[str, Any]:
    """JSON-ready mapping; amounts are strings so no precision is lost."""

    return {
        "referenced": [
            {
                "name": cd.name,
                "address": cd.aggregate.address,
                "count": cd.aggregate.count,
                "sum": format_amount(cd.aggregate.sum),
            }
            for cd in report.referenced
        ],
        "unreferenced": {
            "count": report.unreferenced.count,
            "sum": format_amount(report.unreferenced.sum),
        },
        "min": format_amount(report.min),
        "max": format_amount(report.max),
    }


__all__ = ["NO_DATA", "format_amount", "format_report", "report_to_dict"]
