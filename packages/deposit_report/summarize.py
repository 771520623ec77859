"""Classify deposit aggregates against the known-customer directory.

:func:`summarize` is pure: it reads the aggregates and the directory and
returns a new :class:`~deposit_report.models.DepositSummaryReport`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .models import (
    CustomerDeposit,
    DepositAggregate,
    DepositSummaryReport,
    KnownCustomerDirectory,
    UnreferencedTotal,
)


def partition_aggregates(
    aggregates: Iterable[DepositAggregate],
    directory: KnownCustomerDirectory,
) -> tuple[list[DepositAggregate], list[DepositAggregate]]:
    """Split aggregates into ``(referenced, unreferenced)`` by address."""

    referenced: list[DepositAggregate] = []
    unreferenced: list[DepositAggregate] = []
    for agg in aggregates:
        (referenced if agg.address in directory else unreferenced).append(agg)
    return referenced, unreferenced


def merge_unreferenced(aggregates: Iterable[DepositAggregate]) -> UnreferencedTotal:
    count = 0
    total = Decimal("0")
    for agg in aggregates:
        count += agg.count
        total += agg.sum
    return UnreferencedTotal(count=count, sum=total)


def boundary_sums(aggregates: Sequence[DepositAggregate]) -> tuple[Decimal | None, Decimal | None]:
    """Return ``(min, max)`` over per-address sums.

    ``max`` considers every aggregate. ``min`` only considers non-negative sums,
    so a list whose sums are all negative has no minimum.
    """

    sums = [agg.sum for agg in aggregates]
    largest = max(sums) if sums else None
    non_negative = [s for s in sums if s >= 0]
    smallest = min(non_negative) if non_negative else None
    return smallest, largest


def summarize(
    aggregates: Iterable[DepositAggregate],
    directory: KnownCustomerDirectory,
) -> DepositSummaryReport:
    """Build the per-depositor report for ``aggregates``.

    Steps
    -----
    1. Partition by ``aggregate.address in directory``.
    2. Merge the unreferenced part into one count/sum (``0``/``0`` when empty).
    3. Compute min/max over the full, unpartitioned list.
    4. Attach customer names in directory order; directory addresses without
       an aggregate are left out.
    """

    all_aggs = list(aggregates)
    referenced, unreferenced = partition_aggregates(all_aggs, directory)
    smallest, largest = boundary_sums(all_aggs)

    by_address = {agg.address: agg for agg in referenced}
    named = tuple(
        CustomerDeposit(name=name, aggregate=by_address[address])
        for address, name in directory.items()
        if address in by_address
    )

    return DepositSummaryReport(
        referenced=named,
        unreferenced=merge_unreferenced(unreferenced),
        min=smallest,
        max=largest,
    )


__all__ = ["boundary_sums", "merge_unreferenced", "partition_aggregates", "summarize"]
