"""Data models for ``deposit_report``.

Amounts are always :class:`~decimal.Decimal` values at a fixed scale of eight
fractional digits (``AMOUNT_QUANTUM``). Binary floats never appear in records,
aggregates or reports.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import NamedTuple

AMOUNT_QUANTUM = Decimal("0.00000001")
# Amounts are persisted as integer counts of the smallest unit (1e-8).
AMOUNT_SCALE = 8


def to_base_units(amount: Decimal) -> int:
    """Return ``amount`` as an integer count of ``AMOUNT_QUANTUM`` units.

    Raises ``ValueError`` when ``amount`` has more than eight fractional digits.
    """

    scaled = amount.scaleb(AMOUNT_SCALE)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"amount {amount} has more than {AMOUNT_SCALE} fractional digits")
    return int(scaled)


def from_base_units(units: int | Decimal) -> Decimal:
    return Decimal(units).scaleb(-AMOUNT_SCALE).quantize(AMOUNT_QUANTUM)


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A single wallet-reported transaction leg.

    ``(txid, vout)`` is the natural key: re-ingesting the same pair replaces the
    stored row. Only ``address``, ``category``, ``amount`` and
    ``confirmations`` take part in aggregation; the remaining fields are
    wallet metadata stored for reference.
    """

    txid: str
    vout: int
    address: str
    category: str
    amount: Decimal
    confirmations: int
    account: str | None = None
    label: str | None = None
    blockhash: str | None = None
    blockindex: int | None = None
    blocktime: int | None = None
    time: int | None = None
    timereceived: int | None = None
    walletconflicts: tuple[str, ...] = ()
    bip125_replaceable: str | None = None
    involves_watchonly: bool | None = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.txid, self.vout)


type Transactions = Iterable[TransactionRecord]

type KnownCustomerDirectory = Mapping[str, str]
"""Address → customer display name. Iteration order is report order."""


# ---------------------------------------------------------------------------
# Aggregation and summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DepositAggregate:
    """Count and exact sum of valid deposits received by one address."""

    address: str
    count: int
    sum: Decimal

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"DepositAggregate.count must be >= 1 (got {self.count})")


@dataclass(frozen=True, slots=True)
class UnreferencedTotal:
    """Valid deposits to addresses outside the customer directory, merged."""

    count: int = 0
    sum: Decimal = Decimal("0")


class CustomerDeposit(NamedTuple):
    """A known customer paired with the aggregate for their address."""

    name: str
    aggregate: DepositAggregate


@dataclass(frozen=True, slots=True)
class DepositSummaryReport:
    """Per-depositor summary of one run.

    Attributes
    ----------
    referenced:
        One entry per directory address that received valid deposits, in
        directory order. Customers without qualifying deposits are absent
        rather than zero-filled.
    unreferenced:
        All other addresses merged into a single count/sum.
    min:
        Smallest non-negative per-address sum, or ``None`` when no aggregate
        has a non-negative sum.
    max:
        Largest per-address sum, or ``None`` when there are no aggregates.
    """

    referenced: tuple[CustomerDeposit, ...] = ()
    unreferenced: UnreferencedTotal = field(default_factory=UnreferencedTotal)
    min: Decimal | None = None
    max: Decimal | None = None

    @property
    def total_count(self) -> int:
        return sum(cd.aggregate.count for cd in self.referenced) + self.unreferenced.count


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of a full-replace ingestion batch."""

    batch_id: str
    received: int
    written: int
    removed: int


__all__ = [
    "AMOUNT_QUANTUM",
    "AMOUNT_SCALE",
    "CustomerDeposit",
    "DepositAggregate",
    "DepositSummaryReport",
    "IngestResult",
    "KnownCustomerDirectory",
    "TransactionRecord",
    "Transactions",
    "UnreferencedTotal",
    "from_base_units",
    "to_base_units",
]
