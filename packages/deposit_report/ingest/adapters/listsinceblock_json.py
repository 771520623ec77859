"""Adapter for wallet JSON exports shaped like bitcoind ``listsinceblock``.

Input shape
-----------
``{"transactions": [ {...}, ... ], "removed": [...], "lastblock": "..."}``

Only ``transactions`` is read. Each entry must carry ``txid``, ``vout``,
``address``, ``category``, ``amount`` and ``confirmations``; the remaining
wallet fields (``account``, ``label``, ``blockhash``, ``blockindex``,
``blocktime``, ``time``, ``timereceived``, ``walletconflicts``,
``bip125-replaceable``, ``involvesWatchonly``) are optional and passed through.
Unknown keys are ignored.

Amounts must reach this adapter as :class:`~decimal.Decimal` (or ``int``);
callers parse JSON with ``parse_float=Decimal``. A ``float`` amount is
rejected rather than silently rounded.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from ...models import AMOUNT_QUANTUM, TransactionRecord


class WalletTransactionIn(BaseModel):
    """One entry of the ``transactions`` array."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    txid: Annotated[str, Field(min_length=1)]
    vout: Annotated[StrictInt, Field(ge=0)]
    address: Annotated[str, Field(min_length=1)]
    category: Annotated[str, Field(min_length=1)]
    amount: Decimal
    confirmations: StrictInt

    account: str | None = None
    label: str | None = None
    blockhash: str | None = None
    blockindex: StrictInt | None = None
    blocktime: StrictInt | None = None
    time: StrictInt | None = None
    timereceived: StrictInt | None = None
    walletconflicts: list[str] = Field(default_factory=list)
    bip125_replaceable: str | None = Field(default=None, alias="bip125-replaceable")
    involves_watchonly: bool | None = Field(default=None, alias="involvesWatchonly")

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_not_float(cls, v: Any) -> Any:
        if isinstance(v, float):
            raise ValueError("amount must be parsed as a decimal, not a binary float")
        if isinstance(v, bool):
            raise ValueError("amount must be a number")
        return v

    @field_validator("amount")
    @classmethod
    def _amount_fixed_scale(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be finite")
        try:
            quantized = v.quantize(AMOUNT_QUANTUM)
        except InvalidOperation as e:
            raise ValueError("amount is out of range") from e
        if v != quantized:
            raise ValueError("amount has more than 8 fractional digits")
        return quantized


class WalletTransactionsFile(BaseModel):
    """Top-level schema for a wallet export file."""

    model_config = ConfigDict(extra="ignore")

    transactions: list[WalletTransactionIn]


def to_record(item: WalletTransactionIn) -> TransactionRecord:
    return TransactionRecord(
        txid=item.txid,
        vout=item.vout,
        address=item.address,
        category=item.category,
        amount=item.amount,
        confirmations=item.confirmations,
        account=item.account,
        label=item.label,
        blockhash=item.blockhash,
        blockindex=item.blockindex,
        blocktime=item.blocktime,
        time=item.time,
        timereceived=item.timereceived,
        walletconflicts=tuple(item.walletconflicts),
        bip125_replaceable=item.bip125_replaceable,
        involves_watchonly=item.involves_watchonly,
    )


def to_records(items: Iterable[WalletTransactionIn]) -> Iterator[TransactionRecord]:
    """Convert validated entries to records, preserving input order."""

    for item in items:
        yield to_record(item)


__all__ = ["WalletTransactionIn", "WalletTransactionsFile", "to_record", "to_records"]
