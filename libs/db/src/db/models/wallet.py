from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: wallet_transactions
# ---------------------------


class WalletTransaction(Base):
    """One wallet-reported transaction leg, keyed by ``(txid, vout)``."""

    __tablename__ = "wallet_transactions"

    # SQLite only autoincrements an INTEGER PRIMARY KEY (rowid alias).
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    txid: Mapped[str] = mapped_column(String(64), nullable=False)
    vout: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    # Amount in integer units of 1e-8 so SUM() is exact on every backend.
    amount_sat: Mapped[int] = mapped_column(BigInteger, nullable=False)
    confirmations: Mapped[int] = mapped_column(Integer, nullable=False)

    # Passthrough wallet metadata. Stored verbatim and never interpreted.
    account: Mapped[str | None] = mapped_column(String, nullable=True)
    label: Mapped[str | None] = mapped_column(Text, nullable=True)
    blockhash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    blockindex: Mapped[int | None] = mapped_column(Integer, nullable=True)
    blocktime: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    timereceived: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    walletconflicts: Mapped[list[Any]] = mapped_column(JSON, nullable=False)
    bip125_replaceable: Mapped[str | None] = mapped_column(String, nullable=True)
    involves_watchonly: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Identifier of the ingestion run that last wrote this row. Rows carrying
    # any other value are removed at the end of a full-replace ingest.
    ingest_batch: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        UniqueConstraint("txid", "vout", name="uq_wallet_tx_txid_vout"),
        Index("ix_wallet_tx_category_confirmations", "category", "confirmations"),
        Index("ix_wallet_tx_address", "address"),
    )

    @property
    def amount(self) -> Decimal:
        return Decimal(self.amount_sat).scaleb(-8)


__all__ = [
    "Base",
    "WalletTransaction",
]
