# ruff: noqa: I001
"""Wallet transactions table keyed by (txid, vout).

Revision ID: 0001_wallet_transactions
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_wallet_transactions"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True),
        sa.Column("txid", sa.String(64), nullable=False),
        sa.Column("vout", sa.Integer(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount_sat", sa.BigInteger(), nullable=False),
        sa.Column("confirmations", sa.Integer(), nullable=False),
        sa.Column("account", sa.String(), nullable=True),
        sa.Column("label", sa.Text(), nullable=True),
        sa.Column("blockhash", sa.String(64), nullable=True),
        sa.Column("blockindex", sa.Integer(), nullable=True),
        sa.Column("blocktime", sa.BigInteger(), nullable=True),
        sa.Column("time", sa.BigInteger(), nullable=True),
        sa.Column("timereceived", sa.BigInteger(), nullable=True),
        sa.Column("walletconflicts", sa.JSON(), nullable=False),
        sa.Column("bip125_replaceable", sa.String(), nullable=True),
        sa.Column("involves_watchonly", sa.Boolean(), nullable=True),
        sa.Column("ingest_batch", sa.String(32), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("txid", "vout", name="uq_wallet_tx_txid_vout"),
    )

    # The grouped deposit query filters on category/confirmations and groups by address
    op.create_index(
        "ix_wallet_tx_category_confirmations",
        "wallet_transactions",
        ["category", "confirmations"],
        unique=False,
    )
    op.create_index("ix_wallet_tx_address", "wallet_transactions", ["address"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_wallet_tx_address", table_name="wallet_transactions")
    op.drop_index("ix_wallet_tx_category_confirmations", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")
