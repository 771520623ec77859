"""Shared SQLAlchemy models registry for the workspace database.

Currently includes wallet transaction models used by ``deposit_report``.
"""

from .wallet import Base, WalletTransaction

__all__ = [
    "Base",
    "WalletTransaction",
]
