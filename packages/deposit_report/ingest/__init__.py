"""Input sourcing: wallet export loaders and their format adapters."""

from .utils import load_transactions_from_json

__all__ = ["load_transactions_from_json"]
