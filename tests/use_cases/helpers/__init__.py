"""Test helpers for use case-based testing."""

from .ledger import STARTING_BALANCE, channel_info

__all__ = [
    "STARTING_BALANCE",
    "channel_info",
]
