"""Test fixtures for in-memory implementations."""

from .in_memory_storage import InMemoryKeyValueStore
from .in_memory_repositories import (
    InMemoryChannelCore,
    InMemoryChannelRepository,
    InMemoryLedgerRepository,
)
from .party_actor import PartyActor

__all__ = [
    "InMemoryChannelCore",
    "InMemoryChannelRepository",
    "InMemoryKeyValueStore",
    "InMemoryLedgerRepository",
    "PartyActor",
]
