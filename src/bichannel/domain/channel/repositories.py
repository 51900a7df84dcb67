"""Channel domain repositories: the channel registry and the escrow ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .entities import ChannelKey, ChannelState


class ChannelRepository(ABC):
    """Keyed registry owning every ChannelState. Entries are never deleted."""

    @abstractmethod
    def storage_key(self, key: ChannelKey) -> str:
        """Store key under which the channel state is kept."""
        pass

    @abstractmethod
    async def find(self, key: ChannelKey) -> Optional[ChannelState]:
        pass

    @abstractmethod
    async def get(self, key: ChannelKey) -> ChannelState:
        """Return the state or raise ChannelNotFoundError."""
        pass

    @abstractmethod
    async def insert_if_absent(self, key: ChannelKey, state: ChannelState) -> None:
        """Insert a new entry or raise ChannelExistsError."""
        pass

    @abstractmethod
    async def replace(
        self, key: ChannelKey, previous: ChannelState, state: ChannelState
    ) -> None:
        """Overwrite an entry only if it still holds ``previous``.

        Raises ConcurrentUpdateError when the stored state moved on.
        """
        pass


class LedgerRepository(ABC):
    """Balances held by the external ledger, including the pooled escrow."""

    @abstractmethod
    def balance_key(self, identity: str) -> str:
        pass

    @property
    @abstractmethod
    def escrow_key(self) -> str:
        pass

    @property
    @abstractmethod
    def locked_key(self) -> str:
        """Running sum of total_deposited over open channels."""
        pass

    @abstractmethod
    async def get_balance(self, identity: str) -> int:
        pass

    @abstractmethod
    async def get_escrow_balance(self) -> int:
        pass

    @abstractmethod
    async def get_locked_total(self) -> int:
        pass

    @abstractmethod
    async def get_escrow_coverage(self) -> tuple[int, int]:
        """Return (escrow balance, locked total) read together."""
        pass

    @abstractmethod
    async def credit(self, identity: str, amount: int) -> int:
        """Mint funds to an identity outside any channel; returns the new balance."""
        pass
