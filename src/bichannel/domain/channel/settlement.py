"""Settlement engine interface.

Each method moves value and rewrites the channel registry as one atomic unit:
either every transfer and the registry write take effect, or none do.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from .entities import ChannelKey, ChannelState


class SettlementEngine(ABC):
    @abstractmethod
    async def open_channel(
        self, key: ChannelKey, state: ChannelState, *, payer: str, amount: int
    ) -> None:
        """Insert a new channel and move ``amount`` from ``payer`` into escrow."""
        pass

    @abstractmethod
    async def fund_channel(
        self,
        key: ChannelKey,
        previous: ChannelState,
        state: ChannelState,
        *,
        payer: str,
        amount: int,
    ) -> None:
        """Rewrite an existing channel and move ``amount`` from ``payer`` into escrow."""
        pass

    @abstractmethod
    async def settle_channel(
        self,
        key: ChannelKey,
        previous: ChannelState,
        state: ChannelState,
        *,
        payouts: Sequence[tuple[str, int]],
    ) -> None:
        """Rewrite a channel to its terminal state and pay ``payouts`` out of escrow."""
        pass

    @abstractmethod
    async def sweep_escrow(self, recipient: str) -> int:
        """Move the whole pooled escrow to ``recipient``; returns the amount moved.

        Bypasses per-channel accounting entirely.
        """
        pass
