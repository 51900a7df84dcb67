"""Protocol for the external monotonic block-height clock."""

from __future__ import annotations

from typing import Protocol


class HeightClock(Protocol):
    async def current_height(self) -> int:
        """Return the ledger's current block height. Never decreases."""
        ...
