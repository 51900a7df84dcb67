"""Block-height clock kept in the key-value store."""

from __future__ import annotations

from ..storage import AtomicBatch, KeyValueStore


class StoredHeightClock:
    """Height counter shared by every process reading the same store."""

    HEIGHT_KEY = "ledger:height"

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def current_height(self) -> int:
        raw = await self.store.get(self.HEIGHT_KEY)
        return int(raw) if raw else 0

    async def advance(self, blocks: int = 1) -> int:
        """Move the clock forward; returns the new height."""
        if blocks < 0:
            raise ValueError("Height is monotonic; blocks must be non-negative")
        batch = AtomicBatch(self.store)
        height = await batch.read_int(self.HEIGHT_KEY) + blocks
        batch.write_int(self.HEIGHT_KEY, height)
        await batch.commit()
        return height
