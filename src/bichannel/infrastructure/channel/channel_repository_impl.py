"""Channel registry implementation."""

from __future__ import annotations

from typing import Optional

from ...domain.channel.entities import ChannelKey, ChannelState
from ...domain.channel.repositories import ChannelRepository
from ...domain.errors import (
    ChannelExistsError,
    ChannelNotFoundError,
    ConcurrentUpdateError,
)
from ..storage import AtomicBatch, KeyValueStore


class ChannelRepositoryImpl(ChannelRepository):
    """Channel registry backed by KeyValueStore.

    Key layout:
      - channel:{channel_id_hex}:{party_a}:{party_b} -> ChannelState JSON
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def storage_key(self, key: ChannelKey) -> str:
        return f"channel:{key.channel_id_hex}:{key.party_a}:{key.party_b}"

    async def find(self, key: ChannelKey) -> Optional[ChannelState]:
        data = await self.store.get(self.storage_key(key))
        if not data:
            return None
        return ChannelState.model_validate_json(data)

    async def get(self, key: ChannelKey) -> ChannelState:
        state = await self.find(key)
        if state is None:
            raise ChannelNotFoundError("Channel not found")
        return state

    async def insert_if_absent(self, key: ChannelKey, state: ChannelState) -> None:
        batch = AtomicBatch(self.store)
        await self.stage_insert(batch, key, state)
        await batch.commit()

    async def replace(
        self, key: ChannelKey, previous: ChannelState, state: ChannelState
    ) -> None:
        batch = AtomicBatch(self.store)
        await self.stage_replace(batch, key, previous, state)
        await batch.commit()

    async def stage_insert(
        self, batch: AtomicBatch, key: ChannelKey, state: ChannelState
    ) -> None:
        storage_key = self.storage_key(key)
        if await batch.read(storage_key) is not None:
            raise ChannelExistsError("Channel already exists")
        batch.write(storage_key, state.model_dump_json())

    async def stage_replace(
        self,
        batch: AtomicBatch,
        key: ChannelKey,
        previous: ChannelState,
        state: ChannelState,
    ) -> None:
        """Stage an overwrite pinned to ``previous`` being the stored state."""
        storage_key = self.storage_key(key)
        raw = await batch.read(storage_key)
        if raw is None:
            raise ChannelNotFoundError("Channel not found")
        if ChannelState.model_validate_json(raw) != previous:
            # Registry moved on since the caller validated against it.
            raise ConcurrentUpdateError("Channel changed during the operation")
        batch.write(storage_key, state.model_dump_json())
