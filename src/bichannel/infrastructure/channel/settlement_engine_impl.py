"""Settlement engine committing transfers and registry writes in one batch."""

from __future__ import annotations

import logging
from typing import Sequence

from ...domain.channel.entities import ChannelKey, ChannelState
from ...domain.channel.settlement import SettlementEngine
from ...domain.errors import EscrowInvariantError
from ..storage import AtomicBatch, KeyValueStore
from .channel_repository_impl import ChannelRepositoryImpl
from .ledger_repository_impl import LedgerRepositoryImpl

logger = logging.getLogger(__name__)


def _locked(state: ChannelState) -> int:
    return state.total_deposited if state.is_open else 0


class KeyValueSettlementEngine(SettlementEngine):
    """Settlement engine over the ``commit_batch`` compare-and-set script.

    Every operation stages the registry write and the ledger transfers into a
    single AtomicBatch. Any failed check raises before ``commit`` so nothing
    is written; a concurrent change to a touched key makes the commit itself
    fail without writing.
    """

    def __init__(
        self,
        store: KeyValueStore,
        channel_repo: ChannelRepositoryImpl,
        ledger_repo: LedgerRepositoryImpl,
    ):
        self.store = store
        self.channel_repo = channel_repo
        self.ledger_repo = ledger_repo

    async def _stage_locked_delta(self, batch: AtomicBatch, delta: int) -> None:
        locked = await batch.read_int(self.ledger_repo.locked_key) + delta
        escrow = await batch.read_int(self.ledger_repo.escrow_key)
        # Payouts shrink locked and escrow together; only new locking can break coverage.
        if delta > 0 and locked > escrow:
            logger.error(
                "Escrow coverage violated: locked=%d escrow=%d", locked, escrow
            )
            raise EscrowInvariantError(
                "Open channels would lock more than the pooled escrow holds"
            )
        batch.write_int(self.ledger_repo.locked_key, locked)

    async def open_channel(
        self, key: ChannelKey, state: ChannelState, *, payer: str, amount: int
    ) -> None:
        batch = AtomicBatch(self.store)
        await self.channel_repo.stage_insert(batch, key, state)
        await self.ledger_repo.stage_transfer_in(batch, payer, amount)
        await self._stage_locked_delta(batch, _locked(state))
        await batch.commit()

    async def fund_channel(
        self,
        key: ChannelKey,
        previous: ChannelState,
        state: ChannelState,
        *,
        payer: str,
        amount: int,
    ) -> None:
        batch = AtomicBatch(self.store)
        await self.channel_repo.stage_replace(batch, key, previous, state)
        await self.ledger_repo.stage_transfer_in(batch, payer, amount)
        await self._stage_locked_delta(batch, _locked(state) - _locked(previous))
        await batch.commit()

    async def settle_channel(
        self,
        key: ChannelKey,
        previous: ChannelState,
        state: ChannelState,
        *,
        payouts: Sequence[tuple[str, int]],
    ) -> None:
        batch = AtomicBatch(self.store)
        await self.channel_repo.stage_replace(batch, key, previous, state)
        for payee, amount in payouts:
            if amount:
                await self.ledger_repo.stage_transfer_out(batch, payee, amount)
        await self._stage_locked_delta(batch, _locked(state) - _locked(previous))
        await batch.commit()

    async def sweep_escrow(self, recipient: str) -> int:
        batch = AtomicBatch(self.store)
        amount = await batch.read_int(self.ledger_repo.escrow_key)
        if amount:
            await self.ledger_repo.stage_transfer_out(batch, recipient, amount)
            await batch.commit()
        return amount
