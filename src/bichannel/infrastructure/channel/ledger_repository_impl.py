"""Ledger balance repository implementation."""

from __future__ import annotations

from ...domain.channel.repositories import LedgerRepository
from ...domain.errors import InsufficientFundsError, InvalidInputError
from ..storage import AtomicBatch, KeyValueStore


class LedgerRepositoryImpl(LedgerRepository):
    """Ledger balances backed by KeyValueStore.

    Key layout:
      - ledger:balance:{identity} -> decimal integer
      - ledger:escrow             -> pooled escrow held for every channel
      - ledger:locked             -> sum of total_deposited over open channels

    Balances are stored as decimal strings so 128-bit amounts survive intact.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def balance_key(self, identity: str) -> str:
        return f"ledger:balance:{identity}"

    @property
    def escrow_key(self) -> str:
        return "ledger:escrow"

    @property
    def locked_key(self) -> str:
        return "ledger:locked"

    async def _read_int(self, key: str) -> int:
        raw = await self.store.get(key)
        return int(raw) if raw else 0

    async def get_balance(self, identity: str) -> int:
        return await self._read_int(self.balance_key(identity))

    async def get_escrow_balance(self) -> int:
        return await self._read_int(self.escrow_key)

    async def get_locked_total(self) -> int:
        return await self._read_int(self.locked_key)

    async def get_escrow_coverage(self) -> tuple[int, int]:
        escrow_raw, locked_raw = await self.store.mget(
            [self.escrow_key, self.locked_key]
        )
        return int(escrow_raw or 0), int(locked_raw or 0)

    async def credit(self, identity: str, amount: int) -> int:
        if amount <= 0:
            raise InvalidInputError("Credit amount must be positive")
        batch = AtomicBatch(self.store)
        key = self.balance_key(identity)
        new_balance = await batch.read_int(key) + amount
        batch.write_int(key, new_balance)
        await batch.commit()
        return new_balance

    async def stage_transfer_in(
        self, batch: AtomicBatch, payer: str, amount: int
    ) -> None:
        """Stage a move of ``amount`` from ``payer`` into the pooled escrow."""
        payer_key = self.balance_key(payer)
        payer_balance = await batch.read_int(payer_key)
        if payer_balance < amount:
            raise InsufficientFundsError("Payer balance cannot cover the deposit")
        batch.write_int(payer_key, payer_balance - amount)
        batch.write_int(self.escrow_key, await batch.read_int(self.escrow_key) + amount)

    async def stage_transfer_out(
        self, batch: AtomicBatch, payee: str, amount: int
    ) -> None:
        """Stage a payout of ``amount`` from the pooled escrow to ``payee``."""
        escrow = await batch.read_int(self.escrow_key)
        if escrow < amount:
            raise InsufficientFundsError("Escrow cannot cover the payout")
        batch.write_int(self.escrow_key, escrow - amount)
        payee_key = self.balance_key(payee)
        batch.write_int(payee_key, await batch.read_int(payee_key) + amount)
