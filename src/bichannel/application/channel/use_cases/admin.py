from __future__ import annotations

import logging

from ....domain.channel.repositories import LedgerRepository
from ....domain.channel.settlement import SettlementEngine
from ....domain.errors import NotAuthorizedError
from ..dtos import EscrowAuditResponseDTO, SweepResponseDTO

logger = logging.getLogger(__name__)


class EmergencySweepService:
    """Owner-only escape hatch moving the whole pooled escrow to the admin.

    The sweep ignores per-channel accounting and nothing can refill the escrow
    afterwards, so the freeze is permanent. Open channels keep their recorded
    balances but can never pay out. The locked total never shrinks either, so
    every later create or fund fails the escrow invariant.
    """

    def __init__(self, settlement: SettlementEngine, admin_identity: str):
        self.settlement = settlement
        self.admin_identity = admin_identity

    async def emergency_sweep(self, caller: str) -> SweepResponseDTO:
        if caller != self.admin_identity:
            logger.warning("Emergency sweep refused for non-owner caller")
            raise NotAuthorizedError("Only the owner may sweep the escrow")
        amount = await self.settlement.sweep_escrow(self.admin_identity)
        logger.warning("Emergency sweep moved %d out of escrow", amount)
        return SweepResponseDTO(recipient=self.admin_identity, amount=amount)


class EscrowAuditService:
    """Reports whether the pooled escrow still covers every open channel."""

    def __init__(self, ledger_repo: LedgerRepository):
        self.ledger_repo = ledger_repo

    async def check(self) -> EscrowAuditResponseDTO:
        escrow, locked = await self.ledger_repo.get_escrow_coverage()
        covered = locked <= escrow
        if not covered:
            logger.error("Escrow shortfall: locked=%d escrow=%d", locked, escrow)
        return EscrowAuditResponseDTO(
            escrow_balance=escrow,
            locked_total=locked,
            is_covered=covered,
            shortfall=None if covered else locked - escrow,
        )
