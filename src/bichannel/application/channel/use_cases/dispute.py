"""Unilateral close: the creator proposes a split, then waits out the dispute window.

There is no operation for the counterparty to contest the proposal or submit
a newer mutually signed state during the window, and the channel nonce is
never consulted. Once initiated, the only path forward is waiting for the
deadline (or a cooperative close signed by both parties).
"""

from __future__ import annotations

import logging

from ....domain.channel.entities import DISPUTE_TIMEOUT, ChannelState
from ....domain.channel.repositories import ChannelRepository
from ....domain.channel.settlement import SettlementEngine
from ....domain.errors import ChannelError, DisputePeriodError, InvalidInputError
from ....domain.shared import HeightClock, SignatureVerifier
from ...shared.serialization import settlement_message
from ..dtos import (
    DisputeOpenedResponseDTO,
    InitiateUnilateralCloseRequestDTO,
    ResolveUnilateralCloseRequestDTO,
    SettlementResponseDTO,
)
from ..validators import (
    build_channel_key,
    decode_signature,
    ensure_open,
    validate_balance,
    validate_balance_split,
    verify_party_signature,
)

logger = logging.getLogger(__name__)


class DisputeService:
    """Timeout-gated unilateral close layered on the channel lifecycle."""

    def __init__(
        self,
        channel_repo: ChannelRepository,
        settlement: SettlementEngine,
        verifier: SignatureVerifier,
        clock: HeightClock,
        dispute_timeout: int = DISPUTE_TIMEOUT,
    ):
        if dispute_timeout <= 0:
            raise ValueError("dispute_timeout must be positive")
        self.channel_repo = channel_repo
        self.settlement = settlement
        self.verifier = verifier
        self.clock = clock
        self.dispute_timeout = dispute_timeout

    async def initiate_unilateral_close(
        self, caller: str, dto: InitiateUnilateralCloseRequestDTO
    ) -> DisputeOpenedResponseDTO:
        try:
            return await self._initiate(caller, dto)
        except ChannelError as e:
            logger.warning(
                "Unilateral close of channel %s rejected: %s",
                dto.channel_id_hex,
                e.message,
            )
            raise

    async def resolve_unilateral_close(
        self, caller: str, dto: ResolveUnilateralCloseRequestDTO
    ) -> SettlementResponseDTO:
        try:
            return await self._resolve(caller, dto)
        except ChannelError as e:
            logger.warning(
                "Resolve of channel %s rejected: %s", dto.channel_id_hex, e.message
            )
            raise

    async def _initiate(
        self, caller: str, dto: InitiateUnilateralCloseRequestDTO
    ) -> DisputeOpenedResponseDTO:
        key = build_channel_key(caller, dto.channel_id_hex, dto.party_b)
        validate_balance(dto.proposed_balance_a, "proposed_balance_a")
        validate_balance(dto.proposed_balance_b, "proposed_balance_b")
        signature = decode_signature(dto.signature_b64)

        state = await self.channel_repo.get(key)
        ensure_open(state)
        if state.dispute_deadline:
            raise DisputePeriodError(
                f"Unilateral close already pending until height {state.dispute_deadline}"
            )
        validate_balance_split(
            dto.proposed_balance_a, dto.proposed_balance_b, state.total_deposited
        )

        message = settlement_message(
            key.channel_id, dto.proposed_balance_a, dto.proposed_balance_b
        )
        verify_party_signature(
            self.verifier, message, signature, key.party_a, "initiator"
        )

        deadline = await self.clock.current_height() + self.dispute_timeout
        updated = state.model_copy(
            update={
                "balance_a": dto.proposed_balance_a,
                "balance_b": dto.proposed_balance_b,
                "dispute_deadline": deadline,
            }
        )
        await self.channel_repo.replace(key, state, updated)
        logger.info(
            "Unilateral close of channel %s initiated; finalizable at height %d",
            key.channel_id_hex,
            deadline,
        )
        return DisputeOpenedResponseDTO(
            channel_id_hex=key.channel_id_hex,
            balance_a=updated.balance_a,
            balance_b=updated.balance_b,
            dispute_deadline=deadline,
        )

    async def _resolve(
        self, caller: str, dto: ResolveUnilateralCloseRequestDTO
    ) -> SettlementResponseDTO:
        key = build_channel_key(caller, dto.channel_id_hex, dto.party_b)

        state = await self.channel_repo.get(key)
        ensure_open(state)
        if not state.dispute_deadline:
            raise DisputePeriodError("No unilateral close is pending")
        height = await self.clock.current_height()
        if height < state.dispute_deadline:
            raise DisputePeriodError(
                f"Dispute window open until height {state.dispute_deadline} "
                f"(current height {height})"
            )

        validate_balance(state.balance_a, "balance_a")
        validate_balance(state.balance_b, "balance_b")
        if not state.is_consistent():
            raise InvalidInputError("Stored balances do not match the deposit")

        await self.settlement.settle_channel(
            key,
            state,
            ChannelState.closed(state),
            payouts=[(key.party_a, state.balance_a), (key.party_b, state.balance_b)],
        )
        logger.info(
            "Unilateral close of channel %s resolved (a=%d, b=%d)",
            key.channel_id_hex,
            state.balance_a,
            state.balance_b,
        )
        return SettlementResponseDTO(
            channel_id_hex=key.channel_id_hex,
            party_a=key.party_a,
            party_b=key.party_b,
            paid_a=state.balance_a,
            paid_b=state.balance_b,
        )
