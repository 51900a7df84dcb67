from __future__ import annotations

import logging
from typing import Optional

from ....domain.channel.entities import ChannelState
from ....domain.channel.repositories import ChannelRepository
from ....domain.channel.settlement import SettlementEngine
from ....domain.errors import ChannelError, InvalidInputError
from ....domain.shared import SignatureVerifier
from ...shared.serialization import settlement_message
from ..dtos import (
    ChannelInfoResponseDTO,
    CooperativeCloseRequestDTO,
    CreateChannelRequestDTO,
    FundChannelRequestDTO,
    GetChannelInfoRequestDTO,
    SettlementResponseDTO,
)
from ..validators import (
    build_channel_key,
    checked_add,
    decode_signature,
    ensure_open,
    validate_balance,
    validate_balance_split,
    validate_positive_amount,
    verify_party_signature,
)

logger = logging.getLogger(__name__)


class ChannelLifecycleService:
    """Create, fund, cooperatively close and query bilateral channels.

    Every mutating operation takes the calling identity explicitly. The caller
    always occupies the ``party_a`` slot of the lookup key, so only a
    channel's creator can reach it; any other caller addresses a different
    key and gets ChannelNotFound.
    """

    def __init__(
        self,
        channel_repo: ChannelRepository,
        settlement: SettlementEngine,
        verifier: SignatureVerifier,
    ):
        self.channel_repo = channel_repo
        self.settlement = settlement
        self.verifier = verifier

    async def create_channel(
        self, caller: str, dto: CreateChannelRequestDTO
    ) -> ChannelInfoResponseDTO:
        try:
            key = build_channel_key(caller, dto.channel_id_hex, dto.party_b)
            validate_positive_amount(dto.initial_deposit, "initial_deposit")
            validate_balance(dto.initial_deposit, "initial_deposit")

            state = ChannelState.opened(dto.initial_deposit)
            # Registry insert and escrow deposit commit together or not at all
            await self.settlement.open_channel(
                key, state, payer=key.party_a, amount=dto.initial_deposit
            )
        except ChannelError as e:
            logger.warning(
                "Create of channel %s rejected: %s", dto.channel_id_hex, e.message
            )
            raise
        logger.info(
            "Channel %s opened with deposit %d", key.channel_id_hex, dto.initial_deposit
        )
        return ChannelInfoResponseDTO.from_state(key, state)

    async def fund_channel(
        self, caller: str, dto: FundChannelRequestDTO
    ) -> ChannelInfoResponseDTO:
        try:
            key = build_channel_key(caller, dto.channel_id_hex, dto.party_b)
            validate_positive_amount(dto.amount)

            state = await self.channel_repo.get(key)
            ensure_open(state)

            # Funding always credits the creator's side
            updated = state.model_copy(
                update={
                    "total_deposited": checked_add(state.total_deposited, dto.amount),
                    "balance_a": checked_add(state.balance_a, dto.amount),
                }
            )
            await self.settlement.fund_channel(
                key, state, updated, payer=key.party_a, amount=dto.amount
            )
        except ChannelError as e:
            logger.warning(
                "Fund of channel %s rejected: %s", dto.channel_id_hex, e.message
            )
            raise
        logger.info("Channel %s funded with %d", key.channel_id_hex, dto.amount)
        return ChannelInfoResponseDTO.from_state(key, updated)

    async def cooperative_close(
        self, caller: str, dto: CooperativeCloseRequestDTO
    ) -> SettlementResponseDTO:
        try:
            key = build_channel_key(caller, dto.channel_id_hex, dto.party_b)
            validate_balance(dto.balance_a, "balance_a")
            validate_balance(dto.balance_b, "balance_b")
            signature_a = decode_signature(dto.signature_a_b64, "signature_a")
            signature_b = decode_signature(dto.signature_b_b64, "signature_b")

            state = await self.channel_repo.get(key)
            ensure_open(state)
            validate_balance_split(dto.balance_a, dto.balance_b, state.total_deposited)

            message = settlement_message(key.channel_id, dto.balance_a, dto.balance_b)
            verify_party_signature(
                self.verifier, message, signature_a, key.party_a, "party A"
            )
            verify_party_signature(
                self.verifier, message, signature_b, key.party_b, "party B"
            )

            await self.settlement.settle_channel(
                key,
                state,
                ChannelState.closed(state),
                payouts=[(key.party_a, dto.balance_a), (key.party_b, dto.balance_b)],
            )
        except ChannelError as e:
            logger.warning(
                "Cooperative close of channel %s rejected: %s",
                dto.channel_id_hex,
                e.message,
            )
            raise
        logger.info(
            "Channel %s closed cooperatively (a=%d, b=%d)",
            key.channel_id_hex,
            dto.balance_a,
            dto.balance_b,
        )
        return SettlementResponseDTO(
            channel_id_hex=key.channel_id_hex,
            party_a=key.party_a,
            party_b=key.party_b,
            paid_a=dto.balance_a,
            paid_b=dto.balance_b,
        )

    async def get_channel_info(
        self, dto: GetChannelInfoRequestDTO
    ) -> Optional[ChannelInfoResponseDTO]:
        """Read-only lookup; a malformed or unknown key is simply not found."""
        try:
            key = build_channel_key(dto.party_a, dto.channel_id_hex, dto.party_b)
        except InvalidInputError:
            return None
        state = await self.channel_repo.find(key)
        if state is None:
            return None
        return ChannelInfoResponseDTO.from_state(key, state)
