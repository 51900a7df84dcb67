"""Data Transfer Objects for the channel application layer.

Channel ids travel hex-encoded and signatures base64-encoded; the services
decode and validate them. Caller identity is never part of a DTO: it is passed
to each operation separately.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ...domain.channel.entities import ChannelKey, ChannelPhase, ChannelState


class CreateChannelRequestDTO(BaseModel):
    channel_id_hex: str
    party_b: str
    initial_deposit: int


class FundChannelRequestDTO(BaseModel):
    channel_id_hex: str
    party_b: str
    amount: int


class CooperativeCloseRequestDTO(BaseModel):
    """Final split signed by both parties over the canonical settlement message."""

    channel_id_hex: str
    party_b: str
    balance_a: int
    balance_b: int
    signature_a_b64: str
    signature_b_b64: str


class InitiateUnilateralCloseRequestDTO(BaseModel):
    """Split proposed and signed by the channel's creator alone."""

    channel_id_hex: str
    party_b: str
    proposed_balance_a: int
    proposed_balance_b: int
    signature_b64: str


class ResolveUnilateralCloseRequestDTO(BaseModel):
    channel_id_hex: str
    party_b: str


class GetChannelInfoRequestDTO(BaseModel):
    channel_id_hex: str
    party_a: str
    party_b: str


class ChannelInfoResponseDTO(BaseModel):
    """Stored record of a channel."""

    channel_id_hex: str
    party_a: str
    party_b: str
    total_deposited: int
    balance_a: int
    balance_b: int
    is_open: bool
    dispute_deadline: int
    nonce: int
    phase: ChannelPhase

    @classmethod
    def from_state(cls, key: ChannelKey, state: ChannelState) -> "ChannelInfoResponseDTO":
        return cls(
            channel_id_hex=key.channel_id_hex,
            party_a=key.party_a,
            party_b=key.party_b,
            total_deposited=state.total_deposited,
            balance_a=state.balance_a,
            balance_b=state.balance_b,
            is_open=state.is_open,
            dispute_deadline=state.dispute_deadline,
            nonce=state.nonce,
            phase=state.phase,
        )


class DisputeOpenedResponseDTO(BaseModel):
    channel_id_hex: str
    balance_a: int
    balance_b: int
    dispute_deadline: int


class SettlementResponseDTO(BaseModel):
    """Amounts paid out when a channel closed."""

    channel_id_hex: str
    party_a: str
    party_b: str
    paid_a: int
    paid_b: int


class SweepResponseDTO(BaseModel):
    recipient: str
    amount: int


class EscrowAuditResponseDTO(BaseModel):
    escrow_balance: int
    locked_total: int
    is_covered: bool
    shortfall: Optional[int] = None
