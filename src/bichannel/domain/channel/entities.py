"""Channel domain entities: ChannelKey, ChannelState and their constants."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

MAX_BALANCE = 2**128 - 1
DISPUTE_TIMEOUT = 1008
SIGNATURE_LENGTH = 65
MAX_CHANNEL_ID_LENGTH = 32
BALANCE_WIDTH_BYTES = 16


class ChannelPhase(str, Enum):
    OPEN = "open"
    DISPUTING = "disputing"
    CLOSED = "closed"


class ChannelKey(BaseModel):
    """Unique handle of a channel.

    ``party_a`` is always the identity that issued the creating call, so the
    key is also the only record of which party initiated the channel.
    """

    model_config = ConfigDict(frozen=True)

    channel_id: bytes
    party_a: str
    party_b: str

    @field_validator("channel_id", mode="before")
    @classmethod
    def parse_channel_id(cls, value: object) -> object:
        if isinstance(value, str):
            return bytes.fromhex(value)
        return value

    @field_serializer("channel_id")
    def serialize_channel_id(self, value: bytes) -> str:
        return value.hex()

    @property
    def channel_id_hex(self) -> str:
        return self.channel_id.hex()


class ChannelState(BaseModel):
    """Mutable state stored for a channel key."""

    total_deposited: int
    balance_a: int
    balance_b: int
    is_open: bool = True
    dispute_deadline: int = 0
    # Stored for replay protection; no operation reads or increments it.
    nonce: int = 0

    @classmethod
    def opened(cls, deposit: int) -> "ChannelState":
        return cls(total_deposited=deposit, balance_a=deposit, balance_b=0)

    @classmethod
    def closed(cls, previous: "ChannelState") -> "ChannelState":
        """Terminal record: all funds distributed, dispute cleared."""
        return cls(
            total_deposited=0,
            balance_a=0,
            balance_b=0,
            is_open=False,
            dispute_deadline=0,
            nonce=previous.nonce,
        )

    @property
    def phase(self) -> ChannelPhase:
        if not self.is_open:
            return ChannelPhase.CLOSED
        if self.dispute_deadline:
            return ChannelPhase.DISPUTING
        return ChannelPhase.OPEN

    def is_consistent(self) -> bool:
        """Check the per-channel balance invariants for the current phase."""
        if not self.is_open:
            return self.total_deposited == self.balance_a == self.balance_b == 0
        return (
            0 <= self.balance_a <= MAX_BALANCE
            and 0 <= self.balance_b <= MAX_BALANCE
            and self.balance_a + self.balance_b == self.total_deposited
        )
