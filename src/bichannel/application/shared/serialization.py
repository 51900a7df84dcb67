from __future__ import annotations

from ...domain.channel.entities import BALANCE_WIDTH_BYTES, MAX_BALANCE


def settlement_message(channel_id: bytes, balance_a: int, balance_b: int) -> bytes:
    """Canonical bytes both parties sign to agree on a final balance split.

    ``channel_id`` followed by each balance as a 16-byte big-endian unsigned
    integer. Clients and the channel core must build it identically.
    """
    for value in (balance_a, balance_b):
        if value < 0 or value > MAX_BALANCE:
            raise ValueError("Balance does not fit the fixed-width encoding")
    return (
        channel_id
        + balance_a.to_bytes(BALANCE_WIDTH_BYTES, "big")
        + balance_b.to_bytes(BALANCE_WIDTH_BYTES, "big")
    )
