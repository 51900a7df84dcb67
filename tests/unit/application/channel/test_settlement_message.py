"""Unit tests for the canonical settlement message."""

import pytest

from bichannel.application.shared.serialization import settlement_message
from bichannel.domain.channel.entities import MAX_BALANCE


def test_settlement_message_layout() -> None:
    message = settlement_message(b"\xaa\xbb", 1, 256)

    assert len(message) == 2 + 16 + 16
    assert message[:2] == b"\xaa\xbb"
    assert message[2:18] == (1).to_bytes(16, "big")
    assert message[18:] == b"\x00" * 14 + b"\x01\x00"


def test_settlement_message_full_width_balance() -> None:
    message = settlement_message(b"\x01", MAX_BALANCE, 0)

    assert message[1:17] == b"\xff" * 16


def test_settlement_message_distinguishes_splits() -> None:
    assert settlement_message(b"\x01", 800_000, 200_000) != settlement_message(
        b"\x01", 200_000, 800_000
    )


def test_settlement_message_rejects_unencodable_balance() -> None:
    with pytest.raises(ValueError):
        settlement_message(b"\x01", MAX_BALANCE + 1, 0)
