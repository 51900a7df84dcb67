"""Unit tests for channel validators (pure functions)."""

import base64

import pytest

from bichannel.application.channel.validators import (
    build_channel_key,
    canonicalize_identity,
    checked_add,
    decode_channel_id,
    decode_signature,
    ensure_open,
    validate_balance,
    validate_balance_split,
    validate_distinct_parties,
    validate_positive_amount,
    verify_party_signature,
)
from bichannel.domain.channel.entities import MAX_BALANCE, ChannelState
from bichannel.domain.errors import (
    BalanceOverflowError,
    ChannelClosedError,
    ErrorCode,
    InsufficientFundsError,
    InvalidInputError,
    InvalidSignatureError,
)
from tests.fixtures import PartyActor


class TestDecodeChannelId:
    """Test decode_channel_id function."""

    def test_decode_channel_id_single_byte(self) -> None:
        assert decode_channel_id("ab") == b"\xab"

    def test_decode_channel_id_at_max_length(self) -> None:
        assert decode_channel_id("ff" * 32) == b"\xff" * 32

    def test_decode_channel_id_empty_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="1 to 32 bytes"):
            decode_channel_id("")

    def test_decode_channel_id_too_long_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="got 33"):
            decode_channel_id("00" * 33)

    def test_decode_channel_id_not_hex_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="hex"):
            decode_channel_id("channel-1")


class TestAmounts:
    """Test amount and balance range checks."""

    def test_validate_positive_amount_zero_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="amount must be positive"):
            validate_positive_amount(0)

    def test_validate_positive_amount_names_field(self) -> None:
        with pytest.raises(InvalidInputError, match="initial_deposit"):
            validate_positive_amount(-1, "initial_deposit")

    def test_validate_balance_bounds(self) -> None:
        validate_balance(0)
        validate_balance(MAX_BALANCE)
        # Should not raise

    def test_validate_balance_out_of_range_raises(self) -> None:
        with pytest.raises(InvalidInputError):
            validate_balance(MAX_BALANCE + 1)
        with pytest.raises(InvalidInputError):
            validate_balance(-1)

    def test_checked_add_at_maximum(self) -> None:
        assert checked_add(MAX_BALANCE - 1, 1) == MAX_BALANCE

    def test_checked_add_past_maximum_raises(self) -> None:
        with pytest.raises(BalanceOverflowError) as exc_info:
            checked_add(MAX_BALANCE, 1)
        assert exc_info.value.code == ErrorCode.BALANCE_OVERFLOW


class TestValidateBalanceSplit:
    """Test validate_balance_split function."""

    def test_validate_balance_split_exact(self) -> None:
        validate_balance_split(800_000, 200_000, 1_000_000)
        # Should not raise

    def test_validate_balance_split_over_total_raises(self) -> None:
        with pytest.raises(InsufficientFundsError, match="sum=1100000"):
            validate_balance_split(900_000, 200_000, 1_000_000)

    def test_validate_balance_split_under_total_raises(self) -> None:
        with pytest.raises(InsufficientFundsError):
            validate_balance_split(100, 100, 1_000)

    def test_validate_balance_split_sum_beyond_128_bits(self) -> None:
        """Sum is computed exactly, so two maxima never wrap to a valid total."""
        with pytest.raises(InsufficientFundsError):
            validate_balance_split(MAX_BALANCE, MAX_BALANCE, MAX_BALANCE - 1)


class TestParties:
    def test_validate_distinct_parties_same_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="distinct"):
            validate_distinct_parties("id", "id")

    def test_validate_distinct_parties_empty_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="required"):
            validate_distinct_parties("id", "")

    def test_canonicalize_identity_rewrites_compressed_point(self) -> None:
        party = PartyActor()

        assert canonicalize_identity(party.compressed_identity()) == party.identity

    @pytest.mark.parametrize("identity", ["", "%%%", "bm90LWEta2V5"])
    def test_canonicalize_identity_unloadable_raises(self, identity: str) -> None:
        with pytest.raises(InvalidInputError, match="party_b is not a valid"):
            canonicalize_identity(identity, "party_b")

    def test_build_channel_key_uses_canonical_identities(self) -> None:
        alice, bob = PartyActor(), PartyActor()

        key = build_channel_key(
            alice.compressed_identity(), "ab", bob.compressed_identity()
        )

        assert key.channel_id == b"\xab"
        assert key.party_a == alice.identity
        assert key.party_b == bob.identity

    def test_build_channel_key_same_key_other_encoding_raises(self) -> None:
        alice = PartyActor()

        with pytest.raises(InvalidInputError, match="distinct"):
            build_channel_key(alice.identity, "ab", alice.compressed_identity())


class TestSignatures:
    """Test signature decoding and verification wrappers."""

    def test_decode_signature_exact_length(self) -> None:
        blob = b"\x07" * 65
        assert decode_signature(base64.b64encode(blob).decode()) == blob

    @pytest.mark.parametrize("length", [0, 64, 66])
    def test_decode_signature_wrong_length_raises(self, length: int) -> None:
        encoded = base64.b64encode(b"\x07" * length).decode()
        with pytest.raises(InvalidInputError, match="exactly 65 bytes"):
            decode_signature(encoded)

    def test_decode_signature_not_base64_raises(self) -> None:
        with pytest.raises(InvalidInputError, match="signature_a must be base64"):
            decode_signature("***", "signature_a")

    def test_verify_party_signature_rejected_raises(self) -> None:
        class RejectAll:
            def verify(self, message: bytes, signature: bytes, claimed_signer: str) -> bool:
                return False

        with pytest.raises(InvalidSignatureError, match="party B"):
            verify_party_signature(RejectAll(), b"m", b"\x00" * 65, "bob", "party B")


class TestEnsureOpen:
    def test_ensure_open_on_closed_raises(self) -> None:
        closed = ChannelState.closed(ChannelState.opened(10))
        with pytest.raises(ChannelClosedError):
            ensure_open(closed)

    def test_ensure_open_on_open(self) -> None:
        ensure_open(ChannelState.opened(10))
        # Should not raise
