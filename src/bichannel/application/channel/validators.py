"""Pure validation functions for channel operations.

These functions contain the input-shape and arithmetic rules and can be
tested in isolation without dependencies on repositories or infrastructure.
Every rule raises before any state is touched.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import UnsupportedAlgorithm

from ...crypto.signatures import canonical_identity
from ...domain.channel.entities import (
    MAX_BALANCE,
    MAX_CHANNEL_ID_LENGTH,
    SIGNATURE_LENGTH,
    ChannelKey,
    ChannelState,
)
from ...domain.errors import (
    BalanceOverflowError,
    ChannelClosedError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidSignatureError,
)
from ...domain.shared import SignatureVerifier


def decode_channel_id(channel_id_hex: str) -> bytes:
    """Decode a hex channel id and check its length is within [1, 32] bytes.

    Raises:
        InvalidInputError: If the value is not hex or has the wrong length.
    """
    try:
        channel_id = bytes.fromhex(channel_id_hex)
    except ValueError:
        raise InvalidInputError("channel_id must be hex-encoded")
    validate_channel_id(channel_id)
    return channel_id


def validate_channel_id(channel_id: bytes) -> None:
    if not 1 <= len(channel_id) <= MAX_CHANNEL_ID_LENGTH:
        raise InvalidInputError(
            f"channel_id must be 1 to {MAX_CHANNEL_ID_LENGTH} bytes "
            f"(got {len(channel_id)})"
        )


def validate_positive_amount(amount: int, field: str = "amount") -> None:
    if amount <= 0:
        raise InvalidInputError(f"{field} must be positive")


def validate_balance(value: int, field: str = "balance") -> None:
    if value < 0 or value > MAX_BALANCE:
        raise InvalidInputError(f"{field} must be within [0, 2**128 - 1]")


def decode_signature(signature_b64: str, field: str = "signature") -> bytes:
    """Decode a base64 signature blob and check it is exactly 65 bytes.

    This is a format check only; authenticity is the verifier's job.
    """
    try:
        signature = base64.b64decode(signature_b64, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError(f"{field} must be base64-encoded")
    validate_signature_format(signature, field)
    return signature


def validate_signature_format(signature: bytes, field: str = "signature") -> None:
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidInputError(f"{field} must be exactly {SIGNATURE_LENGTH} bytes")


def canonicalize_identity(identity: str, field: str = "identity") -> str:
    """Return the canonical encoding of a base64 DER EC public key identity.

    Raises:
        InvalidInputError: If the value is not a loadable EC public key.
    """
    try:
        return canonical_identity(identity)
    except (ValueError, UnsupportedAlgorithm):
        raise InvalidInputError(f"{field} is not a valid public key identity")


def validate_distinct_parties(party_a: str, party_b: str) -> None:
    if not party_a or not party_b:
        raise InvalidInputError("Both party identities are required")
    if party_a == party_b:
        raise InvalidInputError("Channel parties must be distinct identities")


def checked_add(current: int, amount: int) -> int:
    """Add two balances without exceeding the 128-bit maximum.

    Raises:
        BalanceOverflowError: If the sum would exceed MAX_BALANCE.
    """
    result = current + amount
    if result > MAX_BALANCE:
        raise BalanceOverflowError(
            f"Balance would exceed the maximum ({current} + {amount})"
        )
    return result


def validate_balance_split(balance_a: int, balance_b: int, total_deposited: int) -> None:
    """Validate that a proposed split distributes exactly the deposited total.

    Raises:
        InsufficientFundsError: If the balances do not sum to total_deposited.
    """
    if balance_a + balance_b != total_deposited:
        raise InsufficientFundsError(
            "Balances must sum to the channel's total deposit "
            f"(sum={balance_a + balance_b}, total={total_deposited})"
        )


def ensure_open(state: ChannelState) -> None:
    if not state.is_open:
        raise ChannelClosedError("Channel is closed")


def verify_party_signature(
    verifier: SignatureVerifier,
    message: bytes,
    signature: bytes,
    signer: str,
    role: str,
) -> None:
    """Require ``signer`` to have signed exactly ``message``.

    Raises:
        InvalidSignatureError: If the verifier rejects the signature.
    """
    if not verifier.verify(message, signature, signer):
        raise InvalidSignatureError(f"Invalid signature from {role}")


def build_channel_key(caller: str, channel_id_hex: str, party_b: str) -> ChannelKey:
    """Key addressed by ``caller``: the caller always fills the party A slot.

    Both identities are canonicalized first so one key cannot pass as two
    parties through different encodings.
    """
    channel_id = decode_channel_id(channel_id_hex)
    party_a = canonicalize_identity(caller, "caller")
    party_b = canonicalize_identity(party_b, "party_b")
    validate_distinct_parties(party_a, party_b)
    return ChannelKey(channel_id=channel_id, party_a=party_a, party_b=party_b)
