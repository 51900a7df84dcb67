"""Domain-specific exceptions.

Every failure surfaced by a channel operation carries one ``ErrorCode``. The
exceptions subclass ``ValueError`` so callers that only care about "the
request was rejected" can keep catching that.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    NOT_AUTHORIZED = "NotAuthorized"
    CHANNEL_EXISTS = "ChannelExists"
    CHANNEL_NOT_FOUND = "ChannelNotFound"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    INVALID_SIGNATURE = "InvalidSignature"
    CHANNEL_CLOSED = "ChannelClosed"
    DISPUTE_PERIOD = "DisputePeriod"
    INVALID_INPUT = "InvalidInput"
    BALANCE_OVERFLOW = "BalanceOverflow"
    ESCROW_INVARIANT = "EscrowInvariant"
    CONCURRENT_UPDATE = "ConcurrentUpdate"


class ChannelError(ValueError):
    """Base class for rejected channel operations."""

    code: ErrorCode

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code.value)
        self.message = message or self.code.value


class NotAuthorizedError(ChannelError):
    """Raised when the caller may not run the operation."""

    code = ErrorCode.NOT_AUTHORIZED


class ChannelExistsError(ChannelError):
    """Raised when creating a channel whose key is already registered."""

    code = ErrorCode.CHANNEL_EXISTS


class ChannelNotFoundError(ChannelError):
    """Raised when a channel lookup fails."""

    code = ErrorCode.CHANNEL_NOT_FOUND


class InsufficientFundsError(ChannelError):
    """Raised on balance-sum mismatch or when a payer cannot cover a transfer."""

    code = ErrorCode.INSUFFICIENT_FUNDS


class InvalidSignatureError(ChannelError):
    code = ErrorCode.INVALID_SIGNATURE


class ChannelClosedError(ChannelError):
    code = ErrorCode.CHANNEL_CLOSED


class DisputePeriodError(ChannelError):
    """Raised when resolving a unilateral close before its deadline."""

    code = ErrorCode.DISPUTE_PERIOD


class InvalidInputError(ChannelError):
    code = ErrorCode.INVALID_INPUT


class BalanceOverflowError(ChannelError):
    code = ErrorCode.BALANCE_OVERFLOW


class EscrowInvariantError(ChannelError):
    """Raised when open channels would lock more than the pooled escrow holds."""

    code = ErrorCode.ESCROW_INVARIANT


class ConcurrentUpdateError(ChannelError):
    """Raised when an atomic commit finds its keys changed since they were read."""

    code = ErrorCode.CONCURRENT_UPDATE
