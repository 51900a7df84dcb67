"""Protocol for the external signature verification capability."""

from __future__ import annotations

from typing import Protocol


class SignatureVerifier(Protocol):
    """Authenticity check of a signature over an exact message.

    Implementations must verify the signature cryptographically against the
    claimed signer's public key. Comparing the caller with the claimed signer
    proves nothing and must not be used as a verifier.
    """

    def verify(self, message: bytes, signature: bytes, claimed_signer: str) -> bool:
        ...
