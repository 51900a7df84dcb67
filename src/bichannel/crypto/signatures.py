from __future__ import annotations

import base64
import logging
from typing import NewType

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from ..domain.channel.entities import SIGNATURE_LENGTH

logger = logging.getLogger(__name__)

DERB64 = NewType("DERB64", str)

_SCALAR_BYTES = 32
# Recovery byte accepted in the trailing position of a 65-byte blob.
_RECOVERY_IDS = frozenset({0, 1, 27, 28})


def identity_from_public_key(public_key: ec.EllipticCurvePublicKey) -> str:
    """Encode a public key as the base64 DER SubjectPublicKeyInfo used as identity."""
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("utf-8")


def identity_from_private_pem(private_key_pem: str) -> str:
    private_key = load_private_key_from_pem(private_key_pem)
    return identity_from_public_key(private_key.public_key())


def load_public_key_from_der_b64(der_b64: DERB64) -> ec.EllipticCurvePublicKey:
    """Load a cryptography public key object from base64-encoded DER (SubjectPublicKeyInfo)."""
    der = base64.b64decode(der_b64, validate=True)
    public_key = serialization.load_der_public_key(der)
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise ValueError("Identity is not an elliptic-curve public key")
    return public_key


def canonical_identity(identity: str) -> str:
    """Re-encode an identity as uncompressed-point DER SubjectPublicKeyInfo.

    The same key can be written with a compressed or uncompressed point;
    identities are only comparable once both are canonical.
    """
    return identity_from_public_key(load_public_key_from_der_b64(DERB64(identity)))


def load_private_key_from_pem(pem_str: str) -> ec.EllipticCurvePrivateKey:
    """Load a cryptography private key object from a PEM-formatted string."""
    private_key = serialization.load_pem_private_key(pem_str.encode(), password=None)
    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise ValueError("Private key is not an elliptic-curve key")
    return private_key


def sign_message(private_key: ec.EllipticCurvePrivateKey, message: bytes) -> bytes:
    """Sign with ECDSA SHA256 and return the fixed 65-byte ``r || s || v`` blob.

    ``v`` is always 0: verification uses the claimed signer's key, so no
    public-key recovery is needed.
    """
    if private_key.curve.key_size > _SCALAR_BYTES * 8:
        raise ValueError("Curve order does not fit a 65-byte signature")
    signature_der = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(signature_der)
    return r.to_bytes(_SCALAR_BYTES, "big") + s.to_bytes(_SCALAR_BYTES, "big") + b"\x00"


class EcdsaSignatureVerifier:
    """Verifies 65-byte ECDSA/SHA-256 signatures against a DER b64 identity."""

    def verify(self, message: bytes, signature: bytes, claimed_signer: str) -> bool:
        if len(signature) != SIGNATURE_LENGTH or signature[-1] not in _RECOVERY_IDS:
            return False
        try:
            public_key = load_public_key_from_der_b64(DERB64(claimed_signer))
        except (ValueError, UnsupportedAlgorithm):
            logger.debug("Claimed signer is not a loadable EC public key")
            return False
        if public_key.curve.key_size > _SCALAR_BYTES * 8:
            return False
        r = int.from_bytes(signature[:_SCALAR_BYTES], "big")
        s = int.from_bytes(signature[_SCALAR_BYTES : 2 * _SCALAR_BYTES], "big")
        if r == 0 or s == 0:
            return False
        try:
            public_key.verify(
                encode_dss_signature(r, s), message, ec.ECDSA(hashes.SHA256())
            )
        except InvalidSignature:
            return False
        return True


def sign_request_body(private_key: ec.EllipticCurvePrivateKey, body: bytes) -> str:
    """Sign a raw HTTP body with ECDSA SHA256 and return base64-encoded DER signature."""
    signature_der = private_key.sign(body, ec.ECDSA(hashes.SHA256()))
    return base64.b64encode(signature_der).decode("utf-8")


def verify_request_signature(identity: str, body: bytes, signature_b64: str) -> bool:
    """Check that ``body`` was signed by the private key behind ``identity``."""
    try:
        public_key = load_public_key_from_der_b64(DERB64(identity))
        signature_der = base64.b64decode(signature_b64, validate=True)
        public_key.verify(signature_der, body, ec.ECDSA(hashes.SHA256()))
    except (InvalidSignature, ValueError, UnsupportedAlgorithm):
        return False
    return True
