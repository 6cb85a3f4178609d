"""ECDSA signature parsing and signer recovery.

Only the canonical encoding of a secp256k1 signature is accepted:
65 bytes laid out as r (32) || s (32) || v (1), with v in {27, 28} and
s in the lower half of the curve order. The curve itself accepts
(r, N - s, v ^ 1) for the same key; rejecting it makes every signature
over a digest unique per signer.
"""
from __future__ import annotations

import logging
from typing import Tuple, Union

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import to_bytes

from .exceptions import BadSignatureFormat, BadSignatureValue, RecoveryFailed
from .identity import is_zero_address

logger = logging.getLogger(__name__)

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

SIGNATURE_LENGTH = 65
VALID_V = (27, 28)

SignatureLike = Union[bytes, bytearray, str]


def signature_bytes(signature: SignatureLike) -> bytes:
    """Coerce a signature given as bytes or hex string to raw bytes."""
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature)
    if isinstance(signature, str):
        try:
            return to_bytes(hexstr=signature)
        except ValueError as e:
            raise BadSignatureFormat(f"Invalid signature hex: {e}") from e
    raise BadSignatureFormat(
        f"Signature must be bytes or hex string, got {type(signature).__name__}"
    )


def split_signature(signature: SignatureLike) -> Tuple[int, int, int]:
    """Split a 65-byte signature into (r, s, v)."""
    raw = signature_bytes(signature)
    if len(raw) != SIGNATURE_LENGTH:
        raise BadSignatureFormat(
            "Invalid signature length",
            details={"length": len(raw)},
        )
    r = int.from_bytes(raw[0:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = raw[64]
    return r, s, v


def recover_signer(digest: bytes, signature: SignatureLike) -> str:
    """Recover the address that produced ``signature`` over ``digest``.

    Args:
        digest: 32-byte final digest (personal-sign prefix already applied)
        signature: 65-byte canonical signature

    Returns:
        Checksummed signer address

    Raises:
        BadSignatureFormat: not 65 bytes
        BadSignatureValue: v not 27/28, or high-s form
        RecoveryFailed: no public key recoverable, or null identity
    """
    r, s, v = split_signature(signature)

    if v not in VALID_V:
        raise BadSignatureValue("Invalid signature 'v' value", details={"v": v})
    if s > SECP256K1_HALF_N:
        raise BadSignatureValue("Invalid signature 's' value")

    try:
        sig = keys.Signature(vrs=(v - 27, r, s))
        public_key = sig.recover_public_key_from_msg_hash(bytes(digest))
    except (BadSignature, ValidationError) as e:
        logger.debug("Signature recovery failed: %s", e)
        raise RecoveryFailed("Invalid signature") from e

    signer = public_key.to_checksum_address()
    if is_zero_address(signer):
        raise RecoveryFailed("Invalid signature")
    return signer
