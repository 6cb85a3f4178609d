"""Canonical action digests.

A digest binds one action to one wallet instance on one network at one
nonce. It is built in three layers:

1. struct hash:  keccak256(abi.encode(TRANSACTION_TYPEHASH, to, value, keccak256(data), nonce))
2. transaction hash (EIP-712): keccak256(0x1901 ++ domainSeparator ++ structHash)
3. final digest (EIP-191): keccak256("\\x19Ethereum Signed Message:\\n32" ++ transactionHash)

Signers sign the transaction hash with a standard personal-sign flow, which
applies layer 3 for them; recovery runs against the final digest. The
structured layers keep fields from bleeding into each other and bind the
domain, while the personal-sign layer keeps unmodified wallets usable.

References:
- https://eips.ethereum.org/EIPS/eip-712
- https://eips.ethereum.org/EIPS/eip-191
"""
from __future__ import annotations

from typing import Union

from eth_abi import encode
from eth_account.messages import defunct_hash_message
from eth_utils import to_bytes
from hexbytes import HexBytes
from web3 import Web3

from .exceptions import InvalidRequestError
from .identity import AddressLike, normalize_address

DEFAULT_DOMAIN_NAME = "MultiSigWallet"
DEFAULT_DOMAIN_VERSION = "1"

EIP712_DOMAIN_TYPEHASH = Web3.keccak(
    text="EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
TRANSACTION_TYPEHASH = Web3.keccak(
    text="Transaction(address to,uint256 value,bytes data,uint256 nonce)"
)

EIP712_PREFIX = b"\x19\x01"

UINT256_MAX = 2**256 - 1

Payload = Union[bytes, bytearray, str]


def payload_bytes(payload: Payload) -> bytes:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if isinstance(payload, str):
        try:
            return to_bytes(hexstr=payload)
        except ValueError as e:
            raise InvalidRequestError(f"Invalid payload hex: {e}", field="data") from e
    raise InvalidRequestError(
        f"Payload must be bytes or hex string, got {type(payload).__name__}",
        field="data",
    )


def _check_uint256(value: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequestError(f"{field} must be an integer", field=field)
    if value < 0 or value > UINT256_MAX:
        raise InvalidRequestError(f"{field} out of uint256 range", field=field)
    return value


def compute_domain_separator(
    name: str,
    version: str,
    chain_id: int,
    verifying_contract: AddressLike,
) -> bytes:
    """Compute the EIP-712 domain separator for one wallet instance."""
    return Web3.keccak(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                EIP712_DOMAIN_TYPEHASH,
                Web3.keccak(text=name),
                Web3.keccak(text=version),
                chain_id,
                normalize_address(verifying_contract, field="verifying_contract"),
            ],
        )
    )


class DigestBuilder:
    """Builds the digests signers sign for a fixed domain separator.

    Pure and deterministic; holds nothing besides the separator.
    """

    def __init__(self, domain_separator: bytes):
        if len(domain_separator) != 32:
            raise ValueError("domain separator must be 32 bytes")
        self._domain_separator = bytes(domain_separator)

    @property
    def domain_separator(self) -> bytes:
        return self._domain_separator

    def struct_hash(
        self,
        target: AddressLike,
        value: int,
        payload: Payload,
        nonce: int,
    ) -> bytes:
        """Hash the typed (to, value, data, nonce) tuple."""
        to = normalize_address(target, field="to", error_cls=InvalidRequestError)
        data = payload_bytes(payload)
        return Web3.keccak(
            encode(
                ["bytes32", "address", "uint256", "bytes32", "uint256"],
                [
                    TRANSACTION_TYPEHASH,
                    to,
                    _check_uint256(value, "value"),
                    Web3.keccak(data),
                    _check_uint256(nonce, "nonce"),
                ],
            )
        )

    def transaction_hash(
        self,
        target: AddressLike,
        value: int,
        payload: Payload,
        nonce: int,
    ) -> HexBytes:
        """EIP-712 digest of an action; the value handed to signers."""
        struct_hash = self.struct_hash(target, value, payload, nonce)
        return HexBytes(
            Web3.keccak(EIP712_PREFIX + self._domain_separator + struct_hash)
        )

    def build_digest(
        self,
        target: AddressLike,
        value: int,
        payload: Payload,
        nonce: int,
    ) -> HexBytes:
        """Final digest that signatures are recovered against."""
        return to_signed_message_digest(
            self.transaction_hash(target, value, payload, nonce)
        )


def to_signed_message_digest(transaction_hash: bytes) -> HexBytes:
    """Apply the personal-sign prefix to a 32-byte transaction hash."""
    if len(transaction_hash) != 32:
        raise InvalidRequestError("transaction hash must be 32 bytes", field="hash")
    return HexBytes(defunct_hash_message(primitive=bytes(transaction_hash)))
