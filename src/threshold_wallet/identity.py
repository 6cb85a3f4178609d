"""Address helpers for signer identities and wallet instances."""
from __future__ import annotations

from typing import Optional, Sequence, Type, Union

from eth_abi import encode
from eth_utils import is_address, to_checksum_address
from web3 import Web3

from .exceptions import ConfigurationError, ThresholdWalletError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

AddressLike = Union[str, bytes]


def normalize_address(
    value: AddressLike,
    field: str = "address",
    error_cls: Type[ThresholdWalletError] = ConfigurationError,
) -> str:
    """Return the checksummed form of an address.

    Accepts a 0x-prefixed hex string (any case, but mixed case must carry a
    valid EIP-55 checksum) or 20 raw bytes.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise error_cls(f"Invalid {field}: expected 20 bytes", field=field)
        return to_checksum_address(bytes(value))
    if not isinstance(value, str) or not is_address(value):
        raise error_cls(f"Invalid {field}: {value!r}", field=field)
    return to_checksum_address(value)


def is_zero_address(value: AddressLike) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return not any(value)
    return value.lower() == ZERO_ADDRESS


def predict_wallet_address(
    creator: AddressLike,
    salt_nonce: int,
    signers: Sequence[AddressLike],
    threshold: int,
    init_code_hash: Optional[bytes] = None,
) -> str:
    """Derive a deterministic address for a wallet instance.

    Follows the CREATE2 layout ``keccak256(0xff ++ creator ++ salt ++ code_hash)[12:]``
    with ``salt = keccak256(abi.encode(keccak256(abi.encode(signers, threshold)), saltNonce))``,
    so the initial configuration is bound into the salt.

    When ``init_code_hash`` (keccak256 of the deployed creation bytecode)
    is given, the result is the real CREATE2 address of that deployment.
    Without it, a hash of the configuration stands in for the code hash and
    the result is only a stable instance identifier, not an on-chain address.

    Args:
        creator: Account or factory creating the wallet
        salt_nonce: Caller-chosen salt
        signers: Initial signer set
        threshold: Initial threshold
        init_code_hash: Optional 32-byte keccak256 of the creation code

    Returns:
        Predicted wallet address (checksummed)
    """
    creator_address = normalize_address(creator, field="creator")
    signer_addresses = [normalize_address(s, field="signers") for s in signers]

    config_hash = Web3.keccak(
        encode(["address[]", "uint256"], [signer_addresses, threshold])
    )
    salt = Web3.keccak(encode(["bytes32", "uint256"], [config_hash, salt_nonce]))

    if init_code_hash is None:
        code_hash = config_hash
    else:
        code_hash = bytes(init_code_hash)
        if len(code_hash) != 32:
            raise ConfigurationError(
                "init_code_hash must be 32 bytes", field="init_code_hash"
            )

    create2_input = (
        b"\xff"
        + bytes.fromhex(creator_address[2:])
        + salt
        + code_hash
    )
    address_hash = Web3.keccak(create2_input)
    return Web3.to_checksum_address(address_hash[-20:])
