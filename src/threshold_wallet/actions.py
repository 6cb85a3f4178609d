"""Action variants routed through the shared digest and verify pipeline.

A transaction and a signer update differ only in what happens after
verification. Both are reduced to an ActionRequest (target, value, data)
before hashing, so one verification path authorizes both.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Sequence, Tuple

from eth_abi import encode
from web3 import Web3

from .identity import AddressLike, normalize_address

SignerUpdateEncoding = Literal["content", "legacy"]

UPDATE_SIGNERS_SELECTOR = Web3.keccak(text="updateSigners(address[],uint256)")[:4]
LEGACY_UPDATE_SIGNERS_SELECTOR = Web3.keccak(
    text="updateSigners(address[],uint256,bytes[])"
)[:4]


class ActionKind(str, Enum):
    """Which effect an authorized request has."""
    TRANSACTION = "transaction"
    SIGNER_UPDATE = "signer_update"


@dataclass(frozen=True)
class ActionRequest:
    """One action as it is hashed; never stored past the call."""
    target: str
    value: int
    payload: bytes
    kind: ActionKind = ActionKind.TRANSACTION


def encode_signer_update(
    new_signers: Sequence[AddressLike],
    new_threshold: int,
    encoding: SignerUpdateEncoding = "content",
) -> bytes:
    """Build the payload hashed for a signer update.

    "content" encodes ``updateSigners(address[],uint256)`` over the new
    configuration only. "legacy" encodes
    ``updateSigners(address[],uint256,bytes[])`` with an empty signatures
    array, matching deployments that hashed that placeholder.
    """
    signers = [normalize_address(s, field="signers") for s in new_signers]
    if encoding == "content":
        return UPDATE_SIGNERS_SELECTOR + encode(
            ["address[]", "uint256"], [signers, new_threshold]
        )
    if encoding == "legacy":
        return LEGACY_UPDATE_SIGNERS_SELECTOR + encode(
            ["address[]", "uint256", "bytes[]"], [signers, new_threshold, []]
        )
    raise ValueError(f"Unknown signer update encoding: {encoding}")


@dataclass(frozen=True)
class SignerUpdate:
    """Proposed replacement of the signer set and threshold."""
    new_signers: Tuple[str, ...]
    new_threshold: int

    def to_request(
        self,
        wallet_address: str,
        encoding: SignerUpdateEncoding = "content",
    ) -> ActionRequest:
        return ActionRequest(
            target=wallet_address,
            value=0,
            payload=encode_signer_update(self.new_signers, self.new_threshold, encoding),
            kind=ActionKind.SIGNER_UPDATE,
        )
