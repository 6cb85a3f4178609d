"""Signer-side helpers.

Signers sign the transaction hash returned by
``ThresholdWallet.get_transaction_hash`` with a plain personal-sign
(EIP-191 version 0x45) flow, exactly what an unmodified wallet does for
``signMessage(bytes)``. Key custody is the caller's concern; these helpers
exist for tooling and tests.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Union

from eth_account import Account
from eth_account.messages import encode_defunct

from .logging_config import mask_hex

logger = logging.getLogger(__name__)

PrivateKey = Union[str, bytes]


def sign_transaction_hash(private_key: PrivateKey, tx_hash: bytes) -> bytes:
    """Personal-sign a 32-byte transaction hash.

    Returns:
        65-byte signature r || s || v with v in {27, 28}
    """
    message = encode_defunct(primitive=bytes(tx_hash))
    signed = Account.sign_message(message, private_key=private_key)
    logger.debug("Signed %s", mask_hex(bytes(tx_hash)))
    return bytes(signed.signature)


def collect_signatures(private_keys: Iterable[PrivateKey], tx_hash: bytes) -> List[bytes]:
    """Sign ``tx_hash`` with every key, preserving key order."""
    return [sign_transaction_hash(key, tx_hash) for key in private_keys]
