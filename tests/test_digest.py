"""Tests for digest.py - domain separator and action digests."""
from __future__ import annotations

import pytest
from eth_account.messages import encode_typed_data
from web3 import Web3

from threshold_wallet.digest import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    TRANSACTION_TYPEHASH,
    DigestBuilder,
    compute_domain_separator,
    to_signed_message_digest,
)
from threshold_wallet.exceptions import InvalidRequestError

from conftest import CHAIN_ID, RECIPIENT, WALLET_ADDRESS

OTHER_WALLET = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"


@pytest.fixture
def separator():
    return compute_domain_separator(
        DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, CHAIN_ID, WALLET_ADDRESS
    )


@pytest.fixture
def builder(separator):
    return DigestBuilder(separator)


# ============ compute_domain_separator ============


class TestDomainSeparator:
    def test_is_32_bytes(self, separator):
        assert len(separator) == 32

    def test_deterministic(self, separator):
        again = compute_domain_separator(
            DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, CHAIN_ID, WALLET_ADDRESS
        )
        assert again == separator

    def test_address_case_does_not_matter(self, separator):
        again = compute_domain_separator(
            DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, CHAIN_ID, WALLET_ADDRESS.lower()
        )
        assert again == separator

    def test_different_chain_different_separator(self, separator):
        other = compute_domain_separator(
            DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, 1, WALLET_ADDRESS
        )
        assert other != separator

    def test_different_wallet_different_separator(self, separator):
        other = compute_domain_separator(
            DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, CHAIN_ID, OTHER_WALLET
        )
        assert other != separator

    def test_different_name_or_version(self, separator):
        assert compute_domain_separator(
            "OtherWallet", DEFAULT_DOMAIN_VERSION, CHAIN_ID, WALLET_ADDRESS
        ) != separator
        assert compute_domain_separator(
            DEFAULT_DOMAIN_NAME, "2", CHAIN_ID, WALLET_ADDRESS
        ) != separator


# ============ DigestBuilder ============


class TestTransactionHash:
    def test_matches_eip712_typed_data(self, builder, separator):
        """Layers 1 and 2 are plain EIP-712 over the Transaction type."""
        data = b"\xa9\x05\x9c\xbb" + b"\x00" * 64
        signable = encode_typed_data(
            full_message={
                "types": {
                    "EIP712Domain": [
                        {"name": "name", "type": "string"},
                        {"name": "version", "type": "string"},
                        {"name": "chainId", "type": "uint256"},
                        {"name": "verifyingContract", "type": "address"},
                    ],
                    "Transaction": [
                        {"name": "to", "type": "address"},
                        {"name": "value", "type": "uint256"},
                        {"name": "data", "type": "bytes"},
                        {"name": "nonce", "type": "uint256"},
                    ],
                },
                "primaryType": "Transaction",
                "domain": {
                    "name": DEFAULT_DOMAIN_NAME,
                    "version": DEFAULT_DOMAIN_VERSION,
                    "chainId": CHAIN_ID,
                    "verifyingContract": WALLET_ADDRESS,
                },
                "message": {
                    "to": RECIPIENT,
                    "value": 10**18,
                    "data": data,
                    "nonce": 3,
                },
            }
        )
        assert signable.header == separator
        assert signable.body == builder.struct_hash(RECIPIENT, 10**18, data, 3)

        expected = Web3.keccak(b"\x19\x01" + signable.header + signable.body)
        assert builder.transaction_hash(RECIPIENT, 10**18, data, 3) == expected

    def test_typehash(self):
        assert TRANSACTION_TYPEHASH == Web3.keccak(
            text="Transaction(address to,uint256 value,bytes data,uint256 nonce)"
        )

    def test_deterministic(self, builder):
        a = builder.transaction_hash(RECIPIENT, 1, b"", 0)
        b = builder.transaction_hash(RECIPIENT, 1, b"", 0)
        assert a == b

    @pytest.mark.parametrize(
        "args",
        [
            (OTHER_WALLET, 1, b"", 0),
            (RECIPIENT, 2, b"", 0),
            (RECIPIENT, 1, b"\x01", 0),
            (RECIPIENT, 1, b"", 1),
        ],
    )
    def test_every_field_is_bound(self, builder, args):
        assert builder.transaction_hash(*args) != builder.transaction_hash(RECIPIENT, 1, b"", 0)

    def test_hex_payload_equals_bytes_payload(self, builder):
        assert builder.transaction_hash(RECIPIENT, 0, "0x0102", 0) == builder.transaction_hash(
            RECIPIENT, 0, b"\x01\x02", 0
        )

    def test_empty_hex_payload(self, builder):
        assert builder.transaction_hash(RECIPIENT, 0, "0x", 0) == builder.transaction_hash(
            RECIPIENT, 0, b"", 0
        )

    def test_same_action_other_domain_differs(self, builder):
        other = DigestBuilder(
            compute_domain_separator(
                DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, 1, WALLET_ADDRESS
            )
        )
        assert other.transaction_hash(RECIPIENT, 1, b"", 0) != builder.transaction_hash(
            RECIPIENT, 1, b"", 0
        )


class TestFinalDigest:
    def test_applies_personal_sign_prefix(self, builder):
        tx_hash = builder.transaction_hash(RECIPIENT, 1, b"", 0)
        expected = Web3.keccak(b"\x19Ethereum Signed Message:\n32" + tx_hash)
        assert builder.build_digest(RECIPIENT, 1, b"", 0) == expected
        assert to_signed_message_digest(tx_hash) == expected

    def test_rejects_non_32_byte_hash(self):
        with pytest.raises(InvalidRequestError):
            to_signed_message_digest(b"\x00" * 31)


class TestInputValidation:
    def test_negative_value(self, builder):
        with pytest.raises(InvalidRequestError) as exc:
            builder.transaction_hash(RECIPIENT, -1, b"", 0)
        assert exc.value.details["field"] == "value"

    def test_nonce_out_of_range(self, builder):
        with pytest.raises(InvalidRequestError):
            builder.transaction_hash(RECIPIENT, 0, b"", 2**256)

    def test_bool_is_not_an_amount(self, builder):
        with pytest.raises(InvalidRequestError):
            builder.transaction_hash(RECIPIENT, True, b"", 0)

    def test_bad_target(self, builder):
        with pytest.raises(InvalidRequestError) as exc:
            builder.transaction_hash("0x1234", 0, b"", 0)
        assert exc.value.details["field"] == "to"

    def test_bad_payload_hex(self, builder):
        with pytest.raises(InvalidRequestError):
            builder.transaction_hash(RECIPIENT, 0, "0xzz", 0)

    def test_separator_length_checked(self):
        with pytest.raises(ValueError):
            DigestBuilder(b"\x00" * 31)
