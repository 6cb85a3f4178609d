"""
Pytest configuration for threshold-wallet tests.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from eth_account import Account

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(package_src))

# Keep a developer's .env or shell from leaking into settings
for _key in list(os.environ):
    if _key.startswith("THRESHOLD_WALLET_"):
        del os.environ[_key]

from threshold_wallet import (  # noqa: E402
    SimulatedLedger,
    ThresholdWallet,
    WalletSettings,
    collect_signatures,
)

# Well-known local development keys (never hold value)
DEV_KEYS = [
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    "0x7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6",
    "0x47e179ec197488593b187f80a00eb0da91f1b9d0b13f8733639f19c30a34926a",
    "0x8b3a350cf5c34c9194ca85829a2df0ec3153be0318b5e2d3348e872092edffba",
    "0x92db14e403b83dfe3df233f83dfa3a0d7096f21ca9b0d6d6b8d88b2b4ec1564e",
]

WALLET_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RECIPIENT = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
CHAIN_ID = 31337
ONE_ETH = 10**18


class Party:
    """A signer key and its address."""

    def __init__(self, key: str):
        self.key = key
        self.address = Account.from_key(key).address

    def __repr__(self) -> str:
        return f"Party({self.address})"


@pytest.fixture(scope="session")
def parties():
    """owner, account1, account2, account3, account4, non_signer, spare."""
    return [Party(k) for k in DEV_KEYS]


@pytest.fixture
def owner(parties):
    return parties[0]


@pytest.fixture
def account1(parties):
    return parties[1]


@pytest.fixture
def account2(parties):
    return parties[2]


@pytest.fixture
def account3(parties):
    return parties[3]


@pytest.fixture
def account4(parties):
    return parties[4]


@pytest.fixture
def non_signer(parties):
    return parties[5]


@pytest.fixture
def settings():
    return WalletSettings(_env_file=None)


@pytest.fixture
def ledger():
    return SimulatedLedger()


@pytest.fixture
def wallet(owner, account1, account2, ledger, settings):
    """3 signers, threshold 2, funded with 10 ETH."""
    w = ThresholdWallet(
        signers=[owner.address, account1.address, account2.address],
        threshold=2,
        address=WALLET_ADDRESS,
        invoker=ledger,
        chain_id=CHAIN_ID,
        settings=settings,
    )
    w.receive(owner.address, 10 * ONE_ETH)
    return w


def sign_with(tx_hash, *parties):
    """Personal-sign ``tx_hash`` with each party, in order."""
    return collect_signatures([p.key for p in parties], tx_hash)
