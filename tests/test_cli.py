"""Tests for the threshold-wallet CLI."""
from __future__ import annotations

import pytest
from click.testing import CliRunner

from threshold_wallet import cli as cli_module
from threshold_wallet.actions import encode_signer_update
from threshold_wallet.cli import cli
from threshold_wallet.signing import sign_transaction_hash

from conftest import CHAIN_ID, RECIPIENT, WALLET_ADDRESS


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli_module, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(
        cli, ["--wallet", WALLET_ADDRESS, "--chain-id", str(CHAIN_ID), *args], obj={}
    )


class TestTxHash:
    def test_matches_wallet(self, runner, wallet):
        result = invoke(
            runner, "tx-hash", "--to", RECIPIENT, "--value", "5", "--data", "0x01", "--nonce", "0"
        )
        assert result.exit_code == 0, result.output
        expected = wallet.get_transaction_hash(RECIPIENT, 5, b"\x01", 0)
        assert result.output.strip() == "0x" + bytes(expected).hex()

    def test_requires_wallet(self, runner):
        result = runner.invoke(cli, ["tx-hash", "--to", RECIPIENT, "--nonce", "0"], obj={})
        assert result.exit_code != 0
        assert "--wallet" in result.output

    def test_bad_target(self, runner):
        result = invoke(runner, "tx-hash", "--to", "0x1234", "--nonce", "0")
        assert result.exit_code == 1
        assert "Invalid to" in result.output


class TestUpdateHash:
    def test_matches_wallet(self, runner, wallet, account3, account4):
        result = invoke(
            runner,
            "update-hash",
            "--signer", account3.address,
            "--signer", account4.address,
            "--threshold", "2",
            "--nonce", "0",
        )
        assert result.exit_code == 0, result.output
        expected = wallet.signer_update_hash([account3.address, account4.address], 2)
        assert result.output.strip() == "0x" + bytes(expected).hex()

    def test_legacy_flag(self, runner, wallet, account3):
        result = invoke(
            runner, "update-hash", "--signer", account3.address, "--threshold", "1",
            "--nonce", "0", "--legacy",
        )
        assert result.exit_code == 0, result.output
        expected = wallet.get_transaction_hash(
            WALLET_ADDRESS, 0, encode_signer_update([account3.address], 1, "legacy"), 0
        )
        assert result.output.strip() == "0x" + bytes(expected).hex()


class TestSignAndRecover:
    TX_HASH = "0x" + "ab" * 32

    def test_sign(self, runner, owner):
        result = runner.invoke(cli, ["sign", "--key", owner.key, "--hash", self.TX_HASH], obj={})
        assert result.exit_code == 0, result.output
        expected = sign_transaction_hash(owner.key, bytes.fromhex("ab" * 32))
        assert result.output.strip() == "0x" + expected.hex()

    def test_sign_then_recover(self, runner, owner):
        signed = runner.invoke(cli, ["sign", "--key", owner.key, "--hash", self.TX_HASH], obj={})
        signature = signed.output.strip()

        result = runner.invoke(
            cli, ["recover", "--hash", self.TX_HASH, "--signature", signature], obj={}
        )
        assert result.exit_code == 0, result.output
        assert result.output.strip() == owner.address

    def test_sign_rejects_short_hash(self, runner, owner):
        result = runner.invoke(cli, ["sign", "--key", owner.key, "--hash", "0xabcd"], obj={})
        assert result.exit_code == 2

    def test_recover_bad_signature(self, runner):
        result = runner.invoke(
            cli, ["recover", "--hash", self.TX_HASH, "--signature", "0x" + "00" * 65], obj={}
        )
        assert result.exit_code == 1


class TestPredictAddress:
    def test_deterministic(self, runner, owner, account1):
        args = [
            "predict-address", "--creator", owner.address, "--salt", "1",
            "--signer", owner.address, "--signer", account1.address, "--threshold", "2",
        ]
        first = runner.invoke(cli, args, obj={})
        second = runner.invoke(cli, args, obj={})
        assert first.exit_code == 0, first.output
        assert first.output == second.output
        assert first.output.strip().startswith("0x")
