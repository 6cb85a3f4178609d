"""
threshold-wallet CLI entry point.

Offline tooling for signers: compute the digest of an action, sign it with
a development key, and check who signed what.

Usage:
    threshold-wallet [OPTIONS] COMMAND [ARGS]...
"""
from __future__ import annotations

import click
from rich.console import Console

from .actions import encode_signer_update
from .config import load_settings
from .digest import DigestBuilder, compute_domain_separator, to_signed_message_digest
from .exceptions import ThresholdWalletError
from .identity import predict_wallet_address
from .logging_config import setup_logging
from .signatures import recover_signer, signature_bytes
from .signing import sign_transaction_hash

console = Console()


def _hash_arg(value: str) -> bytes:
    try:
        raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    except ValueError as e:
        raise click.BadParameter(f"invalid hex: {e}") from e
    if len(raw) != 32:
        raise click.BadParameter("hash must be 32 bytes")
    return raw


@click.group()
@click.version_option(package_name="threshold-wallet", message="%(prog)s %(version)s")
@click.option("--wallet", "wallet_address", envvar="THRESHOLD_WALLET_ADDRESS", help="Wallet address")
@click.option("--chain-id", type=int, default=None, help="Network chain id")
@click.option("--name", default=None, help="EIP-712 domain name")
@click.option("--domain-version", default=None, help="EIP-712 domain version")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, wallet_address, chain_id, name, domain_version, verbose):
    """threshold-wallet - k-of-n signing tools."""
    ctx.ensure_object(dict)
    settings = load_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_json)

    ctx.obj["settings"] = settings
    ctx.obj["wallet"] = wallet_address
    ctx.obj["chain_id"] = chain_id if chain_id is not None else settings.chain_id
    ctx.obj["name"] = name or settings.domain_name
    ctx.obj["version"] = domain_version or settings.domain_version


def _builder(ctx) -> DigestBuilder:
    if not ctx.obj["wallet"]:
        raise click.UsageError("--wallet is required for this command")
    try:
        separator = compute_domain_separator(
            ctx.obj["name"], ctx.obj["version"], ctx.obj["chain_id"], ctx.obj["wallet"]
        )
    except ThresholdWalletError as e:
        raise click.UsageError(e.message) from e
    return DigestBuilder(separator)


@cli.command("tx-hash")
@click.option("--to", "target", required=True, help="Target address")
@click.option("--value", type=int, default=0, help="Value in wei")
@click.option("--data", default="0x", help="Call data as hex")
@click.option("--nonce", type=int, required=True, help="Wallet nonce")
@click.pass_context
def tx_hash(ctx, target, value, data, nonce):
    """Print the transaction hash signers must sign."""
    try:
        digest = _builder(ctx).transaction_hash(target, value, data, nonce)
    except ThresholdWalletError as e:
        raise click.ClickException(e.message) from e
    click.echo("0x" + bytes(digest).hex())


@cli.command("update-hash")
@click.option("--signer", "signers", multiple=True, required=True, help="New signer (repeatable)")
@click.option("--threshold", type=int, required=True, help="New threshold")
@click.option("--nonce", type=int, required=True, help="Wallet nonce")
@click.option("--legacy", is_flag=True, help="Hash the legacy payload with empty signatures")
@click.pass_context
def update_hash(ctx, signers, threshold, nonce, legacy):
    """Print the hash signers must sign for a signer update."""
    builder = _builder(ctx)
    encoding = "legacy" if legacy else ctx.obj["settings"].signer_update_encoding
    try:
        payload = encode_signer_update(list(signers), threshold, encoding)
        digest = builder.transaction_hash(ctx.obj["wallet"], 0, payload, nonce)
    except ThresholdWalletError as e:
        raise click.ClickException(e.message) from e
    click.echo("0x" + bytes(digest).hex())


@cli.command()
@click.option("--key", required=True, envvar="THRESHOLD_WALLET_SIGNER_KEY", help="Private key (dev only)")
@click.option("--hash", "tx_hash_hex", required=True, help="Transaction hash to sign")
def sign(key, tx_hash_hex):
    """Personal-sign a transaction hash."""
    try:
        signature = sign_transaction_hash(key, _hash_arg(tx_hash_hex))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--key") from e
    click.echo("0x" + signature.hex())


@cli.command()
@click.option("--hash", "tx_hash_hex", required=True, help="Transaction hash that was signed")
@click.option("--signature", required=True, help="65-byte signature as hex")
@click.pass_context
def recover(ctx, tx_hash_hex, signature):
    """Recover the signer of a transaction hash."""
    digest = to_signed_message_digest(_hash_arg(tx_hash_hex))
    try:
        signer = recover_signer(digest, signature_bytes(signature))
    except ThresholdWalletError as e:
        console.print(f"[red]{e.error_code}[/red]: {e.message}")
        ctx.exit(1)
    click.echo(signer)


@cli.command("predict-address")
@click.option("--creator", required=True, help="Creating account")
@click.option("--salt", type=int, default=0, help="Salt nonce")
@click.option("--signer", "signers", multiple=True, required=True, help="Initial signer (repeatable)")
@click.option("--threshold", type=int, required=True, help="Initial threshold")
@click.option("--init-code-hash", default=None, help="keccak256 of the creation code, for a real CREATE2 address")
def predict_address(creator, salt, signers, threshold, init_code_hash):
    """Predict a wallet address from its creator and initial configuration."""
    code_hash = _hash_arg(init_code_hash) if init_code_hash else None
    try:
        address = predict_wallet_address(creator, salt, list(signers), threshold, code_hash)
    except ThresholdWalletError as e:
        raise click.ClickException(e.message) from e
    click.echo(address)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
