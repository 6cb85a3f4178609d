"""Canonical configuration surface for threshold-wallet."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class WalletSettings(BaseSettings):
    """Engine configuration.

    Values load from ``THRESHOLD_WALLET_*`` environment variables or a
    ``.env`` file. Domain fields feed the domain separator, so changing any
    of them invalidates every signature collected under the old values.
    """

    model_config = SettingsConfigDict(
        env_prefix="THRESHOLD_WALLET_",
        env_file=".env",
        extra="ignore",
    )

    # EIP-712 domain
    domain_name: str = "MultiSigWallet"
    domain_version: str = "1"
    chain_id: int = 31337  # local development network

    # "content" hashes only (signers, threshold); "legacy" also hashes an
    # empty signatures array for compatibility with existing deployments
    signer_update_encoding: Literal["content", "legacy"] = "content"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("chain_id")
    @classmethod
    def validate_chain_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chain_id must be a positive integer")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def load_settings(env_file: str | None = None) -> WalletSettings:
    """Load WalletSettings once per process."""
    env_path = Path(env_file) if env_file else None
    if env_path is None:
        return WalletSettings()
    return WalletSettings(_env_file=env_path)
