"""Mutable wallet record: signer set, threshold, nonce and domain binding."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Sequence

from .exceptions import ConfigurationError
from .identity import AddressLike, is_zero_address, normalize_address


def validate_signer_set(signers: Sequence[AddressLike], threshold: int) -> List[str]:
    """Check a proposed signer set and threshold.

    Returns:
        Signers as checksummed addresses, order preserved

    Raises:
        ConfigurationError: empty set, threshold outside 1..n,
            null identity, or duplicate identity
    """
    if not signers:
        raise ConfigurationError("Signers array empty", field="signers")
    if (
        isinstance(threshold, bool)
        or not isinstance(threshold, int)
        or threshold < 1
        or threshold > len(signers)
    ):
        raise ConfigurationError(
            "Invalid threshold",
            field="threshold",
            details={"threshold": threshold, "signer_count": len(signers)},
        )

    normalized: List[str] = []
    seen = set()
    for signer in signers:
        address = normalize_address(signer, field="signers")
        if is_zero_address(address):
            raise ConfigurationError("Invalid signer", field="signers")
        if address in seen:
            raise ConfigurationError(
                "Duplicate signer", field="signers", details={"signer": address}
            )
        seen.add(address)
        normalized.append(address)
    return normalized


@dataclass
class WalletState:
    """The only durable record of a wallet.

    Mutated exclusively through advance_nonce() and replace_signers(); the
    membership set is derived from ``signers`` and never edited on its own.
    """
    address: str
    domain_separator: bytes
    signers: List[str]
    threshold: int
    nonce: int = 0
    _members: FrozenSet[str] = field(default=frozenset(), init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.domain_separator, (bytes, bytearray)) or len(self.domain_separator) != 32:
            raise ConfigurationError("Domain separator must be 32 bytes", field="domain_separator")
        self.signers = validate_signer_set(self.signers, self.threshold)
        self._members = frozenset(self.signers)
        if self.nonce < 0:
            raise ConfigurationError("Invalid nonce", field="nonce")

    @property
    def signer_count(self) -> int:
        return len(self.signers)

    @property
    def members(self) -> FrozenSet[str]:
        return self._members

    def is_signer(self, address: AddressLike) -> bool:
        try:
            return normalize_address(address) in self._members
        except ConfigurationError:
            return False

    def advance_nonce(self) -> int:
        """Consume the current nonce and return it."""
        consumed = self.nonce
        self.nonce = consumed + 1
        return consumed

    def replace_signers(self, new_signers: Sequence[AddressLike], new_threshold: int) -> None:
        """Swap in a new signer set and threshold in one step.

        Validation happens before anything is assigned, so a rejected
        update leaves the old configuration intact.
        """
        signers = validate_signer_set(new_signers, new_threshold)
        self.signers = signers
        self._members = frozenset(signers)
        self.threshold = new_threshold

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "domain_separator": "0x" + self.domain_separator.hex(),
            "signers": list(self.signers),
            "threshold": self.threshold,
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalletState":
        separator = data["domain_separator"]
        if isinstance(separator, str):
            try:
                separator = bytes.fromhex(separator[2:] if separator.startswith("0x") else separator)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid domain separator hex: {e}", field="domain_separator"
                ) from e
        return cls(
            address=normalize_address(data["address"]),
            domain_separator=separator,
            signers=list(data["signers"]),
            threshold=int(data["threshold"]),
            nonce=int(data.get("nonce", 0)),
        )
