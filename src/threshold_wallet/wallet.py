"""
k-of-n threshold wallet engine.

A fixed group of signers jointly controls one account. Any state-changing
action needs ``threshold`` distinct signatures from current signers over a
digest bound to this wallet, this network and the current nonce. The
signer set can only be changed by that same rule.

Usage:
    wallet = ThresholdWallet(
        signers=[alice, bob, carol],
        threshold=2,
        address=wallet_address,
        chain_id=1,
        invoker=ledger,
    )

    tx_hash = wallet.get_transaction_hash(to, value, b"", wallet.nonce)
    signatures = [sign_transaction_hash(key, tx_hash) for key in (alice_key, bob_key)]
    wallet.execute_transaction(to, value, b"", signatures)
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

from hexbytes import HexBytes

from .actions import encode_signer_update
from .config import WalletSettings, load_settings
from .exceptions import ConfigurationError
from .digest import DigestBuilder, Payload, compute_domain_separator
from .events import ActionExecuted, EventLog, SignersUpdated
from .executor import Executor
from .governance import GovernanceUpdater
from .identity import AddressLike, normalize_address
from .ledger import TargetInvoker
from .logging_config import wallet_context
from .signatures import SignatureLike
from .state import WalletState
from .verifier import ThresholdVerifier

logger = logging.getLogger(__name__)


class ThresholdWallet:
    """
    Public entry points of the engine.

    State-changing calls run under one re-entrant lock, so verification and
    the nonce/membership mutation form a single step relative to any other
    call. A target invocation that re-enters the wallet on the same thread
    sees the nonce already advanced.
    """

    def __init__(
        self,
        signers: Sequence[AddressLike],
        threshold: int,
        address: AddressLike,
        invoker: TargetInvoker,
        chain_id: Optional[int] = None,
        *,
        settings: Optional[WalletSettings] = None,
        name: Optional[str] = None,
        version: Optional[str] = None,
        events: Optional[EventLog] = None,
    ):
        self._settings = settings or load_settings()
        wallet_address = normalize_address(address, field="address")
        self._chain_id = chain_id if chain_id is not None else self._settings.chain_id
        if isinstance(self._chain_id, bool) or not isinstance(self._chain_id, int) or self._chain_id <= 0:
            raise ConfigurationError("Invalid chain id", field="chain_id")

        domain_separator = compute_domain_separator(
            name or self._settings.domain_name,
            version or self._settings.domain_version,
            self._chain_id,
            wallet_address,
        )
        self._state = WalletState(
            address=wallet_address,
            domain_separator=domain_separator,
            signers=list(signers),
            threshold=threshold,
        )
        self._init_components(invoker, events)
        logger.info(
            "Wallet %s created: %d signers, threshold %d, chain %d",
            wallet_address, self._state.signer_count, threshold, self._chain_id,
        )

    @classmethod
    def from_state(
        cls,
        state: WalletState,
        invoker: TargetInvoker,
        *,
        settings: Optional[WalletSettings] = None,
        events: Optional[EventLog] = None,
    ) -> "ThresholdWallet":
        """Rebuild an engine around a persisted WalletState.

        The stored domain separator is used as is; it is never recomputed.
        """
        wallet = cls.__new__(cls)
        wallet._settings = settings or load_settings()
        wallet._chain_id = None
        wallet._state = state
        wallet._init_components(invoker, events)
        return wallet

    def _init_components(
        self,
        invoker: TargetInvoker,
        events: Optional[EventLog],
    ) -> None:
        self._lock = threading.RLock()
        self._invoker = invoker
        self._events = events if events is not None else EventLog()
        self._digests = DigestBuilder(self._state.domain_separator)
        self._executor = Executor(
            self._state, self._digests, ThresholdVerifier(), invoker, self._events
        )
        self._governance = GovernanceUpdater(
            self._state,
            self._executor,
            self._events,
            encoding=self._settings.signer_update_encoding,
        )

    # ==================== Read-only views ====================

    @property
    def address(self) -> str:
        return self._state.address

    @property
    def chain_id(self) -> Optional[int]:
        return self._chain_id

    @property
    def domain_separator(self) -> HexBytes:
        return HexBytes(self._state.domain_separator)

    @property
    def nonce(self) -> int:
        return self._state.nonce

    @property
    def threshold(self) -> int:
        return self._state.threshold

    @property
    def signer_count(self) -> int:
        return self._state.signer_count

    @property
    def events(self) -> EventLog:
        return self._events

    def get_signers(self) -> List[str]:
        """Snapshot of the signer set in canonical order."""
        return list(self._state.signers)

    def is_signer(self, address: AddressLike) -> bool:
        return self._state.is_signer(address)

    def snapshot(self) -> Dict[str, Any]:
        return self._state.to_dict()

    # ==================== Digests ====================

    def get_transaction_hash(
        self,
        target: AddressLike,
        value: int,
        payload: Payload,
        nonce: int,
    ) -> HexBytes:
        """The digest signers sign (with personal-sign) for this action."""
        return self._digests.transaction_hash(target, value, payload, nonce)

    def signer_update_hash(
        self,
        new_signers: Sequence[AddressLike],
        new_threshold: int,
        nonce: Optional[int] = None,
    ) -> HexBytes:
        """Digest to sign for a signer update, at ``nonce`` or the current nonce."""
        payload = encode_signer_update(
            new_signers, new_threshold, self._governance.encoding
        )
        return self._digests.transaction_hash(
            self._state.address,
            0,
            payload,
            self._state.nonce if nonce is None else nonce,
        )

    # ==================== Actions ====================

    def execute_transaction(
        self,
        target: AddressLike,
        value: int,
        payload: Payload,
        signatures: Sequence[SignatureLike],
    ) -> ActionExecuted:
        """Execute a call from the wallet once enough signers approve."""
        with self._lock, wallet_context(self._state.address):
            return self._executor.execute(target, value, payload, signatures)

    def update_signers(
        self,
        new_signers: Sequence[AddressLike],
        new_threshold: int,
        signatures: Sequence[SignatureLike],
    ) -> SignersUpdated:
        """Replace the signer set once enough *current* signers approve."""
        with self._lock, wallet_context(self._state.address):
            return self._governance.update_signers(new_signers, new_threshold, signatures)

    def receive(self, sender: AddressLike, value: int) -> None:
        """Accept an incoming transfer unconditionally.

        The ledger owns balances; when it exposes ``credit`` the value is
        credited there, otherwise this is a no-op.
        """
        credit = getattr(self._invoker, "credit", None)
        if credit is not None:
            credit(self._state.address, value)
        logger.debug("Received %d from %s", value, sender)
