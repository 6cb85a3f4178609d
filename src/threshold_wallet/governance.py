"""Signer-set governance.

The signer set amends itself through the same rule it enforces: an update
needs ``threshold`` signatures from the *current* signers over a digest
whose target is the wallet itself, value 0, and data describing the new
configuration. No party can bypass this path.
"""
from __future__ import annotations

import logging
from typing import Sequence

from .actions import SignerUpdate, SignerUpdateEncoding
from .events import EventLog, SignersUpdated
from .executor import Executor
from .identity import AddressLike
from .signatures import SignatureLike
from .state import WalletState, validate_signer_set

logger = logging.getLogger(__name__)


class GovernanceUpdater:
    """Replaces the signer set and threshold after threshold approval."""

    def __init__(
        self,
        state: WalletState,
        executor: Executor,
        events: EventLog,
        encoding: SignerUpdateEncoding = "content",
    ):
        self._state = state
        self._executor = executor
        self._events = events
        self._encoding = encoding

    @property
    def encoding(self) -> SignerUpdateEncoding:
        return self._encoding

    def proposal(
        self,
        new_signers: Sequence[AddressLike],
        new_threshold: int,
    ) -> SignerUpdate:
        """Validate a proposed configuration without touching state.

        Raises:
            ConfigurationError: empty set, bad threshold, null or duplicate signer
        """
        signers = validate_signer_set(new_signers, new_threshold)
        return SignerUpdate(new_signers=tuple(signers), new_threshold=new_threshold)

    def update_signers(
        self,
        new_signers: Sequence[AddressLike],
        new_threshold: int,
        signatures: Sequence[SignatureLike],
    ) -> SignersUpdated:
        """Verify and commit a signer update.

        The old and new sets may overlap arbitrarily. Either the whole swap
        commits, or nothing changes.
        """
        update = self.proposal(new_signers, new_threshold)
        request = update.to_request(self._state.address, self._encoding)

        consumed = self._executor.authorize(request, signatures)

        old_signers = list(self._state.signers)
        self._state.replace_signers(update.new_signers, update.new_threshold)
        logger.info(
            "Signer set updated at nonce %d: %d -> %d signers, threshold %d",
            consumed, len(old_signers), len(update.new_signers), update.new_threshold,
        )

        event = SignersUpdated(
            signers=update.new_signers,
            threshold=update.new_threshold,
            nonce=consumed,
        )
        self._events.emit(event)
        return event
