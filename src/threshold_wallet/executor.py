"""Authorization pipeline and transaction execution."""
from __future__ import annotations

import logging
from typing import Sequence

from .actions import (
    LEGACY_UPDATE_SIGNERS_SELECTOR,
    UPDATE_SIGNERS_SELECTOR,
    ActionKind,
    ActionRequest,
)
from .digest import DigestBuilder, Payload, payload_bytes
from .events import ActionExecuted, EventLog
from .exceptions import ExecutionFailed, InvalidRequestError
from .identity import AddressLike, normalize_address
from .ledger import TargetInvoker
from .logging_config import mask_hex
from .signatures import SignatureLike
from .state import WalletState
from .verifier import ThresholdVerifier

logger = logging.getLogger(__name__)

_GOVERNANCE_SELECTORS = (UPDATE_SIGNERS_SELECTOR, LEGACY_UPDATE_SIGNERS_SELECTOR)


class Executor:
    """
    Runs authorized actions against a WalletState.

    Every action takes the same path:
    1. Digest over (target, value, data) at the *stored* nonce
    2. Threshold verification against the current signer set
    3. Nonce advances by exactly one
    4. The action's effect

    A caller cannot pick the nonce, so signatures over a stale or guessed
    nonce fail verification. The nonce moves before the effect, so a target
    that re-enters the wallet cannot replay the same digest.

    Callers must serialize calls; ThresholdWallet does this with a lock.
    """

    def __init__(
        self,
        state: WalletState,
        digest_builder: DigestBuilder,
        verifier: ThresholdVerifier,
        invoker: TargetInvoker,
        events: EventLog,
    ):
        self._state = state
        self._digests = digest_builder
        self._verifier = verifier
        self._invoker = invoker
        self._events = events

    def authorize(
        self,
        request: ActionRequest,
        signatures: Sequence[SignatureLike],
    ) -> int:
        """Verify ``signatures`` over ``request`` and consume the nonce.

        Returns:
            The nonce consumed by this action

        Raises:
            VerificationError / SignatureError: nothing is mutated
        """
        state = self._state
        digest = self._digests.build_digest(
            request.target, request.value, request.payload, state.nonce
        )
        signers = self._verifier.verify(
            digest, signatures, state.members, state.threshold
        )
        consumed = state.advance_nonce()
        logger.info(
            "Authorized %s at nonce %d by %s (digest %s)",
            request.kind.value, consumed, ", ".join(signers), mask_hex(digest),
        )
        return consumed

    def execute(
        self,
        target: AddressLike,
        value: int,
        payload: Payload,
        signatures: Sequence[SignatureLike],
    ) -> ActionExecuted:
        """Authorize and perform a call from the wallet.

        Raises:
            ExecutionFailed: the invocation failed; its nonce stays consumed
        """
        to = normalize_address(target, field="to", error_cls=InvalidRequestError)
        data = payload_bytes(payload)
        if to == self._state.address and data[:4] in _GOVERNANCE_SELECTORS:
            raise InvalidRequestError(
                "Signer updates must go through update_signers", field="data"
            )
        request = ActionRequest(target=to, value=value, payload=data, kind=ActionKind.TRANSACTION)

        consumed = self.authorize(request, signatures)

        try:
            result = self._invoker.invoke(self._state.address, to, value, data)
        except Exception as e:
            logger.warning(
                "Invoker raised for %s at nonce %d: %s", to, consumed, e
            )
            raise ExecutionFailed(to, consumed, str(e) or type(e).__name__) from e

        if not result.success:
            # Nonce burned on purpose: a target that fails then succeeds
            # must not get a second run from the same signatures.
            logger.warning(
                "Invocation of %s failed at nonce %d: %s", to, consumed, result.error
            )
            raise ExecutionFailed(to, consumed, result.error)

        event = ActionExecuted(target=to, value=value, payload=data, nonce=consumed)
        self._events.emit(event)
        return event
