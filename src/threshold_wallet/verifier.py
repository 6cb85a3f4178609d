"""k-of-n threshold verification over a recovered signer set."""
from __future__ import annotations

import logging
from typing import Container, Dict, List, Sequence

from .exceptions import (
    DuplicateSigner,
    InsufficientSignatures,
    SignatureError,
    UnauthorizedSigner,
)
from .logging_config import mask_hex
from .signatures import SignatureLike, recover_signer

logger = logging.getLogger(__name__)


class ThresholdVerifier:
    """
    Checks that a signature set authorizes a digest.

    Verification is all-or-nothing: a single malformed, unauthorized or
    duplicate signature fails the whole set, even if the remaining ones
    would meet the threshold. Callers wanting the loosest k of n must
    filter before calling.
    """

    def verify(
        self,
        digest: bytes,
        signatures: Sequence[SignatureLike],
        signer_set: Container[str],
        threshold: int,
    ) -> List[str]:
        """
        Recover and check every signature.

        Args:
            digest: Final digest the signatures must cover
            signatures: Caller-ordered signatures, one per claimed signer
            signer_set: Current members (checksummed addresses)
            threshold: Minimum number of signatures

        Returns:
            Recovered signers in input order

        Raises:
            InsufficientSignatures: fewer signatures than threshold
            SignatureError: a signature is malformed or unrecoverable
            UnauthorizedSigner: a recovered signer is not a member
            DuplicateSigner: a signer appears twice
        """
        if len(signatures) < threshold:
            raise InsufficientSignatures(len(signatures), threshold)

        recovered: List[str] = []
        seen: Dict[str, int] = {}
        for index, signature in enumerate(signatures):
            try:
                signer = recover_signer(digest, signature)
            except SignatureError as e:
                raise e.at_index(index) from e

            if signer not in signer_set:
                logger.info(
                    "Rejected signature %d from non-signer %s over %s",
                    index, signer, mask_hex(digest),
                )
                raise UnauthorizedSigner(signer, index)

            if signer in seen:
                logger.info("Rejected duplicate signature %d from %s", index, signer)
                raise DuplicateSigner(signer, index, seen[signer])

            seen[signer] = index
            recovered.append(signer)

        return recovered
