"""Exception hierarchy for threshold-wallet.

All errors inherit from ThresholdWalletError, enabling:
- Consistent handling by callers embedding the engine
- Machine-readable error codes for API layers
- Structured error responses via to_dict()

Usage:
    from threshold_wallet.exceptions import (
        ThresholdWalletError,
        UnauthorizedSigner,
        ExecutionFailed,
    )

    try:
        wallet.execute_transaction(to, value, data, signatures)
    except UnauthorizedSigner as e:
        print(e.details["signer"])

Nothing in this package retries internally. Every error except
ExecutionFailed is raised before WalletState is touched.
"""
from __future__ import annotations

from typing import Any, Optional


class ThresholdWalletError(Exception):
    """Base exception for all threshold-wallet errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "DUPLICATE_SIGNER")
        details: Optional additional context
    """

    error_code: str = "THRESHOLD_WALLET_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Parameter Errors
# =============================================================================

class ConfigurationError(ThresholdWalletError):
    """Bad constructor or signer-update parameters."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class InvalidRequestError(ThresholdWalletError):
    """An action request field cannot be encoded (bad address, negative value...)."""

    error_code = "INVALID_REQUEST"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


# =============================================================================
# Signature Errors
# =============================================================================

class SignatureError(ThresholdWalletError):
    """A single signature is malformed, non-canonical or unrecoverable."""

    error_code = "SIGNATURE_ERROR"

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if index is not None:
            details["index"] = index
        self.index = index
        super().__init__(message, details=details)

    def at_index(self, index: int) -> "SignatureError":
        """Return a copy of this error tagged with the signature position."""
        details = {k: v for k, v in self.details.items() if k != "index"}
        return type(self)(self.message, index=index, details=details)


class BadSignatureFormat(SignatureError):
    """Signature is not exactly 65 bytes (r || s || v)."""

    error_code = "BAD_SIGNATURE_FORMAT"


class BadSignatureValue(SignatureError):
    """Recovery id is not 27/28, or s is in the upper half of the curve order."""

    error_code = "BAD_SIGNATURE_VALUE"


class RecoveryFailed(SignatureError):
    """No identity, or the null identity, could be recovered."""

    error_code = "RECOVERY_FAILED"


# =============================================================================
# Threshold Verification Errors
# =============================================================================

class VerificationError(ThresholdWalletError):
    """Signature set does not authorize the action."""

    error_code = "VERIFICATION_ERROR"


class InsufficientSignatures(VerificationError):
    """Fewer signatures were supplied than the threshold requires."""

    error_code = "INSUFFICIENT_SIGNATURES"

    def __init__(self, provided: int, threshold: int) -> None:
        self.provided = provided
        self.threshold = threshold
        super().__init__(
            "Not enough signatures",
            details={"provided": provided, "threshold": threshold},
        )


class UnauthorizedSigner(VerificationError):
    """A recovered identity is not a current member of the signer set."""

    error_code = "UNAUTHORIZED_SIGNER"

    def __init__(self, signer: str, index: int) -> None:
        self.signer = signer
        self.index = index
        super().__init__(
            "Invalid signer",
            details={"signer": signer, "index": index},
        )


class DuplicateSigner(VerificationError):
    """The same identity signed more than once within one signature set."""

    error_code = "DUPLICATE_SIGNER"

    def __init__(self, signer: str, index: int, first_index: int) -> None:
        self.signer = signer
        self.index = index
        self.first_index = first_index
        super().__init__(
            "Duplicate signer",
            details={"signer": signer, "index": index, "first_index": first_index},
        )


# =============================================================================
# Execution Errors
# =============================================================================

class ExecutionFailed(ThresholdWalletError):
    """Target invocation reported failure.

    The nonce was already consumed when this is raised; the signatures that
    authorized the call can never be replayed.
    """

    error_code = "EXECUTION_FAILED"

    def __init__(
        self,
        target: str,
        consumed_nonce: int,
        reason: Optional[str] = None,
    ) -> None:
        self.target = target
        self.consumed_nonce = consumed_nonce
        self.reason = reason
        message = "Transaction execution failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            details={
                "target": target,
                "consumed_nonce": consumed_nonce,
                "reason": reason,
            },
        )
