"""k-of-n threshold wallet engine exports."""

from .actions import (
    ActionKind,
    ActionRequest,
    SignerUpdate,
    encode_signer_update,
)
from .config import WalletSettings, load_settings
from .digest import (
    DigestBuilder,
    compute_domain_separator,
    to_signed_message_digest,
)
from .events import ActionExecuted, EventLog, SignersUpdated
from .exceptions import (
    BadSignatureFormat,
    BadSignatureValue,
    ConfigurationError,
    DuplicateSigner,
    ExecutionFailed,
    InsufficientSignatures,
    InvalidRequestError,
    RecoveryFailed,
    SignatureError,
    ThresholdWalletError,
    UnauthorizedSigner,
    VerificationError,
)
from .identity import ZERO_ADDRESS, normalize_address, predict_wallet_address
from .ledger import InvocationResult, SimulatedLedger, TargetInvoker, Web3Invoker
from .signatures import recover_signer, split_signature
from .signing import collect_signatures, sign_transaction_hash
from .state import WalletState, validate_signer_set
from .verifier import ThresholdVerifier
from .wallet import ThresholdWallet

__all__ = [
    "ThresholdWallet",
    "WalletState",
    "validate_signer_set",
    "DigestBuilder",
    "compute_domain_separator",
    "to_signed_message_digest",
    "ThresholdVerifier",
    "recover_signer",
    "split_signature",
    "sign_transaction_hash",
    "collect_signatures",
    "ActionKind",
    "ActionRequest",
    "SignerUpdate",
    "encode_signer_update",
    "ActionExecuted",
    "SignersUpdated",
    "EventLog",
    "InvocationResult",
    "SimulatedLedger",
    "TargetInvoker",
    "Web3Invoker",
    "WalletSettings",
    "load_settings",
    "ZERO_ADDRESS",
    "normalize_address",
    "predict_wallet_address",
    "ThresholdWalletError",
    "ConfigurationError",
    "InvalidRequestError",
    "SignatureError",
    "BadSignatureFormat",
    "BadSignatureValue",
    "RecoveryFailed",
    "VerificationError",
    "InsufficientSignatures",
    "UnauthorizedSigner",
    "DuplicateSigner",
    "ExecutionFailed",
]
