"""
Location: python/novi_sdk/__init__.py

Summary:
    Main package initialization for novi-sdk. Exports all public classes
    and functions for convenient importing.

Usage:
    from novi_sdk import NoviClient, PaymentIntent, encode, decode

    # Or import specific modules
    from novi_sdk.ledgers import SolanaRpcLedger
    from novi_sdk.signers import MemorySigner

Version: 0.1.0 (USDC on Solana)
"""

from .client import NoviClient
from .types import (
    PaymentIntent,
    AssetConfig,
    LinkConfig,
    SettlementConfig,
    NoviConfig,
    SettlementOperation,
    SettlementResult,
    FinalityOutcome,
    RequestPlan,
    PreviewText,
)
from .codec import encode, decode, to_solana_pay_url
from .split import allocate, to_cents, to_base_units
from .request import plan_request
from .preview import describe_preview
from .builder import SettlementBuilder
from .executor import SettlementExecutor
from .ledger import Ledger, Signer, BaseLedger
from .attempts import AttemptRegistry, MemoryAttemptRegistry, attempt_key
from .errors import (
    NoviError,
    DecodeError,
    DecodeErrorKind,
    BuildError,
    BuildErrorKind,
    ExecutionError,
    ExecutionErrorKind,
    LedgerRpcError,
    SigningRejectedError,
    SettlementInProgressError,
    InvalidTransitionError,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "NoviClient",
    # Types
    "PaymentIntent",
    "AssetConfig",
    "LinkConfig",
    "SettlementConfig",
    "NoviConfig",
    "SettlementOperation",
    "SettlementResult",
    "FinalityOutcome",
    "RequestPlan",
    "PreviewText",
    # Links and splits
    "encode",
    "decode",
    "to_solana_pay_url",
    "allocate",
    "to_cents",
    "to_base_units",
    "plan_request",
    "describe_preview",
    # Settlement
    "SettlementBuilder",
    "SettlementExecutor",
    # Ledger and signer protocols
    "Ledger",
    "Signer",
    "BaseLedger",
    # Single-flight
    "AttemptRegistry",
    "MemoryAttemptRegistry",
    "attempt_key",
    # Exceptions
    "NoviError",
    "DecodeError",
    "DecodeErrorKind",
    "BuildError",
    "BuildErrorKind",
    "ExecutionError",
    "ExecutionErrorKind",
    "LedgerRpcError",
    "SigningRejectedError",
    "SettlementInProgressError",
    "InvalidTransitionError",
]
