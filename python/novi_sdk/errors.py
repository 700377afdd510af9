"""
Location: python/novi_sdk/errors.py

Summary:
    Exception hierarchy and error taxonomy for novi-sdk. Each error family
    maps to one stage of the payment flow:

    - DecodeError: a malformed link, raised before any network call
    - BuildError: pre-submission validation, nothing was sent yet
    - ExecutionError: classification of a failed settlement attempt

    Every kind has exactly one stable message template in MESSAGES. Raw
    ledger text is only surfaced through the Unknown fallback.

Usage:
    from novi_sdk.errors import DecodeError, DecodeErrorKind

    try:
        intent = decode(link)
    except DecodeError as e:
        if e.kind is DecodeErrorKind.MISSING_RECIPIENT:
            ...
        print(e.user_message)
"""

import asyncio
import re
from enum import Enum
from typing import Any, Optional, Union

import httpx


class DecodeErrorKind(str, Enum):
    """Reasons a payment link cannot be turned into an intent."""
    MISSING_RECIPIENT = "MissingRecipient"
    INVALID_RECIPIENT = "InvalidRecipient"
    MISSING_AMOUNT = "MissingAmount"
    INVALID_AMOUNT = "InvalidAmount"
    MISSING_LABEL = "MissingLabel"
    INVALID_SPLIT = "InvalidSplit"


class BuildErrorKind(str, Enum):
    """Reasons settlement operations cannot be built."""
    INVALID_PAYER = "InvalidPayer"
    PAYER_ACCOUNT_MISSING = "PayerAccountMissing"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    AMOUNT_BELOW_MINIMUM = "AmountBelowMinimum"
    ATOMICITY_UNSUPPORTED = "AtomicityUnsupported"


class ExecutionErrorKind(str, Enum):
    """Classified outcome of a failed settlement attempt."""
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    USER_REJECTED = "UserRejected"
    NETWORK_TIMEOUT = "NetworkTimeout"
    UNKNOWN = "Unknown"


MESSAGES: dict[Enum, str] = {
    DecodeErrorKind.MISSING_RECIPIENT: "Missing required parameter: recipient wallet address",
    DecodeErrorKind.INVALID_RECIPIENT: "Invalid recipient wallet address",
    DecodeErrorKind.MISSING_AMOUNT: "Missing required parameter: amount",
    DecodeErrorKind.INVALID_AMOUNT: "Invalid amount: {value}",
    DecodeErrorKind.MISSING_LABEL: "Missing required parameter: label",
    DecodeErrorKind.INVALID_SPLIT: "Invalid split parameters: {reason}",
    BuildErrorKind.INVALID_PAYER: "Invalid payer wallet address",
    BuildErrorKind.PAYER_ACCOUNT_MISSING: "Your wallet has no {symbol} account",
    BuildErrorKind.INSUFFICIENT_BALANCE: (
        "Insufficient balance: {required} base units required, {available} available"
    ),
    BuildErrorKind.AMOUNT_BELOW_MINIMUM: "Amount is smaller than one base unit of {symbol}",
    BuildErrorKind.ATOMICITY_UNSUPPORTED: (
        "The ledger cannot create the recipient account and transfer in one transaction"
    ),
    ExecutionErrorKind.ACCOUNT_NOT_FOUND: "A required token account does not exist on the ledger",
    ExecutionErrorKind.INSUFFICIENT_FUNDS: "Insufficient funds to complete this payment",
    ExecutionErrorKind.USER_REJECTED: "The transaction was rejected in the wallet",
    ExecutionErrorKind.NETWORK_TIMEOUT: (
        "The network did not confirm the transaction in time. "
        "Check the ledger before retrying"
    ),
    ExecutionErrorKind.UNKNOWN: "Payment failed: {detail}",
}


class NoviError(Exception):
    """Base class for all novi-sdk errors."""

    @property
    def user_message(self) -> str:
        """User-facing message for this error."""
        return str(self)


class ClassifiedError(NoviError):
    """
    Base class for errors carrying a kind from the taxonomy.

    Attributes:
        kind: Enum member identifying the error
        details: Values used to render the message template
    """

    def __init__(self, kind: Enum, **details: Any):
        self.kind = kind
        self.details = details
        super().__init__(format_message(kind, **details))

    @property
    def user_message(self) -> str:
        """Stable message rendered from the kind's template."""
        return format_message(self.kind, **self.details)


def format_message(kind: Enum, **details: Any) -> str:
    """
    Render the message template for an error kind.

    Missing placeholders render as empty strings so that a template never
    raises while reporting another error.
    """
    template = MESSAGES[kind]
    return template.format_map(_Blank(details))


class _Blank(dict):
    def __missing__(self, key: str) -> str:
        return ""


class DecodeError(ClassifiedError):
    """Raised when a payment link is malformed."""
    pass


class BuildError(ClassifiedError):
    """
    Raised when settlement operations cannot be built.

    No network mutation has happened when this is raised, so the payer
    can fix the problem (e.g. top up) and try again.
    """
    pass


class ExecutionError(ClassifiedError):
    """
    Classified failure of a settlement attempt.

    Attributes:
        kind: The ExecutionErrorKind
        submitted: True if the ledger had accepted the submission before
            the failure was observed
        transaction_id: Transaction signature, when one is known
    """

    def __init__(
        self,
        kind: ExecutionErrorKind,
        detail: str = "",
        submitted: bool = False,
        transaction_id: Optional[str] = None,
    ):
        self.submitted = submitted
        self.transaction_id = transaction_id
        super().__init__(kind, detail=detail)

    @property
    def detail(self) -> str:
        """Raw diagnostic text from the ledger or signer."""
        return self.details.get("detail", "")

    @property
    def requires_ledger_check(self) -> bool:
        """
        Whether the transfer may have landed despite the failure.

        A submitted attempt that timed out or failed for an unknown reason
        must be checked on the ledger before a retry, otherwise the payer
        could pay twice.
        """
        return self.submitted and self.kind in (
            ExecutionErrorKind.NETWORK_TIMEOUT,
            ExecutionErrorKind.UNKNOWN,
        )

    @property
    def retryable(self) -> bool:
        """Whether a blind retry is safe."""
        if self.requires_ledger_check:
            return False
        return self.kind in (
            ExecutionErrorKind.USER_REJECTED,
            ExecutionErrorKind.NETWORK_TIMEOUT,
        )


class LedgerRpcError(NoviError):
    """
    Exception raised when the ledger RPC endpoint returns an error.

    Attributes:
        code: JSON-RPC error code, if any
        rpc_message: Raw error message from the node
    """

    def __init__(self, rpc_message: str, code: Optional[int] = None, data: Any = None):
        self.code = code
        self.rpc_message = rpc_message
        self.data = data
        super().__init__(f"RPC error {code}: {rpc_message}" if code is not None else rpc_message)


class SigningRejectedError(NoviError):
    """Exception raised by a signer when the wallet owner declines to sign."""
    pass


class SettlementInProgressError(NoviError):
    """Exception raised when an attempt is already processing for the same intent and payer."""
    pass


class InvalidTransitionError(NoviError):
    """Exception raised on an illegal executor state transition."""
    pass


# Ordered: the first matching group wins. Patterns are searched in lowercased text.
FAILURE_SIGNALS: list[tuple[ExecutionErrorKind, tuple[str, ...]]] = [
    (ExecutionErrorKind.USER_REJECTED, (
        "user rejected",
        "user declined",
        "rejected the request",
        "user denied",
    )),
    (ExecutionErrorKind.NETWORK_TIMEOUT, (
        "timed out",
        "timeout",
        "blockhash not found",
        "blockhashnotfound",
        "block height exceeded",
        "blockheightexceeded",
    )),
    (ExecutionErrorKind.ACCOUNT_NOT_FOUND, (
        "accountnotfound",
        "account not found",
        "could not find account",
        "no record of a prior credit",
        "invalidaccountdata",
        "invalid account data",
    )),
    (ExecutionErrorKind.INSUFFICIENT_FUNDS, (
        "insufficientfunds",
        "insufficient funds",
        "insufficient lamports",
        r"custom program error: 0x1\b",
        r"'custom': 1\}",
    )),
]


def classify_failure(
    failure: Union[BaseException, str, Any],
    submitted: bool = False,
    transaction_id: Optional[str] = None,
) -> ExecutionError:
    """
    Map a ledger or signer failure to an ExecutionError.

    Args:
        failure: The exception raised, or the raw error value reported by
            the ledger (e.g. a transaction ``err`` object)
        submitted: Whether the ledger had accepted the submission
        transaction_id: Transaction signature, if known

    Returns:
        ExecutionError with a classified kind. Unmatched failures become
        Unknown and keep the original text.
    """
    if isinstance(failure, ExecutionError):
        return failure

    detail = _failure_text(failure)

    if isinstance(failure, SigningRejectedError):
        kind = ExecutionErrorKind.USER_REJECTED
    elif isinstance(failure, (httpx.TimeoutException, asyncio.TimeoutError)):
        kind = ExecutionErrorKind.NETWORK_TIMEOUT
    else:
        kind = _match_signal(detail)

    return ExecutionError(kind, detail=detail, submitted=submitted, transaction_id=transaction_id)


def _failure_text(failure: Any) -> str:
    if isinstance(failure, LedgerRpcError):
        return str(failure)
    if isinstance(failure, BaseException):
        text = str(failure)
        return text or failure.__class__.__name__
    return str(failure)


def _match_signal(detail: str) -> ExecutionErrorKind:
    lowered = detail.lower()
    for kind, signals in FAILURE_SIGNALS:
        if any(re.search(signal, lowered) for signal in signals):
            return kind
    return ExecutionErrorKind.UNKNOWN


def may_have_landed(failure: BaseException) -> bool:
    """
    Whether a submission that raised this exception may still land.

    Transport failures (timeouts, dropped connections) leave the outcome
    unknown: the node may have accepted the transaction before the
    response was lost. Explicit RPC errors and wallet refusals mean the
    transaction was never accepted.
    """
    return isinstance(failure, (httpx.TransportError, asyncio.TimeoutError))
