"""
Location: python/novi_sdk/types.py

Summary:
    Pydantic models for novi-sdk. Defines the PaymentIntent (a request to
    pay, optionally one share of a split), the configuration models, and
    the settlement records produced by the builder and executor.

Usage:
    These models are imported by codec.py, request.py, builder.py,
    executor.py and client.py. Monetary amounts are Decimal in whole
    currency units on intents, and integers in base units on operations,
    so no value ever passes through a binary float.

Example:
    from decimal import Decimal
    from novi_sdk.types import PaymentIntent

    intent = PaymentIntent(
        recipient="GJyX7wS27fECdBRWZhsUMeAzvGPVnc3nQrAqm3EdMST3",
        amount=Decimal("3.34"),
        label="Dinner",
        total=Decimal("10.00"),
        split_count=3,
    )
"""

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .accounts import USDC_MINTS, is_valid_address
from .errors import ExecutionError, ExecutionErrorKind
from .split import allocate, to_cents


class PaymentIntent(BaseModel):
    """
    A request to pay, as carried by a shareable link.

    Attributes:
        recipient: Wallet address receiving the funds
        amount: Amount of this share in whole units (e.g. Decimal("3.34"))
        label: Short description of what the payment is for
        message: Optional note for the payer
        total: Full amount being split, only on split intents
        split_count: Number of shares including the requester, >= 2
        share_index: Zero-based share this intent represents, only on
            per-participant links
    """
    recipient: str
    amount: Decimal
    label: str
    message: Optional[str] = None
    total: Optional[Decimal] = None
    split_count: Optional[int] = Field(None, alias="splitCount")
    share_index: Optional[int] = Field(None, alias="shareIndex")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("recipient")
    @classmethod
    def _check_recipient(cls, value: str) -> str:
        if not is_valid_address(value):
            raise ValueError(f"invalid recipient address: {value!r}")
        return value

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value <= 0:
            raise ValueError("amount must be a positive number")
        return value

    @field_validator("label")
    @classmethod
    def _check_label(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("label must not be blank")
        return value

    @field_validator("message")
    @classmethod
    def _blank_message_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def _check_split(self) -> "PaymentIntent":
        if self.split_count is None:
            if self.total is not None:
                raise ValueError("total requires splitCount")
            if self.share_index is not None:
                raise ValueError("shareIndex requires splitCount")
            return self

        if self.total is None:
            raise ValueError("splitCount requires total")
        if self.split_count < 2:
            raise ValueError("splitCount must be >= 2")
        if not self.total.is_finite() or self.total <= 0:
            raise ValueError("total must be a positive number")

        cents = self.amount * 100
        if cents != cents.to_integral_value():
            raise ValueError("split share must be a whole number of cents")

        shares = allocate(self.total, self.split_count)
        if self.share_index is not None:
            if not 0 <= self.share_index < self.split_count:
                raise ValueError(
                    f"shareIndex must be in [0, {self.split_count}), got {self.share_index}"
                )
            if int(cents) != shares[self.share_index]:
                raise ValueError(
                    f"amount does not match share {self.share_index} of total {self.total}"
                )
        elif int(cents) not in (min(shares), max(shares)):
            raise ValueError(f"amount is not a share of total {self.total}")
        return self

    @property
    def is_split(self) -> bool:
        """True when this intent is one share of a split total."""
        return self.split_count is not None and self.total is not None

    @property
    def amount_cents(self) -> int:
        """Amount of this intent in cents."""
        return to_cents(self.amount)


class AssetConfig(BaseModel):
    """
    The token used to settle payments.

    Attributes:
        mint: SPL token mint address
        decimals: Fractional digits of the token (6 for USDC)
        symbol: Display symbol
    """
    mint: str
    decimals: int = Field(6, ge=0, le=18)
    symbol: str = "USDC"

    @classmethod
    def usdc(cls, network: str = "devnet") -> "AssetConfig":
        """
        USDC on the given Solana cluster.

        Args:
            network: "mainnet-beta" or "devnet"

        Raises:
            ValueError: If the cluster has no known USDC mint
        """
        try:
            mint = USDC_MINTS[network]
        except KeyError:
            raise ValueError(f"No USDC mint known for network {network!r}")
        return cls(mint=mint, decimals=6, symbol="USDC")


class LinkConfig(BaseModel):
    """
    How payment links are produced.

    Attributes:
        origin: Scheme and host the links point at
        path: Path of the pay page
        per_participant_links: When False one shared link carries the
            uniform base share and the requester may collect up to
            splitCount - 1 cents less than the total. When True each
            share gets its own link and the total is collected exactly.
    """
    origin: str = "https://novi.cash"
    path: str = "/pay"
    per_participant_links: bool = Field(False, alias="perParticipantLinks")

    model_config = {"populate_by_name": True}


class SettlementConfig(BaseModel):
    """
    Settlement behaviour.

    Attributes:
        asset: Token used for settlement
        finality_timeout_seconds: Upper bound on waiting for finality,
            enforced around the ledger call
        verify_balances: Re-read the recipient balance after finality
    """
    asset: AssetConfig = Field(default_factory=AssetConfig.usdc)
    finality_timeout_seconds: float = Field(60.0, gt=0, alias="finalityTimeoutSeconds")
    verify_balances: bool = Field(False, alias="verifyBalances")

    model_config = {"populate_by_name": True}


class NoviConfig(BaseModel):
    """Top-level configuration for NoviClient."""
    links: LinkConfig = Field(default_factory=LinkConfig)
    settlement: SettlementConfig = Field(default_factory=SettlementConfig)


class SettlementOperation(BaseModel):
    """
    One ordered step of a settlement transaction.

    Operations are rebuilt from current ledger state for every attempt
    and never cached.

    Attributes:
        kind: "create-receiving-account-if-absent" or "transfer"
        payer: Wallet that funds and authorizes the operation
        owner: Owner of the account being created (create only)
        account: Holding account being created (create only)
        mint: Token mint
        source: Payer holding account (transfer only)
        destination: Recipient holding account (transfer only)
        amount_units: Amount in base units (transfer only)
        decimals: Token decimals (transfer only)
    """
    kind: Literal["create-receiving-account-if-absent", "transfer"]
    payer: str
    mint: str
    owner: Optional[str] = None
    account: Optional[str] = None
    source: Optional[str] = None
    destination: Optional[str] = None
    amount_units: Optional[int] = Field(None, alias="amountUnits")
    decimals: Optional[int] = None

    model_config = {"populate_by_name": True, "frozen": True}


SettlementStatus = Literal["processing", "success", "failed"]
ExecutorState = Literal["idle", "processing", "success", "failed"]


class SettlementResult(BaseModel):
    """
    Outcome of one settlement attempt.

    Created when an attempt starts processing and replaced (never
    mutated) by the executor on each transition.

    Attributes:
        status: "processing", "success" or "failed"
        attempt: 1-based attempt number for this executor
        transaction_id: Transaction signature once submitted
        error_kind: Classified error on failure
        error_detail: Raw diagnostic text on failure
        submitted: Whether the ledger accepted the submission
    """
    status: SettlementStatus
    attempt: int = 1
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    error_kind: Optional[ExecutionErrorKind] = Field(None, alias="errorKind")
    error_detail: Optional[str] = Field(None, alias="errorDetail")
    submitted: bool = False

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def is_terminal(self) -> bool:
        """True once the attempt succeeded or failed."""
        return self.status in ("success", "failed")

    def raise_for_error(self) -> None:
        """
        Raise the classified ExecutionError if the attempt failed.

        Raises:
            ExecutionError: If status is "failed"
        """
        if self.status == "failed":
            raise ExecutionError(
                self.error_kind or ExecutionErrorKind.UNKNOWN,
                detail=self.error_detail or "",
                submitted=self.submitted,
                transaction_id=self.transaction_id,
            )


class FinalityOutcome(BaseModel):
    """
    What the ledger reported while waiting for finality.

    Attributes:
        status: "finalized", "rejected" or "timed_out"
        transaction_id: The transaction signature
        error: Raw ledger error on rejection
    """
    status: Literal["finalized", "rejected", "timed_out"]
    transaction_id: str = Field(alias="transactionId")
    error: Optional[str] = None

    model_config = {"populate_by_name": True}


class RequestPlan(BaseModel):
    """
    Links and intents produced for one payment request.

    Attributes:
        total_cents: Requested total in cents
        shares: Per-participant shares in cents, as allocated
        intents: One intent (shared link) or one per share
        links: Encoded links, parallel to intents
        per_participant_links: Which link mode produced the plan
        collected_cents: Amount collected if every share is paid
        shortfall_cents: total_cents - collected_cents
    """
    total_cents: int = Field(alias="totalCents")
    shares: list[int]
    intents: list[PaymentIntent]
    links: list[str]
    per_participant_links: bool = Field(alias="perParticipantLinks")
    collected_cents: int = Field(alias="collectedCents")
    shortfall_cents: int = Field(alias="shortfallCents")

    model_config = {"populate_by_name": True}


class PreviewText(BaseModel):
    """Title and description shown by link-preview crawlers."""
    title: str
    description: str
