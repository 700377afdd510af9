"""
Shared pytest fixtures for novi-sdk tests.

This module provides common fixtures used across all test files,
including deterministic wallets, sample intents, and an in-memory
ledger that records every submission.
"""

import asyncio
import json
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

import pytest
from solders.keypair import Keypair  # type: ignore

from novi_sdk.accounts import USDC_MINTS, derive_holding_account
from novi_sdk.ledger import BaseLedger
from novi_sdk.signers import MemorySigner
from novi_sdk.types import AssetConfig, FinalityOutcome, PaymentIntent, SettlementOperation


class FakeLedger(BaseLedger):
    """
    In-memory ledger for tests.

    Balances are keyed by holding account. Submissions are recorded and,
    unless ``apply_transfers`` is False, applied to the balances.
    """

    def __init__(self, balances=None, existing=None, atomic: bool = True):
        self.balances: dict[str, int] = dict(balances or {})
        self.existing: set[str] = set(existing or ())
        self.supports_atomic_batches = atomic
        self.submissions: list[list[SettlementOperation]] = []
        self.apply_transfers = True
        self.submit_error: Optional[BaseException] = None
        self.finality: Optional[FinalityOutcome] = None
        self.finality_error: Optional[BaseException] = None
        self.submit_hold: Optional[asyncio.Event] = None
        self.finality_hold: Optional[asyncio.Event] = None
        self.submit_started = asyncio.Event()
        self.finality_started = asyncio.Event()
        self.closed = False

    async def account_exists(self, address: str) -> bool:
        return address in self.existing or address in self.balances

    async def get_balance(self, holding_account: str) -> Optional[int]:
        return self.balances.get(holding_account)

    async def submit(self, signer, operations: Sequence[SettlementOperation]) -> str:
        self.submit_started.set()
        if self.submit_hold is not None:
            await self.submit_hold.wait()
        await signer.sign(b"settlement-message")
        if self.submit_error is not None:
            raise self.submit_error

        self.submissions.append(list(operations))
        if self.apply_transfers:
            for op in operations:
                if op.kind == "create-receiving-account-if-absent":
                    self.existing.add(op.account)
                    self.balances.setdefault(op.account, 0)
                else:
                    self.balances[op.source] -= op.amount_units
                    self.balances[op.destination] = (
                        self.balances.get(op.destination, 0) + op.amount_units
                    )
        return f"sig-{len(self.submissions)}"

    async def await_finality(self, attempt_id: str, timeout: float) -> FinalityOutcome:
        self.finality_started.set()
        if self.finality_hold is not None:
            await self.finality_hold.wait()
        if self.finality_error is not None:
            raise self.finality_error
        if self.finality is not None:
            return self.finality.model_copy(update={"transaction_id": attempt_id})
        return FinalityOutcome(status="finalized", transaction_id=attempt_id)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def payer_keypair():
    """Deterministic payer keypair."""
    return Keypair.from_seed(bytes([1] * 32))


@pytest.fixture
def payer_address(payer_keypair):
    """Payer wallet address."""
    return str(payer_keypair.pubkey())


@pytest.fixture
def recipient_address():
    """Recipient wallet address."""
    return str(Keypair.from_seed(bytes([2] * 32)).pubkey())


@pytest.fixture
def signer(payer_keypair):
    """In-memory signer for the payer."""
    return MemorySigner(payer_keypair)


@pytest.fixture
def asset():
    """USDC on devnet."""
    return AssetConfig.usdc("devnet")


@pytest.fixture
def payer_account(payer_address):
    """Payer USDC holding account."""
    return derive_holding_account(payer_address, USDC_MINTS["devnet"])


@pytest.fixture
def recipient_account(recipient_address):
    """Recipient USDC holding account."""
    return derive_holding_account(recipient_address, USDC_MINTS["devnet"])


@pytest.fixture
def ledger_factory():
    """Factory for ledgers with custom balances and capabilities."""
    return FakeLedger


@pytest.fixture
def ledger(payer_account, recipient_account):
    """Ledger where the payer holds 10 USDC and the recipient's account exists."""
    return FakeLedger(balances={payer_account: 10_000_000, recipient_account: 0})


@pytest.fixture
def intent(recipient_address):
    """Plain 3.34 USDC intent."""
    return PaymentIntent(
        recipient=recipient_address,
        amount=Decimal("3.34"),
        label="Dinner",
        message="Split payment for Dinner",
    )


@pytest.fixture
def split_intent(recipient_address):
    """First share of a 10.00 total split three ways."""
    return PaymentIntent(
        recipient=recipient_address,
        amount=Decimal("3.34"),
        label="Dinner",
        total=Decimal("10.00"),
        split_count=3,
        share_index=0,
    )


@pytest.fixture
def split_vectors():
    """Load shared allocation and link vectors from fixtures."""
    vectors_path = Path(__file__).parent.parent.parent / "fixtures" / "split-vectors.json"
    with open(vectors_path, encoding="utf-8") as f:
        return json.load(f)
