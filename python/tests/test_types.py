"""
Tests for novi_sdk.types module.

Tests Pydantic models for PaymentIntent, configuration and settlement
records. Verifies validation, alias handling, and serialization.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from novi_sdk.accounts import USDC_MINTS
from novi_sdk.errors import ExecutionError, ExecutionErrorKind
from novi_sdk.types import (
    AssetConfig,
    FinalityOutcome,
    LinkConfig,
    NoviConfig,
    PaymentIntent,
    SettlementConfig,
    SettlementOperation,
    SettlementResult,
)


class TestPaymentIntent:
    """Tests for PaymentIntent model."""

    def test_basic_creation(self, recipient_address):
        """Test creating a plain intent."""
        intent = PaymentIntent(recipient=recipient_address, amount="5.00", label="Pizza")

        assert intent.amount == Decimal("5.00")
        assert intent.message is None
        assert intent.total is None
        assert not intent.is_split
        assert intent.amount_cents == 500

    def test_camel_case_alias(self, recipient_address):
        """Test that camelCase keys populate split fields."""
        intent = PaymentIntent.model_validate({
            "recipient": recipient_address,
            "amount": "3.33",
            "label": "Dinner",
            "total": "10.00",
            "splitCount": 3,
        })

        assert intent.split_count == 3
        assert intent.is_split

    def test_serialization_uses_alias(self, split_intent):
        """Test that serialization uses camelCase by alias."""
        data = split_intent.model_dump(by_alias=True, exclude_none=True)

        assert data["splitCount"] == 3
        assert data["shareIndex"] == 0
        assert "split_count" not in data

    def test_blank_message_becomes_none(self, recipient_address):
        """Test that an empty message is normalized away."""
        intent = PaymentIntent(recipient=recipient_address, amount="1", label="x", message="")

        assert intent.message is None

    def test_is_frozen(self, intent):
        """Test that intents cannot be mutated."""
        with pytest.raises(ValidationError):
            intent.amount = Decimal("100")

    def test_invalid_recipient(self):
        """Test that a malformed recipient is rejected."""
        with pytest.raises(ValidationError):
            PaymentIntent(recipient="not-a-wallet", amount="1", label="x")

    @pytest.mark.parametrize("amount", ["0", "-1", "NaN", "Infinity"])
    def test_invalid_amount(self, recipient_address, amount):
        """Test that non-positive and non-finite amounts are rejected."""
        with pytest.raises(ValidationError):
            PaymentIntent(recipient=recipient_address, amount=amount, label="x")

    def test_blank_label(self, recipient_address):
        """Test that a whitespace label is rejected."""
        with pytest.raises(ValidationError):
            PaymentIntent(recipient=recipient_address, amount="1", label="   ")

    def test_shared_split_accepts_either_share_size(self, recipient_address):
        """Test that a shared link may carry the base or the larger share."""
        for amount in ("3.33", "3.34"):
            intent = PaymentIntent(
                recipient=recipient_address, amount=amount, label="x",
                total="10.00", split_count=3,
            )
            assert intent.amount_cents in (333, 334)

    def test_split_share_must_be_whole_cents(self, recipient_address):
        """Test that split shares cannot carry fractions of a cent."""
        with pytest.raises(ValidationError):
            PaymentIntent(
                recipient=recipient_address, amount="3.335", label="x",
                total="10.00", split_count=3,
            )

    def test_total_requires_split_count(self, recipient_address):
        """Test that total alone is not a split."""
        with pytest.raises(ValidationError):
            PaymentIntent(recipient=recipient_address, amount="5", label="x", total="10")

    def test_share_index_requires_split_count(self, recipient_address):
        """Test that shareIndex alone is rejected."""
        with pytest.raises(ValidationError):
            PaymentIntent(recipient=recipient_address, amount="5", label="x", share_index=0)

    def test_share_index_out_of_range(self, recipient_address):
        """Test that shareIndex must be below splitCount."""
        with pytest.raises(ValidationError):
            PaymentIntent(
                recipient=recipient_address, amount="3.33", label="x",
                total="10.00", split_count=3, share_index=3,
            )


class TestAssetConfig:
    """Tests for AssetConfig model."""

    def test_usdc_devnet(self):
        """Test the devnet USDC preset."""
        asset = AssetConfig.usdc()

        assert asset.mint == USDC_MINTS["devnet"]
        assert asset.decimals == 6
        assert asset.symbol == "USDC"

    def test_usdc_mainnet(self):
        """Test the mainnet USDC preset."""
        assert AssetConfig.usdc("mainnet-beta").mint == "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

    def test_unknown_network(self):
        """Test that unknown clusters raise ValueError."""
        with pytest.raises(ValueError):
            AssetConfig.usdc("testnet-42")


class TestConfig:
    """Tests for link and settlement configuration."""

    def test_defaults(self):
        """Test default configuration values."""
        config = NoviConfig()

        assert config.links.origin == "https://novi.cash"
        assert config.links.path == "/pay"
        assert config.links.per_participant_links is False
        assert config.settlement.finality_timeout_seconds == 60.0
        assert config.settlement.verify_balances is False

    def test_camel_case_alias(self):
        """Test camelCase configuration keys."""
        config = NoviConfig.model_validate({
            "links": {"perParticipantLinks": True},
            "settlement": {"finalityTimeoutSeconds": 15, "verifyBalances": True},
        })

        assert config.links.per_participant_links is True
        assert config.settlement.finality_timeout_seconds == 15
        assert config.settlement.verify_balances is True

    def test_timeout_must_be_positive(self):
        """Test that a zero finality timeout is rejected."""
        with pytest.raises(ValidationError):
            SettlementConfig(finality_timeout_seconds=0)

    def test_link_config_by_name(self):
        """Test populating LinkConfig by field name."""
        assert LinkConfig(per_participant_links=True).per_participant_links is True


class TestSettlementOperation:
    """Tests for SettlementOperation model."""

    def test_alias_serialization(self, payer_address):
        """Test camelCase serialization of amount_units."""
        op = SettlementOperation(
            kind="transfer",
            payer=payer_address,
            mint=USDC_MINTS["devnet"],
            amount_units=3_340_000,
            decimals=6,
        )

        data = op.model_dump(by_alias=True)
        assert data["amountUnits"] == 3_340_000

    def test_rejects_unknown_kind(self, payer_address):
        """Test that only the two operation kinds exist."""
        with pytest.raises(ValidationError):
            SettlementOperation(kind="burn", payer=payer_address, mint=USDC_MINTS["devnet"])


class TestSettlementResult:
    """Tests for SettlementResult model."""

    def test_is_terminal(self):
        """Test terminal status detection."""
        assert not SettlementResult(status="processing").is_terminal
        assert SettlementResult(status="success").is_terminal
        assert SettlementResult(status="failed").is_terminal

    def test_raise_for_error_on_success(self):
        """Test that success does not raise."""
        SettlementResult(status="success", transaction_id="sig").raise_for_error()

    def test_raise_for_error_on_failure(self):
        """Test that failure raises the classified error."""
        result = SettlementResult(
            status="failed",
            transaction_id="sig",
            error_kind=ExecutionErrorKind.NETWORK_TIMEOUT,
            error_detail="not finalized within 60.0s",
            submitted=True,
        )

        with pytest.raises(ExecutionError) as exc_info:
            result.raise_for_error()

        assert exc_info.value.kind is ExecutionErrorKind.NETWORK_TIMEOUT
        assert exc_info.value.transaction_id == "sig"
        assert exc_info.value.requires_ledger_check

    def test_json_serialization(self):
        """Test JSON-mode dump with aliases."""
        result = SettlementResult(
            status="failed",
            error_kind=ExecutionErrorKind.INSUFFICIENT_FUNDS,
        )

        data = result.model_dump(by_alias=True, mode="json")
        assert data["errorKind"] == "InsufficientFunds"
        assert data["transactionId"] is None


class TestFinalityOutcome:
    """Tests for FinalityOutcome model."""

    def test_alias(self):
        """Test populating by alias and by name."""
        assert FinalityOutcome(status="finalized", transactionId="a").transaction_id == "a"
        assert FinalityOutcome(status="timed_out", transaction_id="b").transaction_id == "b"
