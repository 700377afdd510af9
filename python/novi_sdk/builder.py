"""
Location: python/novi_sdk/builder.py

Summary:
    Settlement Builder. Turns a validated PaymentIntent and a payer
    address into the ordered operations of one transaction: an optional
    creation of the recipient's holding account followed by the transfer.

Usage:
    Used by executor.py at the start of every attempt. The builder only
    reads from the ledger; it never submits anything, so a BuildError
    always means no funds moved.

Example:
    builder = SettlementBuilder(AssetConfig.usdc("devnet"))
    operations = await builder.build(intent, payer_address, ledger)
"""

import logging

from .accounts import derive_holding_account, is_valid_address
from .errors import BuildError, BuildErrorKind
from .ledger import Ledger
from .split import to_base_units
from .types import AssetConfig, PaymentIntent, SettlementOperation

logger = logging.getLogger(__name__)


class SettlementBuilder:
    """
    Builds the operations that settle one intent.

    Attributes:
        asset: Token the payment is settled in
    """

    def __init__(self, asset: AssetConfig):
        """
        Initialize the builder.

        Args:
            asset: Settlement token (mint and decimals)
        """
        self.asset = asset

    async def build(
        self,
        intent: PaymentIntent,
        payer: str,
        ledger: Ledger,
    ) -> list[SettlementOperation]:
        """
        Build the ordered operations for paying an intent.

        Steps:
        1. Derive both holding accounts (pure, no RPC)
        2. Read the payer's balance; a missing account is an error
        3. Convert the amount to base units, rounding toward zero
        4. Refuse if the balance does not cover the amount
        5. Prepend an account creation if the recipient has none
        6. Append the transfer

        Args:
            intent: The validated intent
            payer: Payer wallet address
            ledger: Read access to current ledger state

        Returns:
            Ordered list of operations, creation (if any) before transfer

        Raises:
            BuildError: InvalidPayer, PayerAccountMissing,
                AmountBelowMinimum, InsufficientBalance or
                AtomicityUnsupported
        """
        if not is_valid_address(payer):
            raise BuildError(BuildErrorKind.INVALID_PAYER, value=payer)

        mint = self.asset.mint
        payer_account = derive_holding_account(payer, mint)
        recipient_account = derive_holding_account(intent.recipient, mint)

        balance = await ledger.get_balance(payer_account)
        if balance is None:
            raise BuildError(
                BuildErrorKind.PAYER_ACCOUNT_MISSING,
                symbol=self.asset.symbol,
                account=payer_account,
            )

        required = to_base_units(intent.amount, self.asset.decimals)
        if required <= 0:
            raise BuildError(BuildErrorKind.AMOUNT_BELOW_MINIMUM, symbol=self.asset.symbol)

        if balance < required:
            raise BuildError(
                BuildErrorKind.INSUFFICIENT_BALANCE,
                required=required,
                available=balance,
            )

        operations: list[SettlementOperation] = []

        if not await ledger.account_exists(recipient_account):
            logger.debug("Recipient %s has no holding account, creating %s",
                         intent.recipient, recipient_account)
            operations.append(
                SettlementOperation(
                    kind="create-receiving-account-if-absent",
                    payer=payer,
                    mint=mint,
                    owner=intent.recipient,
                    account=recipient_account,
                )
            )

        operations.append(
            SettlementOperation(
                kind="transfer",
                payer=payer,
                mint=mint,
                source=payer_account,
                destination=recipient_account,
                amount_units=required,
                decimals=self.asset.decimals,
            )
        )

        if len(operations) > 1 and not ledger.supports_atomic_batches:
            raise BuildError(BuildErrorKind.ATOMICITY_UNSUPPORTED)

        return operations
