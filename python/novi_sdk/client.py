"""
Location: python/novi_sdk/client.py

Summary:
    Main NoviClient class for novi-sdk. Ties the flow together for both
    sides of a payment: requesters plan links, payers open a link and
    settle it against the ledger.

Usage:
    The primary entry point for using the SDK. Create a NoviClient with a
    ledger and the payer's signer, then create or pay links.

Example:
    from novi_sdk import NoviClient, NoviConfig
    from novi_sdk.ledgers import SolanaRpcLedger
    from novi_sdk.signers import MemorySigner

    async with NoviClient(
        ledger=SolanaRpcLedger(network="devnet"),
        signer=MemorySigner(secret),
        config=NoviConfig(),
    ) as client:
        plan = client.create_request(owner, "10.00", "Dinner", split_count=3)
        result = await client.pay(plan.links[0])
        result.raise_for_error()
"""

import logging
from typing import Optional, Union

from .accounts import derive_holding_account
from .attempts import AttemptRegistry, MemoryAttemptRegistry
from .codec import decode
from .executor import SettlementExecutor
from .ledger import Ledger, Signer
from .preview import describe_preview
from .request import plan_request
from .split import Number
from .types import NoviConfig, PaymentIntent, PreviewText, RequestPlan, SettlementResult

logger = logging.getLogger(__name__)


class NoviClient:
    """
    Main novi-sdk client.

    Attributes:
        ledger: Ledger used for reads and settlement
        signer: Signing capability of the payer
        config: Link and settlement configuration
    """

    def __init__(
        self,
        ledger: Ledger,
        signer: Signer,
        config: Optional[NoviConfig] = None,
        registry: Optional[AttemptRegistry] = None,
    ):
        """
        Initialize the NoviClient.

        Args:
            ledger: Ledger implementation (e.g. SolanaRpcLedger)
            signer: Signer of the payer
            config: Optional NoviConfig (defaults to USDC on devnet,
                shared split links)
            registry: Optional AttemptRegistry for single-flight
                protection (uses memory by default)
        """
        self.ledger = ledger
        self.signer = signer
        self.config = config or NoviConfig()
        self._registry = registry if registry is not None else MemoryAttemptRegistry()

    async def close(self) -> None:
        """
        Close the ledger and release resources.

        Should be called when done with the client, or use the async
        context manager pattern.
        """
        close = getattr(self.ledger, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "NoviClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager and close resources."""
        await self.close()

    def create_request(
        self,
        recipient: str,
        total: Number,
        label: str,
        message: Optional[str] = None,
        split_count: int = 1,
    ) -> RequestPlan:
        """
        Create the links for a payment request.

        The link mode (one shared link or one link per participant) comes
        from ``config.links.per_participant_links``.

        Args:
            recipient: Wallet address receiving the payments
            total: Total amount in whole units
            label: What the request is for
            message: Optional note for payers
            split_count: Number of shares including the requester

        Returns:
            RequestPlan with intents and links
        """
        return plan_request(
            recipient,
            total,
            label,
            message=message,
            split_count=split_count,
            config=self.config.links,
        )

    def open_link(self, link: str) -> PaymentIntent:
        """
        Decode a payment link.

        Raises:
            DecodeError: If the link is malformed
        """
        return decode(link)

    def preview(self, link: str) -> PreviewText:
        """Preview title and description for a link."""
        return describe_preview(link, asset_symbol=self.config.settlement.asset.symbol)

    def executor(self) -> SettlementExecutor:
        """
        Create a fresh executor sharing this client's single-flight registry.

        Returns:
            An idle SettlementExecutor
        """
        return SettlementExecutor(
            self.ledger,
            self.signer,
            self.config.settlement,
            registry=self._registry,
        )

    async def pay(self, link: Union[str, PaymentIntent]) -> SettlementResult:
        """
        Settle a payment link with the client's signer.

        Args:
            link: A payment link or an already decoded intent

        Returns:
            The terminal SettlementResult

        Raises:
            DecodeError: If the link is malformed
            BuildError: If the payment cannot be built (nothing was sent)
            SettlementInProgressError: If the same link is already being
                paid by this payer
        """
        intent = link if isinstance(link, PaymentIntent) else decode(link)
        logger.info("Paying %s to %s for %r", intent.amount, intent.recipient, intent.label)
        return await self.executor().execute(intent)

    async def get_balance(self) -> Optional[int]:
        """
        Get the payer's balance of the settlement asset.

        Returns:
            Balance in base units, or None if the payer has no holding
            account for the asset
        """
        payer = await self.signer.get_address()
        account = derive_holding_account(payer, self.config.settlement.asset.mint)
        return await self.ledger.get_balance(account)
