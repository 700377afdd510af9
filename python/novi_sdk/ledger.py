"""
Location: python/novi_sdk/ledger.py

Summary:
    Defines the Ledger and Signer protocols (interfaces) the settlement
    core depends on. Also provides BaseLedger, an abstract class for
    implementing custom ledger adapters.

Usage:
    builder.py and executor.py only talk to these protocols, so tests can
    pass an in-memory ledger and production code a SolanaRpcLedger.

Example:
    from novi_sdk.ledger import BaseLedger

    class MyLedger(BaseLedger):
        async def account_exists(self, address: str) -> bool:
            ...
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, Sequence, runtime_checkable

from .types import FinalityOutcome, SettlementOperation


@runtime_checkable
class Signer(Protocol):
    """
    Protocol for an opaque signing capability.

    Signers never expose key material. Implementations include
    MemorySigner (dev) and wallet bridges that prompt the user.
    """

    async def get_address(self) -> str:
        """
        Get the wallet address of the signer.

        Returns:
            Base58 wallet address
        """
        ...

    async def sign(self, payload: bytes) -> bytes:
        """
        Sign a serialized transaction message.

        Args:
            payload: The raw message bytes

        Returns:
            The 64-byte signature

        Raises:
            SigningRejectedError: If the wallet owner declines
        """
        ...


@runtime_checkable
class Ledger(Protocol):
    """
    Protocol for the external settlement ledger.

    Every method is a network call and a suspension point. The ledger is
    the only system of record; the core keeps no state of its own.
    """

    supports_atomic_batches: bool

    async def account_exists(self, address: str) -> bool:
        """
        Check whether an account exists on the ledger.

        Args:
            address: Account address

        Returns:
            True if the account exists
        """
        ...

    async def get_balance(self, holding_account: str) -> Optional[int]:
        """
        Get the token balance of a holding account.

        Args:
            holding_account: Token account address

        Returns:
            Balance in base units, or None if the account does not exist
        """
        ...

    async def submit(self, signer: Signer, operations: Sequence[SettlementOperation]) -> str:
        """
        Sign and submit operations as one transaction.

        Args:
            signer: Signing capability of the payer
            operations: Ordered operations to submit atomically

        Returns:
            Attempt identifier (transaction signature) once the network
            accepted the transaction; it is not final yet
        """
        ...

    async def await_finality(self, attempt_id: str, timeout: float) -> FinalityOutcome:
        """
        Wait for a submitted transaction to become final.

        Args:
            attempt_id: Identifier returned by submit()
            timeout: Maximum seconds to wait

        Returns:
            FinalityOutcome: finalized, rejected, or timed_out
        """
        ...


class BaseLedger(ABC):
    """
    Abstract base class for ledger implementations.

    Ledgers are assumed to apply a whole submission atomically; adapters
    for ledgers that cannot must set ``supports_atomic_batches = False``
    so the builder refuses to split an account creation from its
    transfer.
    """

    supports_atomic_batches: bool = True

    @abstractmethod
    async def account_exists(self, address: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def get_balance(self, holding_account: str) -> Optional[int]:
        raise NotImplementedError

    @abstractmethod
    async def submit(self, signer: Signer, operations: Sequence[SettlementOperation]) -> str:
        raise NotImplementedError

    @abstractmethod
    async def await_finality(self, attempt_id: str, timeout: float) -> FinalityOutcome:
        raise NotImplementedError

    async def close(self) -> None:
        """Release any resources held by the ledger."""
        return None
