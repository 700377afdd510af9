"""
Location: python/novi_sdk/ledgers/solana_rpc.py

Summary:
    Ledger implementation backed by a Solana JSON-RPC endpoint. Reads
    accounts and token balances, assembles and submits signed
    transactions, and polls signature statuses until finality or a
    caller-supplied timeout.

Usage:
    from novi_sdk.ledgers import SolanaRpcLedger

    async with SolanaRpcLedger(network="devnet") as ledger:
        exists = await ledger.account_exists(address)

Example:
    ledger = SolanaRpcLedger("https://api.devnet.solana.com", commitment="confirmed")
    signature = await ledger.submit(signer, operations)
    outcome = await ledger.await_finality(signature, timeout=60)
"""

import asyncio
import base64
import itertools
import logging
from typing import Any, Optional, Sequence

import httpx
from solders.hash import Hash  # type: ignore
from solders.message import Message  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore
from solders.transaction import Transaction  # type: ignore

from ..accounts import to_instruction
from ..errors import LedgerRpcError
from ..ledger import BaseLedger, Signer
from ..types import FinalityOutcome, SettlementOperation

logger = logging.getLogger(__name__)

# Public RPC endpoints per cluster
NETWORKS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
}

# Error message returned by getTokenAccountBalance for a missing account
ACCOUNT_MISSING_MESSAGES = ("could not find account", "invalid param: could not find account")

COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaRpcLedger(BaseLedger):
    """
    Solana ledger over JSON-RPC.

    A Solana transaction executes all of its instructions atomically, so
    account creation and transfer are always submitted together.

    Attributes:
        rpc_url: JSON-RPC endpoint
        commitment: Commitment level treated as final
        poll_interval: Seconds between status polls
    """

    supports_atomic_batches = True

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        *,
        network: Optional[str] = None,
        commitment: str = "finalized",
        poll_interval: float = 2.0,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the ledger.

        Args:
            rpc_url: JSON-RPC endpoint; takes precedence over network
            network: Cluster name from NETWORKS when rpc_url is not given
            commitment: "confirmed" or "finalized"
            poll_interval: Seconds between finality polls
            timeout: HTTP request timeout in seconds
            http_client: Optional pre-configured httpx client

        Raises:
            ValueError: If neither a known network nor an rpc_url is given
        """
        if rpc_url is None:
            if network not in NETWORKS:
                raise ValueError(f"Unknown Solana network: {network!r}")
            rpc_url = NETWORKS[network]
        if commitment not in ("confirmed", "finalized"):
            raise ValueError(f"Unsupported commitment: {commitment!r}")

        self.rpc_url = rpc_url
        self.commitment = commitment
        self.poll_interval = poll_interval
        self._ids = itertools.count(1)
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._http.aclose()

    async def __aenter__(self) -> "SolanaRpcLedger":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager and close resources."""
        await self.close()

    async def account_exists(self, address: str) -> bool:
        result = await self._rpc(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        return result.get("value") is not None

    async def get_balance(self, holding_account: str) -> Optional[int]:
        try:
            result = await self._rpc(
                "getTokenAccountBalance",
                [holding_account, {"commitment": self.commitment}],
            )
        except LedgerRpcError as e:
            if any(msg in e.rpc_message.lower() for msg in ACCOUNT_MISSING_MESSAGES):
                return None
            raise
        value = result.get("value")
        if value is None:
            return None
        return int(value["amount"])

    async def submit(self, signer: Signer, operations: Sequence[SettlementOperation]) -> str:
        """
        Assemble, sign and send one transaction for all operations.

        The signer only ever sees serialized message bytes.

        Returns:
            The transaction signature (base58)
        """
        payer = Pubkey.from_string(await signer.get_address())
        instructions = [to_instruction(op) for op in operations]
        blockhash = await self._latest_blockhash()

        message = Message.new_with_blockhash(instructions, payer, blockhash)
        signature = Signature.from_bytes(await signer.sign(bytes(message)))
        tx = Transaction.populate(message, [signature])

        encoded = base64.b64encode(bytes(tx)).decode()
        result = await self._rpc(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": self.commitment}],
        )
        logger.debug("Sent transaction %s with %d instruction(s)", result, len(instructions))
        return str(result)

    async def await_finality(self, attempt_id: str, timeout: float) -> FinalityOutcome:
        """
        Poll the signature status until final, rejected, or timed out.

        Args:
            attempt_id: Transaction signature from submit()
            timeout: Maximum seconds to wait

        Returns:
            FinalityOutcome
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        target = COMMITMENT_RANK[self.commitment]

        while True:
            status = await self._signature_status(attempt_id)
            if status is not None:
                if status.get("err") is not None:
                    return FinalityOutcome(
                        status="rejected",
                        transaction_id=attempt_id,
                        error=str(status["err"]),
                    )
                reached = COMMITMENT_RANK.get(status.get("confirmationStatus") or "processed", 0)
                if reached >= target:
                    return FinalityOutcome(status="finalized", transaction_id=attempt_id)

            if loop.time() + self.poll_interval > deadline:
                return FinalityOutcome(status="timed_out", transaction_id=attempt_id)
            await asyncio.sleep(self.poll_interval)

    async def _signature_status(self, signature: str) -> Optional[dict[str, Any]]:
        result = await self._rpc(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
        )
        statuses = result.get("value") or [None]
        return statuses[0]

    async def _latest_blockhash(self) -> Hash:
        result = await self._rpc("getLatestBlockhash", [{"commitment": self.commitment}])
        return Hash.from_string(result["value"]["blockhash"])

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        """
        Perform a JSON-RPC call.

        Args:
            method: RPC method name
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            LedgerRpcError: If the node returns an error object
            httpx.HTTPError: On transport failures
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("RPC %s", method)

        response = await self._http.post(self.rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()

        error = body.get("error")
        if error:
            raise LedgerRpcError(
                error.get("message", "unknown RPC error"),
                code=error.get("code"),
                data=error.get("data"),
            )
        return body.get("result")
