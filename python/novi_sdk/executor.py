"""
Location: python/novi_sdk/executor.py

Summary:
    Settlement Executor. A state machine that takes an intent from
    ``idle`` through ``processing`` to ``success`` or ``failed``:
    it builds fresh operations, submits them, waits (bounded) for
    finality, and classifies any failure.

    idle --execute--> processing --finality--> success
                                 \\--failure--> failed --retry--> idle

Usage:
    executor = SettlementExecutor(ledger, signer, SettlementConfig())
    result = await executor.execute(intent)
    if result.status == "failed":
        if executor.error.retryable:
            result = await executor.retry(intent)

    The executor's state is plain data (see snapshot()) and needs no UI
    to be driven or tested.
"""

import asyncio
import logging
from typing import Any, Optional

from .attempts import AttemptRegistry, MemoryAttemptRegistry, attempt_key
from .builder import SettlementBuilder
from .errors import (
    ExecutionError,
    ExecutionErrorKind,
    InvalidTransitionError,
    SettlementInProgressError,
    classify_failure,
    may_have_landed,
)
from .ledger import Ledger, Signer
from .types import (
    ExecutorState,
    FinalityOutcome,
    PaymentIntent,
    SettlementConfig,
    SettlementOperation,
    SettlementResult,
)

logger = logging.getLogger(__name__)

# Allowed state transitions
TRANSITIONS: dict[str, frozenset[str]] = {
    "idle": frozenset({"processing"}),
    "processing": frozenset({"success", "failed"}),
    "failed": frozenset({"idle"}),
    "success": frozenset(),
}


class SettlementExecutor:
    """
    Drives one intent to a settled (or failed) ledger transaction.

    Only one attempt runs at a time per executor, and per (intent, payer)
    across every executor sharing the same registry. Retries are explicit
    and always rebuild operations from current ledger state.

    Attributes:
        ledger: Ledger used for reads, submission and finality
        signer: Payer's signing capability
        config: Settlement configuration (timeouts, asset)
        builder: Builder producing operations for each attempt
        history: Every state the executor has been in, in order
    """

    def __init__(
        self,
        ledger: Ledger,
        signer: Signer,
        config: Optional[SettlementConfig] = None,
        registry: Optional[AttemptRegistry] = None,
        builder: Optional[SettlementBuilder] = None,
    ):
        """
        Initialize the executor in the ``idle`` state.

        Args:
            ledger: Ledger implementation
            signer: Signer of the payer
            config: Settlement configuration, defaults to SettlementConfig()
            registry: Shared single-flight registry (memory by default)
            builder: Custom builder, defaults to one for config.asset
        """
        self.ledger = ledger
        self.signer = signer
        self.config = config or SettlementConfig()
        self.builder = builder or SettlementBuilder(self.config.asset)
        self._registry = registry if registry is not None else MemoryAttemptRegistry()

        self._state: ExecutorState = "idle"
        self._result: Optional[SettlementResult] = None
        self._error: Optional[ExecutionError] = None
        self._attempts = 0
        self._busy = False
        self._key: Optional[str] = None
        self.history: list[ExecutorState] = ["idle"]

    @property
    def state(self) -> ExecutorState:
        """Current state: idle, processing, success or failed."""
        return self._state

    @property
    def result(self) -> Optional[SettlementResult]:
        """Result of the latest attempt, None before the first one."""
        return self._result

    @property
    def error(self) -> Optional[ExecutionError]:
        """Classified error of the latest failed attempt."""
        return self._error

    async def execute(self, intent: PaymentIntent) -> SettlementResult:
        """
        Settle an intent, starting from ``idle``.

        Args:
            intent: A validated PaymentIntent

        Returns:
            The terminal SettlementResult ("success" or "failed")

        Raises:
            BuildError: If operations cannot be built; the executor stays idle
            SettlementInProgressError: If an attempt is already processing
                for this executor or for the same intent and payer
            InvalidTransitionError: If the executor is not idle
        """
        if self._busy or self._state == "processing":
            raise SettlementInProgressError("A settlement attempt is already processing")
        if self._state != "idle":
            raise InvalidTransitionError(
                f"Cannot execute from state {self._state!r}; "
                "a failed attempt must be retried with retry()"
            )

        self._busy = True
        try:
            payer = await self.signer.get_address()
            key = attempt_key(intent, payer)
            if not await self._registry.acquire(key):
                raise SettlementInProgressError(
                    "Another attempt for this intent and payer is already processing"
                )
            self._key = key
            try:
                return await self._attempt(intent, payer)
            finally:
                await self._release_if_settled()
        finally:
            self._busy = False

    async def retry(self, intent: PaymentIntent) -> SettlementResult:
        """
        Start a new attempt after a failure.

        Operations are rebuilt from scratch, so balances and account
        existence reflect the ledger as it is now.

        Args:
            intent: The intent to settle

        Returns:
            The terminal SettlementResult of the new attempt

        Raises:
            InvalidTransitionError: If the executor is not in ``failed``
        """
        if self._busy:
            raise SettlementInProgressError("A settlement attempt is already processing")
        self._transition("idle")
        return await self.execute(intent)

    async def resume(self) -> SettlementResult:
        """
        Wait for finality again for an attempt whose tracking was abandoned.

        If the task awaiting an attempt is cancelled, the submitted
        transaction cannot be recalled; the executor stays in
        ``processing``, and keeps its single-flight key, until resume()
        observes its outcome.

        Returns:
            The terminal SettlementResult

        Raises:
            InvalidTransitionError: If there is no processing attempt
                with a known transaction id
        """
        if self._busy:
            raise SettlementInProgressError("A settlement attempt is already being tracked")
        if self._state != "processing" or not self._result or not self._result.transaction_id:
            raise InvalidTransitionError("No submitted attempt to resume")

        self._busy = True
        try:
            return await self._await_finality(self._result.transaction_id, None, None)
        finally:
            await self._release_if_settled()
            self._busy = False

    def snapshot(self) -> dict[str, Any]:
        """
        Serializable view of the executor state.

        Returns:
            Dict with state, attempts, history and the latest result
        """
        return {
            "state": self._state,
            "attempts": self._attempts,
            "history": list(self.history),
            "result": self._result.model_dump(by_alias=True, mode="json") if self._result else None,
        }

    async def _attempt(self, intent: PaymentIntent, payer: str) -> SettlementResult:
        operations = await self.builder.build(intent, payer, self.ledger)
        transfer = operations[-1]

        balance_before = None
        if self.config.verify_balances:
            balance_before = await self._balance_or_zero(transfer.destination)

        self._attempts += 1
        self._error = None
        self._result = SettlementResult(status="processing", attempt=self._attempts)
        self._transition("processing")

        try:
            attempt_id = await self.ledger.submit(self.signer, operations)
        except asyncio.CancelledError:
            self._fail(ExecutionError(
                ExecutionErrorKind.UNKNOWN,
                detail="cancelled during submission; the transaction may have landed",
                submitted=True,
            ))
            raise
        except Exception as e:
            return self._fail(classify_failure(e, submitted=may_have_landed(e)))

        self._result = self._result.model_copy(
            update={"transaction_id": attempt_id, "submitted": True}
        )
        logger.info("Attempt %d submitted as %s", self._attempts, attempt_id)

        return await self._await_finality(attempt_id, transfer, balance_before)

    async def _await_finality(
        self,
        attempt_id: str,
        transfer: Optional[SettlementOperation],
        balance_before: Optional[int],
    ) -> SettlementResult:
        timeout = self.config.finality_timeout_seconds
        try:
            outcome = await asyncio.wait_for(
                self.ledger.await_finality(attempt_id, timeout), timeout
            )
        except asyncio.CancelledError:
            logger.info("Stopped tracking %s; the submission itself is not revoked", attempt_id)
            raise
        except asyncio.TimeoutError:
            outcome = FinalityOutcome(status="timed_out", transaction_id=attempt_id)
        except Exception as e:
            return self._fail(classify_failure(e, submitted=True, transaction_id=attempt_id))

        if outcome.status == "timed_out":
            return self._fail(ExecutionError(
                ExecutionErrorKind.NETWORK_TIMEOUT,
                detail=f"not finalized within {timeout}s",
                submitted=True,
                transaction_id=attempt_id,
            ))

        if outcome.status == "rejected":
            return self._fail(classify_failure(
                outcome.error or "transaction rejected",
                submitted=True,
                transaction_id=attempt_id,
            ))

        if transfer is not None and balance_before is not None:
            try:
                balance_after = await self._balance_or_zero(transfer.destination)
            except Exception as e:
                return self._fail(ExecutionError(
                    ExecutionErrorKind.UNKNOWN,
                    detail=f"balance verification failed on {transfer.destination}: {e}",
                    submitted=True,
                    transaction_id=outcome.transaction_id,
                ))
            received = balance_after - balance_before
            if received < (transfer.amount_units or 0):
                return self._fail(ExecutionError(
                    ExecutionErrorKind.UNKNOWN,
                    detail=(
                        f"balance verification mismatch on {transfer.destination}: "
                        f"expected +{transfer.amount_units}, observed +{received}"
                    ),
                    submitted=True,
                    transaction_id=outcome.transaction_id,
                ))

        return self._succeed(outcome.transaction_id)

    async def _release_if_settled(self) -> None:
        # A processing attempt may still land, so its key stays held.
        if self._key is not None and self._state != "processing":
            await self._registry.release(self._key)
            self._key = None

    async def _balance_or_zero(self, account: Optional[str]) -> int:
        if account is None:
            return 0
        balance = await self.ledger.get_balance(account)
        return balance or 0

    def _succeed(self, transaction_id: str) -> SettlementResult:
        self._result = self._result.model_copy(
            update={"status": "success", "transaction_id": transaction_id}
        )
        self._transition("success")
        return self._result

    def _fail(self, error: ExecutionError) -> SettlementResult:
        self._error = error
        self._result = self._result.model_copy(update={
            "status": "failed",
            "error_kind": error.kind,
            "error_detail": error.detail,
            "submitted": error.submitted,
            "transaction_id": error.transaction_id or self._result.transaction_id,
        })
        logger.warning(
            "Attempt %d failed (%s): %s", self._attempts, error.kind.value, error.detail
        )
        self._transition("failed")
        return self._result

    def _transition(self, new_state: ExecutorState) -> None:
        if new_state not in TRANSITIONS[self._state]:
            raise InvalidTransitionError(
                f"Illegal transition {self._state!r} -> {new_state!r}"
            )
        logger.info("Settlement %s -> %s", self._state, new_state)
        self._state = new_state
        self.history.append(new_state)
