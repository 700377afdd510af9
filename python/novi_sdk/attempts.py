"""
Location: python/novi_sdk/attempts.py

Summary:
    Single-flight guard for settlement attempts. Tracks which
    (intent, payer) pairs have an attempt in flight so that a second
    submission against the same balance snapshot is rejected instead of
    racing the first one into a double spend.

Usage:
    Used by executor.py around every attempt. NoviClient shares one
    registry across all executors it creates.

Example:
    from novi_sdk.attempts import MemoryAttemptRegistry, attempt_key

    registry = MemoryAttemptRegistry()
    key = attempt_key(intent, payer)
    if await registry.acquire(key):
        try:
            ...
        finally:
            await registry.release(key)
"""

import hashlib
import json
from typing import Protocol

from .codec import encode_query
from .types import PaymentIntent


def attempt_key(intent: PaymentIntent, payer: str) -> str:
    """
    Generate a deterministic key for an (intent, payer) pair.

    The key is a SHA-256 hash of the canonical link query and the payer,
    truncated to 32 characters.

    Args:
        intent: The intent being paid
        payer: Payer wallet address

    Returns:
        32-character hex string
    """
    data = json.dumps({"intent": encode_query(intent), "payer": payer}, sort_keys=True)
    return hashlib.sha256(data.encode()).hexdigest()[:32]


class AttemptRegistry(Protocol):
    """
    Protocol for tracking in-flight settlement attempts.

    The default MemoryAttemptRegistry is suitable for a single process.
    Deployments paying from several processes need a shared store with
    an atomic set-if-absent (e.g. Redis SET NX).
    """

    async def acquire(self, key: str) -> bool:
        """
        Mark an attempt as in flight.

        Args:
            key: Attempt key from attempt_key()

        Returns:
            True if acquired, False if an attempt with this key is
            already in flight
        """
        ...

    async def release(self, key: str) -> None:
        """
        Mark an attempt as no longer in flight.

        Args:
            key: Attempt key from attempt_key()
        """
        ...

    async def is_active(self, key: str) -> bool:
        """
        Check whether an attempt is in flight.

        Args:
            key: Attempt key from attempt_key()

        Returns:
            True if an attempt with this key is in flight
        """
        ...


class MemoryAttemptRegistry:
    """
    In-memory attempt registry for single-process use.

    acquire() does not await between its check and its write, so it is
    atomic with respect to other coroutines on the same event loop.

    WARNING: Not shared across processes.

    Attributes:
        _active: Keys of attempts currently in flight
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._active: set[str] = set()

    async def acquire(self, key: str) -> bool:
        if key in self._active:
            return False
        self._active.add(key)
        return True

    async def release(self, key: str) -> None:
        self._active.discard(key)

    async def is_active(self, key: str) -> bool:
        return key in self._active

    async def clear(self) -> None:
        """
        Forget all in-flight attempts.

        Useful for testing.
        """
        self._active.clear()

    def __len__(self) -> int:
        """Return the number of attempts in flight."""
        return len(self._active)
