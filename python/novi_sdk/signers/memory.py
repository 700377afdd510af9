"""
Location: python/novi_sdk/signers/memory.py

Summary:
    Development-only in-memory signer. Holds a Solana keypair in memory
    for testing and scripting. NEVER use in production with real funds.

Usage:
    Used during development and testing to sign transactions without a
    wallet. Production payers sign through their wallet, which exposes
    the same Signer protocol.

Example:
    from novi_sdk.signers import MemorySigner

    # WARNING: Development only!
    signer = MemorySigner("4Z7cXSyeFR8wNGMVXUE1TwtKn5D5Vu7FzEv69dokLv7K...")
"""

import warnings
from typing import Union

from solders.keypair import Keypair  # type: ignore


class MemorySigner:
    """
    Development-only signer that keeps a keypair in memory.

    WARNING: Never use in production with real funds! The secret key
    lives in process memory.

    Attributes:
        _keypair: The solders Keypair
    """

    def __init__(self, secret: Union[str, bytes, Keypair]):
        """
        Initialize the memory signer.

        Args:
            secret: A Keypair, its 64-byte secret, or the base58 string
                of that secret

        Warns:
            UserWarning: Always warns that this is for development only
        """
        warnings.warn(
            "MemorySigner is for development only. Do not use with real funds!",
            UserWarning,
            stacklevel=2
        )
        if isinstance(secret, Keypair):
            self._keypair = secret
        elif isinstance(secret, bytes):
            self._keypair = Keypair.from_bytes(secret)
        else:
            self._keypair = Keypair.from_base58_string(secret)

    @property
    def address(self) -> str:
        """Base58 address of the keypair."""
        return str(self._keypair.pubkey())

    async def get_address(self) -> str:
        """
        Get the wallet address of the signer.

        Returns:
            The base58 wallet address
        """
        return self.address

    async def sign(self, payload: bytes) -> bytes:
        """
        Sign a serialized transaction message.

        Args:
            payload: The raw message bytes

        Returns:
            The 64-byte ed25519 signature
        """
        return bytes(self._keypair.sign_message(payload))
