"""
Location: python/novi_sdk/signers/__init__.py

Summary:
    Signers package for novi-sdk. Wallet integrations implement the
    Signer protocol from novi_sdk.ledger; this package ships the
    development signer.

Usage:
    from novi_sdk.signers import MemorySigner
"""

from .memory import MemorySigner

__all__ = ["MemorySigner"]
