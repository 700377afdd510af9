"""
Location: python/novi_sdk/ledgers/__init__.py

Summary:
    Ledger adapters for novi-sdk.

Usage:
    from novi_sdk.ledgers import SolanaRpcLedger
"""

from .solana_rpc import NETWORKS, SolanaRpcLedger

__all__ = ["SolanaRpcLedger", "NETWORKS"]
