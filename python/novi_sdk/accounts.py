"""
Location: python/novi_sdk/accounts.py

Summary:
    Solana address handling: address validation, holding-account
    (associated token account) derivation, and the mapping from
    SettlementOperation records to SPL token instructions.

Usage:
    Used by types.py to validate recipients, by builder.py to resolve the
    payer's and recipient's holding accounts, and by the Solana RPC ledger
    to turn operations into instructions.

Example:
    from novi_sdk.accounts import derive_holding_account, USDC_MINTS

    ata = derive_holding_account(owner, USDC_MINTS["devnet"])
"""

import re
from typing import TYPE_CHECKING

from solders.instruction import Instruction  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore
from spl.token.instructions import (  # type: ignore
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    transfer_checked,
)

if TYPE_CHECKING:
    from .types import SettlementOperation

# USDC mint per cluster
USDC_MINTS = {
    "mainnet-beta": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "devnet": "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
}

_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_address(address: str) -> bool:
    """
    Check whether a string is a well-formed Solana address.

    A valid address is base58 text decoding to exactly 32 bytes. Whether
    the key lies on the ed25519 curve is not checked, since program
    derived addresses are legitimate recipients too.

    Args:
        address: Candidate base58 address

    Returns:
        True if the address parses as a public key
    """
    if not isinstance(address, str) or not _BASE58_RE.match(address):
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def derive_holding_account(owner: str, mint: str) -> str:
    """
    Derive the associated token account of an owner for a mint.

    This is a pure function of ``(owner, mint)``; no RPC call is needed.

    Args:
        owner: Wallet address (base58)
        mint: SPL token mint address (base58)

    Returns:
        The associated token account address (base58)
    """
    ata = get_associated_token_address(
        Pubkey.from_string(owner),
        Pubkey.from_string(mint),
    )
    return str(ata)


def to_instruction(operation: "SettlementOperation") -> Instruction:
    """
    Build the SPL instruction for a settlement operation.

    Args:
        operation: A create-account or transfer operation

    Returns:
        A solders Instruction ready to be placed in a message

    Raises:
        ValueError: If the operation kind is not supported
    """
    if operation.kind == "create-receiving-account-if-absent":
        return create_associated_token_account(
            Pubkey.from_string(operation.payer),
            Pubkey.from_string(operation.owner),
            Pubkey.from_string(operation.mint),
        )

    if operation.kind == "transfer":
        return transfer_checked(
            TransferCheckedParams(
                program_id=TOKEN_PROGRAM_ID,
                source=Pubkey.from_string(operation.source),
                mint=Pubkey.from_string(operation.mint),
                dest=Pubkey.from_string(operation.destination),
                owner=Pubkey.from_string(operation.payer),
                amount=operation.amount_units,
                decimals=operation.decimals,
            )
        )

    raise ValueError(f"Unsupported operation kind: {operation.kind}")
