"""Solana-focused utilities for SolWallet."""

from .rpc import SolanaRPCClient, SolanaRPCError
from .transactions import close_account_operation, transfer_operation
from .wallet import WalletError, WalletManager, WalletStatus

__all__ = [
    "WalletManager",
    "WalletStatus",
    "WalletError",
    "SolanaRPCClient",
    "SolanaRPCError",
    "close_account_operation",
    "transfer_operation",
]
