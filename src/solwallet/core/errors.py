"""Error taxonomy shared across SolWallet services."""

from __future__ import annotations


class SolWalletError(RuntimeError):
    """Base class for all SolWallet failures."""


class ValidationError(SolWalletError):
    """Raised for malformed user input or conflicting RPC profiles."""


class NetworkError(SolWalletError):
    """Raised when an RPC endpoint is unreachable or times out."""


class TransactionError(SolWalletError):
    """Raised when the chain rejects or fails to confirm a transaction."""


class PersistenceError(SolWalletError):
    """Raised when stored configuration cannot be read or written."""


class PreconditionError(SolWalletError):
    """Raised when an operation is invoked without what it requires (e.g. a wallet)."""


__all__ = [
    "SolWalletError",
    "ValidationError",
    "NetworkError",
    "TransactionError",
    "PersistenceError",
    "PreconditionError",
]
