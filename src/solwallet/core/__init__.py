"""Core services for SolWallet."""

from .accounts import AccountCloseSelector, CloseCandidate
from .config import (
    DEFAULT_CONFIG_DIR,
    ConfigManager,
    ConfigurationError,
    WalletConfig,
)
from .errors import (
    NetworkError,
    PersistenceError,
    PreconditionError,
    SolWalletError,
    TransactionError,
    ValidationError,
)
from .executor import (
    BatchProgress,
    BatchResult,
    CancellationToken,
    ItemOutcome,
    SequentialTransactionExecutor,
)
from .intents import IntentValidator, TransferIntent
from .logs import LogBuffer, LogEntry
from .networks import BUILTIN_NETWORKS, NetworkConfigRegistry, NetworkProfile
from .polling import BalancePoller, HistoryEntry, HistoryFetcher, PollHandle, explorer_url, fetch_balance

__all__ = [
    "AccountCloseSelector",
    "BUILTIN_NETWORKS",
    "BalancePoller",
    "BatchProgress",
    "BatchResult",
    "CancellationToken",
    "CloseCandidate",
    "ConfigManager",
    "ConfigurationError",
    "DEFAULT_CONFIG_DIR",
    "HistoryEntry",
    "HistoryFetcher",
    "IntentValidator",
    "ItemOutcome",
    "LogBuffer",
    "LogEntry",
    "NetworkConfigRegistry",
    "NetworkError",
    "NetworkProfile",
    "PersistenceError",
    "PollHandle",
    "PreconditionError",
    "SequentialTransactionExecutor",
    "SolWalletError",
    "TransactionError",
    "TransferIntent",
    "ValidationError",
    "WalletConfig",
    "explorer_url",
    "fetch_balance",
]
