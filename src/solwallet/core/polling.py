"""Read-only wallet queries: balance polling and recent transaction history."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import quote

from solwallet.core.errors import SolWalletError
from solwallet.core.intents import LAMPORTS_PER_SOL

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.core.networks import NetworkProfile
    from solwallet.solana.rpc import SolanaRPCClient

logger = logging.getLogger(__name__)

DEFAULT_EXPLORER_URL = "https://explorer.solana.com"
HistoryKind = Literal["incoming", "outgoing", "other"]


def fetch_balance(rpc_client: SolanaRPCClient | None, public_key: str | None) -> Decimal | None:
    """Fetch the SOL balance, returning None when unavailable."""
    if not public_key or rpc_client is None:
        return None
    try:
        return rpc_client.get_balance(public_key)
    except SolWalletError as exc:
        logger.warning("Unable to fetch balance for %s: %s", public_key, exc)
        return None


class PollHandle:
    """Cancellable handle returned by `BalancePoller.start`."""

    def __init__(self, thread: threading.Thread, stop_event: threading.Event) -> None:
        self._thread = thread
        self._stop_event = stop_event

    @property
    def active(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()

    def cancel(self, *, wait: bool = False, timeout: float | None = None) -> None:
        self._stop_event.set()
        if wait and self._thread is not threading.current_thread():
            self._thread.join(timeout)


class BalancePoller:
    """Polls the balance of one address on a daemon thread.

    Each tick builds a client for whatever endpoint is active at that moment,
    so a network switch takes effect on the next poll.
    """

    def __init__(self, rpc_provider: Callable[[], SolanaRPCClient], *, interval: float = 30.0) -> None:
        self._rpc_provider = rpc_provider
        self.interval = max(interval, 0.05)

    def poll_once(self, address: str) -> Decimal | None:
        return fetch_balance(self._rpc_provider(), address)

    def start(self, address: str, on_update: Callable[[Decimal | None], None]) -> PollHandle:
        stop_event = threading.Event()

        def _loop() -> None:
            while not stop_event.is_set():
                balance = self.poll_once(address)
                if stop_event.is_set():
                    break
                try:
                    on_update(balance)
                except Exception:  # noqa: BLE001
                    logger.exception("Balance update callback raised")
                stop_event.wait(self.interval)
            logger.debug("Balance polling for %s stopped", address)

        thread = threading.Thread(target=_loop, name=f"balance-poller-{address[:8]}", daemon=True)
        handle = PollHandle(thread, stop_event)
        thread.start()
        return handle


@dataclass(frozen=True)
class HistoryEntry:
    signature: str
    timestamp: datetime
    kind: HistoryKind
    amount: Decimal | None = None
    counterparty: str | None = None


def _instructions(transaction: dict[str, Any]) -> list[dict[str, Any]]:
    message = (transaction.get("transaction") or {}).get("message") or {}
    instructions = message.get("instructions")
    return instructions if isinstance(instructions, list) else []


def classify_transfer(transaction: dict[str, Any], address: str) -> tuple[HistoryKind, Decimal | None, str | None]:
    """Find the first system transfer touching `address` and describe it from that side."""
    for instruction in _instructions(transaction):
        parsed = instruction.get("parsed")
        if not isinstance(parsed, dict) or parsed.get("type") != "transfer":
            continue
        info = parsed.get("info") or {}
        lamports = info.get("lamports")
        if not isinstance(lamports, int):
            continue
        amount = Decimal(lamports) / LAMPORTS_PER_SOL
        if info.get("source") == address:
            return "outgoing", amount, info.get("destination")
        if info.get("destination") == address:
            return "incoming", amount, info.get("source")
    return "other", None, None


class HistoryFetcher:
    """Loads the most recent transactions for an address."""

    def __init__(self, rpc_provider: Callable[[], SolanaRPCClient]) -> None:
        self._rpc_provider = rpc_provider

    def fetch(self, address: str, limit: int = 10) -> list[HistoryEntry]:
        rpc = self._rpc_provider()
        signatures = rpc.get_signatures_for_address(address, limit=limit)
        entries: list[HistoryEntry] = []
        for record in signatures:
            signature = record.get("signature")
            block_time = record.get("blockTime")
            if not signature or block_time is None:
                continue
            try:
                transaction = rpc.get_parsed_transaction(signature)
            except SolWalletError as exc:
                logger.warning("Skipping transaction %s: %s", signature, exc)
                continue
            if not transaction:
                continue
            kind, amount, counterparty = classify_transfer(transaction, address)
            entries.append(
                HistoryEntry(
                    signature=signature,
                    timestamp=datetime.fromtimestamp(block_time, tz=UTC),
                    kind=kind,
                    amount=amount,
                    counterparty=counterparty,
                )
            )
        return entries


def explorer_url(signature: str, profile: NetworkProfile, *, base_url: str = DEFAULT_EXPLORER_URL) -> str:
    """Return the block explorer link for `signature` on `profile`'s cluster."""
    root = f"{base_url.rstrip('/')}/tx/{signature}"
    if profile.is_custom:
        return f"{root}?cluster=custom&customUrl={quote(profile.endpoint, safe='')}"
    return f"{root}?cluster={profile.id}"


__all__ = [
    "BalancePoller",
    "HistoryEntry",
    "HistoryFetcher",
    "PollHandle",
    "classify_transfer",
    "explorer_url",
    "fetch_balance",
]
