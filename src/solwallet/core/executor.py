"""Sequential batch execution of one transaction per item."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from solwallet.core.errors import NetworkError

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.core.networks import NetworkConfigRegistry
    from solwallet.solana.rpc import SolanaRPCClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[T, "SolanaRPCClient"], str]
RpcFactory = Callable[[str], "SolanaRPCClient"]


@dataclass(frozen=True)
class BatchProgress:
    success_count: int
    failed_count: int
    completed_count: int
    total_count: int


@dataclass(frozen=True)
class ItemOutcome(Generic[T]):
    """Result of a single item: a signature on success, an error message otherwise."""

    item: T
    signature: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.signature is not None


@dataclass
class BatchResult(Generic[T]):
    """Aggregate outcome of one executor run."""

    total_count: int
    success_count: int = 0
    failed_count: int = 0
    cancelled: bool = False
    outcomes: list[ItemOutcome[T]] = field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return self.success_count + self.failed_count

    @property
    def is_complete(self) -> bool:
        return self.completed_count == self.total_count

    def snapshot(self) -> BatchProgress:
        return BatchProgress(
            success_count=self.success_count,
            failed_count=self.failed_count,
            completed_count=self.completed_count,
            total_count=self.total_count,
        )

    def summary(self) -> str:
        text = f"{self.success_count} succeeded, {self.failed_count} failed of {self.total_count}"
        if self.cancelled:
            text += f" (cancelled; {self.total_count - self.completed_count} not attempted)"
        return text


class CancellationToken:
    """Thread-safe flag checked by the executor between items."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class SequentialTransactionExecutor:
    """Runs `operation` once per item, strictly in order, against the active endpoint.

    The endpoint is read once when a run starts and the registry stays pinned
    until the run ends, so every item of a batch lands on the same RPC.
    Exceptions raised by `operation` are recorded against their item and the
    run continues; no item is retried.
    """

    def __init__(
        self,
        registry: NetworkConfigRegistry,
        rpc_factory: RpcFactory,
        *,
        progress: Callable[[BatchProgress], None] | None = None,
        stop_on_network_error: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.registry = registry
        self.rpc_factory = rpc_factory
        self.progress = progress
        self.stop_on_network_error = stop_on_network_error
        self.cancel_token = cancel_token

    def run(self, items: Sequence[T], operation: Operation[T]) -> BatchResult[T]:
        result: BatchResult[T] = BatchResult(total_count=len(items))
        if not items:
            return result

        with self.registry.pinned() as endpoint:
            rpc = self.rpc_factory(endpoint)
            logger.info("Starting batch of %d item(s) against %s", len(items), endpoint)
            for index, item in enumerate(items, start=1):
                if self.cancel_token is not None and self.cancel_token.cancelled:
                    logger.info("Batch cancelled before item %d of %d", index, len(items))
                    result.cancelled = True
                    break
                try:
                    signature = operation(item, rpc)
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Batch item %d of %d failed: %s", index, len(items), exc)
                    result.failed_count += 1
                    result.outcomes.append(ItemOutcome(item=item, error=str(exc) or exc.__class__.__name__))
                    self._emit(result)
                    if self.stop_on_network_error and isinstance(exc, NetworkError):
                        logger.warning("Stopping batch: endpoint %s unreachable", endpoint)
                        result.cancelled = index < len(items)
                        break
                    continue
                logger.debug("Batch item %d of %d confirmed: %s", index, len(items), signature)
                result.success_count += 1
                result.outcomes.append(ItemOutcome(item=item, signature=signature))
                self._emit(result)

        logger.info("Batch finished: %s", result.summary())
        return result

    def _emit(self, result: BatchResult[T]) -> None:
        if self.progress is None:
            return
        try:
            self.progress(result.snapshot())
        except Exception:  # noqa: BLE001
            logger.exception("Progress callback raised")


__all__ = [
    "BatchProgress",
    "BatchResult",
    "CancellationToken",
    "ItemOutcome",
    "SequentialTransactionExecutor",
]
