"""Solana JSON-RPC helpers."""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

import httpx

from solwallet.core.errors import NetworkError, TransactionError
from solwallet.core.intents import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
DEFAULT_COMMITMENT = "confirmed"

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaRPCError(NetworkError):
    """Raised when Solana RPC calls fail."""


RequestFn = Callable[[str, Any], httpx.Response]


@dataclass(frozen=True)
class BlockhashInfo:
    """A recent blockhash together with the last block height it is valid for."""

    blockhash: str
    last_valid_block_height: int


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / LAMPORTS_PER_SOL


def commitment_reached(status: str | None, required: str) -> bool:
    """Return True when a reported confirmation status satisfies `required`."""
    if status is None:
        return False
    return _COMMITMENT_RANK.get(status, -1) >= _COMMITMENT_RANK.get(required, 1)


@dataclass
class SolanaRPCClient:
    """Thin wrapper around Solana's JSON-RPC interface."""

    endpoint: str
    timeout: float = 10.0
    commitment: str = DEFAULT_COMMITMENT
    _request: RequestFn | None = None
    _sleep: Callable[[float], None] | None = None
    _clock: Callable[[], float] | None = None

    def __post_init__(self) -> None:
        if self._request is None:
            self._request = httpx.post
        if self._sleep is None:
            self._sleep = time.sleep
        if self._clock is None:
            self._clock = time.monotonic
        self._next_id = 0

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------
    def get_balance(self, public_key: str) -> Decimal:
        """Return balance for `public_key` in SOL."""
        result = self._call("getBalance", [public_key, {"commitment": self.commitment}])
        try:
            lamports = result["value"]
        except (KeyError, TypeError) as exc:
            raise SolanaRPCError("Malformed RPC response; missing balance value") from exc

        if not isinstance(lamports, int):
            raise SolanaRPCError("Balance value is not an integer")

        balance = lamports_to_sol(lamports)
        logger.debug("Fetched balance %s SOL for %s", balance, public_key)
        return balance

    def get_latest_blockhash(self) -> BlockhashInfo:
        result = self._call("getLatestBlockhash", [{"commitment": self.commitment}])
        try:
            value = result["value"]
            return BlockhashInfo(
                blockhash=str(value["blockhash"]),
                last_valid_block_height=int(value["lastValidBlockHeight"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SolanaRPCError("Malformed RPC response; missing blockhash") from exc

    def get_block_height(self) -> int:
        result = self._call("getBlockHeight", [{"commitment": self.commitment}])
        if not isinstance(result, int):
            raise SolanaRPCError("Block height is not an integer")
        return result

    def get_token_accounts_by_owner(
        self, owner: str, *, program_id: str = TOKEN_PROGRAM_ID
    ) -> list[dict[str, Any]]:
        """Return jsonParsed token accounts (`{"pubkey", "account"}` entries) held by `owner`."""
        result = self._call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"programId": program_id},
                {"encoding": "jsonParsed", "commitment": self.commitment},
            ],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, list):
            raise SolanaRPCError("Malformed RPC response; token account list missing")
        return value

    def get_minimum_balance_for_rent_exemption(self, data_size: int) -> int:
        result = self._call("getMinimumBalanceForRentExemption", [int(data_size)])
        if not isinstance(result, int):
            raise SolanaRPCError("Rent exemption value is not an integer")
        return result

    def get_signatures_for_address(self, address: str, *, limit: int = 10) -> list[dict[str, Any]]:
        result = self._call(
            "getSignaturesForAddress",
            [address, {"limit": limit, "commitment": self.commitment}],
        )
        if not isinstance(result, list):
            raise SolanaRPCError("Malformed RPC response; signature list missing")
        return result

    def get_parsed_transaction(self, signature: str) -> dict[str, Any] | None:
        return self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": self.commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )

    # ------------------------------------------------------------------
    # Submission and confirmation
    # ------------------------------------------------------------------
    def send_transaction(self, raw_transaction: bytes) -> str:
        """Submit a signed, serialized transaction and return its signature."""
        encoded = base64.b64encode(raw_transaction).decode("ascii")
        result = self._call(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": self.commitment}],
        )
        if not isinstance(result, str):
            raise SolanaRPCError("Malformed RPC response; signature missing")
        return result

    def get_signature_statuses(self, signatures: list[str]) -> list[dict[str, Any] | None]:
        result = self._call("getSignatureStatuses", [signatures])
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, list):
            raise SolanaRPCError("Malformed RPC response; signature statuses missing")
        return value

    def confirm_transaction(
        self,
        signature: str,
        blockhash: BlockhashInfo,
        *,
        timeout: float = 60.0,
        poll_interval: float = 0.5,
    ) -> None:
        """Block until `signature` reaches the client's commitment level.

        Raises TransactionError when the transaction failed on-chain, when its
        blockhash expired before it landed, or when `timeout` elapses.
        """
        assert self._clock is not None and self._sleep is not None
        deadline = self._clock() + timeout
        while True:
            statuses = self.get_signature_statuses([signature])
            status = statuses[0] if statuses else None
            if status is not None:
                if status.get("err"):
                    raise TransactionError(f"Transaction {signature} failed: {status['err']}")
                if commitment_reached(status.get("confirmationStatus"), self.commitment):
                    logger.debug("Transaction %s reached %s", signature, self.commitment)
                    return
            elif self.get_block_height() > blockhash.last_valid_block_height:
                raise TransactionError(f"Blockhash expired before {signature} was confirmed")
            if self._clock() >= deadline:
                raise TransactionError(f"Timed out waiting for confirmation of {signature}")
            self._sleep(poll_interval)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _call(self, method: str, params: list[Any]) -> Any:
        self._next_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        try:
            response = self._request(self.endpoint, json=payload, timeout=self.timeout)  # type: ignore[misc]
        except httpx.TransportError as exc:
            raise NetworkError(f"RPC endpoint {self.endpoint} unreachable: {exc}") from exc
        try:
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SolanaRPCError(f"RPC request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:  # pragma: no cover - unexpected for compliant RPC
            raise SolanaRPCError("Invalid JSON in RPC response") from exc

        if "error" in data:
            error = data["error"]
            message = error.get("message", "Unknown RPC error") if isinstance(error, dict) else str(error)
            raise SolanaRPCError(f"{method}: {message}")

        if "result" not in data:
            raise SolanaRPCError(f"Malformed RPC response for {method}")
        return data["result"]


__all__ = [
    "BlockhashInfo",
    "DEFAULT_COMMITMENT",
    "LAMPORTS_PER_SOL",
    "SolanaRPCClient",
    "SolanaRPCError",
    "TOKEN_PROGRAM_ID",
    "commitment_reached",
    "lamports_to_sol",
]
