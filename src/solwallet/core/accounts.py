"""Rent reclaim: discover token accounts and close the selected ones."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Literal

from solwallet.core.errors import PreconditionError
from solwallet.core.executor import BatchResult, Operation

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.core.executor import SequentialTransactionExecutor
    from solwallet.solana.rpc import SolanaRPCClient

logger = logging.getLogger(__name__)

AccountKind = Literal["token", "system", "program", "unknown"]

# SPL token accounts are 165 bytes when the RPC omits `space`
TOKEN_ACCOUNT_SIZE = 165


@dataclass
class CloseCandidate:
    """An account the user may close to reclaim its rent deposit."""

    account_id: str
    kind: AccountKind
    token_balance: Decimal
    mint_id: str | None
    rent_exempt_lamports: int
    selected: bool = False

    @property
    def is_empty_token(self) -> bool:
        return self.kind == "token" and self.token_balance == 0


def _token_balance(info: dict[str, Any]) -> Decimal:
    amount = info.get("tokenAmount") or {}
    try:
        if amount.get("uiAmountString") is not None:
            return Decimal(str(amount["uiAmountString"]))
        if amount.get("amount") is not None:
            return Decimal(str(amount["amount"])).scaleb(-int(amount.get("decimals", 0)))
    except (InvalidOperation, ValueError):
        logger.debug("Unparseable token amount %r", amount)
    return Decimal(0)


def _account_kind(data: dict[str, Any]) -> AccountKind:
    if data.get("program") in {"spl-token", "spl-token-2022"} and data.get("parsed", {}).get("type") == "account":
        return "token"
    return "unknown"


class AccountCloseSelector:
    """Holds the scanned candidates and the user's selection between commands."""

    def __init__(self, rpc_provider: Callable[[], SolanaRPCClient]) -> None:
        self._rpc_provider = rpc_provider
        self._candidates: list[CloseCandidate] = []
        self.owner: str | None = None

    @property
    def candidates(self) -> list[CloseCandidate]:
        return list(self._candidates)

    def scan(self, owner: str | None) -> list[CloseCandidate]:
        """Replace the candidate list with the token accounts held by `owner`."""
        if not owner:
            raise PreconditionError("Connect or unlock a wallet before scanning accounts.")
        rpc = self._rpc_provider()
        rent_by_size: dict[int, int] = {}
        candidates: list[CloseCandidate] = []
        for entry in rpc.get_token_accounts_by_owner(owner):
            account = entry.get("account") or {}
            data = account.get("data") or {}
            info = (data.get("parsed") or {}).get("info") or {}
            size = int(data.get("space") or account.get("space") or TOKEN_ACCOUNT_SIZE)
            if size not in rent_by_size:
                rent_by_size[size] = rpc.get_minimum_balance_for_rent_exemption(size)
            candidate = CloseCandidate(
                account_id=str(entry.get("pubkey")),
                kind=_account_kind(data),
                token_balance=_token_balance(info),
                mint_id=info.get("mint"),
                rent_exempt_lamports=rent_by_size[size],
            )
            candidate.selected = candidate.is_empty_token
            candidates.append(candidate)
        self._candidates = candidates
        self.owner = owner
        logger.info("Found %d token account(s) for %s", len(candidates), owner)
        return self.candidates

    def toggle(self, account_id: str) -> CloseCandidate:
        for candidate in self._candidates:
            if candidate.account_id == account_id:
                candidate.selected = not candidate.selected
                return candidate
        raise KeyError(account_id)

    def select_all_empty(self) -> int:
        """Select every zero-balance token account; returns how many are selected."""
        for candidate in self._candidates:
            if candidate.is_empty_token:
                candidate.selected = True
        return len(self.selected())

    def selected(self) -> list[CloseCandidate]:
        return [candidate for candidate in self._candidates if candidate.selected]

    def total_reclaim_lamports(self) -> int:
        return sum(candidate.rent_exempt_lamports for candidate in self.selected())

    def close_selected(
        self,
        executor: SequentialTransactionExecutor,
        operation: Operation[CloseCandidate],
        *,
        confirm: Callable[[str], bool] | None = None,
    ) -> BatchResult[CloseCandidate] | None:
        """Close the selected token accounts; returns None when nothing ran."""
        targets = [candidate for candidate in self.selected() if candidate.kind == "token"]
        if not targets:
            return None
        if confirm is not None and not confirm(
            f"Close {len(targets)} account(s) and reclaim {self.total_reclaim_lamports()} lamports?"
        ):
            return None
        result = executor.run(targets, operation)
        closed = {outcome.item.account_id for outcome in result.outcomes if outcome.ok}
        self._candidates = [candidate for candidate in self._candidates if candidate.account_id not in closed]
        return result


__all__ = ["AccountCloseSelector", "CloseCandidate", "TOKEN_ACCOUNT_SIZE"]
