"""Per-item transaction operations fed to the sequential executor.

Each factory returns a callable `(item, rpc) -> signature` that fetches a
fresh blockhash, builds and signs a single-instruction transaction, submits
it, and blocks until it is confirmed at the client's commitment.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from solwallet.core.errors import TransactionError, ValidationError
from solwallet.core.intents import sol_to_lamports
from solwallet.solana.rpc import TOKEN_PROGRAM_ID, SolanaRPCClient, SolanaRPCError

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.core.accounts import CloseCandidate
    from solwallet.core.intents import TransferIntent

logger = logging.getLogger(__name__)

CLOSE_ACCOUNT_IX = bytes([9])


def build_transfer_ix(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    return transfer(TransferParams(from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=int(lamports)))


def build_close_token_account_ix(
    token_account: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    *,
    token_program_id: Pubkey | None = None,
) -> Instruction:
    return Instruction(
        program_id=token_program_id or Pubkey.from_string(TOKEN_PROGRAM_ID),
        accounts=[
            AccountMeta(pubkey=token_account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=destination, is_signer=False, is_writable=True),
            AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
        ],
        data=CLOSE_ACCOUNT_IX,
    )


def _pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid address: {value}") from exc


def submit_instruction(
    rpc: SolanaRPCClient,
    payer: Keypair,
    instruction: Instruction,
    *,
    timeout: float,
    poll_interval: float,
) -> str:
    """Sign `instruction` under a fresh blockhash, send it and wait for confirmation."""
    blockhash_info = rpc.get_latest_blockhash()
    blockhash = Hash.from_string(blockhash_info.blockhash)
    message = Message.new_with_blockhash([instruction], payer.pubkey(), blockhash)
    tx = Transaction.new_unsigned(message)
    tx.sign([payer], blockhash)
    try:
        signature = rpc.send_transaction(bytes(tx))
    except SolanaRPCError as exc:
        raise TransactionError(f"Transaction rejected: {exc}") from exc
    logger.debug("Submitted transaction %s", signature)
    rpc.confirm_transaction(signature, blockhash_info, timeout=timeout, poll_interval=poll_interval)
    return signature


def transfer_operation(
    payer: Keypair,
    *,
    confirm_timeout: float = 60.0,
    poll_interval: float = 0.5,
) -> Callable[[TransferIntent, SolanaRPCClient], str]:
    """Return an operation that sends `intent.amount` SOL from `payer` to `intent.address`."""

    def _send(intent: TransferIntent, rpc: SolanaRPCClient) -> str:
        if not intent.valid:
            raise ValidationError(intent.error or "Invalid transfer intent")
        instruction = build_transfer_ix(payer.pubkey(), _pubkey(intent.address), sol_to_lamports(intent.amount))
        return submit_instruction(rpc, payer, instruction, timeout=confirm_timeout, poll_interval=poll_interval)

    return _send


def close_account_operation(
    owner: Keypair,
    *,
    confirm_timeout: float = 60.0,
    poll_interval: float = 0.5,
) -> Callable[[CloseCandidate, SolanaRPCClient], str]:
    """Return an operation that closes a token account and sends its rent to `owner`."""

    def _close(candidate: CloseCandidate, rpc: SolanaRPCClient) -> str:
        authority = owner.pubkey()
        instruction = build_close_token_account_ix(_pubkey(candidate.account_id), authority, authority)
        return submit_instruction(rpc, owner, instruction, timeout=confirm_timeout, poll_interval=poll_interval)

    return _close


__all__ = [
    "CLOSE_ACCOUNT_IX",
    "build_close_token_account_ix",
    "build_transfer_ix",
    "close_account_operation",
    "submit_instruction",
    "transfer_operation",
]
