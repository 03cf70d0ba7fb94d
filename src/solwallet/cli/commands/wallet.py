"""Wallet management commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand
from solwallet.solana import WalletError

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp

NO_WALLET = "No wallet found. Run `/wallet create` or `/wallet restore` to set one up."

USAGE = "\n".join(
    [
        "Usage: /wallet <subcommand>",
        "",
        "Subcommands:",
        "  status              Show lock state, address and balance.",
        "  address             Print the full wallet address.",
        "  create              Generate a new wallet (prompts for passphrase).",
        "  restore [secret]    Restore from a recovery phrase, JSON key array, base58 key or key file.",
        "  unlock              Unlock the wallet for signing.",
        "  lock                Forget the decrypted key.",
    ]
)


def _balance_suffix(app: CLIApp) -> str:
    balance = app.refresh_balance()
    return f" Balance {balance:.4f} SOL." if balance is not None else ""


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register the /wallet command."""

    def handle(app: CLIApp, args: list[str]) -> CommandResponse:
        manager = app.wallet_manager
        command = args[0].lower() if args else "status"
        rest = args[1:]

        if command == "status":
            status = manager.status()
            if not status.exists:
                app.log_event("wallet", "Wallet status requested (missing)", severity="warning")
                return CommandResponse(messages=[("system", NO_WALLET)])
            lock_state = "Unlocked" if status.is_unlocked else "Locked"
            balance = app.refresh_balance()
            balance_line = f"Balance: {balance:.4f} SOL" if balance is not None else "Balance: unavailable"
            message = "\n".join(
                [
                    f"Wallet {lock_state}",
                    f"Address: {status.public_key}",
                    balance_line,
                    f"Network: {app.registry.selected_network().name}",
                ]
            )
            app.log_event("wallet", f"Status checked: {lock_state} ({status.masked_address})")
            return CommandResponse(messages=[("system", message)])

        if command == "address":
            status = manager.status()
            if not status.public_key:
                return CommandResponse(messages=[("system", NO_WALLET)])
            return CommandResponse(messages=[("system", status.public_key)])

        if command == "help":
            return CommandResponse(messages=[("system", USAGE)])

        if command == "create":
            if manager.wallet_exists():
                app.log_event("wallet", "Wallet create aborted: already exists", severity="warning")
                return CommandResponse(
                    messages=[("warning", "Wallet already exists. Use `/wallet restore` to replace it.")],
                )
            passphrase = app._prompt_secret("Create wallet passphrase", confirmation=True)
            status, mnemonic = manager.create_wallet(passphrase)
            app.restart_balance_polling()
            message = "\n".join(
                [
                    f"Created wallet {status.public_key} and unlocked it.",
                    "Recovery phrase (store securely):",
                    mnemonic,
                ]
            )
            app.log_event("wallet", f"Wallet created {status.masked_address}")
            return CommandResponse(messages=[("success", message)])

        if command == "restore":
            if not rest:
                secret = app._prompt_secret("Secret key or recovery phrase")
            else:
                candidate = Path(rest[0]).expanduser()
                secret = candidate.read_text().strip() if candidate.is_file() else " ".join(rest)
            if manager.wallet_exists() and not app._confirm("Replace the existing wallet?"):
                return CommandResponse(messages=[("system", "Restore cancelled.")])
            passphrase = app._prompt_secret("Wallet passphrase", confirmation=True)
            try:
                manager.restore_wallet(secret, passphrase, overwrite=True)
                status = manager.unlock_wallet(passphrase)
            except WalletError as exc:
                app.log_event("wallet", f"Wallet restore failed: {exc}", severity="error")
                return CommandResponse(messages=[("error", str(exc))])
            app.restart_balance_polling()
            app.log_event("wallet", f"Wallet restored {status.masked_address}")
            return CommandResponse(
                messages=[("success", f"Wallet restored for {status.public_key} and unlocked.{_balance_suffix(app)}")]
            )

        if command == "unlock":
            if not manager.wallet_exists():
                return CommandResponse(messages=[("system", NO_WALLET)])
            passphrase = app._prompt_secret("Wallet passphrase")
            try:
                status = manager.unlock_wallet(passphrase)
            except WalletError as exc:
                app.log_event("wallet", f"Wallet unlock failed: {exc}", severity="error")
                return CommandResponse(messages=[("error", str(exc))])
            app.log_event("wallet", f"Wallet unlocked {status.masked_address}")
            return CommandResponse(
                messages=[("success", f"Wallet unlocked for {status.public_key}.{_balance_suffix(app)}")]
            )

        if command == "lock":
            manager.lock_wallet()
            app.log_event("wallet", "Wallet locked")
            return CommandResponse(messages=[("system", "Wallet locked.")])

        return CommandResponse(messages=[("system", f"Unknown subcommand '{command}'.\n{USAGE}")])

    router.register(SlashCommand("wallet", handle, "Wallet status and key management"))


__all__ = ["register"]
