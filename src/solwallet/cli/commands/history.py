"""/balance and /history: read-only wallet queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand
from solwallet.core.polling import explorer_url

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp

NO_WALLET = "No wallet found. Run `/wallet create` or `/wallet restore` to set one up."

_KIND_LABELS = {"incoming": "Received", "outgoing": "Sent", "other": "Transaction"}


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register /balance and /history."""

    def handle_balance(app: CLIApp, _args: list[str]) -> CommandResponse:
        address = app.wallet_manager.status().public_key
        if not address:
            return CommandResponse(messages=[("system", NO_WALLET)])
        balance = app.refresh_balance()
        if balance is None:
            app.log_event("network", "Balance lookup failed", severity="warning")
            return CommandResponse(messages=[("warning", "Balance unavailable; check the active network.")])
        network = app.registry.selected_network().name
        return CommandResponse(messages=[("system", f"{balance:.9f} SOL on {network}")])

    def handle_history(app: CLIApp, args: list[str]) -> CommandResponse:
        address = app.wallet_manager.status().public_key
        if not address:
            return CommandResponse(messages=[("system", NO_WALLET)])
        limit = app.config.history_limit
        if args:
            if not args[0].isdigit() or int(args[0]) < 1:
                return CommandResponse(messages=[("system", "Usage: /history [limit]")])
            limit = int(args[0])
        entries = app.history_fetcher.fetch(address, limit=limit)
        if not entries:
            return CommandResponse(messages=[("system", "No transactions found.")])
        profile = app.registry.selected_network()
        lines: list[str] = []
        for entry in entries:
            label = _KIND_LABELS[entry.kind]
            when = entry.timestamp.strftime("%Y-%m-%d %H:%M")
            if entry.amount is not None:
                sign = "+" if entry.kind == "incoming" else "-"
                direction = "from" if entry.kind == "incoming" else "to"
                lines.append(f"{when}  {label} {sign}{entry.amount} SOL {direction} {entry.counterparty}")
            else:
                lines.append(f"{when}  {label}")
            lines.append(f"    {explorer_url(entry.signature, profile, base_url=app.config.explorer_base_url)}")
        app.log_event("network", f"Loaded {len(entries)} history entries")
        return CommandResponse(messages=[("system", "\n".join(lines))])

    router.register(SlashCommand("balance", handle_balance, "Show the wallet's SOL balance"))
    router.register(SlashCommand("history", handle_history, "Recent transactions: /history [limit]"))


__all__ = ["register"]
