"""/close: reclaim rent by closing empty token accounts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand
from solwallet.core.accounts import CloseCandidate
from solwallet.solana.rpc import lamports_to_sol
from solwallet.solana.transactions import close_account_operation

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp

USAGE = "\n".join(
    [
        "Usage: /close <subcommand>",
        "",
        "Subcommands:",
        "  scan              Find token accounts held by the wallet.",
        "  list              Show the last scan and the current selection.",
        "  toggle <#|addr>   Select or deselect an account.",
        "  empty             Select every empty token account.",
        "  run               Close the selected accounts.",
    ]
)


def _render(app: CLIApp) -> str:
    selector = app.account_selector
    candidates = selector.candidates
    if not candidates:
        return "No token accounts found. Run `/close scan` first."
    lines = ["#   sel  account                                       balance        mint"]
    for index, candidate in enumerate(candidates, start=1):
        mark = "[x]" if candidate.selected else "[ ]"
        mint = candidate.mint_id or "-"
        lines.append(f"{index:<3} {mark}  {candidate.account_id:<44}  {candidate.token_balance!s:<13}  {mint}")
    lines.append("")
    lines.append(
        f"{len(selector.selected())} selected; rent to reclaim: "
        f"{lamports_to_sol(selector.total_reclaim_lamports())} SOL"
    )
    return "\n".join(lines)


def _lookup(app: CLIApp, token: str) -> CloseCandidate | None:
    candidates = app.account_selector.candidates
    if token.isdigit() and 1 <= int(token) <= len(candidates):
        return candidates[int(token) - 1]
    return next((c for c in candidates if c.account_id == token), None)


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register the /close command."""

    def handle(app: CLIApp, args: list[str]) -> CommandResponse:
        selector = app.account_selector
        command = args[0].lower() if args else "list"
        rest = args[1:]

        if command == "help":
            return CommandResponse(messages=[("system", USAGE)])

        if command == "scan":
            owner = app.wallet_manager.status().public_key
            candidates = selector.scan(owner)
            app.log_event("accounts", f"Scanned {len(candidates)} token account(s)")
            return CommandResponse(messages=[("system", _render(app))])

        if command == "list":
            return CommandResponse(messages=[("system", _render(app))])

        if command == "toggle":
            if not rest:
                return CommandResponse(messages=[("system", "Usage: /close toggle <#|address>")])
            candidate = _lookup(app, rest[0])
            if candidate is None:
                return CommandResponse(messages=[("error", f"No scanned account matches '{rest[0]}'.")])
            selector.toggle(candidate.account_id)
            return CommandResponse(messages=[("system", _render(app))])

        if command == "empty":
            selector.select_all_empty()
            return CommandResponse(messages=[("system", _render(app))])

        if command == "run":
            if not selector.selected():
                return CommandResponse(messages=[("system", "No accounts selected.")])
            keypair = app.wallet_manager.keypair()
            operation = close_account_operation(keypair, **app.operation_options())
            result = selector.close_selected(app.make_executor(), operation, confirm=app._confirm)
            if result is None:
                return CommandResponse(messages=[("system", "Nothing closed.")])
            for outcome in result.outcomes:
                if outcome.ok:
                    app.log_event("accounts", f"Closed {outcome.item.account_id}: {outcome.signature}")
                else:
                    app.log_event("accounts", f"Close {outcome.item.account_id} failed: {outcome.error}", severity="error")
            reclaimed = sum(o.item.rent_exempt_lamports for o in result.outcomes if o.ok)
            app.refresh_balance()
            return CommandResponse.for_batch(result, f"{result.summary()}. Reclaimed {lamports_to_sol(reclaimed)} SOL.")

        return CommandResponse(messages=[("system", f"Unknown subcommand '{command}'.\n{USAGE}")])

    router.register(SlashCommand("close", handle, "Close empty token accounts to reclaim rent"))


__all__ = ["register"]
