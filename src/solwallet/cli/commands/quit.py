"""/quit and /exit."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp


def register(_app: CLIApp, router: CommandRouter) -> None:
    """Register /quit with /exit as an alias."""

    def handle(app: CLIApp, _args: list[str]) -> CommandResponse:
        app.shutdown()
        return CommandResponse(messages=[("system", "Exiting SolWallet. Bye!")], continue_loop=False)

    router.register(SlashCommand("quit", handle, "Exit SolWallet"))
    router.register(SlashCommand("exit", handle, "Exit SolWallet"))


__all__ = ["register"]
