"""/logs: recent activity recorded in the in-memory log buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand
from solwallet.core.logs import VALID_CATEGORIES

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp

DEFAULT_LOG_LIMIT = 20


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register the /logs command."""

    def handle(app: CLIApp, args: list[str]) -> CommandResponse:
        category_filter: str | None = None
        limit = DEFAULT_LOG_LIMIT
        for arg in args:
            if arg.isdigit():
                limit = max(int(arg), 1)
                continue
            candidate = arg.lower()
            if candidate not in VALID_CATEGORIES:
                allowed = ", ".join(sorted(VALID_CATEGORIES))
                return CommandResponse(
                    messages=[("system", f"Unknown log category '{candidate}'. Choose from: {allowed}.")],
                )
            category_filter = candidate

        entries = app.log_buffer.recent(category=category_filter, limit=limit)
        if not entries:
            scope = f"'{category_filter}' " if category_filter else ""
            return CommandResponse(messages=[("system", f"No {scope}log entries recorded yet.")])

        header = "time      category  severity message"
        lines = [header, "-" * len(header)]
        for entry in entries:
            lines.append(
                f"{entry.timestamp:%H:%M:%S}  {entry.category:<9} {entry.severity.upper():<8} {entry.message}",
            )
        return CommandResponse(messages=[("system", "\n".join(lines))])

    router.register(SlashCommand("logs", handle, "Show recent activity: /logs [category] [limit]"))


__all__ = ["register"]
