"""Shared CLI types and routing helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp
    from solwallet.core.executor import BatchResult
else:  # pragma: no cover - runtime only
    CLIApp = Any  # type: ignore[assignment]


logger = logging.getLogger(__name__)

MessageRole = Literal["system", "success", "warning", "error"]


@dataclass
class CommandResponse:
    """Represents the outcome of handling a CLI input.

    `messages` holds `(role, text)` pairs; the role only selects the panel
    style the shell renders the text with.
    """

    messages: list[tuple[MessageRole, str]]
    continue_loop: bool = True

    @classmethod
    def for_batch(cls, result: BatchResult[Any], text: str) -> CommandResponse:
        """Report an executor run: `success` only when every item went through."""
        role: MessageRole = "success" if result.failed_count == 0 and not result.cancelled else "warning"
        return cls(messages=[(role, text)])

    @property
    def roles(self) -> list[MessageRole]:
        return [role for role, _text in self.messages]


class SlashCommand:
    """Container for slash command metadata."""

    def __init__(self, name: str, handler: Callable[[CLIApp, list[str]], CommandResponse], help_text: str) -> None:
        self.name = name
        self.handler = handler
        self.help_text = help_text


class CommandRouter:
    """Parses and dispatches slash commands."""

    def __init__(self) -> None:
        self._commands: dict[str, SlashCommand] = {}

    def register(self, command: SlashCommand) -> None:
        logger.debug("Registering command: %s", command.name)
        self._commands[command.name] = command

    def available_commands(self) -> Iterable[SlashCommand]:
        return self._commands.values()

    def dispatch(self, app: CLIApp, raw_line: str) -> CommandResponse:
        parts = raw_line.strip().split()
        if not parts:
            return CommandResponse(messages=[])
        command_name, *args = parts
        command = self._commands.get(command_name)
        if not command:
            logger.info("Unknown command: /%s", command_name)
            return CommandResponse(messages=[("system", f"Unknown command '/{command_name}'. Type /help for a list of commands.")])
        logger.debug("Dispatching command '/%s' with args %s", command_name, args)
        return command.handler(app, args)


__all__ = ["CommandResponse", "MessageRole", "CommandRouter", "SlashCommand"]
