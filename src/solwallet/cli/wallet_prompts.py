"""Prompt helpers for passphrases, secrets and confirmations."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

YES_ANSWERS = {"y", "yes"}


def prompt_secret(
    session: PromptSession,
    console: Console,
    message: str,
    *,
    confirmation: bool = False,
) -> str:
    """Prompt for a passphrase or secret key, optionally asking twice."""
    while True:
        # Secrets never reach the persistent history file
        old_history = session.default_buffer.history
        session.default_buffer.history = InMemoryHistory()  # type: ignore[assignment]
        try:
            value = session.prompt(f"{message}: ", is_password=True)
            if not confirmation:
                return value
            confirm = session.prompt("Confirm passphrase: ", is_password=True)
            if value == confirm:
                return value
            console.print("[red]Passphrases do not match. Try again.[/red]")
        finally:
            session.default_buffer.reset()
            session.default_buffer.history = old_history  # type: ignore[assignment]


def prompt_text(session: PromptSession, message: str) -> str:
    """Prompt the user for plain text input."""
    return session.prompt(f"{message}: ", is_password=False)


def prompt_confirm(session: PromptSession, message: str) -> bool:
    """Ask a yes/no question; anything but an explicit yes declines."""
    try:
        answer = session.prompt(f"{message} (y/N) ", is_password=False)
    except (EOFError, KeyboardInterrupt):
        return False
    return answer.strip().lower() in YES_ANSWERS


__all__ = ["prompt_confirm", "prompt_secret", "prompt_text"]
